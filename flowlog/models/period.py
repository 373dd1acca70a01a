import enum
from datetime import date

from sqlalchemy import Date, SmallInteger
from sqlalchemy.orm import Mapped, mapped_column

from flowlog.core.errors import UnsupportedFlowCode
from flowlog.db.base import Base


class Flow(enum.IntEnum):
    """Six-level flow intensity. The integer value is the stored code."""

    NONE = 0
    SPOTTING = 1
    LIGHT = 2
    MEDIUM = 3
    HEAVY = 4
    APOCALYPTIC = 5

    @classmethod
    def from_code(cls, value: int) -> "Flow":
        # bool is an int subclass; True must not decode to SPOTTING
        if isinstance(value, bool) or not isinstance(value, int):
            raise UnsupportedFlowCode(value)
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedFlowCode(value) from None

    @classmethod
    def options(cls) -> list["Flow"]:
        """Picker order: NONE first, APOCALYPTIC last."""
        return sorted(cls)

    @property
    def code(self) -> int:
        return int(self.value)

    @property
    def label(self) -> str:
        return self.name.capitalize()

    def __str__(self) -> str:
        return self.label

    def __format__(self, format_spec: str) -> str:
        return format(self.label, format_spec)


class PeriodEntry(Base):
    """One logged day. `logdate` is the natural key: one row per date."""

    __tablename__ = "period"

    logdate: Mapped[date] = mapped_column(Date, primary_key=True)
    flow: Mapped[int] = mapped_column(SmallInteger, nullable=False)
