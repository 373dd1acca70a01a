"""
Value objects handed out by the store. Immutable so a snapshot given to the
calendar cannot be used to mutate anything.
"""
import datetime as dt

from pydantic import BaseModel, ConfigDict

from flowlog.models.period import Flow, PeriodEntry


class Entry(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    flow: Flow

    @classmethod
    def from_row(cls, row: PeriodEntry) -> "Entry":
        # Decode explicitly so a corrupt code raises UnsupportedFlowCode,
        # not a pydantic ValidationError.
        return cls(date=row.logdate, flow=Flow.from_code(row.flow))
