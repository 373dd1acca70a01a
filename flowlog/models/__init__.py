from .period import Flow, PeriodEntry

__all__ = [
    "Flow",
    "PeriodEntry",
]
