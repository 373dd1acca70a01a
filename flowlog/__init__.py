"""flowlog: a local log of dated flow intensities with a calendar view."""

__version__ = "0.1.0"
