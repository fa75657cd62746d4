"""Plot models, value formatting, CSV export and terminal encoding for serial oscilloscope data."""

__version__ = "0.1.0"