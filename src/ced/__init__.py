"""ced: line-oriented editor for delimited tabular data."""

__version__ = "0.4.0"
