"""Quiz question bank served from a spreadsheet-style tabular store."""

__version__ = "0.1.0"
