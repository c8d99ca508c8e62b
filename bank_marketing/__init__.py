"""Term deposit subscription analysis of the UCI bank marketing dataset."""

__version__ = "0.1.0"
