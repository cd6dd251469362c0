"""Job application lifecycle and reminder tracking."""

__version__ = "1.0.0"
