"""varsync — typed state kept in sync with an external variable store."""

__version__ = "0.4.0"
