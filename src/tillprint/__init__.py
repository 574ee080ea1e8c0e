"""tillprint - ESC/POS receipt rendering and printer transport for POS tills."""

__version__ = "0.1.0"
