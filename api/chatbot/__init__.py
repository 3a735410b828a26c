"""Sikkim Monasteries travel-guide chatbot API."""

__version__ = "1.0.0"
