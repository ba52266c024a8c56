"""TickerScore: technical confidence scoring with optional AI blending."""

__version__ = "0.1.0"
