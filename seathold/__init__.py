"""Seat hold and booking confirmation service."""

__version__ = "1.0.0"
