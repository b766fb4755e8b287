"""
Module: utils
Description: Package initialization for utility functions.

Current utilities:
- logger: Structured logging configuration and helpers
- durations: Go-style duration parsing
"""

__all__ = []
