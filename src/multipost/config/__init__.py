"""
Module: config
Description: Configuration loading for multipost.
"""

from .settings import Settings

__all__ = ["Settings"]
