"""Configuration for the WBS builder."""

from .settings import settings, Settings

__all__ = ['settings', 'Settings']
