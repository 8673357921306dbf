"""Loaders for the export package."""

from .base_loader import BaseLoader
from .file_loader import FileLoader

__all__ = ['BaseLoader', 'FileLoader']
