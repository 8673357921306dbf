"""
Equipment WBS builder.

Turns a flat electrical equipment list into a Primavera P6 WBS and reconciles
later equipment lists against the issued WBS without renumbering it.
"""

__version__ = '0.1.0'
