"""Observation spreadsheet import / template export.

Validates .xlsx observation sheets against configured column schemas and
record schemas, and builds blank templates with the same columns.
"""

__version__ = "0.1.0"
