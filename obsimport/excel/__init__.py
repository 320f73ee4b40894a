"""Spreadsheet handling: document handle, header gate, row extraction, templates."""
