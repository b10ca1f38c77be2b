"""Data I/O (UCI wine table)."""

from .wine import WineTable, WineTableSpec, load_wine_table

__all__ = ["WineTable", "WineTableSpec", "load_wine_table"]
