# Models package - record base and column binding registry
from .record import ColumnBindings, Record, parse_model

__all__ = ["ColumnBindings", "Record", "parse_model"]
