"""FieldTrack: operational tracker backed by a single XLSX workbook."""

__version__ = "0.1.0"
