"""Spreadsheet tools for preparing WooCommerce product imports."""

from .media_library import MediaIndex, MediaLibrary, build_index, normalize_filename
from .reconciliation import Classification, reconcile_cell

__version__ = "1.0.0"
