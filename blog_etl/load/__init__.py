"""Table and boundary loaders"""

from .tables import (
    load_table,
    load_boundaries,
    boundary_vintages,
    infer_column_types
)

__all__ = [
    'load_table',
    'load_boundaries',
    'boundary_vintages',
    'infer_column_types'
]
