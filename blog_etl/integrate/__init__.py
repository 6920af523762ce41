"""Data integration: joins with lookup tables"""

from .join import (
    inner_join,
    unmatched_keys,
    expect_row_count,
    trim_keys
)
from .lookups import census_regions

__all__ = [
    'inner_join',
    'unmatched_keys',
    'expect_row_count',
    'trim_keys',
    'census_regions'
]
