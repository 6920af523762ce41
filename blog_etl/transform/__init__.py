"""Reshaping and aggregation of long tables"""

from .reshape import wide_to_long, long_to_wide
from .aggregate import aggregate, aggregate_max, aggregate_sum

__all__ = [
    'wide_to_long',
    'long_to_wide',
    'aggregate',
    'aggregate_max',
    'aggregate_sum'
]
