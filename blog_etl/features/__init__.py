"""Derived metrics and change detection"""

from .derived import (
    add_ratio,
    period_changes,
    largest_change,
    flag_outlier_periods
)

__all__ = [
    'add_ratio',
    'period_changes',
    'largest_change',
    'flag_outlier_periods'
]
