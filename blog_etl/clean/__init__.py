"""Data cleaning rules and null reporting"""

from .cleaning import (
    SplitColumn,
    RestrictColumns,
    RestrictRange,
    RenameValues,
    FillNulls,
    DropValues,
    DropNulls,
    NullReport,
    RENAMED_COUNTY_FIPS,
    apply_rules,
    report_nulls,
    require_columns
)

__all__ = [
    'SplitColumn',
    'RestrictColumns',
    'RestrictRange',
    'RenameValues',
    'FillNulls',
    'DropValues',
    'DropNulls',
    'NullReport',
    'RENAMED_COUNTY_FIPS',
    'apply_rules',
    'report_nulls',
    'require_columns'
]
