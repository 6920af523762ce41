#!/usr/bin/env python3
"""
Table Shape and Quality Validation

Uses pandera to validate the tables passed between pipeline stages:
- Wide tables (one numeric column per period)
- Long tables (unique entity-period rows)
- Aggregated tables (unique keys, populated values)

Usage:
    from blog_etl.utils.validation import long_table_schema, validate_table

    schema = long_table_schema(['fips'], 'period', 'value')
    validate_table(long_df, schema, 'county population (long)')
"""

from typing import Optional, Sequence

import pandas as pd
import pandera as pa
from pandera import Check, Column

from blog_etl.errors import SchemaMismatch


# ============================================================================
# SCHEMA BUILDERS
# ============================================================================

def wide_table_schema(id_columns: Sequence[str],
                      period_columns: Sequence[str]) -> pa.DataFrameSchema:
    """Ids present, one numeric (nullable) column per period"""
    columns = {c: Column(nullable=True) for c in id_columns}
    for c in period_columns:
        columns[str(c)] = Column(float, nullable=True, coerce=True)

    return pa.DataFrameSchema(
        columns,
        strict=False,
        description='Wide table: one row per entity, one column per period'
    )


def long_table_schema(id_columns: Sequence[str],
                      period_name: str = 'period',
                      value_name: str = 'value') -> pa.DataFrameSchema:
    """One row per (entity, period)"""
    columns = {c: Column(nullable=True) for c in id_columns}
    columns[period_name] = Column(nullable=False)
    columns[value_name] = Column(float, nullable=True, coerce=True)

    return pa.DataFrameSchema(
        columns,
        unique=list(id_columns) + [period_name],
        strict=False,
        description='Long table: one row per (entity, period)'
    )


def aggregated_schema(keys: Sequence[str], value: str = 'value',
                      min_value: Optional[float] = None) -> pa.DataFrameSchema:
    """Unique, non-null keys with a populated value"""
    checks = [] if min_value is None else [Check.greater_than_or_equal_to(min_value)]
    columns = {k: Column(nullable=False) for k in keys}
    columns[value] = Column(float, checks, nullable=False, coerce=True)

    return pa.DataFrameSchema(
        columns,
        unique=list(keys),
        strict=False,
        description='Aggregated table: one row per key'
    )


# ============================================================================
# VALIDATION FUNCTIONS
# ============================================================================

def validate_table(df: pd.DataFrame, schema: pa.DataFrameSchema,
                   name: str = 'table', verbose: bool = True) -> pd.DataFrame:
    """
    Validate a table against a schema

    Returns:
        The input table, unchanged

    Raises:
        SchemaMismatch: Listing the failing columns
    """
    try:
        schema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as err:
        cases = err.failure_cases
        if verbose:
            print(f'  ❌ Schema validation failed for {name}:')
            print(cases)
        failing = sorted({str(c) for c in cases['column'].dropna()}) if 'column' in cases else []
        raise SchemaMismatch(f'{name} failed validation ({len(cases)} failure cases)',
                             keys=failing or [name]) from err

    if verbose:
        print(f'  ✓ Schema validation passed for {name}')
    return df


def check_data_quality(df: pd.DataFrame, name: str = 'table',
                       key: Optional[Sequence[str]] = None) -> dict:
    """
    Print data quality warnings beyond schema validation

    Checks:
    - Missing value percentages
    - Duplicate keys

    Returns:
        dict with 'missing_pct' (per column) and 'duplicate_keys' count
    """
    missing_pct = (df.isnull().sum() / max(len(df), 1) * 100).sort_values(ascending=False)
    high_missing = missing_pct[missing_pct > 50]
    if len(high_missing) > 0:
        print(f'  ⚠️  {name}: high missing values (>50%):')
        for col, pct in high_missing.items():
            print(f'     - {col}: {pct:.1f}%')

    dup_count = 0
    if key:
        dup_count = int(df.duplicated(subset=list(key)).sum())
        if dup_count > 0:
            print(f'  ⚠️  WARNING: {dup_count} duplicate keys in {name}')

    return {'missing_pct': missing_pct.to_dict(), 'duplicate_keys': dup_count}
