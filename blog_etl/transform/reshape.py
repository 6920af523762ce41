"""
Wide <-> long reshaping

Wide: one row per entity, one column per period.
Long: one row per (entity, period) with explicit period and value columns.
The two are exact inverses up to row order; nulls survive the trip.

Digit labels ('1920') become integer periods in the long table. The
original labels are kept in `long.attrs['period_labels']` so widening
restores them as they were (int 1920 or str '1920').
"""

from typing import Optional, Sequence

import pandas as pd

from blog_etl.clean.cleaning import require_columns
from blog_etl.errors import SchemaMismatch

LABELS_ATTR = 'period_labels'


def _period_label(label):
    """'1920' -> 1920; anything non-numeric is left as-is"""
    text = str(label).strip()
    return int(text) if text.isdigit() else label


def _period_order(period):
    # numeric periods first, then text labels ('est_2023')
    return (isinstance(period, str), period)


def wide_to_long(df: pd.DataFrame,
                 id_columns: Sequence[str],
                 period_columns: Optional[Sequence[str]] = None,
                 period_name: str = 'period',
                 value_name: str = 'value') -> pd.DataFrame:
    """
    Melt a wide table into long form

    Args:
        df: Wide table
        id_columns: Entity columns, repeated on every output row
        period_columns: Value columns, one per period (default: every
            non-id column)
        period_name: Name of the output period column
        value_name: Name of the output value column

    Returns:
        Long DataFrame sorted by entity then period
    """
    id_columns = list(id_columns)
    require_columns(df, id_columns, 'wide table')

    if period_columns is None:
        period_columns = [c for c in df.columns if c not in id_columns]
    period_columns = list(period_columns)
    require_columns(df, period_columns, 'wide table')

    if not period_columns:
        raise SchemaMismatch('Wide table has no period columns', keys=id_columns)
    clash = {period_name, value_name} & set(id_columns)
    if clash:
        raise SchemaMismatch('Output column names collide with id columns', keys=sorted(clash))

    labels = {_period_label(c): c for c in period_columns}
    if len(labels) != len(period_columns):
        raise SchemaMismatch('Period columns collide once parsed', keys=period_columns)

    long = df.melt(id_vars=id_columns, value_vars=period_columns,
                   var_name=period_name, value_name=value_name)
    long[period_name] = long[period_name].map(_period_label)

    order = {p: i for i, p in enumerate(sorted(labels, key=_period_order))}
    long['_order'] = long[period_name].map(order)
    long = long.sort_values(id_columns + ['_order'], kind='mergesort')
    long = long.drop(columns='_order').reset_index(drop=True)

    long.attrs = {**long.attrs, LABELS_ATTR: labels}
    return long


def long_to_wide(df: pd.DataFrame,
                 id_columns: Sequence[str],
                 period_name: str = 'period',
                 value_name: str = 'value') -> pd.DataFrame:
    """
    Pivot a long table back to wide form

    Period columns come back under their original wide labels when `df`
    came from `wide_to_long`; otherwise they are named `str(period)`.
    Numeric periods are ordered ascending, ahead of text labels.

    Raises:
        SchemaMismatch: Missing columns or duplicate (entity, period) rows
    """
    id_columns = list(id_columns)
    require_columns(df, id_columns + [period_name, value_name], 'long table')

    dupes = df.duplicated(subset=id_columns + [period_name], keep=False)
    if dupes.any():
        keys = df.loc[dupes, id_columns + [period_name]].drop_duplicates()
        raise SchemaMismatch('Duplicate (entity, period) rows in long table',
                             keys=[tuple(r) for r in keys.itertuples(index=False)])

    labels = df.attrs.get(LABELS_ATTR, {})

    periods = sorted(df[period_name].dropna().unique(), key=_period_order)
    order = {p: i for i, p in enumerate(periods)}
    keyed = df.assign(_order=df[period_name].map(order))

    wide = keyed.pivot(index=id_columns, columns='_order', values=value_name)
    wide = wide.reindex(columns=range(len(periods)))
    wide.columns = [labels.get(p, str(p)) for p in periods]
    wide.columns.name = None

    wide = wide.reset_index()
    wide.attrs = {}
    return wide
