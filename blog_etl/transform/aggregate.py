"""
Group-and-reduce over long tables

Tie-break policy for max: when several periods share an entity's maximum,
the earliest period wins. Rows are stably sorted by key then period and
the first maximum in that order is kept.
"""

from typing import Sequence, Union

import pandas as pd

from blog_etl.clean.cleaning import require_columns
from blog_etl.errors import InvalidParameter

REDUCTIONS = ('max', 'sum')


def _complete_rows(df: pd.DataFrame, columns) -> pd.DataFrame:
    # nulls are reported upstream by the cleaner; they never reach a reduction
    return df.dropna(subset=list(columns))


def aggregate_max(df: pd.DataFrame,
                  keys: Sequence[str],
                  value: str = 'value',
                  at: str = 'period') -> pd.DataFrame:
    """
    Max-by-value per key, with the `at` value where the max occurred

    Args:
        df: Long table
        keys: Group-key columns
        value: Column to maximise
        at: Column recording where the max happened (period, player, ...)

    Returns:
        One row per distinct key: keys + [at, value]
    """
    keys = list(keys)
    require_columns(df, keys + [at, value], 'max aggregation')

    rows = _complete_rows(df, keys + [at, value])
    rows = rows.sort_values(keys + [at], kind='mergesort').reset_index(drop=True)

    # idxmax returns the first index label holding the maximum
    winners = rows.groupby(keys, sort=True)[value].idxmax()
    result = rows.loc[winners.values, keys + [at, value]]

    return result.reset_index(drop=True)


def aggregate_sum(df: pd.DataFrame,
                  keys: Sequence[str],
                  values: Union[str, Sequence[str]] = 'value') -> pd.DataFrame:
    """
    Summed totals per key

    Returns:
        One row per distinct key: keys + values
    """
    keys = list(keys)
    values = [values] if isinstance(values, str) else list(values)
    require_columns(df, keys + values, 'sum aggregation')

    rows = _complete_rows(df, keys)
    result = rows.groupby(keys, sort=True, dropna=True)[values].sum(min_count=1)

    return result.reset_index()


def aggregate(df: pd.DataFrame, keys: Sequence[str], reduction: str = 'max',
              value: str = 'value', at: str = 'period') -> pd.DataFrame:
    """Dispatch to the named reduction ('max' or 'sum')"""
    if reduction == 'max':
        return aggregate_max(df, keys, value=value, at=at)
    if reduction == 'sum':
        return aggregate_sum(df, keys, values=value)
    raise InvalidParameter(f'Unknown reduction (use one of {REDUCTIONS})', keys=[reduction])
