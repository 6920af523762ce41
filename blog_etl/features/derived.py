"""
Derived metrics

Ratios over aggregated columns, period-over-period changes, and the
"largest single-period change" outlier check used by the population posts.
"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from blog_etl.clean.cleaning import require_columns
from blog_etl.errors import InvalidParameter
from blog_etl.transform.aggregate import aggregate_max

DIRECTIONS = ('increase', 'decrease', 'absolute')

# Iglewicz & Hoaglin modified z-score constants
MAD_SCALE = 0.6745
MEAN_AD_SCALE = 1.253314


def add_ratio(df: pd.DataFrame, numerator: str, denominator: str, name: str,
              scale: float = 1.0, decimals: Optional[int] = None) -> pd.DataFrame:
    """
    Add `name` = numerator / denominator * scale

    Zero or null denominators give null, not inf.
    """
    require_columns(df, [numerator, denominator], 'ratio')
    df = df.copy()

    num = pd.to_numeric(df[numerator], errors='coerce').astype(float)
    den = pd.to_numeric(df[denominator], errors='coerce').astype(float)
    ratio = (num / den.replace(0, np.nan)) * scale
    if decimals is not None:
        ratio = ratio.round(decimals)

    df[name] = ratio
    return df


def period_changes(df: pd.DataFrame, keys: Sequence[str], at: str = 'period',
                   value: str = 'value', name: str = 'change') -> pd.DataFrame:
    """
    Per-entity change from the previous period

    The first period of each entity has a null change.
    """
    keys = list(keys)
    require_columns(df, keys + [at, value], 'change computation')

    df = df.sort_values(keys + [at], kind='mergesort').reset_index(drop=True)
    current = pd.to_numeric(df[value], errors='coerce').astype(float)
    previous = current.groupby([df[k] for k in keys], sort=False).shift(1)
    df[name] = current - previous
    df[f'{name}_pct'] = (current - previous) / previous.replace(0, np.nan) * 100
    return df


def largest_change(df: pd.DataFrame, keys: Sequence[str], at: str = 'period',
                   value: str = 'value', direction: str = 'increase') -> pd.DataFrame:
    """
    Largest single-period change per entity

    Args:
        direction: 'increase' (biggest gain), 'decrease' (biggest loss), or
            'absolute' (biggest swing either way)

    Returns:
        keys + [at, 'change'], earliest period on ties
    """
    if direction not in DIRECTIONS:
        raise InvalidParameter(f'Unknown direction (use one of {DIRECTIONS})', keys=[direction])

    changes = period_changes(df, keys, at=at, value=value)
    changes = changes.dropna(subset=['change'])

    if direction == 'increase':
        changes['_score'] = changes['change']
    elif direction == 'decrease':
        changes['_score'] = -changes['change']
    else:
        changes['_score'] = changes['change'].abs()

    best = aggregate_max(changes, keys, value='_score', at=at)
    result = best.merge(changes[list(keys) + [at, 'change']], on=list(keys) + [at], how='left')
    return result.drop(columns='_score')


def _robust_z(values: pd.Series) -> pd.Series:
    median = values.median()
    deviation = (values - median).abs()
    mad = deviation.median()
    if mad and not pd.isna(mad):
        return MAD_SCALE * (values - median) / mad

    # more than half the values equal the median
    mean_ad = deviation.mean()
    if not mean_ad or pd.isna(mean_ad):
        return pd.Series(0.0, index=values.index)
    return (values - median) / (MEAN_AD_SCALE * mean_ad)


def flag_outlier_periods(df: pd.DataFrame, keys: Sequence[str], value: str = 'change',
                         threshold: float = 3.5, name: str = 'is_outlier') -> pd.DataFrame:
    """
    Flag rows whose `value` is a robust (median/MAD) outlier within its entity

    Adds `<name>_score` (modified z-score) and boolean `name`. Null values
    are never flagged.
    """
    keys = list(keys)
    require_columns(df, keys + [value], 'outlier check')
    df = df.copy()

    scores = pd.Series(np.nan, index=df.index)
    present = df[value].notna()
    if present.any():
        subset = df.loc[present]
        scores.loc[present] = subset.groupby(keys, sort=False)[value].transform(
            lambda s: _robust_z(s.astype(float))
        )

    df[f'{name}_score'] = scores
    df[name] = scores.abs().gt(threshold).fillna(False).astype(bool)
    return df
