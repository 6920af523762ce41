"""
Inner joins with row-count consistency checks

Mismatched keys (stray whitespace, renamed entities) silently shrink a
join, so every join reports the left keys it lost and can be held to an
expected row count.
"""

from typing import List, Optional, Sequence, Union

import pandas as pd

from blog_etl.clean.cleaning import require_columns
from blog_etl.errors import JoinKeyMismatch, SchemaMismatch


def _as_list(on: Union[str, Sequence[str]]) -> List[str]:
    return [on] if isinstance(on, str) else list(on)


def trim_keys(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Copy of `df` with surrounding whitespace stripped from text key columns"""
    df = df.copy()
    for col in columns:
        if df[col].dtype == object or pd.api.types.is_string_dtype(df[col].dtype):
            df[col] = df[col].astype('string').str.strip()
    return df


def _key_tuples(df: pd.DataFrame, columns: Sequence[str]) -> pd.Series:
    return pd.Series(list(df[list(columns)].itertuples(index=False, name=None)), index=df.index)


def unmatched_keys(left: pd.DataFrame, right: pd.DataFrame,
                   on: Union[str, Sequence[str]],
                   right_on: Union[str, Sequence[str], None] = None) -> list:
    """
    Left key values with no match on the right (after trimming)

    Single-column keys are returned as scalars, composite keys as tuples.
    A left key with any null part never matches and is always reported.
    """
    on = _as_list(on)
    right_on = _as_list(right_on) if right_on is not None else on

    left_keys = _key_tuples(trim_keys(left, on), on)
    right_keys = set(_key_tuples(trim_keys(right, right_on).dropna(subset=right_on), right_on))

    missing = [k for k in pd.unique(left_keys) if k not in right_keys]
    if len(on) == 1:
        return [k[0] for k in missing]
    return missing


def inner_join(left: pd.DataFrame, right: pd.DataFrame,
               on: Union[str, Sequence[str]],
               right_on: Union[str, Sequence[str], None] = None,
               expected_rows: Optional[int] = None,
               max_dropped: Optional[int] = None,
               suffixes=('', '_right'),
               verbose: bool = True) -> pd.DataFrame:
    """
    Inner-join `left` with a lookup/dimension table `right`

    Args:
        left: Main table
        right: Lookup table, unique on its key
        on: Left key column(s)
        right_on: Right key column(s) (default: same names as `on`)
        expected_rows: Exact row count the result must have
        max_dropped: Most left rows the join may drop
        suffixes: Suffixes for overlapping non-key columns
        verbose: Print match summary

    Returns:
        Joined DataFrame (left row order preserved), keys named as in `left`

    Raises:
        SchemaMismatch: Key column absent, or key types incompatible
        JoinKeyMismatch: Duplicate right keys, or row count outside bounds
    """
    on = _as_list(on)
    right_on = _as_list(right_on) if right_on is not None else on
    if len(on) != len(right_on):
        raise SchemaMismatch('Left and right keys differ in length', keys=on + right_on)

    require_columns(left, on, 'left join table')
    require_columns(right, right_on, 'right join table')

    left_t = trim_keys(left, on)
    right_t = trim_keys(right, right_on).rename(columns=dict(zip(right_on, on)))
    # Null keys never match, not even each other
    right_t = right_t.dropna(subset=on)
    keyed = left_t.dropna(subset=on)

    dup = right_t.duplicated(subset=on, keep=False)
    if dup.any():
        keys = right_t.loc[dup, on].drop_duplicates()
        raise JoinKeyMismatch('Lookup table has duplicate keys',
                              keys=[tuple(r) if len(on) > 1 else r[0]
                                    for r in keys.itertuples(index=False)])

    try:
        joined = keyed.merge(right_t, on=on, how='inner', suffixes=suffixes, sort=False)
    except ValueError as e:
        raise SchemaMismatch(f'Join keys have incompatible types: {e}', keys=on) from e

    lost = unmatched_keys(left_t, right_t, on)
    dropped = len(left) - len(joined)

    if verbose:
        print(f'  ✓ Joined on {on}: {len(left):,} → {len(joined):,} rows')
        if lost:
            shown = ', '.join(str(k) for k in lost[:10])
            print(f'  ⚠️  {len(lost)} unmatched left keys: {shown}')

    if expected_rows is not None and len(joined) != expected_rows:
        raise JoinKeyMismatch(
            f'Join produced {len(joined)} rows, expected {expected_rows}', keys=lost
        )
    if max_dropped is not None and dropped > max_dropped:
        raise JoinKeyMismatch(
            f'Join dropped {dropped} rows, tolerance {max_dropped}', keys=lost
        )

    return joined.reset_index(drop=True)


def expect_row_count(df: pd.DataFrame, expected: int, label: str = 'table'):
    """Assert a table has exactly `expected` rows before it is rendered"""
    if len(df) != expected:
        raise JoinKeyMismatch(f'{label} has {len(df)} rows, expected {expected}',
                              keys=[label])
    return df
