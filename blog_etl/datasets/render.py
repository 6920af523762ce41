"""
Render contract

A renderer receives one row per plotted unit with a column per visual
channel: x, y, color, facet, tooltip. Entity key columns ride along
under their own names so maps can merge boundaries on them.
"""

from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from blog_etl.clean.cleaning import report_nulls, require_columns
from blog_etl.errors import SchemaMismatch

CHANNELS = ('x', 'y', 'color', 'facet', 'tooltip')

# Columns shown without thousands separators (1950, not 1,950)
PERIOD_HINTS = ('period', 'year', 'season')


def _format_value(value) -> str:
    if pd.isna(value):
        return 'n/a'
    if isinstance(value, (bool, np.bool_)):
        return str(value)
    if isinstance(value, (float, np.floating)):
        value = float(value)
        return f'{value:,.2f}' if not value.is_integer() else f'{int(value):,}'
    if isinstance(value, (int, np.integer)):
        return f'{value:,}'
    return str(value)


def _format_period(value) -> str:
    if pd.isna(value):
        return 'n/a'
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def build_tooltip(df: pd.DataFrame, columns: Sequence[str], labels: Optional[dict] = None,
                  sep: str = '<br>') -> pd.Series:
    """'Label: value' lines joined with `sep`, one string per row"""
    labels = labels or {}
    require_columns(df, columns, 'tooltip')
    lines = []
    for col in columns:
        label = labels.get(col, col)
        fmt = _format_period if any(t in col.lower() for t in PERIOD_HINTS) else _format_value
        lines.append(df[col].map(lambda v, label=label, fmt=fmt: f'{label}: {fmt(v)}'))
    tooltip = lines[0].astype(str)
    for line in lines[1:]:
        tooltip = tooltip + sep + line.astype(str)
    return tooltip


def finalize_for_render(df: pd.DataFrame,
                        x: str,
                        y: str,
                        color: Optional[str] = None,
                        facet: Optional[str] = None,
                        tooltip: Union[Sequence[str], None] = None,
                        key: Union[str, Sequence[str], None] = None,
                        tooltip_labels: Optional[dict] = None,
                        expected_rows: Optional[int] = None) -> pd.DataFrame:
    """
    Produce the finalized table a renderer consumes

    Args:
        df: Aggregated/joined table
        x, y: Position channels (required, never null)
        color: Color/fill channel
        facet: Small-multiple channel
        tooltip: Columns shown on hover
        key: Columns identifying a plotted unit (default: x plus color and
            facet); kept in the output under their own names
        tooltip_labels: Display labels for tooltip columns
        expected_rows: Exact number of plotted units

    Returns:
        DataFrame with channel columns (and key columns)

    Raises:
        SchemaMismatch: Missing column, null position, duplicate plotted unit,
            or unexpected row count
    """
    channel_sources = {'x': x, 'y': y, 'color': color, 'facet': facet}
    used = {ch: col for ch, col in channel_sources.items() if col is not None}
    require_columns(df, list(used.values()), 'render table')

    nulls = report_nulls(df, [x, y])
    if nulls.count:
        raise SchemaMismatch('Null x/y in render table', keys=nulls.keys)

    if key is None:
        key_cols = [c for c in (x, color, facet) if c is not None]
    else:
        key_cols = [key] if isinstance(key, str) else list(key)
    key_cols = list(dict.fromkeys(key_cols))
    require_columns(df, key_cols, 'render table')

    dup = df.duplicated(subset=key_cols, keep=False)
    if dup.any():
        dupes = df.loc[dup, key_cols].drop_duplicates()
        raise SchemaMismatch('More than one row per plotted unit',
                             keys=[tuple(r) for r in dupes.itertuples(index=False)])

    out = pd.DataFrame({ch: df[col].values for ch, col in used.items()}, index=df.index)
    if tooltip:
        out['tooltip'] = build_tooltip(df, list(tooltip), tooltip_labels).values
    for col in key_cols:
        if col not in out.columns:
            out[col] = df[col].values

    if expected_rows is not None and len(out) != expected_rows:
        raise SchemaMismatch(f'Render table has {len(out)} rows, expected {expected_rows}',
                             keys=key_cols)

    return out.reset_index(drop=True)
