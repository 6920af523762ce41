#!/usr/bin/env python3
"""
Static Charts for the Blog Posts

Line charts and faceted small multiples rendered with matplotlib/seaborn
from a finalized render table (x, y, color, facet).
"""

from pathlib import Path
from typing import Optional, Union

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from config.settings import CHART_COLORS, REGION_COLORS


def _palette(render_df: pd.DataFrame):
    if 'color' not in render_df.columns:
        return None
    values = list(pd.unique(render_df['color'].dropna()))
    if all(v in REGION_COLORS for v in values):
        return {v: REGION_COLORS[v] for v in values}
    return {v: CHART_COLORS[i % len(CHART_COLORS)] for i, v in enumerate(values)}


def plot_line_chart(render_df: pd.DataFrame, title: str = '',
                    x_label: str = '', y_label: str = '',
                    highlight: Optional[pd.Series] = None,
                    figsize=(12, 6)) -> plt.Figure:
    """
    One line per color group (single line when there is no color channel)

    Args:
        render_df: Finalized render table
        title: Chart title
        x_label: X axis label
        y_label: Y axis label
        highlight: Boolean mask over render_df rows to mark (e.g. outlier periods)
        figsize: Figure size

    Returns:
        matplotlib Figure
    """
    sns.set_style('whitegrid')
    fig, ax = plt.subplots(figsize=figsize)

    df = render_df.sort_values('x', kind='mergesort')
    if 'color' in df.columns:
        sns.lineplot(data=df, x='x', y='y', hue='color', palette=_palette(df),
                     marker='o', ax=ax)
        ax.legend(title='')
    else:
        ax.plot(df['x'], df['y'], marker='o', color=CHART_COLORS[0], linewidth=2)

    if highlight is not None:
        marked = render_df[highlight.reindex(render_df.index, fill_value=False).astype(bool)]
        ax.scatter(marked['x'], marked['y'], s=140, facecolors='none',
                   edgecolors='red', linewidths=2, zorder=5, label='Outlier')

    ax.set_title(title, fontsize=13, fontweight='bold', pad=15)
    ax.set_xlabel(x_label, fontsize=11)
    ax.set_ylabel(y_label, fontsize=11)
    ax.grid(axis='y', alpha=0.3)
    fig.tight_layout()

    return fig


def plot_faceted_chart(render_df: pd.DataFrame, title: str = '',
                       x_label: str = '', y_label: str = '',
                       col_wrap: int = 3, height: float = 3.0,
                       kind: str = 'line') -> sns.FacetGrid:
    """
    Small multiples, one panel per facet value

    Returns:
        seaborn FacetGrid (its `.figure` is the matplotlib Figure)
    """
    sns.set_style('whitegrid')
    df = render_df.sort_values(['facet', 'x'], kind='mergesort')

    grid = sns.relplot(
        data=df, x='x', y='y',
        hue='color' if 'color' in df.columns else None,
        palette=_palette(df),
        col='facet', col_wrap=col_wrap,
        kind=kind, height=height, aspect=1.3,
        facet_kws={'sharey': False},
        **({'marker': 'o'} if kind == 'line' else {}),
    )
    grid.set_titles('{col_name}')
    grid.set_axis_labels(x_label, y_label)
    if grid.legend is not None:
        grid.legend.set_title('')
    grid.figure.suptitle(title, fontsize=13, fontweight='bold')
    grid.figure.subplots_adjust(top=0.9)

    return grid


def plot_region_bars(render_df: pd.DataFrame, title: str = '',
                     value_label: str = '', figsize=(10, 6)) -> plt.Figure:
    """Horizontal bars of y per x, colored by the color channel"""
    sns.set_style('whitegrid')
    fig, ax = plt.subplots(figsize=figsize)

    df = render_df.sort_values('y', kind='mergesort')
    palette = _palette(df)
    colors = [palette[c] for c in df['color']] if palette else CHART_COLORS[0]
    ax.barh(df['x'].astype(str), df['y'], color=colors, alpha=0.8)

    for i, value in enumerate(df['y']):
        ax.text(value, i, f' {value:,.1f}', va='center', fontsize=9)

    ax.set_title(title, fontsize=13, fontweight='bold', pad=15)
    ax.set_xlabel(value_label, fontsize=11)
    ax.grid(axis='x', alpha=0.3)
    fig.tight_layout()

    return fig


def save_figure(fig, output_path: Union[str, Path], dpi: int = 300) -> Path:
    """Save a Figure (or seaborn grid) as a static image and close it"""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    figure = fig.figure if isinstance(fig, sns.FacetGrid) else fig
    figure.savefig(output_path, dpi=dpi, bbox_inches='tight')
    plt.close(figure)
    print(f'  ✓ Saved figure: {output_path}')
    return output_path
