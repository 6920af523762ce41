"""
Interactive chart utilities for the blog posts
Plotly figures built from a finalized render table (x, y, color, facet, tooltip)
"""

import warnings
from pathlib import Path
from typing import Optional, Union

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from config.settings import CHART_COLORS, PLOTLY_THEME, REGION_COLORS
from blog_etl.errors import InvalidParameter

warnings.filterwarnings('ignore', category=FutureWarning, module='plotly')


def _color_map(render_df: pd.DataFrame) -> Optional[dict]:
    if 'color' not in render_df.columns:
        return None
    values = render_df['color'].dropna().unique()
    if all(v in REGION_COLORS for v in values):
        return REGION_COLORS
    return {v: CHART_COLORS[i % len(CHART_COLORS)] for i, v in enumerate(values)}


def create_interactive_chart(render_df: pd.DataFrame, kind: str = 'line',
                             title: str = '', x_title: str = '', y_title: str = '',
                             height: int = 500) -> go.Figure:
    """
    Create a line or scatter chart with hover tooltips

    Args:
        render_df: Finalized render table
        kind: 'line' or 'scatter'
        title: Chart title
        x_title: X axis label
        y_title: Y axis label
        height: Figure height in pixels

    Returns:
        Plotly figure
    """
    if kind not in ('line', 'scatter'):
        raise InvalidParameter("Chart kind must be 'line' or 'scatter'", keys=[kind])

    df = render_df.sort_values('x', kind='mergesort')
    kwargs = dict(
        x='x', y='y',
        color='color' if 'color' in df.columns else None,
        facet_col='facet' if 'facet' in df.columns else None,
        facet_col_wrap=3 if 'facet' in df.columns else 0,
        color_discrete_map=_color_map(df) or {},
        custom_data=['tooltip'] if 'tooltip' in df.columns else None,
        template=PLOTLY_THEME,
        height=height,
    )

    if kind == 'line':
        fig = px.line(df, markers=True, **kwargs)
    else:
        fig = px.scatter(df, **kwargs)

    if 'tooltip' in df.columns:
        fig.update_traces(hovertemplate='%{customdata[0]}<extra></extra>')

    fig.update_layout(
        title=title,
        xaxis_title=x_title,
        yaxis_title=y_title,
        hovermode='closest',
        legend_title_text=''
    )

    return fig


def create_ranked_bar_chart(render_df: pd.DataFrame, top_n: int = 15,
                            title: str = '', x_title: str = '') -> go.Figure:
    """
    Horizontal bar chart of the top `top_n` units by y

    Args:
        render_df: Finalized render table (x = label, y = value)
        top_n: Number of bars
        title: Chart title
        x_title: Value axis label

    Returns:
        Plotly figure
    """
    top = render_df.nlargest(top_n, 'y').iloc[::-1]

    fig = go.Figure(data=[go.Bar(
        x=top['y'],
        y=top['x'].astype(str),
        orientation='h',
        marker=dict(color=CHART_COLORS[0]),
        customdata=top[['tooltip']].values if 'tooltip' in top.columns else None,
        hovertemplate='%{customdata[0]}<extra></extra>' if 'tooltip' in top.columns else None,
    )])

    fig.update_layout(
        title=title,
        xaxis_title=x_title,
        template=PLOTLY_THEME,
        height=max(300, 28 * len(top)),
        showlegend=False
    )

    return fig


def save_html(fig: go.Figure, output_path: Union[str, Path]) -> Path:
    """Write a self-contained HTML document (plotly.js inlined)"""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(str(output_path), include_plotlyjs=True, full_html=True)
    print(f'  ✓ Saved interactive chart: {output_path}')
    return output_path
