"""
Renderers for the blog posts

Static charts (matplotlib/seaborn), interactive charts (plotly), and
choropleth maps (folium/geopandas), all consuming a finalized render table.
"""

from .charts import (
    plot_line_chart,
    plot_faceted_chart,
    plot_region_bars,
    save_figure
)
from .interactive import (
    create_interactive_chart,
    create_ranked_bar_chart,
    save_html
)
from .maps import (
    merge_boundaries,
    create_choropleth_map,
    plot_static_choropleth,
    save_map
)

__all__ = [
    'plot_line_chart',
    'plot_faceted_chart',
    'plot_region_bars',
    'save_figure',
    'create_interactive_chart',
    'create_ranked_bar_chart',
    'save_html',
    'merge_boundaries',
    'create_choropleth_map',
    'plot_static_choropleth',
    'save_map'
]
