"""
Map visualization utilities for the blog posts
Choropleths from boundary polygons merged with a finalized render table
"""

from pathlib import Path
from typing import Optional, Tuple, Union

import folium
import geopandas as gpd
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import pandas as pd

from config.settings import MAP_CENTER, MAP_ZOOM
from blog_etl.integrate.join import inner_join


def merge_boundaries(boundaries: gpd.GeoDataFrame, render_df: pd.DataFrame,
                     key: str, boundary_key: str = 'GEOID',
                     max_dropped: Optional[int] = None,
                     verbose: bool = True) -> gpd.GeoDataFrame:
    """
    Attach render channels to boundary polygons

    Render rows without a polygon are reported by the join and dropped.
    """
    geo = boundaries[[boundary_key, 'geometry']]
    merged = inner_join(render_df, geo, on=key, right_on=boundary_key,
                        max_dropped=max_dropped, verbose=verbose)
    return gpd.GeoDataFrame(merged, geometry='geometry', crs=boundaries.crs)


def create_choropleth_map(geo_df: gpd.GeoDataFrame, key: str,
                          value_col: str = 'fill',
                          legend_name: str = '',
                          center: Optional[Tuple[float, float]] = None,
                          zoom_start: int = MAP_ZOOM,
                          fill_color: str = 'YlOrRd') -> folium.Map:
    """
    Interactive choropleth with hover tooltips

    Args:
        geo_df: Boundaries merged with a render table
        key: Entity key column
        value_col: Column driving the fill color
        legend_name: Color scale legend
        center: Map center (lat, lon); default contiguous US
        zoom_start: Initial zoom level
        fill_color: ColorBrewer scheme

    Returns:
        Folium map object
    """
    geo_df = geo_df.to_crs('EPSG:4326')
    center = center or tuple(MAP_CENTER)

    m = folium.Map(location=center, zoom_start=zoom_start, tiles='cartodbpositron')

    # folium serializes through GeoJSON; keep only JSON-safe columns
    columns = [key, value_col] + (['tooltip'] if 'tooltip' in geo_df.columns else [])
    layer_df = geo_df[columns + ['geometry']].copy()
    layer_df[key] = layer_df[key].astype(str)
    layer_df[value_col] = pd.to_numeric(layer_df[value_col], errors='coerce').astype(float)
    if 'tooltip' in layer_df.columns:
        layer_df['tooltip'] = layer_df['tooltip'].astype(str)

    choropleth = folium.Choropleth(
        geo_data=layer_df.__geo_interface__,
        data=layer_df,
        columns=[key, value_col],
        key_on=f'feature.properties.{key}',
        fill_color=fill_color,
        fill_opacity=0.75,
        line_opacity=0.2,
        nan_fill_color='lightgray',
        legend_name=legend_name,
        highlight=True,
    ).add_to(m)

    if 'tooltip' in layer_df.columns:
        choropleth.geojson.add_child(
            folium.features.GeoJsonTooltip(fields=['tooltip'], labels=False)
        )

    return m


def plot_static_choropleth(geo_df: gpd.GeoDataFrame, value_col: str = 'fill',
                           title: str = '', legend_label: str = '',
                           cmap: str = 'YlOrRd', figsize=(14, 8)) -> plt.Figure:
    """Static choropleth for the post's inline image"""
    fig, ax = plt.subplots(figsize=figsize)
    geo_df.plot(
        column=value_col, cmap=cmap, linewidth=0.1, edgecolor='white',
        legend=True, legend_kwds={'label': legend_label, 'shrink': 0.6},
        missing_kwds={'color': 'lightgray'}, ax=ax
    )
    ax.set_title(title, fontsize=13, fontweight='bold', pad=15)
    ax.set_axis_off()
    fig.tight_layout()
    return fig


def save_map(m: folium.Map, output_path: Union[str, Path]) -> Path:
    """Write the folium map as a self-contained HTML document"""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    m.save(str(output_path))
    print(f'  ✓ Saved map: {output_path}')
    return output_path
