"""
Table loading utilities for the analysis posts
Reads delimited tables (local or remote) and boundary files into typed frames
"""

import io
import re
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

import geopandas as gpd
import pandas as pd

from blog_etl.download.http import http_get
from blog_etl.errors import SchemaMismatch, SourceUnavailable

# Boundary files are named with their vintage year, e.g. tl_2010_us_county.shp
VINTAGE_PATTERN = re.compile(r'(?<!\d)(\d{4})(?!\d)')


def _is_text(series: pd.Series) -> bool:
    return series.dtype == object or pd.api.types.is_string_dtype(series.dtype)


def _is_url(source) -> bool:
    return isinstance(source, str) and source.startswith(('http://', 'https://'))


def infer_column_types(df: pd.DataFrame, id_columns: Iterable[str] = (),
                       numeric_columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Assign semantic types to a freshly loaded table

    Identifier columns stay strings (leading zeros in FIPS codes survive).
    Listed numeric columns are coerced; unparseable cells become null.
    When `numeric_columns` is None, any object column whose non-null cells
    all parse as numbers is converted.
    """
    df = df.copy()
    id_columns = list(id_columns)

    for col in id_columns:
        df[col] = df[col].astype('string').str.strip()

    if numeric_columns is None:
        candidates = [c for c in df.columns
                      if c not in id_columns and _is_text(df[c])]
        for col in candidates:
            cleaned = df[col].astype(str).str.replace(',', '', regex=False).str.strip()
            parsed = pd.to_numeric(cleaned.where(df[col].notna()), errors='coerce')
            if parsed.notna().sum() == df[col].notna().sum() and df[col].notna().any():
                df[col] = parsed
    else:
        for col in numeric_columns:
            cleaned = df[col].astype(str).str.replace(',', '', regex=False).str.strip()
            df[col] = pd.to_numeric(cleaned.where(df[col].notna()), errors='coerce')

    rest = [c for c in df.columns if c not in id_columns]
    text_cols = [c for c in rest if _is_text(df[c])]
    for col in text_cols:
        df[col] = df[col].astype('string').str.strip()

    return df


def load_table(source: Union[str, Path],
               id_columns: Iterable[str] = (),
               numeric_columns: Optional[Sequence[str]] = None,
               sep: str = ',',
               session=None,
               verbose: bool = True) -> pd.DataFrame:
    """
    Load a delimited table from a file path or http(s) URL

    Args:
        source: Local path or URL
        id_columns: Columns read as strings (entity identifiers)
        numeric_columns: Columns coerced to numbers (None = infer)
        sep: Field delimiter
        session: HTTP session for URL sources
        verbose: Print progress

    Returns:
        Typed DataFrame

    Raises:
        SourceUnavailable: Missing/unreadable file or failed download
        SchemaMismatch: An id/numeric column is absent
    """
    id_columns = list(id_columns)
    dtype = {c: str for c in id_columns}

    try:
        if _is_url(source):
            response = http_get(source, session=session, keys=[source])
            if response.status_code != 200:
                raise SourceUnavailable(f'HTTP {response.status_code}', keys=[source])
            df = pd.read_csv(io.StringIO(response.text), sep=sep, dtype=dtype)
        else:
            path = Path(source)
            if not path.exists():
                raise SourceUnavailable('File not found', keys=[str(path)])
            df = pd.read_csv(path, sep=sep, dtype=dtype)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
        raise SourceUnavailable(f'Could not read table: {e}', keys=[str(source)]) from e

    expected = id_columns + list(numeric_columns or [])
    missing = [c for c in expected if c not in df.columns]
    if missing:
        raise SchemaMismatch(f'Expected columns absent from {source}', keys=missing)

    df = infer_column_types(df, id_columns=id_columns, numeric_columns=numeric_columns)

    if verbose:
        print(f'  ✓ Loaded {len(df):,} rows x {len(df.columns)} columns from {source}')

    return df


def boundary_vintages(directory: Union[str, Path], pattern: str = '*') -> dict:
    """Map vintage year -> boundary file for files matching `pattern`"""
    directory = Path(directory)
    if not directory.is_dir():
        raise SourceUnavailable('Boundary directory not found', keys=[str(directory)])

    vintages = {}
    for path in sorted(directory.glob(pattern)):
        match = VINTAGE_PATTERN.search(path.stem)
        if match and path.suffix.lower() in ('.shp', '.geojson', '.json', '.gpkg', '.zip'):
            vintages[int(match.group(1))] = path
    return vintages


def load_boundaries(directory: Union[str, Path], year: int,
                    pattern: str = '*',
                    id_column: Optional[str] = 'GEOID',
                    verbose: bool = True) -> gpd.GeoDataFrame:
    """
    Load the boundary vintage in effect for `year`

    Picks the latest vintage not after `year` (a 2015 map uses 2010
    boundaries when those are the newest available).

    Raises:
        SourceUnavailable: No vintage at or before `year`
        SchemaMismatch: `id_column` absent from the boundary file
    """
    vintages = boundary_vintages(directory, pattern)
    eligible = [v for v in vintages if v <= year]
    if not eligible:
        raise SourceUnavailable(
            f'No boundary vintage at or before {year} (available: {sorted(vintages)})',
            keys=[str(directory), year]
        )

    vintage = max(eligible)
    path = vintages[vintage]
    try:
        gdf = gpd.read_file(path)
    except Exception as e:
        raise SourceUnavailable(f'Could not read boundary file: {e}', keys=[str(path)]) from e

    if id_column is not None:
        if id_column not in gdf.columns:
            raise SchemaMismatch('Boundary file has no id column', keys=[id_column, str(path)])
        gdf[id_column] = gdf[id_column].astype(str).str.strip()

    gdf['vintage'] = vintage

    if verbose:
        print(f'  ✓ Loaded {len(gdf):,} boundaries (vintage {vintage}) from {path.name}')

    return gdf
