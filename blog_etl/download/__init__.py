"""
Data Download Module

Remote data acquisition:
- Census Data API (ACS, decennial) with per-year pulls
- Retrying HTTP session shared by every remote read
"""

from .http import get_http_session, http_get
from .census_api import (
    CensusQuery,
    fetch_census_table,
    fetch_census_years,
    year_range
)

__all__ = [
    'get_http_session',
    'http_get',
    'CensusQuery',
    'fetch_census_table',
    'fetch_census_years',
    'year_range'
]
