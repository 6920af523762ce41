"""
Configuration for the analysis posts
API endpoints, network policy, and chart styling constants
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# ==============================================================================
# CENSUS API
# ==============================================================================

CENSUS_API_BASE = "https://api.census.gov/data"
CENSUS_API_KEY_ENV = "CENSUS_API_KEY"

# First year each dataset is published through the API
CENSUS_DATASET_FIRST_YEAR = {
    'acs/acs5': 2009,
    'acs/acs1': 2005,
    'acs/acs5/profile': 2009,
    'acs/acs1/profile': 2005,
    'dec/pl': 2000,
    'pep/population': 2015,
}

# Years a dataset was never released (2020 ACS 1-year was experimental only)
CENSUS_DATASET_MISSING_YEARS = {
    'acs/acs1': {2020},
    'acs/acs1/profile': {2020},
}

# Census encodes "not available" estimates with large negative sentinels
CENSUS_NULL_SENTINELS = [
    -111111111, -222222222, -333333333, -555555555,
    -666666666, -888888888, -999999999,
]

# ==============================================================================
# NETWORK POLICY
# ==============================================================================

REQUEST_TIMEOUT = 60             # seconds per request
RETRY_TOTAL = 3                  # retries for connect/read/status failures
RETRY_BACKOFF = 0.5              # 0.5, 1.0, 2.0, ...
RETRY_STATUSES = (429, 500, 502, 503, 504)

# ==============================================================================
# CHART STYLING
# ==============================================================================

# Region colors (Census regions)
REGION_COLORS = {
    'Northeast': '#3498db',
    'Midwest': '#2ecc71',
    'South': '#e74c3c',
    'West': '#f39c12',
}

CHART_COLORS = [
    '#3498db',  # Blue
    '#e74c3c',  # Red
    '#2ecc71',  # Green
    '#f39c12',  # Orange
    '#9b59b6',  # Purple
    '#1abc9c',  # Turquoise
    '#34495e',  # Dark gray
    '#e67e22',  # Carrot
]

PLOTLY_THEME = 'plotly_white'

# Map Settings
MAP_CENTER = [39.8, -98.6]  # Contiguous US
MAP_ZOOM = 4


def get_census_api_key():
    """Census API key from the environment, or None when unset"""
    key = os.getenv(CENSUS_API_KEY_ENV)
    return key.strip() if key and key.strip() else None
