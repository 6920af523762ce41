import json
import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


class FakeResponse:

    def __init__(self, status_code=200, payload=None, text=''):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError('no json body')
        return self._payload


class FakeSession:
    """Stands in for requests.Session; `handler(url, params)` builds responses"""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        return self.handler(url, params)


@pytest.fixture
def make_session():
    return FakeSession


@pytest.fixture
def make_response():
    return FakeResponse


class _ScriptedHandler(BaseHTTPRequestHandler):
    """Replies with the next scripted status; the last one repeats"""

    def do_GET(self):
        server = self.server
        server.hits += 1
        status = server.statuses[min(server.hits, len(server.statuses)) - 1]
        body = json.dumps(server.payload if status == 200 else {'error': status}).encode()
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def scripted_server():
    """
    Local HTTP server answering GETs with a scripted status sequence

    Call `start(statuses, payload)` to get the base URL; `server.hits`
    counts requests that reached it.
    """
    servers = []

    def start(statuses, payload=None):
        server = ThreadingHTTPServer(('127.0.0.1', 0), _ScriptedHandler)
        server.statuses = list(statuses)
        server.payload = payload
        server.hits = 0
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        host, port = server.server_address[:2]
        return server, f'http://{host}:{port}'

    yield start

    for server in servers:
        server.shutdown()
        server.server_close()


def _year_from_url(url):
    # https://api.census.gov/data/<year>/<dataset>
    return int(url.split('/')[4])


@pytest.fixture
def census_session():
    """Answers every request with one Fulton County row for the requested year"""
    def handler(url, params):
        year = _year_from_url(url)
        header = params['get'].split(',') + ['state', 'county']
        row = ['Fulton County, Georgia'] + [str(900000 + year)] * (len(header) - 3) + ['13', '121']
        return FakeResponse(200, [header, row])
    return FakeSession(handler)


@pytest.fixture
def county_wide():
    return pd.DataFrame({
        'fips': ['01001', '06001', '46113', '48001'],
        'name': [
            'Autauga County, Alabama',
            'Alameda County, California',
            'Shannon County, South Dakota',
            'Anderson County, Texas',
        ],
        '2000': [100.0, 300.0, 10.0, 50.0],
        '2010': [150.0, 300.0, 12.0, 60.0],
        '2020': [120.0, 200.0, 14.0, 70.0],
    })


SPIKE_POPULATION = [5000, 5200, 5500, 5900, 6100, 14100, 14600, 15000, 15400, 15700, 16000]


@pytest.fixture
def spike_wide():
    """One county, 1920-2020, with a jump between 1960 and 1970"""
    data = {'fips': ['13121'], 'name': ['Fulton County, Georgia']}
    for year, value in zip(range(1920, 2021, 10), SPIKE_POPULATION):
        data[str(year)] = [float(value)]
    return pd.DataFrame(data)


@pytest.fixture
def texas_wide_3134():
    """3134 counties, three of them missing their 2010 count"""
    n = 3134
    fips = [f'{i + 1:05d}' for i in range(n)]
    df = pd.DataFrame({
        'fips': fips,
        'name': [f'County {i}, Texas' for i in range(n)],
        '2000': np.arange(n, dtype=float) + 1000,
        '2010': np.arange(n, dtype=float) + 2000,
        '2020': np.arange(n, dtype=float) + 1500,
    })
    df.loc[[10, 20, 30], '2010'] = np.nan
    return df


@pytest.fixture
def nba_totals():
    return pd.DataFrame({
        'Season': [2023, 2023, 2023, 2023, 2023, 2023, 2023],
        'Player': ['A', 'B', 'C', 'D', 'E', 'F', 'G'],
        'Tm': ['BOS', 'BOS', 'BOS', 'LAL', 'LAL', 'TOT', 'LAL'],
        'Age': [25, 26, 27, 28, 29, 30, 31],
        'PTS': [2000.0, 1000.0, 1000.0, 1500.0, 1500.0, 1800.0, np.nan],
    })


@pytest.fixture
def wnba_totals():
    return pd.DataFrame({
        'Season': [2024, 2024, 2024, 2024, 2024],
        'Player': ['Wilson', 'Young', 'Clark', 'Mitchell', 'Traded'],
        'Team': ['LVA', 'LVA', 'IND', 'IND', 'TOT'],
        'PTS': [1021.0, 600.0, 769.0, 700.0, 300.0],
    })
