import json
import os
import sys
from unittest.mock import MagicMock

import pytest

# Ensure project root is on sys.path so tests can import `weather_lookup` when
# pytest is invoked from the repository root or other working directories.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


BOSTON_PAYLOAD = {
    "main": {"temp": 72.5, "feels_like": 70.1, "humidity": 45},
    "weather": [{"description": "clear sky", "icon": "01d"}],
    "name": "Boston",
}


@pytest.fixture
def boston_payload():
    return json.loads(json.dumps(BOSTON_PAYLOAD))


def make_response(status_code=200, body=None, content=None):
    """Build a stand-in for ``requests.Response``."""
    response = MagicMock()
    response.status_code = status_code
    if content is None:
        content = json.dumps(body).encode() if body is not None else b""
    response.content = content
    response.text = content.decode(errors="replace")
    if body is not None:
        response.json.return_value = body
    else:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    return response


@pytest.fixture
def response_factory():
    return make_response
