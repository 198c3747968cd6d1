# tests/conftest.py

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

# Put the project root on the path so the top-level packages import
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import load_config  # noqa: E402
from services.models import SourceField  # noqa: E402

API_KEY = "0123456789abcdef0123456789abcdef-us12"
LIST_ID = "abc123def4"


@pytest.fixture
def config_values() -> dict:
    """Minimal valid configuration, as it would come from the CLI."""
    return {
        "api_key": API_KEY,
        "list_id": LIST_ID,
        "default_status": "Subscribed",
        "sql_server": "db.example.local",
        "sql_database": "Sales",
        "sql_table": "Customers",
    }


@pytest.fixture
def config(config_values):
    return load_config(config_values, environ={})


@pytest.fixture
def jane_row() -> dict:
    return {
        SourceField.EMAIL: "jane@example.com",
        SourceField.FIRST_NAME: "Jane",
        SourceField.LAST_NAME: "Doe",
        SourceField.TITLE: "Ms",
        SourceField.AGREED: True,
    }


def make_response(status_code: int, json_body=None, text: str = "") -> MagicMock:
    """Builds a fake requests.Response whose raise_for_status behaves like the real one."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    if json_body is None:
        response.json.side_effect = ValueError("No JSON body")
    else:
        response.json.return_value = json_body
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code} Error", response=response)
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def mock_session(mocker):
    """A requests.Session stand-in; preflight succeeds and every PUT returns 200 unless a test says otherwise."""
    session = mocker.MagicMock(spec=requests.Session)
    session.headers = {}
    session.get.return_value = make_response(200, {"id": LIST_ID, "name": "Customers"})
    session.put.return_value = make_response(200, {"id": "member"})
    return session
