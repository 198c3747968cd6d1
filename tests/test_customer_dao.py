# tests/test_customer_dao.py

import pytest

from config.settings import load_config
from db.connector import build_connection_string, get_db_connection
from db.customer_dao import build_select, fetch_customers
from services.exceptions import NoDataError
from services.models import SourceField


@pytest.fixture
def mock_connection(mocker):
    """Patches the pyodbc connect call and returns the fake connection."""
    conn = mocker.MagicMock()
    mocker.patch("db.connector.open_connection", return_value=conn)
    return conn


def test_build_select_quotes_identifiers(config):
    assert build_select(config) == (
        "SELECT [Email], [FirstName], [LastName], [Title], [AgreedToPromotions] FROM [dbo].[Customers]"
    )


def test_build_select_uses_configured_names(config_values):
    config_values.update({"sql_schema": "crm", "sql_table": "Mailing View", "email_column": "E-Mail"})
    config = load_config(config_values, environ={})
    assert build_select(config).startswith("SELECT [E-Mail], ")
    assert build_select(config).endswith("FROM [crm].[Mailing View]")


def test_connection_string_trusted(config):
    assert build_connection_string(config) == (
        "DRIVER={ODBC Driver 17 for SQL Server};SERVER=db.example.local;DATABASE=Sales;Trusted_Connection=yes;"
    )


def test_connection_string_sql_login(config_values):
    config_values.update({"sql_username": "svc", "sql_password": "s3cret", "sql_instance": "PROD"})
    config = load_config(config_values, environ={})

    assert build_connection_string(config) == (
        "DRIVER={ODBC Driver 17 for SQL Server};SERVER=db.example.local\\PROD;DATABASE=Sales;UID=svc;PWD=s3cret;"
    )
    assert "s3cret" not in build_connection_string(config, include_secrets=False)


def test_fetch_customers_binds_columns_in_order(config, mock_connection):
    # Arrange
    cursor = mock_connection.cursor.return_value
    cursor.fetchall.return_value = [
        ("jane@example.com", "Jane", "Doe", "Ms", True),
        (None, "No", "Email", None, False),
    ]

    # Act
    records = fetch_customers(config)

    # Assert
    cursor.execute.assert_called_once_with(build_select(config))
    assert records == [
        {SourceField.EMAIL: "jane@example.com", SourceField.FIRST_NAME: "Jane", SourceField.LAST_NAME: "Doe",
         SourceField.TITLE: "Ms", SourceField.AGREED: True},
        {SourceField.EMAIL: None, SourceField.FIRST_NAME: "No", SourceField.LAST_NAME: "Email",
         SourceField.TITLE: None, SourceField.AGREED: False},
    ]
    mock_connection.close.assert_called_once()


def test_fetch_customers_no_rows_raises(config, mock_connection):
    mock_connection.cursor.return_value.fetchall.return_value = []

    with pytest.raises(NoDataError):
        fetch_customers(config)
    mock_connection.close.assert_called_once()


def test_fetch_customers_connection_failure(config, mocker):
    mocker.patch("db.connector.open_connection", side_effect=Exception("08001", "[08001] Login timeout expired"))

    with pytest.raises(ConnectionError, match="Failed to connect"):
        fetch_customers(config)


def test_fetch_customers_query_failure(config, mock_connection):
    mock_connection.cursor.return_value.execute.side_effect = Exception("42S02", "Invalid object name")

    with pytest.raises(ConnectionError, match="Failed to read"):
        fetch_customers(config)
    mock_connection.close.assert_called_once()


def test_get_db_connection_closes_on_error(config, mock_connection):
    with pytest.raises(RuntimeError):
        with get_db_connection(config):
            raise RuntimeError("boom")
    mock_connection.close.assert_called_once()


def test_fetch_customers_missing_odbc_driver_is_connection_error(config, mocker):
    mocker.patch("db.connector.open_connection", side_effect=ImportError("libodbc.so.2: cannot open shared object file"))

    with pytest.raises(ConnectionError, match="libodbc") as excinfo:
        fetch_customers(config)
    assert isinstance(excinfo.value.__cause__, ImportError)
