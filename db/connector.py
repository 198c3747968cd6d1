# db/connector.py

from contextlib import contextmanager
from config.settings import SyncConfig
from utils.logger import get_logger

logger = get_logger("db_connector")


def build_connection_string(config: SyncConfig, include_secrets: bool = True) -> str:
    """
    Builds the ODBC connection string for the configured server.

    Uses SQL authentication when a username/password pair is configured,
    otherwise Windows (trusted) authentication.
    """
    parts = [
        f"DRIVER={config.sql_driver};",
        f"SERVER={config.sql_server_address};",
        f"DATABASE={config.sql_database};",
    ]
    if config.uses_trusted_connection:
        parts.append("Trusted_Connection=yes;")
    else:
        password = config.sql_password.get_secret_value() if include_secrets else "***"
        parts.append(f"UID={config.sql_username};")
        parts.append(f"PWD={password};")
    return "".join(parts)


def open_connection(connection_string: str):
    """Opens a raw pyodbc connection. The driver manager is loaded on first use."""
    import pyodbc
    return pyodbc.connect(connection_string, autocommit=True)


@contextmanager
def get_db_connection(config: SyncConfig):
    """Provides a database connection using a context manager. Always closes it."""
    logger.info(f"Using DB Connection String: {build_connection_string(config, include_secrets=False)}")
    conn = None
    try:
        logger.debug("Attempting to connect to the database...")
        conn = open_connection(build_connection_string(config))
        logger.debug("Database connection successful.")
    except Exception as ex:
        sqlstate = ex.args[0] if ex.args else "N/A"
        logger.error(f"Database connection error (SQLSTATE: {sqlstate}): {ex}")
        # Re-raise as a standard ConnectionError for consistent handling
        raise ConnectionError(f"Failed to connect to database {config.sql_database} on {config.sql_server_address}: {ex}") from ex

    try:
        yield conn
    finally:
        logger.debug("Closing database connection.")
        conn.close()
