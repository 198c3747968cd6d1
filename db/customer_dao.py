# db/customer_dao.py

from db.connector import get_db_connection
from config.settings import SyncConfig, validate_sql_identifier
from services.exceptions import ConfigurationError, NoDataError
from services.models import SourceRecord
from utils.logger import get_logger
from typing import List

logger = get_logger("customer_dao")


def _quote(name: str) -> str:
    try:
        validate_sql_identifier(name)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    # The allow-list excludes ']', so bracket quoting cannot be escaped
    return f"[{name}]"


def build_select(config: SyncConfig) -> str:
    """Builds the single SELECT that reads the five customer columns."""
    columns = ", ".join(_quote(column) for column in config.column_map.values())
    return f"SELECT {columns} FROM {_quote(config.sql_schema)}.{_quote(config.sql_table)}"


def fetch_customers(config: SyncConfig) -> List[SourceRecord]:
    """
    Reads every row of the configured table/view.

    Configured column names are bound to SourceField keys here; callers only
    ever see canonical keys.

    Raises:
        ConnectionError: If the server is unreachable, the login fails, or the query fails.
        NoDataError: If the query returns no rows.
    """
    sql = build_select(config)
    fields = list(config.column_map.keys())

    logger.debug(f"SQL: {sql}")
    with get_db_connection(config) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(sql)
            rows = cursor.fetchall()
        except Exception as e:
            logger.error(f"💥 Error reading customers from {config.sql_schema}.{config.sql_table}: {e}", exc_info=True)
            raise ConnectionError(f"Failed to read from {config.sql_schema}.{config.sql_table}: {e}") from e
        finally:
            cursor.close()

    if not rows:
        raise NoDataError(
            f"Query against {config.sql_schema}.{config.sql_table} returned no rows; "
            f"check the server, database, table and column settings."
        )

    records = [dict(zip(fields, row)) for row in rows]
    logger.info(f"Fetched {len(records)} customer rows from {config.sql_schema}.{config.sql_table}.")
    return records
