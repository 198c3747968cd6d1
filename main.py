# main.py
import argparse
import json
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from config.settings import SUBSCRIPTION_STATUSES, load_config
from services.exceptions import ConfigurationError, NoDataError
from services.sync_orchestrator import run_sync
from utils.logger import get_logger, set_log_level

logger = get_logger("main")

# CLI flag -> SyncConfig field
CONFIG_ARGUMENTS = [
    ("--api-key", "api_key", "Mailchimp API key (MAILCHIMP_API_KEY)"),
    ("--api-base-url", "api_base_url", "Mailchimp API base URL (MAILCHIMP_BASE_URL)"),
    ("--api-username", "api_username", "Basic auth username (MAILCHIMP_USERNAME)"),
    ("--list-id", "list_id", "Mailchimp audience/list ID (MAILCHIMP_LIST_ID)"),
    ("--default-status", "default_status",
     f"Status for new members, one of {', '.join(SUBSCRIPTION_STATUSES)} (MAILCHIMP_DEFAULT_STATUS)"),
    ("--timeout", "http_timeout", "HTTP timeout in seconds (MAILCHIMP_TIMEOUT)"),
    ("--sql-server", "sql_server", "SQL Server host (SQL_SERVER)"),
    ("--sql-instance", "sql_instance", "Named SQL Server instance (SQL_INSTANCE)"),
    ("--sql-database", "sql_database", "Database name (SQL_DATABASE)"),
    ("--sql-username", "sql_username", "SQL login; omit with password for Windows auth (SQL_USERNAME)"),
    ("--sql-password", "sql_password", "SQL password (SQL_PASSWORD)"),
    ("--sql-schema", "sql_schema", "Schema of the customer table (SQL_SCHEMA)"),
    ("--sql-table", "sql_table", "Customer table or view (SQL_TABLE)"),
    ("--email-column", "email_column", "Email column (SQL_EMAIL_COLUMN)"),
    ("--first-name-column", "first_name_column", "First name column (SQL_FIRST_NAME_COLUMN)"),
    ("--last-name-column", "last_name_column", "Last name column (SQL_LAST_NAME_COLUMN)"),
    ("--title-column", "title_column", "Title column (SQL_TITLE_COLUMN)"),
    ("--agreed-column", "agreed_column", "Promotions-agreed column (SQL_AGREED_COLUMN)"),
    ("--sql-driver", "sql_driver", "ODBC driver name (SQL_DRIVER)"),
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Upsert customers from a SQL Server table into a Mailchimp audience. "
                    "Every option can also be set through the environment variable shown in its help."
    )
    for flag, dest, help_text in CONFIG_ARGUMENTS:
        parser.add_argument(flag, dest=dest, default=None, help=help_text)
    parser.add_argument("--log-level", default=None, help="Logging level, e.g. DEBUG or INFO (LOG_LEVEL)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Runs one sync and prints the summary as JSON. Returns the process exit status."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    # Loggers were created at import time, before .env was read
    try:
        set_log_level(args.log_level or os.getenv("LOG_LEVEL", "INFO"))
    except ValueError as e:
        logger.error(str(e))
        return 1

    values = {dest: getattr(args, dest) for _, dest, _ in CONFIG_ARGUMENTS}
    try:
        config = load_config(values)
        result = run_sync(config)
    except ConfigurationError as e:
        logger.error(f"❌ Configuration error: {e}")
        return 1
    except ConnectionError as e:
        logger.error(f"❌ Database error: {e}")
        return 1
    except NoDataError as e:
        logger.error(f"❌ No data: {e}")
        return 1

    print(json.dumps(result.model_dump()))
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
