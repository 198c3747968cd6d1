# config/settings.py

import os
import re
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, SecretStr, ValidationError, field_validator, model_validator

from services.exceptions import ConfigurationError
from services.models import SourceField
from utils.domain_utils import derive_api_host

API_KEY_PATTERN = re.compile(r"^[0-9a-f]{32}-[a-z]{2}\d{1,2}$", re.IGNORECASE)
LIST_ID_PATTERN = re.compile(r"^[0-9a-z]{10}$", re.IGNORECASE)
BASE_URL_PATTERN = re.compile(r"^(https?://)?[a-z0-9-]+(\.[a-z0-9-]+)+(/[a-z0-9._~-]+)*/?$", re.IGNORECASE)
# Identifiers are interpolated into the query text, so only these characters pass
SQL_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9 \-_.#@]+$")

SUBSCRIPTION_STATUSES = ("subscribed", "unsubscribed", "cleaned", "pending", "transactional")

DEFAULT_API_BASE_URL = "https://api.mailchimp.com/3.0"
DEFAULT_SQL_DRIVER = "{ODBC Driver 17 for SQL Server}"

# Field name -> environment variable consulted when the CLI leaves it unset
ENV_VARS = {
    "api_key": "MAILCHIMP_API_KEY",
    "api_base_url": "MAILCHIMP_BASE_URL",
    "api_username": "MAILCHIMP_USERNAME",
    "list_id": "MAILCHIMP_LIST_ID",
    "default_status": "MAILCHIMP_DEFAULT_STATUS",
    "http_timeout": "MAILCHIMP_TIMEOUT",
    "sql_server": "SQL_SERVER",
    "sql_instance": "SQL_INSTANCE",
    "sql_database": "SQL_DATABASE",
    "sql_username": "SQL_USERNAME",
    "sql_password": "SQL_PASSWORD",
    "sql_schema": "SQL_SCHEMA",
    "sql_table": "SQL_TABLE",
    "email_column": "SQL_EMAIL_COLUMN",
    "first_name_column": "SQL_FIRST_NAME_COLUMN",
    "last_name_column": "SQL_LAST_NAME_COLUMN",
    "title_column": "SQL_TITLE_COLUMN",
    "agreed_column": "SQL_AGREED_COLUMN",
    "sql_driver": "SQL_DRIVER",
}


def validate_sql_identifier(name: str) -> str:
    """Returns the name unchanged if it only uses allow-listed characters, else raises ValueError."""
    if not name or not SQL_IDENTIFIER_PATTERN.match(name):
        raise ValueError(f"'{name}' is not a valid SQL identifier (allowed: letters, digits, space, - _ . # @)")
    return name


class SyncConfig(BaseModel):
    """Validated, immutable parameters for one sync run."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Mailchimp
    api_key: SecretStr
    api_base_url: str = DEFAULT_API_BASE_URL
    api_username: str = "anystring"
    list_id: str
    default_status: str
    http_timeout: float = 10.0

    # SQL Server
    sql_server: str
    sql_instance: Optional[str] = None
    sql_database: str
    sql_username: Optional[str] = None
    sql_password: Optional[SecretStr] = None
    sql_schema: str = "dbo"
    sql_table: str
    email_column: str = "Email"
    first_name_column: str = "FirstName"
    last_name_column: str = "LastName"
    title_column: str = "Title"
    agreed_column: str = "AgreedToPromotions"
    sql_driver: str = DEFAULT_SQL_DRIVER

    @field_validator("api_key", mode="before")
    @classmethod
    def _check_api_key(cls, value: Any) -> Any:
        raw = value.get_secret_value() if isinstance(value, SecretStr) else str(value).strip()
        if not API_KEY_PATTERN.match(raw):
            raise ValueError("API key must look like 32 hex characters followed by '-<data center>' (e.g. '-us12')")
        return raw

    @field_validator("api_base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        value = value.strip()
        if not BASE_URL_PATTERN.match(value):
            raise ValueError(f"'{value}' is not a valid API base URL")
        return value

    @field_validator("list_id")
    @classmethod
    def _check_list_id(cls, value: str) -> str:
        value = value.strip()
        if not LIST_ID_PATTERN.match(value):
            raise ValueError(f"'{value}' is not a valid list ID (expected 10 alphanumeric characters)")
        return value

    @field_validator("default_status")
    @classmethod
    def _check_status(cls, value: str) -> str:
        status = value.strip().lower()
        if status not in SUBSCRIPTION_STATUSES:
            raise ValueError(f"'{value}' is not one of: {', '.join(SUBSCRIPTION_STATUSES)}")
        return status

    @field_validator("http_timeout")
    @classmethod
    def _check_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("HTTP timeout must be greater than zero")
        return value

    @field_validator(
        "sql_schema", "sql_table", "email_column", "first_name_column",
        "last_name_column", "title_column", "agreed_column",
    )
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        return validate_sql_identifier(value)

    @model_validator(mode="after")
    def _check_sql_credentials(self) -> "SyncConfig":
        if (self.sql_username is None) != (self.sql_password is None):
            raise ValueError("SQL username and password must be given together (omit both for trusted authentication)")
        return self

    @property
    def api_host(self) -> str:
        return derive_api_host(self.api_base_url, self.api_key.get_secret_value())

    @property
    def sql_server_address(self) -> str:
        if self.sql_instance:
            return f"{self.sql_server}\\{self.sql_instance}"
        return self.sql_server

    @property
    def uses_trusted_connection(self) -> bool:
        return self.sql_username is None

    @property
    def column_map(self) -> Dict[SourceField, str]:
        """Configured column name for each canonical field, in SELECT order."""
        return {
            SourceField.EMAIL: self.email_column,
            SourceField.FIRST_NAME: self.first_name_column,
            SourceField.LAST_NAME: self.last_name_column,
            SourceField.TITLE: self.title_column,
            SourceField.AGREED: self.agreed_column,
        }


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "config"
        problems.append(f"{location}: {err['msg']}")
    return "; ".join(problems)


def load_config(values: Optional[Mapping[str, Any]] = None, environ: Optional[Mapping[str, str]] = None) -> SyncConfig:
    """
    Builds a SyncConfig from explicit values, falling back to environment variables.

    Args:
        values: Field name -> value (typically parsed CLI arguments). Blank values count as unset.
        environ: Environment mapping, defaults to os.environ.

    Returns:
        SyncConfig: The validated configuration.

    Raises:
        ConfigurationError: If any parameter is missing or malformed. All problems are reported together.
    """
    values = values or {}
    environ = os.environ if environ is None else environ

    unknown = set(values) - set(ENV_VARS)
    if unknown:
        raise ConfigurationError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")

    merged = {}
    for field, env_var in ENV_VARS.items():
        value = values.get(field)
        if _is_blank(value):
            value = environ.get(env_var)
        if not _is_blank(value):
            if isinstance(value, str) and field != "sql_password":
                value = value.strip()
            merged[field] = value

    try:
        return SyncConfig(**merged)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {_format_validation_error(e)}") from e
