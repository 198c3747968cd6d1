# services/sync_orchestrator.py

from typing import Callable, List, Optional

from config.settings import SyncConfig
from db.customer_dao import fetch_customers
from mailchimp_client.members_client import MailchimpClient
from mailchimp_client.exceptions import (
    MailchimpError, MailchimpAuthenticationError, MailchimpNotFoundError,
    MailchimpRateLimitError, MailchimpBadRequestError, MailchimpServerError, UpsertFailure
)
from services.exceptions import ConfigurationError
from services.models import RowOutcome, RunResult, SourceRecord
from services.transformer import build_upsert
from utils.logger import get_logger

logger = get_logger("sync_orchestrator")


def preflight(client: MailchimpClient) -> dict:
    """
    Confirms the target list exists and the credentials work before any row is touched.

    Raises:
        ConfigurationError: If the list cannot be fetched for any reason.
    """
    try:
        return client.get_list()
    except MailchimpAuthenticationError as e:
        logger.error(f"🔒 Mailchimp rejected the credentials for list {client.list_id}: {e}")
        raise ConfigurationError(f"Mailchimp authentication failed; check the API key and username: {e}") from e
    except MailchimpNotFoundError as e:
        logger.error(f"❓ Mailchimp list {client.list_id} not found: {e}")
        raise ConfigurationError(f"Mailchimp list {client.list_id} not found; check the list ID and data center: {e}") from e
    except MailchimpError as e:
        logger.error(f"💥 Could not verify Mailchimp list {client.list_id}: {e}")
        raise ConfigurationError(f"Could not verify Mailchimp list {client.list_id}: {e}") from e


def process_record(record: SourceRecord, client: MailchimpClient, default_status: str, result: RunResult) -> RowOutcome:
    """
    Runs one row through transform and upsert, and counts the outcome in result.

    Upsert failures are logged and counted, never raised.
    """
    upsert = build_upsert(record, default_status)
    if upsert is None:
        logger.warning("Skipping row with no email address.")
        result.record(RowOutcome.SKIPPED)
        return RowOutcome.SKIPPED

    identifier, payload = upsert
    email = payload.email_address
    try:
        client.upsert_member(identifier, payload)
        logger.debug(f"Upserted {email} ({identifier}).")
        outcome = RowOutcome.SUCCEEDED
    except UpsertFailure as e:
        cause = e.original_exception
        if isinstance(cause, MailchimpRateLimitError):
            logger.warning(f"🚦 Mailchimp rate limit hit upserting {email}: {e}")
        elif isinstance(cause, MailchimpBadRequestError):
            logger.error(f"📉 Mailchimp rejected the data for {email}: {e}")
        elif isinstance(cause, MailchimpServerError):
            logger.error(f"💥 Mailchimp server error upserting {email}: {e}")
        else:
            logger.error(f"💥 Failed to upsert {email} ({identifier}): {e}")
        outcome = RowOutcome.FAILED

    result.record(outcome)
    return outcome


def run_sync(config: SyncConfig,
             client: Optional[MailchimpClient] = None,
             fetch: Optional[Callable[[SyncConfig], List[SourceRecord]]] = None) -> RunResult:
    """
    Runs one full sync: preflight, bulk read, then one upsert per row in read order.

    Args:
        config: Validated run configuration.
        client: Mailchimp client; built from config when omitted (and closed afterwards).
        fetch: Row extractor, defaults to the SQL Server reader.

    Returns:
        RunResult: Final counters, with succeeded + skipped + failed equal to the rows read.

    Raises:
        ConfigurationError: Preflight failed.
        ConnectionError: The database could not be read.
        NoDataError: The query returned no rows.
    """
    fetch = fetch or fetch_customers
    owns_client = client is None
    if owns_client:
        client = MailchimpClient.from_config(config)

    try:
        logger.info(f"🚀 Starting sync from {config.sql_schema}.{config.sql_table} to Mailchimp list {config.list_id}")
        preflight(client)

        records = fetch(config)
        result = RunResult()
        for record in records:
            process_record(record, client, config.default_status, result)

        logger.info(
            f"Sync finished: {result.succeeded} succeeded, {result.skipped} skipped, "
            f"{result.failed} failed (of {len(records)} rows)."
        )
        return result
    finally:
        if owns_client:
            client.close()
