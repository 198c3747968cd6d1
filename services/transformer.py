# services/transformer.py

import hashlib
from typing import Optional, Tuple

from services.models import MergeFields, SourceField, SourceRecord, UpsertPayload


def member_identifier(email: str) -> str:
    """
    Mailchimp subscriber hash: md5 of the lowercased, trimmed email, as lowercase hex.

    The same address always maps to the same member path, which is what makes
    the PUT an upsert.
    """
    normalized = email.lower().strip()
    if not normalized:
        raise ValueError("Cannot compute a member identifier for an empty email address.")
    return hashlib.md5(normalized.encode("utf-8")).hexdigest()


def build_upsert(record: SourceRecord, default_status: str) -> Optional[Tuple[str, UpsertPayload]]:
    """
    Turns one customer row into the member identifier and the PUT body.

    Args:
        record: The source row keyed by SourceField.
        default_status: Subscription status applied when the member is new.

    Returns:
        (identifier, payload), or None when the row has no usable email and must be skipped.
    """
    email = record.get(SourceField.EMAIL)
    if email is None:
        return None

    email = str(email).strip()
    if not email:
        return None

    payload = UpsertPayload(
        email_address=email,
        status_if_new=default_status.lower(),
        merge_fields=MergeFields(
            first_name=record.get(SourceField.FIRST_NAME),
            last_name=record.get(SourceField.LAST_NAME),
            title=record.get(SourceField.TITLE),
            agreed=record.get(SourceField.AGREED),
        ),
    )
    return member_identifier(email), payload
