# tests/test_transformer.py

import datetime
import hashlib
from decimal import Decimal

import pytest

from services.models import SourceField
from services.transformer import build_upsert, member_identifier


def test_member_identifier_ignores_case_and_whitespace():
    """The same address in any case or padding maps to the same member."""
    assert member_identifier("A@B.com") == member_identifier(" a@b.com ") == member_identifier("a@b.com")


def test_member_identifier_is_md5_hex():
    assert member_identifier("jane@example.com") == hashlib.md5(b"jane@example.com").hexdigest()
    assert member_identifier("Jane@Example.com") == member_identifier("jane@example.com").lower()


def test_member_identifier_rejects_blank():
    with pytest.raises(ValueError):
        member_identifier("   ")


def test_build_upsert_jane(jane_row):
    # Act
    identifier, payload = build_upsert(jane_row, "Subscribed")

    # Assert
    assert identifier == member_identifier("jane@example.com")
    assert payload.to_json() == {
        "email_address": "jane@example.com",
        "status_if_new": "subscribed",
        "merge_fields": {"FNAME": "Jane", "LNAME": "Doe", "TITLE": "Ms", "AGREED": True},
    }


def test_build_upsert_trims_email(jane_row):
    jane_row[SourceField.EMAIL] = "  Jane@Example.com  "

    identifier, payload = build_upsert(jane_row, "pending")

    assert payload.email_address == "Jane@Example.com"
    assert identifier == member_identifier("jane@example.com")
    assert payload.status_if_new == "pending"


@pytest.mark.parametrize("email", [None, "", "   "])
def test_build_upsert_skips_rows_without_email(jane_row, email):
    jane_row[SourceField.EMAIL] = email
    assert build_upsert(jane_row, "subscribed") is None


def test_build_upsert_skips_missing_email_key():
    assert build_upsert({SourceField.FIRST_NAME: "NoEmail"}, "subscribed") is None


def test_build_upsert_passes_nulls_through(jane_row):
    jane_row[SourceField.TITLE] = None
    jane_row[SourceField.AGREED] = None

    _, payload = build_upsert(jane_row, "subscribed")

    merge_fields = payload.to_json()["merge_fields"]
    assert merge_fields["TITLE"] is None
    assert merge_fields["AGREED"] is None


def test_build_upsert_serializes_driver_types(jane_row):
    """Dates and Decimals from pyodbc must survive JSON encoding."""
    jane_row[SourceField.TITLE] = datetime.date(2024, 3, 1)
    jane_row[SourceField.AGREED] = Decimal("1")

    _, payload = build_upsert(jane_row, "subscribed")

    merge_fields = payload.to_json()["merge_fields"]
    assert merge_fields["TITLE"] == "2024-03-01"
    assert merge_fields["AGREED"] == "1"
