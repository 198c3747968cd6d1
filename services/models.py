# services/models.py

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt


class SourceField(str, Enum):
    """Canonical names for the columns read from the customer table."""
    EMAIL = "email"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    TITLE = "title"
    AGREED = "agreed"


# One customer row, keyed by canonical field. Values are whatever the driver returned.
SourceRecord = Dict[SourceField, Any]


class MergeFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    first_name: Any = Field(default=None, alias="FNAME")
    last_name: Any = Field(default=None, alias="LNAME")
    title: Any = Field(default=None, alias="TITLE")
    agreed: Any = Field(default=None, alias="AGREED")


class UpsertPayload(BaseModel):
    """Body of the member PUT. status_if_new only applies when Mailchimp creates the member."""
    model_config = ConfigDict(frozen=True)

    email_address: str
    status_if_new: str
    merge_fields: MergeFields

    def to_json(self) -> Dict[str, Any]:
        # JSON mode turns dates and Decimals from the driver into strings
        return self.model_dump(mode="json", by_alias=True)


class RowOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class RunResult(BaseModel):
    """Outcome counters for one run. Exactly one counter moves per row."""
    succeeded: NonNegativeInt = 0
    skipped: NonNegativeInt = 0
    failed: NonNegativeInt = 0

    def record(self, outcome: RowOutcome) -> None:
        if outcome is RowOutcome.SUCCEEDED:
            self.succeeded += 1
        elif outcome is RowOutcome.FAILED:
            self.failed += 1
        elif outcome is RowOutcome.SKIPPED:
            self.skipped += 1
        else:
            raise ValueError(f"Unknown row outcome: {outcome!r}")

    @property
    def total(self) -> int:
        return self.succeeded + self.skipped + self.failed
