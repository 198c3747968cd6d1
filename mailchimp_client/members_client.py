# mailchimp_client/members_client.py

import requests
from pydantic_core import PydanticSerializationError
from requests.auth import HTTPBasicAuth
from typing import Any, Dict, Optional

from services.models import UpsertPayload
from utils.logger import get_logger
from .exceptions import (
    MailchimpError, MailchimpAuthenticationError, MailchimpRateLimitError,
    MailchimpNotFoundError, MailchimpBadRequestError, MailchimpServerError, UpsertFailure
)

logger = get_logger("mailchimp_client")

DEFAULT_TIMEOUT = 10


def _handle_api_exception(e: Exception, context: str):
    """Translates a requests exception into the matching MailchimpError subclass and raises it."""
    status_code = None
    if isinstance(e, requests.exceptions.HTTPError) and e.response is not None:
        status_code = e.response.status_code
        logger.error(f"Mailchimp HTTP error during {context}: Status={status_code}, Response={e.response.text}")
    elif isinstance(e, requests.exceptions.Timeout):
        logger.error(f"Mailchimp request timed out during {context}: {e}")
        raise MailchimpError(message=f"Timed out during {context}: {e}", original_exception=e) from e
    elif isinstance(e, requests.exceptions.RequestException):
        # Network/connection error, no response to classify
        logger.error(f"Mailchimp request exception during {context}: {e}")
        raise MailchimpError(message=f"Network or request error during {context}: {e}", original_exception=e) from e
    else:
        logger.exception(f"Unexpected error during {context}: {e}")
        raise MailchimpError(message=f"Unexpected error during {context}: {e}", original_exception=e) from e

    if status_code in (401, 403):
        raise MailchimpAuthenticationError(message=f"Mailchimp authentication failed ({status_code}) during {context}", status_code=status_code, original_exception=e) from e
    elif status_code == 404:
        raise MailchimpNotFoundError(message=f"Mailchimp resource not found (404) during {context}", original_exception=e) from e
    elif status_code == 429:
        raise MailchimpRateLimitError(original_exception=e) from e
    elif status_code == 400:
        raise MailchimpBadRequestError(message=f"Mailchimp bad request (400) during {context}", original_exception=e) from e
    elif status_code >= 500:
        raise MailchimpServerError(original_exception=e) from e
    else:
        raise MailchimpError(message=f"Unhandled Mailchimp error during {context} (Status: {status_code})", status_code=status_code, original_exception=e) from e


class MailchimpClient:
    """
    Talks to one Mailchimp audience (list).

    Args:
        api_host: Host plus API path prefix, e.g. "us12.api.mailchimp.com/3.0".
        list_id: The audience ID.
        username: Basic auth username (Mailchimp accepts any string).
        api_key: Basic auth password.
        timeout: Seconds before a request is abandoned.
        session: Optional pre-built requests.Session.
    """

    def __init__(self, api_host: str, list_id: str, username: str, api_key: str,
                 timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.api_host = api_host
        self.list_id = list_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = HTTPBasicAuth(username, api_key)
        self.session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})

    @classmethod
    def from_config(cls, config) -> "MailchimpClient":
        return cls(
            api_host=config.api_host,
            list_id=config.list_id,
            username=config.api_username,
            api_key=config.api_key.get_secret_value(),
            timeout=config.http_timeout,
        )

    @property
    def list_url(self) -> str:
        return f"https://{self.api_host}/lists/{self.list_id}"

    def member_url(self, identifier: str) -> str:
        return f"{self.list_url}/members/{identifier}"

    def get_list(self) -> Dict[str, Any]:
        """
        Fetches the audience metadata. Used as the preflight check before a run.

        Returns:
            dict: The list resource, guaranteed to contain a "name".

        Raises:
            MailchimpError (or a subclass): On any transport error, non-200 answer, or unexpected body.
        """
        context = f"fetching list {self.list_id}"
        logger.debug(f"GET {self.list_url}")
        try:
            response = self.session.get(self.list_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            _handle_api_exception(e, context)

        if response.status_code != 200:
            raise MailchimpError(message=f"Unexpected status {response.status_code} while {context}", status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise MailchimpError(message=f"Response was not JSON while {context}", status_code=response.status_code, original_exception=e) from e

        if not isinstance(body, dict) or not body.get("name"):
            raise MailchimpError(message=f"Response has no list name while {context}", status_code=response.status_code)

        logger.info(f"✅ Found Mailchimp list '{body['name']}' ({self.list_id}).")
        return body

    def upsert_member(self, identifier: str, payload: UpsertPayload) -> Dict[str, Any]:
        """
        Creates or updates one member with a PUT to its subscriber-hash path. One attempt only.

        Returns:
            dict: The member resource returned by Mailchimp (empty if the body was not JSON).

        Raises:
            UpsertFailure: On a body that cannot be encoded, any transport error, timeout, or status other than 200.
        """
        url = self.member_url(identifier)
        context = f"upserting member {identifier}"
        try:
            body = payload.to_json()
        except (PydanticSerializationError, ValueError) as e:
            logger.error(f"Could not encode the request body while {context}: {e}")
            raise UpsertFailure(message=f"Could not encode the request body while {context}: {e}", original_exception=e) from e

        logger.debug(f"PUT {url} body={body}")
        try:
            response = self.session.put(url, json=body, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            try:
                _handle_api_exception(e, context)
            except MailchimpError as classified:
                raise UpsertFailure(message=str(classified), status_code=classified.status_code, original_exception=classified) from classified

        if response.status_code != 200:
            raise UpsertFailure(message=f"Unexpected status {response.status_code} while {context}", status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            return {}

    def close(self) -> None:
        self.session.close()
