# utils/domain_utils.py

import re

DATA_CENTER_PREFIX = re.compile(r"^[A-Za-z]{2}\d{1,2}\.")


def data_center_from_key(api_key: str) -> str:
    """
    Extracts the data center suffix from a Mailchimp API key.

    Args:
        api_key (str): The API key, e.g. "0123...cdef-us12".

    Returns:
        str: The part after the final hyphen (e.g. "us12").
    """
    if "-" not in api_key:
        raise ValueError("API key has no data center suffix.")
    data_center = api_key.rsplit("-", 1)[-1]
    if not data_center:
        raise ValueError("API key has an empty data center suffix.")
    return data_center


def derive_api_host(base_url: str, api_key: str) -> str:
    """
    Builds the API host (and path prefix) that request URLs are appended to.

    Any scheme and trailing slash are stripped from the base URL. When it does
    not already start with a data center prefix such as "us12.", the data
    center taken from the API key is prepended.

    Args:
        base_url (str): Configured base URL, e.g. "https://api.mailchimp.com/3.0/".
        api_key (str): The Mailchimp API key.

    Returns:
        str: e.g. "us12.api.mailchimp.com/3.0".
    """
    host = re.sub(r"^https?://", "", base_url.strip(), flags=re.IGNORECASE).rstrip("/")
    if not DATA_CENTER_PREFIX.match(host):
        host = f"{data_center_from_key(api_key)}.{host}"
    return host
