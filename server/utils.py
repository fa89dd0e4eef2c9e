"""Utility helper functions for the upload server."""

import re
import secrets
import string
import uuid
from datetime import datetime, timezone
from typing import List

SHORT_ID_ALPHABET = string.ascii_letters + string.digits

_URI_TEMPLATE = re.compile(r'\{[?&][^}]*\}')


def generate_upload_id() -> str:
    """
    Generate a new opaque upload session id.

    Returns:
        32 character hex string
    """
    return uuid.uuid4().hex


def generate_file_id() -> str:
    """
    Generate a new catalog file id.

    Returns:
        File id in the form ``f_<12 hex chars>``
    """
    return f"f_{secrets.token_hex(6)}"


def generate_short_id(length: int) -> str:
    """
    Generate a random human-shareable id from letters and digits.
    """
    return ''.join(secrets.choice(SHORT_ID_ALPHABET) for _ in range(length))


def get_current_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Returns:
        Current timestamp as ISO format string with a ``Z`` suffix
    """
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def parse_ids(ids_str: str) -> List[str]:
    """
    Parse comma-separated ids into a list, dropping blanks and duplicates.

    Args:
        ids_str: Comma-separated ids (e.g., "f_1,f_2")

    Returns:
        List of trimmed ids in their original order
    """
    seen = set()
    ids = []
    for raw in ids_str.split(','):
        item = raw.strip()
        if item and item not in seen:
            seen.add(item)
            ids.append(item)
    return ids


def strip_uri_template(url: str) -> str:
    """
    Remove RFC 6570 query templates such as ``{?name,label}`` from a URL.
    """
    return _URI_TEMPLATE.sub('', url.strip())
