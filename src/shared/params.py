"""
Query-string validation shared by both handlers.

Every failure is raised as a ClientInputError so the handler can map it to a
400 envelope.
"""

import logging
import re
from typing import Any, Mapping
from urllib.parse import urlsplit

from src.shared.errors import ClientInputError
from src.shared.models import RequestParameters

logger = logging.getLogger(__name__)

DECIMAL = re.compile(r'[+-]?[0-9]+')
ALLOWED_SCHEMES = ('http', 'https')


def query_parameters(event: Mapping[str, Any]) -> RequestParameters:
    """
    Extract the query-string mapping from an API Gateway proxy event.

    Raises:
        ClientInputError: If the event carries no query string at all
    """
    params = event.get('queryStringParameters')
    if params is None:
        raise ClientInputError('MISSING_KEY_ERROR', 'No query string parameters were provided')

    return {str(k): '' if v is None else str(v) for k, v in params.items()}


def require(params: RequestParameters, key: str) -> str:
    """Return a required parameter, rejecting absent and empty values."""
    value = params.get(key)
    if value is None or value == '':
        raise ClientInputError(f'{key}_missing', f'You must provide a valid {key}')
    return value


def parse_int(params: RequestParameters, key: str, default: int, minimum: int, maximum: int) -> int:
    """
    Parse an optional base-10 integer and clamp it to [minimum, maximum].

    Absent or unparseable values fall back to the default.
    """
    raw = params.get(key)
    if raw is None or raw.strip() == '':
        return default

    # ASCII digits only: int() would also take '1_000' and other scripts' digits
    if not DECIMAL.fullmatch(raw.strip()):
        logger.warning(f'Ignoring unparseable {key}={raw!r}, using default {default}')
        return default

    value = int(raw.strip(), 10)

    clamped = min(max(value, minimum), maximum)
    if clamped != value:
        logger.debug(f'Clamped {key} from {value} to {clamped}')
    return clamped


def flag(params: RequestParameters, key: str) -> bool:
    """Presence-based boolean: `?full_page` and `?full_page=1` are both true."""
    return key in params


def parse_url(value: str) -> str:
    """
    Normalise a target URL, defaulting to http:// when no scheme is given.

    Raises:
        ClientInputError: If the value cannot be parsed into an http(s) URL with a host
    """
    candidate = value.strip()
    if '://' not in candidate:
        candidate = f'http://{candidate}'

    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
    except ValueError as e:
        raise ClientInputError('INVALID_URL_ERROR', f'Could not parse url {value!r}: {e}', e)

    if parts.scheme.lower() not in ALLOWED_SCHEMES or not hostname:
        raise ClientInputError('INVALID_URL_ERROR', f'Could not parse url {value!r}')

    return parts.geturl()
