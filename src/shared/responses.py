import logging
from typing import Any

from src.shared.errors import HandlerError
from src.shared.models import ResponseEnvelope

logger = logging.getLogger(__name__)


def success(**body: Any) -> ResponseEnvelope:
    return ResponseEnvelope(status_code=200, body=body)


def from_error(error: HandlerError) -> ResponseEnvelope:
    if error.status_code >= 500:
        logger.error(f'{error.error}: {error.message}')
    else:
        logger.warning(f'{error.error}: {error.message}')

    return ResponseEnvelope(
        status_code=error.status_code,
        body={'error': error.error, 'message': error.message},
    )


def from_unexpected(error: Exception) -> ResponseEnvelope:
    logger.exception(f'Unexpected error handling request: {error}')
    return ResponseEnvelope(
        status_code=500,
        body={'error': 'INTERNAL_ERROR', 'message': str(error)},
    )
