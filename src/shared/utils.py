import logging
import os
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = 'INFO') -> None:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    if not isinstance(logging.getLevelName(level), int):
        logger.warning(f'Unknown log level {level!r}, falling back to INFO')
        level = 'INFO'

    # Set our application loggers to the configured level
    logging.getLogger('src').setLevel(level)

    # Suppress noisy third-party loggers
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)


class Stopwatch:
    """Measures elapsed wall time in whole milliseconds."""

    def __init__(self):
        self._started = time.monotonic()

    def elapsed_ms(self) -> int:
        return max(0, int((time.monotonic() - self._started) * 1000))


@contextmanager
def scratch_file(suffix: str = '.png', prefix: str = 'scratch-') -> Generator[Path, None, None]:
    """
    Reserve a temporary file path owned by the caller.

    The file is removed on exit whether or not the body raised.
    """
    fd, name = tempfile.mkstemp(suffix=suffix, prefix=prefix)
    os.close(fd)
    path = Path(name)
    try:
        yield path
    finally:
        try:
            path.unlink(missing_ok=True)
            logger.debug(f'Removed scratch file {path}')
        except OSError as e:
            logger.warning(f'Could not remove scratch file {path}: {e}')


def is_local_file(identifier: str) -> bool:
    try:
        return Path(identifier).is_file()
    except (OSError, ValueError):
        return False
