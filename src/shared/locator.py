import logging

from src.shared.errors import ClientInputError, ResourceUnavailableError
from src.shared.interfaces import ObjectStore
from src.shared.models import ArtifactReference
from src.shared.storage import StorageError
from src.shared.utils import is_local_file

logger = logging.getLogger(__name__)


class ResourceLocator:
    """
    Resolves input identifiers to local files or object-store content.

    A local path is always preferred; only identifiers that are not existing
    files are fetched from the store. Each identifier is resolved once and
    never retried.
    """

    def __init__(self, store: ObjectStore | None):
        self.store = store

    async def resolve(self, param: str, identifier: str) -> ArtifactReference:
        if is_local_file(identifier):
            logger.debug(f'Using local file {identifier} for {param}')
            return ArtifactReference(kind='local', location=identifier)

        if self.store is None:
            raise ResourceUnavailableError(
                'MISSING_KEY_ERROR',
                f"Provided {param} '{identifier}' cannot be located (no bucket configured)"
            )

        try:
            content = await self.store.get_bytes(identifier)
        except StorageError as e:
            logger.debug(f'Fetching {identifier} failed: {e}')
            raise ResourceUnavailableError(
                'MISSING_KEY_ERROR',
                f"Provided {param} '{identifier}' cannot be located",
                e
            )

        return ArtifactReference(kind='remote', location=identifier, content=content)

    async def ensure_absent(self, key: str) -> None:
        """
        Reject a destination key that already holds an object.

        The probe and the later upload are separate requests, so an object
        written in between will be overwritten. No bucket means nothing to probe.

        Raises:
            ClientInputError: If an object already exists under the key
            ResourceUnavailableError: If the probe itself fails
        """
        if self.store is None:
            return

        try:
            found = await self.store.exists(key)
        except StorageError as e:
            raise ResourceUnavailableError('DESTINATION_CHECK_ERROR', f"Could not check destination '{key}': {e}", e)

        if found:
            raise ClientInputError('EXISTING_KEY_ERROR', f"Provided destination_path '{key}' already exists")
