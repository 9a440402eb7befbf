import logging
import tempfile
from pathlib import Path
from typing import Any

from src.shared.errors import PublishError
from src.shared.interfaces import ObjectStore
from src.shared.models import PublishedArtifact
from src.shared.settings import Settings
from src.shared.storage import StorageError

logger = logging.getLogger(__name__)


class ResultPublisher:
    """Stores a finished PNG artifact in the bucket, or on local disk when no bucket is configured."""

    def __init__(self, settings: Settings, store: ObjectStore | None):
        self.settings = settings
        self.store = store

    async def publish(self, content: bytes, key: str, extra_args: dict[str, Any] | None = None) -> PublishedArtifact:
        """
        Publish artifact bytes under the destination key.

        Raises:
            PublishError: If the upload (or local write) fails
        """
        if self.store is None:
            local_path = self._write_local(content, key)
            logger.info(f'No AWS_S3_BUCKET configured, artifact saved at "{local_path}"')
            return PublishedArtifact(key=key, local_path=str(local_path))

        upload_args: dict[str, Any] = {
            'ACL': 'public-read',
            'ContentType': 'image/png',
            **(extra_args or {}),
        }

        try:
            await self.store.put_bytes(key, content, upload_args)
        except StorageError as e:
            logger.error(f'Error uploading image: {e}')
            raise PublishError('IMAGE_UPLOAD_ERROR', str(e), e)

        return PublishedArtifact(key=key)

    def _write_local(self, content: bytes, key: str) -> Path:
        # each invocation gets its own directory so concurrent or repeated calls never collide
        try:
            base_dir = None
            if self.settings.local_output_dir:
                base_dir = Path(self.settings.local_output_dir)
                base_dir.mkdir(parents=True, exist_ok=True)

            output_dir = Path(tempfile.mkdtemp(prefix='artifact-', dir=base_dir))
            output_path = output_dir / (Path(key).name or 'artifact.png')
            output_path.write_bytes(content)
        except OSError as e:
            raise PublishError('IMAGE_UPLOAD_ERROR', f'Could not write artifact locally: {e}', e)

        return output_path
