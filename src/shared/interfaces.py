from typing import Any, AsyncContextManager, Callable, Protocol

from src.shared.models import CompareOptions, DiffResult


class ObjectStore(Protocol):
    """Generic interface for the object store holding source images and results."""

    async def get_bytes(self, key: str) -> bytes:
        """
        Download an object.

        Raises:
            ObjectNotFound: If no object exists under the key
            StorageError: For any other storage failure
        """
        ...

    async def exists(self, key: str) -> bool:
        """
        Probe whether an object exists under the key.

        Raises:
            StorageError: If the probe itself fails (anything other than not-found)
        """
        ...

    async def put_bytes(self, key: str, content: bytes, extra_args: dict[str, Any]) -> None:
        """
        Upload an object.

        Raises:
            StorageError: If the upload fails
        """
        ...


class DiffCapability(Protocol):
    def __call__(self, options: CompareOptions) -> DiffResult:
        ...


# Returns an async context manager yielding a launched browser
BrowserLauncher = Callable[[], AsyncContextManager[Any]]
