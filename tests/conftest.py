"""Pytest configuration and shared fixtures."""

import io
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from src.shared.errors import CapabilityFailureError
from src.shared.settings import Settings
from src.shared.storage import ObjectNotFound, StorageError


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "output"


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch, output_dir: Path) -> Settings:
    """Settings with an S3 bucket configured."""
    monkeypatch.setenv("AWS_S3_BUCKET", "test-bucket")
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("LOCAL_OUTPUT_DIR", str(output_dir))
    monkeypatch.delenv("CHROMIUM_EXECUTABLE_PATH", raising=False)
    return Settings()


@pytest.fixture
def local_settings(monkeypatch: pytest.MonkeyPatch, output_dir: Path) -> Settings:
    """Settings without a bucket: artifacts are written locally."""
    monkeypatch.setenv("AWS_S3_BUCKET", "")
    monkeypatch.setenv("LOCAL_OUTPUT_DIR", str(output_dir))
    monkeypatch.delenv("CHROMIUM_EXECUTABLE_PATH", raising=False)
    return Settings()


# ============================================================================
# Storage Fixtures
# ============================================================================


class FakeObjectStore:
    """In-memory ObjectStore that records uploads and can be told to fail."""

    def __init__(self, objects: dict[str, bytes] | None = None):
        self.objects: dict[str, bytes] = dict(objects or {})
        self.uploads: list[tuple[str, bytes, dict[str, Any]]] = []
        self.probed: list[str] = []
        self.fail_get = False
        self.fail_exists = False
        self.fail_put = False

    async def get_bytes(self, key: str) -> bytes:
        if self.fail_get:
            raise StorageError(f"Access denied for {key}", key)
        if key not in self.objects:
            raise ObjectNotFound(f"Key {key} not found", key)
        return self.objects[key]

    async def exists(self, key: str) -> bool:
        self.probed.append(key)
        if self.fail_exists:
            raise StorageError(f"Forbidden: {key}", key)
        return key in self.objects

    async def put_bytes(self, key: str, content: bytes, extra_args: dict[str, Any]) -> None:
        if self.fail_put:
            raise StorageError(f"Upload of {key} failed", key)
        self.uploads.append((key, content, extra_args))
        self.objects[key] = content


@pytest.fixture
def store() -> FakeObjectStore:
    return FakeObjectStore()


# ============================================================================
# Image Fixtures
# ============================================================================


def render_png(
    size: tuple[int, int] = (10, 10),
    color: tuple[int, int, int, int] = (255, 255, 255, 255),
    pixels: dict[tuple[int, int], tuple[int, int, int, int]] | None = None,
) -> bytes:
    """Render a solid PNG, optionally overriding individual pixels."""
    image = Image.new("RGBA", size, color)
    for xy, value in (pixels or {}).items():
        image.putpixel(xy, value)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    return render_png


@pytest.fixture
def write_png(tmp_path: Path) -> Callable[..., Path]:
    """Write a PNG into tmp_path and return its path."""

    def _write(name: str, **kwargs: Any) -> Path:
        path = tmp_path / name
        path.write_bytes(render_png(**kwargs))
        return path

    return _write


# ============================================================================
# Browser Fixtures
# ============================================================================


class FakeLauncher:
    """Stands in for BrowserSession; counts acquisitions and releases."""

    def __init__(self, browser: Any, launch_error: Exception | None = None):
        self.browser = browser
        self.launch_error = launch_error
        self.entered = 0
        self.exited = 0

    def __call__(self) -> "FakeLauncher":
        return self

    async def __aenter__(self) -> Any:
        if self.launch_error is not None:
            raise self.launch_error
        self.entered += 1
        return self.browser

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.exited += 1


@pytest.fixture
def screenshot_png() -> bytes:
    return render_png(size=(20, 10), color=(0, 128, 255, 255))


@pytest.fixture
def page(screenshot_png: bytes) -> MagicMock:
    """Create a mock Playwright page."""
    page = MagicMock()
    page.goto = AsyncMock()
    page.screenshot = AsyncMock(return_value=screenshot_png)
    return page


@pytest.fixture
def browser(page: MagicMock) -> MagicMock:
    """Create a mock Playwright browser whose contexts open the mock page."""
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    return browser


@pytest.fixture
def launcher(browser: MagicMock) -> FakeLauncher:
    return FakeLauncher(browser)


@pytest.fixture
def failing_launcher(browser: MagicMock) -> FakeLauncher:
    """Launcher whose browser never starts."""
    return FakeLauncher(
        browser,
        launch_error=CapabilityFailureError("BROWSER_LAUNCH_ERROR", "could not launch browser: executable missing"),
    )
