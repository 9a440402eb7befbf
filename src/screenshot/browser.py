import asyncio
import logging
import os
import shutil
import tempfile
from typing import Any, Callable, Optional

from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from src.shared.errors import CapabilityFailureError
from src.shared.models import CaptureOptions
from src.shared.settings import Settings

logger = logging.getLogger(__name__)

# Sandboxing is disabled because the Lambda execution environment already is one
CHROMIUM_ARGS = [
    '--disable-dev-shm-usage',
    '--disable-gpu',
    '--single-process',
    '--no-zygote',
    '--no-sandbox',
]


class BrowserSession:
    """
    One headless Chromium process owned by a single invocation.

    Use as an async context manager. The browser, the Playwright driver and the
    scratch directory Chromium writes into are released on every exit path;
    a failed launch releases whatever was already started before raising.
    """

    def __init__(self, settings: Settings, playwright_factory: Callable[[], Any] = async_playwright):
        self.settings = settings
        self._playwright_factory = playwright_factory
        self._playwright: Optional[Playwright] = None
        self._scratch_dir: Optional[str] = None
        self.browser: Optional[Browser] = None

    async def __aenter__(self) -> Browser:
        self._scratch_dir = tempfile.mkdtemp(prefix='chromium-')

        launch_kwargs: dict[str, Any] = {
            'headless': True,
            'args': CHROMIUM_ARGS,
            'downloads_path': self._scratch_dir,
            'env': {**os.environ, 'TMPDIR': self._scratch_dir},
        }
        if self.settings.chromium_executable_path:
            launch_kwargs['executable_path'] = self.settings.chromium_executable_path

        try:
            self._playwright = await self._playwright_factory().start()
            self.browser = await self._playwright.chromium.launch(**launch_kwargs)
        except Exception as e:
            await self.close()
            raise CapabilityFailureError('BROWSER_LAUNCH_ERROR', f'could not launch browser: {e}', e)

        logger.debug(f'Launched Chromium (scratch dir {self._scratch_dir})')
        return self.browser

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """
        Tear down the browser and driver, then remove Chromium's scratch files.

        Each step runs even when an earlier one failed; failures are logged,
        never raised, so they cannot replace the error that ended the session.
        """
        if self.browser is not None:
            try:
                await self.browser.close()
            except Exception as e:
                logger.warning(f'Failed to close browser: {e}')
            self.browser = None

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.warning(f'Failed to stop Playwright: {e}')
            self._playwright = None

        # Chromium's leftovers would otherwise fill the container's /tmp across invocations
        if self._scratch_dir is not None:
            shutil.rmtree(self._scratch_dir, ignore_errors=True)
            logger.debug(f'Removed scratch dir {self._scratch_dir}')
            self._scratch_dir = None


async def capture_screenshot(browser: Browser, options: CaptureOptions) -> bytes:
    """
    Render the page and return PNG bytes.

    Raises:
        CapabilityFailureError: Tagged with the stage that failed (viewport, navigation, capture)
    """
    logger.debug(f'Setting viewport to {options.viewport_width}x{options.viewport_height} at {options.scale_factor}x...')
    try:
        context = await browser.new_context(
            viewport={'width': options.viewport_width, 'height': options.viewport_height},
            device_scale_factor=options.scale_factor,
            ignore_https_errors=True,
        )
        page = await context.new_page()
    except PlaywrightError as e:
        raise CapabilityFailureError('VIEWPORT_ERROR', f'could not set viewport: {e}', e)

    try:
        logger.debug(f'Going to {options.url}...')
        await page.goto(options.url, wait_until='load')
        logger.debug(f'Successfully loaded {options.url}')
    except PlaywrightError as e:
        raise CapabilityFailureError('NAVIGATION_ERROR', f'could not go to provided url: {e}', e)

    logger.debug(f'Waiting {options.wait_seconds * 1000} milliseconds...')
    await asyncio.sleep(options.wait_seconds)

    try:
        buffer = await page.screenshot(full_page=options.full_page, type='png')
    except PlaywrightError as e:
        raise CapabilityFailureError('CAPTURE_ERROR', f'could not generate screenshot: {e}', e)

    kind = 'full page' if options.full_page else 'viewport'
    logger.debug(f'Generated {kind} screenshot {len(buffer)} bytes')

    return buffer
