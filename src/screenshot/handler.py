import asyncio
import logging
from typing import Any, Mapping

from src.screenshot.browser import BrowserSession, capture_screenshot
from src.shared.errors import HandlerError
from src.shared.interfaces import BrowserLauncher, ObjectStore
from src.shared.models import CaptureOptions, RequestParameters, ResponseEnvelope
from src.shared.params import flag, parse_int, parse_url, query_parameters, require
from src.shared.publisher import ResultPublisher
from src.shared.responses import from_error, from_unexpected, success
from src.shared.settings import Settings
from src.shared.storage import get_store
from src.shared.utils import Stopwatch, configure_logging

logger = logging.getLogger(__name__)

# (default, minimum, maximum)
SCALE_FACTOR = (2, 1, 4)
VIEWPORT_WIDTH = (1400, 320, 3840)
VIEWPORT_HEIGHT = (900, 200, 2160)
WAIT_SECONDS = (1, 0, 30)


class ScreenshotHandler:
    """
    GET /screenshot

    Loads `url` in headless Chromium and stores the PNG under `path`.
    """

    def __init__(self, settings: Settings, store: ObjectStore | None, launcher: BrowserLauncher | None = None):
        self.settings = settings
        self.publisher = ResultPublisher(settings, store)
        self.launcher: BrowserLauncher = launcher or (lambda: BrowserSession(settings))

    async def handle(self, event: Mapping[str, Any]) -> ResponseEnvelope:
        stopwatch = Stopwatch()
        try:
            return await self._handle(event, stopwatch)
        except HandlerError as e:
            return from_error(e)
        except Exception as e:
            return from_unexpected(e)

    async def _handle(self, event: Mapping[str, Any], stopwatch: Stopwatch) -> ResponseEnvelope:
        params = query_parameters(event)
        url = parse_url(require(params, 'url'))
        path = require(params, 'path')
        options = build_capture_options(url, params)

        async with self.launcher() as browser:
            content = await capture_screenshot(browser, options)

        published = await self.publisher.publish(
            content,
            path,
            {'CacheControl': self.settings.screenshot_cache_control}
        )

        body: dict[str, Any] = {
            'success': True,
            'url': url,
            'key': path,
            'took': stopwatch.elapsed_ms(),
        }
        if published.local_path:
            body['path'] = published.local_path

        logger.info(f'Captured {url} to {published.local_path or path} in {body["took"]}ms')
        return success(**body)


def build_capture_options(url: str, params: RequestParameters) -> CaptureOptions:
    return CaptureOptions(
        url=url,
        scale_factor=parse_int(params, 'scale_factor', *SCALE_FACTOR),
        viewport_width=parse_int(params, 'viewport_width', *VIEWPORT_WIDTH),
        viewport_height=parse_int(params, 'viewport_height', *VIEWPORT_HEIGHT),
        wait_seconds=parse_int(params, 'wait', *WAIT_SECONDS),
        full_page=flag(params, 'full_page'),
    )


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """API Gateway proxy entry point."""
    try:
        settings = Settings()
        configure_logging(settings.log_level)
        handler = ScreenshotHandler(settings, get_store(settings))
    except Exception as e:
        return from_unexpected(e).to_lambda()

    return asyncio.run(handler.handle(event)).to_lambda()
