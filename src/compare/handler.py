import asyncio
import logging
from pathlib import Path
from typing import Any, Mapping

from src.compare.diff import generate_composite
from src.shared.errors import CapabilityFailureError, ClientInputError, HandlerError
from src.shared.interfaces import DiffCapability, ObjectStore
from src.shared.locator import ResourceLocator
from src.shared.models import ArtifactReference, CompareOptions, DiffResult, ResponseEnvelope
from src.shared.params import query_parameters, require
from src.shared.publisher import ResultPublisher
from src.shared.responses import from_error, from_unexpected, success
from src.shared.settings import Settings
from src.shared.storage import get_store
from src.shared.utils import Stopwatch, configure_logging, scratch_file

logger = logging.getLogger(__name__)


class CompareImagesHandler:
    """
    GET /compare-images

    Diffs `base_path` against `target_path` and stores the composite under
    `destination_path`. Each input may be a local file or an object key.
    """

    def __init__(self, settings: Settings, store: ObjectStore | None, diff: DiffCapability = generate_composite):
        self.settings = settings
        self.locator = ResourceLocator(store)
        self.publisher = ResultPublisher(settings, store)
        self.diff = diff

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
        base_path = require(params, 'base_path')
        target_path = require(params, 'target_path')
        destination_path = require(params, 'destination_path')

        # never overwrite an earlier result
        await self.locator.ensure_absent(destination_path)

        base = await self.locator.resolve('base_path', base_path)
        target = await self.locator.resolve('target_path', target_path)

        with scratch_file(prefix='comparison-') as output_path:
            options = build_compare_options(base, target, output_path)
            result = await self._run_diff(options)

            if result.differences == 0:
                raise ClientInputError('COMPARE_IMAGES_FAILED', 'The two images are the same')

            if not output_path.exists() or output_path.stat().st_size == 0:
                raise CapabilityFailureError('COMPARE_IMAGES_ERROR', 'Could not generate comparison image')

            content = output_path.read_bytes()

        logger.info(f'Found {result.differences} differences between {base_path} and {target_path}')

        published = await self.publisher.publish(content, destination_path)

        return success(
            success=True,
            differences=result.differences,
            key=destination_path,
            path=published.local_path or published.key,
            took=stopwatch.elapsed_ms(),
        )

    async def _run_diff(self, options: CompareOptions) -> DiffResult:
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, self.diff, options)
        except Exception as e:
            raise CapabilityFailureError('COMPARE_IMAGES_ERROR', str(e), e)


def build_compare_options(base: ArtifactReference, target: ArtifactReference, output_path: Path) -> CompareOptions:
    sources: dict[str, Any] = {}

    for name, reference in (('image_a', base), ('image_b', target)):
        if reference.kind == 'local':
            sources[f'{name}_path'] = reference.location
        else:
            sources[name] = reference.content

    return CompareOptions(output_path=str(output_path), **sources)


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """API Gateway proxy entry point."""
    try:
        settings = Settings()
        configure_logging(settings.log_level)
        handler = CompareImagesHandler(settings, get_store(settings))
    except Exception as e:
        return from_unexpected(e).to_lambda()

    return asyncio.run(handler.handle(event)).to_lambda()
