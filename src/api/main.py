from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from typing import Any
import json
import logging
import uvicorn

from src.compare.handler import CompareImagesHandler
from src.screenshot.handler import ScreenshotHandler
from src.shared.models import ResponseEnvelope
from src.shared.settings import Settings
from src.shared.storage import get_store
from src.shared.utils import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan - configure logging once for the local server"""
    configure_logging(Settings().log_level)
    logger.info('Local endpoint server started')

    yield

    logger.info('Local endpoint server stopped')


# Serves the Lambda handlers over plain HTTP for local development
app = FastAPI(title='Page Capture Endpoints', lifespan=lifespan)


def to_event(request: Request) -> dict[str, Any]:
    """Build an API Gateway proxy event from the incoming request."""
    query = dict(request.query_params)

    return {
        'resource': request.url.path,
        'path': request.url.path,
        'httpMethod': request.method,
        'headers': dict(request.headers),
        'queryStringParameters': query or None,
        'body': None,
        'isBase64Encoded': False,
    }


def to_response(envelope: ResponseEnvelope) -> Response:
    return Response(
        content=json.dumps(envelope.body),
        status_code=envelope.status_code,
        media_type='application/json'
    )


@app.get('/health')
def health_route() -> dict[str, str]:
    return {'status': 'ok'}


@app.get('/screenshot')
async def screenshot_route(request: Request) -> Response:
    """
    Capture a screenshot.

    Query parameters: url, path (required); scale_factor, viewport_width,
    viewport_height, wait, full_page (optional).
    """
    settings = Settings()
    handler = ScreenshotHandler(settings, get_store(settings))
    return to_response(await handler.handle(to_event(request)))


@app.get('/compare-images')
async def compare_images_route(request: Request) -> Response:
    """
    Diff two images.

    Query parameters: base_path, target_path, destination_path (all required).
    """
    settings = Settings()
    handler = CompareImagesHandler(settings, get_store(settings))
    return to_response(await handler.handle(to_event(request)))


if __name__ == '__main__':
    # python -m src.api.main
    uvicorn.run('src.api.main:app', host='127.0.0.1', port=8000)
