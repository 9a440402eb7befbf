import json
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, model_validator

RequestParameters = dict[str, str]

"""
Capability options
"""

class CaptureOptions(BaseModel):
    """Everything the browser needs to render and capture one page."""
    url: str
    viewport_width: int = 1400
    viewport_height: int = 900
    scale_factor: int = 2
    wait_seconds: int = 1
    full_page: bool = False


class CompareOptions(BaseModel):
    """
    Inputs and matching tolerance for a pixel diff.

    Each image is supplied either as a local path or as in-memory bytes,
    never both.
    """
    image_a_path: Optional[str] = None
    image_a: Optional[bytes] = None
    image_b_path: Optional[str] = None
    image_b: Optional[bytes] = None
    output_path: str

    # YIQ colour distance above which two pixels differ, 0 (exact) to 1
    threshold: float = Field(default=0.1, ge=0, le=1)

    @model_validator(mode='after')
    def check_sources(self) -> 'CompareOptions':
        for name in ('image_a', 'image_b'):
            has_path = getattr(self, f'{name}_path') is not None
            has_bytes = getattr(self, name) is not None
            if has_path == has_bytes:
                raise ValueError(f'exactly one of {name}_path and {name} must be set')
        return self


class DiffResult(BaseModel):
    differences: int
    total_pixels: int
    width: int
    height: int


"""
Resolution and publishing
"""

class ArtifactReference(BaseModel):
    """Where an input image lives, resolved once per request."""
    kind: Literal['local', 'remote']
    location: str
    content: Optional[bytes] = None


class PublishedArtifact(BaseModel):
    """Outcome of publishing: a storage key, or a local path when uploads are disabled."""
    key: str
    local_path: Optional[str] = None

    @property
    def uploaded(self) -> bool:
        return self.local_path is None


"""
Response models
"""

class ResponseEnvelope(BaseModel):
    status_code: int
    body: dict[str, Any] = Field(default_factory=dict)

    def to_lambda(self) -> dict[str, Any]:
        """API Gateway Lambda proxy output format."""
        return {
            'statusCode': self.status_code,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps(self.body),
        }
