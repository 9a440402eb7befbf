"""
Pixel diff capability backed by pixelmatch.

The diff is rendered as a mask: differing pixels in red on a transparent
canvas, source images are not copied in and anti-aliased pixels are neither
counted nor drawn.
"""

import io
import logging
from typing import Optional

from PIL import Image
from pixelmatch.contrib.PIL import pixelmatch

from src.shared.models import CompareOptions, DiffResult

logger = logging.getLogger(__name__)

DIFFERENCE_COLOR = (255, 0, 0)


def generate_composite(options: CompareOptions) -> DiffResult:
    """Compare both images, write the diff PNG to options.output_path and return the counts."""
    image_a = load_image(options.image_a_path, options.image_a)
    image_b = load_image(options.image_b_path, options.image_b)

    if image_a.size != image_b.size:
        raise ValueError(f'Image sizes differ: {image_a.size} and {image_b.size}')

    width, height = image_a.size
    output = Image.new('RGBA', (width, height), (0, 0, 0, 0))

    differences = pixelmatch(
        image_a,
        image_b,
        output,
        threshold=options.threshold,
        includeAA=False,
        diff_color=DIFFERENCE_COLOR,
        diff_mask=True,
    )
    output.save(options.output_path, format='PNG')

    logger.debug(f'Diff {width}x{height}: {differences} differences')

    return DiffResult(
        differences=differences,
        total_pixels=width * height,
        width=width,
        height=height,
    )


def load_image(path: Optional[str], content: Optional[bytes]) -> Image.Image:
    source = path if path is not None else io.BytesIO(content or b'')
    with Image.open(source) as image:
        return image.convert('RGBA')
