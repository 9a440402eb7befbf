"""Tests for the pixel diff capability."""

from pathlib import Path

import pytest
from PIL import Image

from src.compare.diff import DIFFERENCE_COLOR, generate_composite
from src.shared.models import CompareOptions

BLACK = (0, 0, 0, 255)
TRANSPARENT = (0, 0, 0, 0)


@pytest.fixture
def output_path(tmp_path: Path) -> Path:
    return tmp_path / "diff.png"


def options_for(image_a: bytes, image_b: bytes, output_path: Path, **overrides) -> CompareOptions:
    return CompareOptions(image_a=image_a, image_b=image_b, output_path=str(output_path), **overrides)


class TestGenerateComposite:
    """Tests for generate_composite."""

    def test_identical_images(self, make_png, output_path):
        png = make_png()
        result = generate_composite(options_for(png, png, output_path))

        assert result.differences == 0
        assert result.total_pixels == 100
        assert output_path.exists()

    def test_single_pixel_difference(self, make_png, output_path):
        base = make_png()
        target = make_png(pixels={(5, 5): BLACK})

        result = generate_composite(options_for(base, target, output_path))

        assert result.differences == 1
        with Image.open(output_path) as output:
            assert output.getpixel((5, 5)) == (*DIFFERENCE_COLOR, 255)
            # source images are not copied into the output
            assert output.getpixel((0, 0)) == TRANSPARENT

    def test_small_colour_changes_within_threshold(self, make_png, output_path):
        base = make_png(color=(100, 100, 100, 255))
        target = make_png(color=(110, 110, 110, 255))

        result = generate_composite(options_for(base, target, output_path))

        assert result.differences == 0

    def test_zero_threshold_is_exact(self, make_png, output_path):
        base = make_png(color=(100, 100, 100, 255))
        target = make_png(color=(110, 110, 110, 255))

        result = generate_composite(options_for(base, target, output_path, threshold=0))

        assert result.differences == 100

    def test_size_mismatch_is_rejected(self, make_png, output_path):
        base = make_png(size=(10, 10))
        target = make_png(size=(10, 12))

        with pytest.raises(ValueError, match="Image sizes differ"):
            generate_composite(options_for(base, target, output_path))
        assert not output_path.exists()

    def test_local_paths(self, write_png, output_path):
        base = write_png("base.png")
        target = write_png("target.png", pixels={(3, 3): BLACK})

        options = CompareOptions(image_a_path=str(base), image_b_path=str(target), output_path=str(output_path))
        result = generate_composite(options)

        assert result.differences == 1

    def test_invalid_image_data(self, make_png, output_path):
        with pytest.raises(Exception):
            generate_composite(options_for(b"not an image", make_png(), output_path))


class TestCompareOptions:
    """Tests for CompareOptions validation."""

    def test_default_threshold(self, tmp_path):
        options = CompareOptions(image_a=b"a", image_b=b"b", output_path=str(tmp_path / "x.png"))
        assert options.threshold == 0.1

    @pytest.mark.parametrize("threshold", [-0.1, 1.5])
    def test_threshold_out_of_range(self, tmp_path, threshold):
        with pytest.raises(ValueError):
            CompareOptions(image_a=b"a", image_b=b"b", output_path=str(tmp_path / "x.png"), threshold=threshold)

    def test_source_required(self, tmp_path):
        with pytest.raises(ValueError):
            CompareOptions(image_b=b"b", output_path=str(tmp_path / "x.png"))

    def test_path_and_bytes_are_exclusive(self, tmp_path):
        with pytest.raises(ValueError):
            CompareOptions(image_a=b"a", image_a_path="a.png", image_b=b"b", output_path=str(tmp_path / "x.png"))
