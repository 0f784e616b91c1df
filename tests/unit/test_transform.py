"""
Tests for imgsync.transform module.
"""

from pathlib import Path

import pytest
from PIL import Image

from imgsync.core.config import EncodingConfig
from imgsync.transform import PASSTHROUGH, ImageTransformer, TransformResult


@pytest.fixture
def transformer() -> ImageTransformer:
    return ImageTransformer()


class TestEncoderSelection:
    """Tests for extension-based encoder selection."""

    @pytest.mark.parametrize(
        ("name", "encoder"),
        [
            ("a.jpg", "jpeg"),
            ("a.JPEG", "jpeg"),
            ("a.png", "png"),
            ("a.WebP", "webp"),
            ("a.gif", PASSTHROUGH),
            ("a.bmp", PASSTHROUGH),
        ],
    )
    def test_encoder_for(self, transformer: ImageTransformer, name: str, encoder: str) -> None:
        assert transformer.encoder_for(Path(name)) == encoder


class TestImageTransformer:
    """Tests for ImageTransformer.transform."""

    @pytest.mark.parametrize(
        ("name", "fmt"),
        [("photo.jpg", "JPEG"), ("shot.png", "PNG"), ("pic.webp", "WEBP")],
    )
    def test_encodes_in_source_format(
        self, transformer: ImageTransformer, temp_dir: Path, make_image, name: str, fmt: str
    ) -> None:
        source = make_image(temp_dir / "src" / name, size=(32, 24))
        artifact = temp_dir / "out" / "nested" / name

        result = transformer.transform(source, artifact)

        assert result.success is True
        assert result.bytes_written == artifact.stat().st_size
        with Image.open(artifact) as img:
            assert img.format == fmt
            assert img.size == (32, 24)

    def test_creates_parent_directories(
        self, transformer: ImageTransformer, temp_dir: Path, make_image
    ) -> None:
        source = make_image(temp_dir / "a.png")
        artifact = temp_dir / "x" / "y" / "z" / "a.png"

        assert transformer.transform(source, artifact).success
        assert artifact.exists()

    def test_jpeg_converts_alpha_images(
        self, transformer: ImageTransformer, temp_dir: Path
    ) -> None:
        source = temp_dir / "alpha.jpg"
        # RGBA cannot be written as JPEG directly; store it as PNG bytes under a .jpg name
        Image.new("RGBA", (8, 8), (0, 0, 255, 128)).save(source, format="PNG")

        result = transformer.transform(source, temp_dir / "out" / "alpha.jpg")

        assert result.success, result.reason
        assert result.encoder == "jpeg"

    def test_lossless_webp_option(self, temp_dir: Path, make_image) -> None:
        transformer = ImageTransformer(EncodingConfig(webp={"lossless": True}))
        source = make_image(temp_dir / "a.webp")

        assert transformer.transform(source, temp_dir / "out" / "a.webp").success

    def test_passthrough_copies_bytes(self, transformer: ImageTransformer, temp_dir: Path) -> None:
        source = temp_dir / "anim.gif"
        source.write_bytes(b"GIF89a-not-really")
        artifact = temp_dir / "out" / "anim.gif"

        result = transformer.transform(source, artifact)

        assert result.success
        assert result.encoder == PASSTHROUGH
        assert artifact.read_bytes() == b"GIF89a-not-really"

    def test_corrupt_image_reports_failure(
        self, transformer: ImageTransformer, temp_dir: Path
    ) -> None:
        source = temp_dir / "broken.png"
        source.write_bytes(b"this is not a png")
        artifact = temp_dir / "out" / "broken.png"

        result = transformer.transform(source, artifact)

        assert isinstance(result, TransformResult)
        assert result.success is False
        assert result.reason
        assert not artifact.exists()
        assert list((temp_dir / "out").iterdir()) == []

    def test_failure_keeps_existing_artifact(
        self, transformer: ImageTransformer, temp_dir: Path
    ) -> None:
        source = temp_dir / "broken.png"
        source.write_bytes(b"garbage")
        artifact = temp_dir / "out" / "broken.png"
        artifact.parent.mkdir()
        artifact.write_bytes(b"previous artifact")

        result = transformer.transform(source, artifact)

        assert not result.success
        assert artifact.read_bytes() == b"previous artifact"

    def test_missing_source_reports_failure(
        self, transformer: ImageTransformer, temp_dir: Path
    ) -> None:
        result = transformer.transform(temp_dir / "nope.jpg", temp_dir / "out" / "nope.jpg")
        assert not result.success
        assert "FileNotFoundError" in result.reason

    def test_overwrites_existing_artifact(
        self, transformer: ImageTransformer, temp_dir: Path, make_image
    ) -> None:
        source = make_image(temp_dir / "a.png", size=(10, 10))
        artifact = temp_dir / "out" / "a.png"
        artifact.parent.mkdir()
        artifact.write_bytes(b"stale")

        assert transformer.transform(source, artifact).success
        with Image.open(artifact) as img:
            assert img.size == (10, 10)
