from pathlib import Path

import pytest
from PIL import Image

from epubmanga.epub.image import ImageProcessor
from epubmanga.error import ConfigurationError, ImageDecodeError


def test_list_source_images_sorted_and_filtered(make_pages):
    source = make_pages(["c.png", "a.jpg", "b.PNG"])
    (source / "notes.txt").write_text("not a page")
    (source / "sub.png").mkdir()

    names = [p.name for p in ImageProcessor().list_source_images(source)]
    assert names == ["a.jpg", "b.PNG", "c.png"]


def test_list_source_images_rejects_missing_or_empty(tmp_path):
    processor = ImageProcessor()
    with pytest.raises(ConfigurationError):
        processor.list_source_images(tmp_path / "missing")
    (tmp_path / "empty").mkdir()
    with pytest.raises(ConfigurationError):
        processor.list_source_images(tmp_path / "empty")


def test_normalize_letterboxes_to_canvas(make_pages, tmp_path):
    source = make_pages(["a.png"], size=(500, 1000))
    images_dir = tmp_path / "images"

    [page] = ImageProcessor().process_directory(source, images_dir)

    assert page.source_path == source / "a.png"
    assert page.normalized_path == images_dir / "a.png"
    assert (page.original_width, page.original_height) == (500, 1000)
    assert (page.width, page.height) == (1072, 1448)

    with Image.open(page.normalized_path) as img:
        assert img.size == (1072, 1448)
        assert img.format == "PNG"
        assert img.getpixel((0, 0)) == (255, 255, 255)
        assert img.getpixel((536, 724)) == (200, 30, 30)

    # The source is never modified
    with Image.open(source / "a.png") as original:
        assert original.size == (500, 1000)


def test_normalize_flattens_transparency(tmp_path):
    path = tmp_path / "alpha.png"
    Image.new("RGBA", (100, 100), (0, 0, 0, 0)).save(path)

    page = ImageProcessor(target_width=100, target_height=100).normalize(path)

    with Image.open(page.normalized_path) as img:
        assert img.mode == "RGB"
        assert img.getpixel((50, 50)) == (255, 255, 255)


def test_normalize_keeps_jpeg_format(make_pages, tmp_path):
    source = make_pages(["a.jpg"], size=(1072, 1448))
    [page] = ImageProcessor(quality=70).process_directory(source, tmp_path / "images")
    with Image.open(page.normalized_path) as img:
        assert img.format == "JPEG"


def test_decode_failure_names_source_file(make_pages, tmp_path):
    source = make_pages(["a.png"])
    (source / "b.png").write_bytes(b"definitely not a png")

    with pytest.raises(ImageDecodeError) as excinfo:
        ImageProcessor().process_directory(source, tmp_path / "images")

    assert excinfo.value.path == Path(source / "b.png")
    assert excinfo.value.stage == "normalize"
    assert "b.png" in excinfo.value.message


def test_parallel_normalization_keeps_order(make_pages, tmp_path):
    names = [f"{i:03d}.png" for i in range(12)]
    source = make_pages(names, size=(300, 400))

    pages = ImageProcessor(max_workers=4).process_directory(source, tmp_path / "images")

    assert [p.name for p in pages] == names


def test_webp_pages_are_reencoded_losslessly(tmp_path):
    path = tmp_path / "page.webp"
    Image.new("RGB", (100, 100), (123, 45, 67)).save(path, lossless=True)

    page = ImageProcessor(target_width=100, target_height=100).normalize(path)

    with Image.open(page.normalized_path) as img:
        assert img.format == "WEBP"
        assert img.convert("RGB").getpixel((50, 50)) == (123, 45, 67)
