from pathlib import Path

import pytest
from PIL import Image

from epubmanga.epub.cover import TextMetrics, BoundingBox


class FakeMetrics(TextMetrics):
    """Deterministic metrics: fixed widths per text, fixed line height."""

    def __init__(self, widths=None, char_width=10, line_height=100):
        self.widths = widths or {}
        self.char_width = char_width
        self.line_height = line_height
        self.drawn = []

    def measure(self, text, x, y, anchor="mm"):
        width = self.widths.get(text, len(text) * self.char_width)
        if anchor[1] == "m":
            top = y - self.line_height / 2
        else:
            top = y - self.line_height * 0.8
        return BoundingBox(x - width / 2, top, width, self.line_height)

    def draw(self, draw, text, x, y, anchor="mm", fill="#ffffff"):
        self.drawn.append((text, x, y, anchor))


@pytest.fixture
def fake_metrics():
    return FakeMetrics


@pytest.fixture
def make_pages(tmp_path: Path):
    """Write synthetic page images into a source directory."""

    def _make(names, size=(600, 800), color=(200, 30, 30), directory="pages"):
        source = tmp_path / directory
        source.mkdir(exist_ok=True)
        for name in names:
            Image.new("RGB", size, color).save(source / name)
        return source

    return _make


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root
