"""Cover composition.

The cover is the first normalized page with the book title drawn over it.
The title is laid out by a greedy line-wrap sized against measured glyph
metrics: one centred line when it fits, otherwise several centred lines, each
on its own opaque band so it stays readable on any artwork.
"""

import math
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from ..error import RenderError

# Set up logging
logger = logging.getLogger(__name__)

FONT_SIZE = 100
TITLE_MARGIN = 100
BOX_PADDING = 10
TEXT_COLOR = "#ffffff"
BOX_COLOR = "#000000"
COVER_QUALITY = 90

# Pillow anchors: middle/middle for a single line, middle/baseline for wrapped lines
CENTER_ANCHOR = "mm"
BASELINE_ANCHOR = "ms"


@dataclass(frozen=True)
class BoundingBox:
    """Rendered extent of a text run."""

    x: float
    y: float
    width: float
    height: float


class TextMetrics:
    """Measures and draws text for the cover title.

    Subclasses provide ``measure``; ``draw`` is only needed to rasterize.
    """

    font_size = FONT_SIZE

    def measure(self, text: str, x: float, y: float, anchor: str = CENTER_ANCHOR) -> BoundingBox:
        raise NotImplementedError

    def draw(self, draw: ImageDraw.ImageDraw, text: str, x: float, y: float,
             anchor: str = CENTER_ANCHOR, fill: str = TEXT_COLOR) -> None:
        raise NotImplementedError


class PillowTextMetrics(TextMetrics):
    """Text metrics backed by a Pillow FreeType font."""

    def __init__(self, font_path: Optional[Union[str, Path]] = None, font_size: int = FONT_SIZE):
        """Load the title font.

        Args:
            font_path: TrueType/OpenType font file, Pillow's default font when omitted.
            font_size: Font size in pixels.

        Raises:
            RenderError: If the font cannot be loaded.
        """
        self.font_size = font_size
        try:
            if font_path:
                self.font = ImageFont.truetype(str(font_path), size=font_size)
            else:
                self.font = ImageFont.load_default(size=font_size)
        except (OSError, ValueError) as e:
            raise RenderError(f"Cannot load title font {font_path or 'default'}: {e}",
                              path=font_path, original_error=e) from e

    def measure(self, text: str, x: float, y: float, anchor: str = CENTER_ANCHOR) -> BoundingBox:
        left, top, right, bottom = self.font.getbbox(text, anchor=anchor)
        return BoundingBox(x + left, y + top, right - left, bottom - top)

    def draw(self, draw: ImageDraw.ImageDraw, text: str, x: float, y: float,
             anchor: str = CENTER_ANCHOR, fill: str = TEXT_COLOR) -> None:
        draw.text((x, y), text, font=self.font, anchor=anchor, fill=fill)


@dataclass(frozen=True)
class OverlayBox:
    """Opaque background band behind a line of text."""

    x: float
    y: float
    width: float
    height: float
    fill: str = BOX_COLOR


@dataclass(frozen=True)
class OverlayText:
    """A line of text anchored at a point."""

    text: str
    x: float
    y: float
    anchor: str
    fill: str = TEXT_COLOR


@dataclass
class TitleLayout:
    """The laid-out title overlay."""

    line_count: int
    lines: List[str]
    elements: list = field(default_factory=list)

    @property
    def wrapped(self) -> bool:
        return self.line_count > 1


def layout_title(title: str, container_width: int, container_height: int,
                 metrics: TextMetrics, margin: int = TITLE_MARGIN) -> TitleLayout:
    """Lay out a title so it fits the cover.

    A title narrower than ``container_width - margin`` is drawn on one line
    centred on both axes. A wider title is split into
    ``ceil(width / (container_width - margin))`` lines holding an equal number
    of consecutive words; lines are not re-balanced by measured width. A title
    made of one word always stays on one line, even if it overflows.

    Args:
        title: Book title (non-empty).
        container_width: Cover width.
        container_height: Cover height.
        metrics: Text metrics used to measure each line.
        margin: Horizontal room kept free around the title.

    Returns:
        TitleLayout: Background boxes and text runs, in drawing order.
    """
    center_x = round(container_width / 2)
    center_y = round(container_height / 2)
    available = container_width - margin

    box = metrics.measure(title, center_x, center_y, CENTER_ANCHOR)
    words = title.split()

    if box.width < available or len(words) <= 1:
        return TitleLayout(
            line_count=1,
            lines=[title],
            elements=[
                OverlayBox(box.x - BOX_PADDING, box.y - BOX_PADDING,
                           box.width + 2 * BOX_PADDING, box.height + 2 * BOX_PADDING),
                OverlayText(title, center_x, center_y, CENTER_ANCHOR),
            ],
        )

    line_height = box.height
    line_count = math.ceil(box.width / available) if available > 0 else len(words)
    block_height = line_height * line_count
    words_per_line = math.ceil(len(words) / line_count)

    lines = [" ".join(words[i * words_per_line:(i + 1) * words_per_line])
             for i in range(line_count)]

    elements = []
    first_baseline = round(container_height / 2 - block_height / 2 + line_height)
    for line_index, line in enumerate(lines):
        if not line:
            continue
        baseline = first_baseline + line_index * line_height
        line_box = metrics.measure(line, center_x, baseline, BASELINE_ANCHOR)
        elements.append(OverlayBox(0, line_box.y - BOX_PADDING,
                                   container_width, line_box.height + 2 * BOX_PADDING))
        elements.append(OverlayText(line, center_x, baseline, BASELINE_ANCHOR))

    logger.debug(f"Title wrapped on {line_count} line(s), {words_per_line} word(s) per line")
    return TitleLayout(line_count=line_count, lines=lines, elements=elements)


class CoverComposer:
    """Builds the cover image of a book."""

    def __init__(self, metrics: Optional[TextMetrics] = None,
                 font_path: Optional[Union[str, Path]] = None,
                 margin: int = TITLE_MARGIN, quality: int = COVER_QUALITY):
        """Initialize the composer.

        Args:
            metrics: Text metrics, a Pillow font is loaded lazily when omitted.
            font_path: Font used when no metrics are given.
            margin: Horizontal room kept free around the title.
            quality: JPEG quality of the cover.
        """
        self._metrics = metrics
        self.font_path = font_path
        self.margin = margin
        self.quality = quality

    @property
    def metrics(self) -> TextMetrics:
        if self._metrics is None:
            self._metrics = PillowTextMetrics(self.font_path)
        return self._metrics

    def render_overlay(self, img: Image.Image, layout: TitleLayout) -> None:
        """Draw a title layout onto an image in place."""
        draw = ImageDraw.Draw(img)
        for element in layout.elements:
            if isinstance(element, OverlayBox):
                draw.rectangle(
                    [element.x, element.y, element.x + element.width, element.y + element.height],
                    fill=element.fill,
                )
            else:
                self.metrics.draw(draw, element.text, element.x, element.y,
                                  anchor=element.anchor, fill=element.fill)

    def compose(self, image_path: Union[str, Path], destination: Union[str, Path],
                title: Optional[str] = None) -> Path:
        """Compose and save the cover.

        The cover keeps the intrinsic size of the source image.

        Args:
            image_path: First normalized page.
            destination: Output path of the JPEG cover.
            title: Book title; no overlay is drawn when empty.

        Returns:
            Path: The written cover path.

        Raises:
            RenderError: If the cover cannot be composed or written.
        """
        image_path = Path(image_path)
        destination = Path(destination)

        try:
            with Image.open(image_path) as source:
                cover = source.convert("RGB")

            if title:
                layout = layout_title(title, cover.width, cover.height, self.metrics, self.margin)
                self.render_overlay(cover, layout)

            cover.save(destination, "JPEG", quality=self.quality, optimize=True)
        except RenderError:
            raise
        except (OSError, UnidentifiedImageError, ValueError, TypeError) as e:
            logger.error(f"Error composing cover from {image_path}: {e}")
            raise RenderError(f"Cannot compose cover from {image_path}: {e}",
                              path=image_path, original_error=e) from e

        logger.info(f"Cover written to {destination} ({cover.width}x{cover.height})")
        return destination
