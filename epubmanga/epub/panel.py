"""Geometry of the region-magnification panel.

The normalizer centres every image on the page canvas, so the panel is the
centred rectangle of the image expressed in percentages of the page. If the
padding strategy in ``image.py`` changes, this calculation must follow.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PanelGeometry:
    """Panel rectangle in percentages of the page canvas."""

    left: float
    top: float
    width: float
    height: float


def _offset(page_size: int, image_size: int) -> float:
    if page_size <= 0:
        return 0.0
    return math.floor(page_size / 2 - image_size / 2) / page_size * 100


def _extent(page_size: int, image_size: int) -> float:
    if page_size <= 0:
        return 0.0
    return image_size / page_size * 100


def panel_geometry(page_width: int, page_height: int,
                   image_width: int, image_height: int) -> PanelGeometry:
    """Position of the magnifiable panel for an image centred on a page.

    Args:
        page_width: Page canvas width.
        page_height: Page canvas height.
        image_width: Width of the normalized image.
        image_height: Height of the normalized image.

    Returns:
        PanelGeometry: Offsets and extent as percentages of the page.
    """
    return PanelGeometry(
        left=_offset(page_width, image_width),
        top=_offset(page_height, image_height),
        width=_extent(page_width, image_width),
        height=_extent(page_height, image_height),
    )


def format_percent(value: float) -> str:
    """Render a percentage for CSS without float noise."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return f"{text or '0'}%"
