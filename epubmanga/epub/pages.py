"""Page markup generation.

One fixed-layout XHTML document is written per page image. When region
magnification is enabled each page also carries a panel overlay that readers
use for tap-to-zoom.
"""

import logging
from html import escape
from pathlib import Path
from typing import List, Union

from ..config import BuildOptions
from ..utils import format_index, href
from .image import PageImage
from .panel import panel_geometry, format_percent

# Set up logging
logger = logging.getLogger(__name__)

STYLESHEET_NAME = "style.css"

DEFAULT_CSS = """@namespace h "http://www.w3.org/1999/xhtml";
html, body {
    margin: 0;
    padding: 0;
}
body {
    background-repeat: no-repeat;
    background-position: center center;
    background-size: contain;
}
#PV {
    position: absolute;
    width: 100%;
    height: 100%;
    top: 0;
    left: 0;
}
#PV div {
    position: absolute;
}
a.app-amzn-magnify {
    display: block;
    width: 100%;
    height: 100%;
}
div.PV-P {
    position: absolute;
    width: 100%;
    height: 100%;
    top: 0;
    left: 0;
    display: none;
}
div.PV-P img {
    position: absolute;
}
"""

PAGE_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">
<head>
<title>{title}</title>
<link href="{stylesheet}" type="text/css" rel="stylesheet"/>
<meta name="viewport" content="width={width}, height={height}"/>
</head>
<body style="background-image: url({image})">
{panel}</body>
</html>
"""

PANEL_TEMPLATE = """<div id="PV">
<div id="{region_id}" style="left: {left}; top: {top}; width: {panel_width}; height: {panel_height};">
<a class="app-amzn-magnify" data-app-amzn-magnify='{{"targetId":"{target_id}", "ordinal":1}}'></a>
</div>
</div>
<div id="{target_id}" class="PV-P">
<img src="{image}" width="{image_width}" height="{image_height}" style="left: {left}; top: {top};" alt=""/>
</div>
"""


def page_file_name(index: int) -> str:
    """File name of the page document for a 1-based index."""
    return f"{format_index(index)}.xhtml"


class PageMarkupGenerator:
    """Writes the XHTML page documents of a book."""

    def __init__(self, options: BuildOptions, title: str = ""):
        """Initialize the generator.

        Args:
            options: Build options (page size, magnification).
            title: Book title, used as the document title.
        """
        self.options = options
        self.title = title

    def panel_markup(self, index: int, image: PageImage) -> str:
        """Overlay region and zoom target for one page.

        Args:
            index: 1-based page index.
            image: The normalized page image.

        Returns:
            str: XHTML fragment, empty when magnification is disabled.
        """
        if not self.options.region_magnification:
            return ""

        geometry = panel_geometry(
            self.options.page_width, self.options.page_height, image.width, image.height
        )
        region_id = f"PV-{format_index(index)}"
        return PANEL_TEMPLATE.format(
            region_id=region_id,
            target_id=f"{region_id}-P",
            left=format_percent(geometry.left),
            top=format_percent(geometry.top),
            panel_width=format_percent(geometry.width),
            panel_height=format_percent(geometry.height),
            image=escape(f"images/{href(image.name)}"),
            image_width=image.width,
            image_height=image.height,
        )

    def render(self, index: int, image: PageImage) -> str:
        """Render the page document for one image.

        Args:
            index: 1-based page index.
            image: The normalized page image.

        Returns:
            str: The XHTML document.
        """
        return PAGE_TEMPLATE.format(
            title=escape(self.title or str(index)),
            stylesheet=STYLESHEET_NAME,
            width=self.options.page_width,
            height=self.options.page_height,
            image=escape(f"images/{href(image.name)}"),
            panel=self.panel_markup(index, image),
        )

    def build(self, images: List[PageImage], destination: Union[str, Path]) -> List[Path]:
        """Write one page document per image, in reading order.

        Args:
            images: Normalized pages in reading order.
            destination: Directory receiving the documents.

        Returns:
            List[Path]: Generated page paths in reading order.
        """
        destination = Path(destination)
        file_paths = []

        for index, image in enumerate(images, start=1):
            file_path = destination / page_file_name(index)
            with open(file_path, "w", encoding="utf-8") as f:
                f.write(self.render(index, image))
            file_paths.append(file_path)

        logger.info(f"Generated {len(file_paths)} page document(s)")
        return file_paths


def write_stylesheet(destination: Union[str, Path]) -> Path:
    """Write the shared stylesheet into a directory.

    Args:
        destination: Directory receiving the stylesheet.

    Returns:
        Path: Path of the written stylesheet.
    """
    path = Path(destination) / STYLESHEET_NAME
    with open(path, "w", encoding="utf-8") as f:
        f.write(DEFAULT_CSS)
    return path
