"""Package (OPF) and container descriptors."""

import logging
from dataclasses import dataclass
from html import escape
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..config import BuildOptions
from ..utils import format_index, href, media_type
from .image import PageImage
from .navigation import NAV_FILE_NAME, NCX_FILE_NAME
from .pages import STYLESHEET_NAME

# Set up logging
logger = logging.getLogger(__name__)

OPF_FILE_NAME = "content.opf"
CONTAINER_PATH = "META-INF/container.xml"
COVER_FILE_NAME = "cover.jpg"

OPF_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<package version="3.0" unique-identifier="BookID" xmlns="http://www.idpf.org/2007/opf">
<metadata xmlns:opf="http://www.idpf.org/2007/opf" xmlns:dc="http://purl.org/dc/elements/1.1/">
<dc:title>{title}</dc:title>
<dc:language>{language}</dc:language>
<dc:identifier id="BookID">urn:uuid:{identifier}</dc:identifier>
<dc:contributor id="contributor">{author}</dc:contributor>
<meta name="cover" content="cover"/>
<meta property="rendition:orientation">{orientation}</meta>
<meta property="rendition:spread">{orientation}</meta>
<meta property="rendition:layout">pre-paginated</meta>
<meta name="original-resolution" content="{width}x{height}"/>
<meta name="book-type" content="comic"/>
<meta name="RegionMagnification" content="{magnification}"/>
<meta name="primary-writing-mode" content="{writing_mode}"/>
<meta name="zero-gutter" content="true"/>
<meta name="zero-margin" content="true"/>
<meta name="ke-border-color" content="#ffffff"/>
<meta name="ke-border-width" content="0"/>
</metadata>
<manifest>
{manifest}</manifest>
<spine toc="ncx" page-progression-direction="{direction}">
{spine}</spine>
</package>
"""

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
<rootfiles>
<rootfile full-path="{opf}" media-type="application/oebps-package+xml"/>
</rootfiles>
</container>
""".format(opf=OPF_FILE_NAME)


@dataclass(frozen=True)
class ManifestItem:
    """One entry of the package manifest."""

    id: str
    href: str
    media_type: str
    properties: Optional[str] = None

    def to_xml(self) -> str:
        props = f' properties="{escape(self.properties)}"' if self.properties else ""
        return (f'<item id="{escape(self.id)}" href="{escape(href(self.href))}" '
                f'media-type="{escape(self.media_type)}"{props}/>')


def page_item_id(index: int) -> str:
    return f"page_{format_index(index)}"


def image_item_id(index: int) -> str:
    return f"image_{format_index(index)}"


def manifest_items(images: Sequence[PageImage],
                   page_paths: Sequence[Union[str, Path]]) -> List[ManifestItem]:
    """Every file of the package except the descriptors themselves.

    Args:
        images: Normalized pages in reading order.
        page_paths: Page documents in reading order.

    Returns:
        List[ManifestItem]: Cover, NCX, nav, stylesheet, images, then pages.
    """
    items = [
        ManifestItem("cover", COVER_FILE_NAME, media_type(COVER_FILE_NAME), "cover-image"),
        ManifestItem("ncx", NCX_FILE_NAME, media_type(NCX_FILE_NAME)),
        ManifestItem("nav", NAV_FILE_NAME, media_type(NAV_FILE_NAME), "nav"),
        ManifestItem("style", STYLESHEET_NAME, media_type(STYLESHEET_NAME)),
    ]
    for index, image in enumerate(images, start=1):
        items.append(ManifestItem(image_item_id(index), f"images/{image.name}", media_type(image.name)))
    for index, page_path in enumerate(page_paths, start=1):
        name = Path(page_path).name
        items.append(ManifestItem(page_item_id(index), name, media_type(name)))
    return items


def build_opf(images: Sequence[PageImage], page_paths: Sequence[Union[str, Path]],
              identifier: str, title: str, options: BuildOptions) -> str:
    """Build the package descriptor.

    The spine lists the pages in reading order whatever the direction; the
    direction is only declared through page-progression-direction.

    Args:
        images: Normalized pages in reading order.
        page_paths: Page documents in reading order.
        identifier: Book identifier (UUID).
        title: Book title.
        options: Build options.

    Returns:
        str: The content.opf document.
    """
    manifest = "".join(f"{item.to_xml()}\n" for item in manifest_items(images, page_paths))
    spine = "".join(
        f'<itemref idref="{page_item_id(index)}"/>\n'
        for index in range(1, len(page_paths) + 1)
    )

    return OPF_TEMPLATE.format(
        title=escape(title),
        language=escape(options.language),
        identifier=escape(identifier),
        author=escape(options.author),
        orientation=options.orientation,
        width=options.page_width,
        height=options.page_height,
        magnification="true" if options.region_magnification else "false",
        writing_mode=options.reading_direction.writing_mode,
        direction=options.reading_direction.value,
        manifest=manifest,
        spine=spine,
    )


def build_container() -> str:
    """Build the container descriptor pointing at the package descriptor."""
    return CONTAINER_XML


def write_package(images: Sequence[PageImage], page_paths: Sequence[Union[str, Path]],
                  destination: Union[str, Path], identifier: str, title: str,
                  options: BuildOptions) -> List[Path]:
    """Write content.opf and META-INF/container.xml into a directory.

    Returns:
        List[Path]: The OPF and container paths.
    """
    destination = Path(destination)
    opf_path = destination / OPF_FILE_NAME
    container_path = destination / CONTAINER_PATH
    container_path.parent.mkdir(parents=True, exist_ok=True)

    with open(opf_path, "w", encoding="utf-8") as f:
        f.write(build_opf(images, page_paths, identifier, title, options))
    with open(container_path, "w", encoding="utf-8") as f:
        f.write(build_container())

    logger.debug(f"Package descriptor written with {len(page_paths)} spine item(s)")
    return [opf_path, container_path]
