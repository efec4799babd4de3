"""Navigation documents: the EPUB3 nav document and the legacy NCX."""

import logging
from html import escape
from pathlib import Path
from typing import List, Sequence, Union

from ..config import DEFAULT_LANGUAGE
from ..utils import format_index, href

# Set up logging
logger = logging.getLogger(__name__)

NAV_FILE_NAME = "nav.xhtml"
NCX_FILE_NAME = "toc.ncx"

NAV_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">
<head>
<title>{title}</title>
<meta charset="utf-8"/>
</head>
<body>
<nav epub:type="toc" id="toc">
<ol>
{items}</ol>
</nav>
<nav epub:type="page-list" id="page-list" hidden="">
<ol>
{items}</ol>
</nav>
</body>
</html>
"""

NCX_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<ncx version="2005-1" xml:lang="{language}" xmlns="http://www.daisy.org/z3986/2005/ncx/">
<head>
<meta name="dtb:uid" content="urn:uuid:{identifier}"/>
<meta name="dtb:depth" content="1"/>
<meta name="dtb:totalPageCount" content="{page_count}"/>
<meta name="dtb:maxPageNumber" content="{max_page_number}"/>
<meta name="generated" content="true"/>
</head>
<docTitle><text>{title}</text></docTitle>
<navMap>
{nav_points}</navMap>
</ncx>
"""


def _names(page_paths: Sequence[Union[str, Path]]) -> List[str]:
    return [Path(p).name for p in page_paths]


def build_nav(page_paths: Sequence[Union[str, Path]], title: str) -> str:
    """Build the EPUB3 navigation document.

    Every page is listed twice, once in the table of contents and once in the
    page list, with its 1-based number as label.

    Args:
        page_paths: Page documents in reading order.
        title: Book title.

    Returns:
        str: The nav.xhtml document.
    """
    items = "".join(
        f'<li><a href="{escape(href(name))}">{index}</a></li>\n'
        for index, name in enumerate(_names(page_paths), start=1)
    )
    return NAV_TEMPLATE.format(title=escape(title), items=items)


def build_ncx(page_paths: Sequence[Union[str, Path]], identifier: str, title: str,
              language: str = DEFAULT_LANGUAGE) -> str:
    """Build the legacy NCX navigation map.

    The maximum page number is the page count plus one: numbering reserves a
    slot for the cover, which is not a page document.

    Args:
        page_paths: Page documents in reading order.
        identifier: Book identifier (UUID).
        title: Book title.
        language: Book language.

    Returns:
        str: The toc.ncx document.
    """
    names = _names(page_paths)
    page_count = len(names)

    nav_points = "".join(
        f'<navPoint id="{format_index(index)}" playOrder="{index}">'
        f'<navLabel><text>{index}</text></navLabel>'
        f'<content src="{escape(href(name))}"/></navPoint>\n'
        for index, name in enumerate(names, start=1)
    )

    return NCX_TEMPLATE.format(
        language=escape(language),
        identifier=escape(identifier),
        page_count=page_count,
        max_page_number=page_count + 1,
        title=escape(title),
        nav_points=nav_points,
    )


def write_navigation(page_paths: Sequence[Union[str, Path]], destination: Union[str, Path],
                     identifier: str, title: str,
                     language: str = DEFAULT_LANGUAGE) -> List[Path]:
    """Write nav.xhtml and toc.ncx into a directory.

    Returns:
        List[Path]: The nav and NCX paths.
    """
    destination = Path(destination)
    nav_path = destination / NAV_FILE_NAME
    ncx_path = destination / NCX_FILE_NAME

    with open(nav_path, "w", encoding="utf-8") as f:
        f.write(build_nav(page_paths, title))
    with open(ncx_path, "w", encoding="utf-8") as f:
        f.write(build_ncx(page_paths, identifier, title, language))

    logger.debug(f"Navigation written for {len(page_paths)} page(s)")
    return [nav_path, ncx_path]
