"""EPUB generation package for epubmanga.

This package holds the stages of the fixed-layout EPUB pipeline: image
normalization, cover composition, page markup, navigation, package
descriptors and archive assembly.
"""

from .image import ImageProcessor, PageImage
from .cover import CoverComposer, PillowTextMetrics, TextMetrics, layout_title
from .pages import PageMarkupGenerator
from .panel import panel_geometry
from .navigation import build_nav, build_ncx
from .package import build_opf, build_container
from .archive import ArchiveAssembler

__all__ = [
    'ImageProcessor', 'PageImage', 'CoverComposer', 'PillowTextMetrics', 'TextMetrics',
    'layout_title', 'PageMarkupGenerator', 'panel_geometry', 'build_nav', 'build_ncx',
    'build_opf', 'build_container', 'ArchiveAssembler',
]
