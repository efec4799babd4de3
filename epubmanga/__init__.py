"""epubmanga: fixed-layout EPUB generation for manga and comics."""

__version__ = "0.1.0"

from .builder import convert, EpubBuilder, BuildRequest
from .config import BuildOptions, ReadingDirection

__all__ = ['convert', 'EpubBuilder', 'BuildRequest', 'BuildOptions', 'ReadingDirection', '__version__']
