"""Command Line Interface for epubmanga.

This module provides the ``epubmanga`` command: a thin shell that turns
command line flags into build options and hands them to ``convert``.
"""

import sys
import logging
from typing import Any, Dict, Optional
import click

from . import __version__
from .builder import convert
from .config import merge_options, load_options_file, validate_options, DEFAULT_OPTIONS
from .error import initialize_error_handler, error_handler, EpubMangaError
from .ui import print_header, print_info, print_success, print_options

# Set up logging
logger = logging.getLogger(__name__)


def collect_overrides(config_file: Optional[str], flags: Dict[str, Any]) -> Dict[str, Any]:
    """Merge option sources: explicit flags win over the file, the file over defaults.

    Args:
        config_file: Optional JSON file of option overrides.
        flags: Option values from the command line; None means not given.

    Returns:
        Dict[str, Any]: Overrides to apply on top of the defaults.
    """
    overrides: Dict[str, Any] = {}
    if config_file:
        overrides.update(load_options_file(config_file))
    overrides.update({key: value for key, value in flags.items() if value is not None})
    return overrides


@click.group()
@click.version_option(version=__version__)
@click.option('--debug', is_flag=True, help="Enable debug logging")
@click.option('--log-dir', help="Directory for log files")
@click.pass_context
def cli(ctx, debug, log_dir):
    """epubmanga: Convert a folder of manga pages to a fixed-layout EPUB.

    Each image becomes one full-screen page. The first page doubles as the
    cover with the title drawn over it, and every page carries a Kindle
    region-magnification panel.

    Basic usage:
      epubmanga convert ./pages ./book.epub "My Manga Vol. 1"

    For more information on a specific command, use:
      epubmanga COMMAND --help
    """
    # Initialize context object
    ctx.ensure_object(dict)

    # Configure logging
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Store debug flag in context
    ctx.obj['DEBUG'] = debug

    # Initialize error handler
    initialize_error_handler(debug=debug, log_dir=log_dir)


@cli.command(name="convert")
@click.argument('source', type=click.Path(file_okay=False))
@click.argument('output', type=click.Path(dir_okay=False))
@click.argument('title', required=False, default="")
@click.option('--width', type=int, help=f"Page width in pixels (default: {DEFAULT_OPTIONS['page_width']})")
@click.option('--height', type=int, help=f"Page height in pixels (default: {DEFAULT_OPTIONS['page_height']})")
@click.option('--direction', type=click.Choice(['rtl', 'ltr'], case_sensitive=False),
              help="Reading direction (default: rtl)")
@click.option('--author', help="Contributor written to the metadata")
@click.option('--language', '-l', help=f"Book language (default: {DEFAULT_OPTIONS['language']})")
@click.option('--quality', type=int, help="JPEG quality of normalized pages (1-100)")
@click.option('--workers', type=int, help="Number of images normalized in parallel")
@click.option('--no-magnification', is_flag=True,
              help="Do not emit region-magnification panels")
@click.option('--font', type=click.Path(dir_okay=False), help="TrueType font for the cover title")
@click.option('--workspace-root', type=click.Path(file_okay=False),
              help="Directory holding the temporary workspace")
@click.option('--config', 'config_file', type=click.Path(dir_okay=False),
              help="JSON file of option overrides")
@click.option('--progress/--no-progress', default=None, help="Show a progress bar")
@click.pass_context
def convert_command(ctx, source, output, title, width, height, direction, author, language,
                    quality, workers, no_magnification, font, workspace_root, config_file,
                    progress):
    """Convert a directory of page images to EPUB.

    SOURCE is the directory holding the page images, OUTPUT the EPUB to
    write and TITLE the optional book title drawn on the cover.

    Examples:
      epubmanga convert ./pages ./book.epub "One Piece 1"
      epubmanga convert ./pages ./book.epub --direction ltr --no-magnification
      epubmanga convert ./pages ./book.epub --config kindle.json --width 1236
    """
    flags = {
        "page_width": width,
        "page_height": height,
        "reading_direction": direction,
        "author": author,
        "language": language,
        "image_quality": quality,
        "max_workers": workers,
        "region_magnification": False if no_magnification else None,
        "font_path": font,
        "workspace_root": workspace_root,
        "show_progress": progress,
    }

    try:
        options = validate_options(merge_options(None, collect_overrides(config_file, flags)))

        print_header(f"Converting: {title or source}")
        if ctx.obj.get('DEBUG'):
            print_options(options.to_dict())

        result = convert(source, output, title, options)
        print_success(f"✅ EPUB written to {result}")
    except EpubMangaError as e:
        error = error_handler.handle(e)
        error_handler.display_error(error)
        logger.debug(f"Build failed at stage {error.stage}")
        sys.exit(1)


@cli.command()
def defaults():
    """Show the default build options.

    Examples:
      epubmanga defaults
    """
    print_info("Default build options:")
    print_options(DEFAULT_OPTIONS)
