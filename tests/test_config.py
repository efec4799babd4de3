import json
from pathlib import Path

import pytest

from epubmanga.config import (
    BuildOptions,
    ReadingDirection,
    DEFAULT_OPTIONS,
    merge_options,
    validate_options,
    resolve_options,
    load_options_file,
)
from epubmanga.error import ConfigurationError, ErrorCategory


def test_defaults():
    options = BuildOptions()
    assert (options.page_width, options.page_height) == (1072, 1448)
    assert options.reading_direction is ReadingDirection.RTL
    assert options.author == "EPUB Manga Generator"
    assert options.region_magnification is True
    assert options.orientation == "portrait"
    assert DEFAULT_OPTIONS["reading_direction"] == "rtl"


def test_merge_keeps_unspecified_fields():
    options = merge_options(None, {"page_width": "800", "reading_direction": "LTR", "author": None})
    assert options.page_width == 800
    assert options.page_height == 1448
    assert options.reading_direction is ReadingDirection.LTR
    assert options.author == "EPUB Manga Generator"

    options = merge_options(options, {"reading_direction": ReadingDirection.RTL})
    assert options.reading_direction is ReadingDirection.RTL
    assert options.page_width == 800


def test_merge_coerces_flags_and_paths():
    options = merge_options(BuildOptions(), {"region_magnification": "false",
                                             "workspace_root": "/tmp/books"})
    assert options.region_magnification is False
    assert options.workspace_root == Path("/tmp/books")


def test_merge_rejects_unknown_keys():
    with pytest.raises(ConfigurationError) as excinfo:
        merge_options(None, {"page_depth": 3})
    assert excinfo.value.field == "page_depth"
    assert excinfo.value.stage == "configure"
    assert excinfo.value.category is ErrorCategory.VALIDATION


def test_merge_rejects_bad_direction():
    with pytest.raises(ConfigurationError) as excinfo:
        merge_options(None, {"reading_direction": "ttb"})
    assert excinfo.value.field == "reading_direction"


@pytest.mark.parametrize("overrides, field", [
    ({"page_width": 0}, "page_width"),
    ({"page_height": -5}, "page_height"),
    ({"image_quality": 101}, "image_quality"),
    ({"max_workers": 0}, "max_workers"),
    ({"language": "  "}, "language"),
    ({"font_path": "/does/not/exist.ttf"}, "font_path"),
])
def test_validate_rejects_out_of_range(overrides, field):
    with pytest.raises(ConfigurationError) as excinfo:
        validate_options(merge_options(None, overrides))
    assert excinfo.value.field == field


def test_resolve_accepts_mapping_and_options():
    assert resolve_options(None) == BuildOptions()
    assert resolve_options({"page_width": 1448, "page_height": 1072}).orientation == "landscape"
    options = BuildOptions(author="Someone")
    assert resolve_options(options) is options


def test_load_options_file(tmp_path):
    path = tmp_path / "options.json"
    path.write_text(json.dumps({"reading_direction": "ltr", "image_quality": 70}))
    assert load_options_file(path) == {"reading_direction": "ltr", "image_quality": 70}


def test_load_options_file_rejects_non_objects(tmp_path):
    path = tmp_path / "options.json"
    path.write_text("[1, 2]")
    with pytest.raises(ConfigurationError):
        load_options_file(path)


def test_load_options_file_rejects_bad_json(tmp_path):
    path = tmp_path / "options.json"
    path.write_text("{not json")
    with pytest.raises(ConfigurationError):
        load_options_file(path)
    with pytest.raises(ConfigurationError):
        load_options_file(tmp_path / "missing.json")


def test_resolve_accepts_enum_overrides():
    options = resolve_options({"reading_direction": ReadingDirection.LTR})
    assert options.reading_direction is ReadingDirection.LTR
