import pytest

from epubmanga.epub.panel import panel_geometry, format_percent, PanelGeometry


def test_full_canvas_image():
    assert panel_geometry(1072, 1448, 1072, 1448) == PanelGeometry(0.0, 0.0, 100.0, 100.0)


def test_centred_narrow_image():
    geometry = panel_geometry(1072, 1448, 536, 1448)
    assert geometry.left == pytest.approx(25.0)
    assert geometry.top == 0.0
    assert geometry.width == pytest.approx(50.0)
    assert geometry.height == pytest.approx(100.0)


def test_offset_is_floored():
    # floor(500 - 166.5) = 333
    assert panel_geometry(1000, 1000, 333, 1000).left == pytest.approx(33.3)


def test_zero_page_size():
    assert panel_geometry(0, 0, 10, 10) == PanelGeometry(0.0, 0.0, 0.0, 0.0)


@pytest.mark.parametrize("value, expected", [
    (25.0, "25%"),
    (33.300000000000004, "33.3%"),
    (0.0, "0%"),
    (100.0, "100%"),
])
def test_format_percent(value, expected):
    assert format_percent(value) == expected
