from board_drawio.constants import SLDS_ICON_BASE_URL
from board_drawio.drawio_fmt import (
    compose_style,
    dash_pattern,
    fmt_number,
    icon_url,
    round_half_up,
    xml_attr,
    xml_escape,
)


def test_compose_style_preserves_order_with_trailing_semicolon():
    assert compose_style({"rounded": 1, "fillColor": "#fff", "html": 1}) == (
        "rounded=1;fillColor=#fff;html=1;"
    )


def test_compose_style_emits_bare_swimlane_flag():
    assert compose_style({"swimlane": 1, "fontStyle": 1}) == "swimlane;fontStyle=1;"
    assert compose_style({"swimlane": 0, "rounded": 1}) == "swimlane=0;rounded=1;"


def test_compose_style_formats_numbers():
    assert compose_style({"opacity": 0.5, "strokeWidth": 3.0}) == "opacity=0.5;strokeWidth=3;"


def test_xml_escape_covers_five_special_characters():
    assert xml_escape("<a href=\"x\">&'") == "&lt;a href=&quot;x&quot;&gt;&amp;&apos;"


def test_xml_attr_encodes_newlines():
    assert xml_attr("a\nb") == "a&#xa;b"


def test_dash_pattern_accepts_lists_and_strings():
    assert dash_pattern([5, 5]) == "5,5"
    assert dash_pattern("5, 10") == "5,10"
    assert dash_pattern("4 2") == "4,2"
    assert dash_pattern("dotted") is None
    assert dash_pattern(None) is None


def test_fmt_number():
    assert fmt_number(1.0) == "1"
    assert fmt_number(0.75) == "0.75"
    assert fmt_number(3) == "3"


def test_icon_url_resolves_known_categories_only():
    assert icon_url("standard:account") == f"{SLDS_ICON_BASE_URL}/standard/account.svg"
    assert icon_url("bogus:account") is None
    assert icon_url("account") is None
    assert icon_url("") is None


def test_round_half_up():
    assert [round_half_up(v) for v in (0.5, 1.5, 2.5, 2.49, -2.5, -2.6)] == [1, 2, 3, 2, -2, -3]
