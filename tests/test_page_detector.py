from extraction.page_detector import analyze_pages, is_homepage, looks_like_page, normalize_page_name
from figma_nodes import document, frame
from messages.design_messages import PageInfo, node_from_dict


def test_normalize_page_name_strips_decorations() -> None:
    assert normalize_page_name("01 - Home Page - Desktop") == "Home"
    assert normalize_page_name("About Screen") == "About"
    assert normalize_page_name("Pricing - Mobile") == "Pricing"
    assert normalize_page_name("Page") == "Page"


def test_large_or_named_frames_are_pages() -> None:
    assert looks_like_page(node_from_dict(frame("Frame 12", 1440, 900)))
    assert looks_like_page(node_from_dict(frame("Landing", 50, 50)))
    assert looks_like_page(node_from_dict(frame("03 - Checkout", 50, 50)))
    assert not looks_like_page(node_from_dict(frame("Icon", 24, 24)))


def test_page_thresholds_are_configurable() -> None:
    node = node_from_dict(frame("Frame", 200, 500))
    assert not looks_like_page(node)
    assert looks_like_page(node, min_width=100, min_height=400)


def test_analyze_pages_only_reads_canvas_frames() -> None:
    raw = document(
        frame("01 - Home Page - Desktop", 1440, 3000),
        frame("icon", 24, 24),
        frame("Button page", 200, 60, type="COMPONENT"),
    )
    raw["children"].append(frame("Loose page", 1440, 900))
    pages = analyze_pages(node_from_dict(raw))
    assert [p.name for p in pages] == ["Home"]


def test_homepage_is_first_or_named_home() -> None:
    node = node_from_dict(frame("x", 1, 1))
    assert is_homepage(PageInfo(id="1", name="Landing", node=node), 0)
    assert is_homepage(PageInfo(id="2", name="Home", node=node), 3)
    assert not is_homepage(PageInfo(id="3", name="About", node=node), 1)


def test_numbered_homepage_frame_is_page_and_icon_is_not() -> None:
    assert looks_like_page(node_from_dict(frame("01 - Homepage", 800, 1200)))
    assert not looks_like_page(node_from_dict(frame("Icon/arrow", 24, 24)))
