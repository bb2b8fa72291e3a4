from extraction.token_extractor import ShadowSample, color_key, extract_raw_tokens
from extraction.token_normalizer import (
    assign_to_scale,
    extract_design_tokens,
    map_to_semantic_colors,
    normalize_shadows,
)
from figma_nodes import document, frame, solid, text
from messages.design_messages import SPACING_SCALE, SYSTEM_FONT_STACK, DesignTokens, node_from_dict


def _styled_tree():
    card = frame(
        "Card", 400, 300,
        children=[text("Title", 16, fontFamily="Inter", fontWeight=700, lineHeightPx=24)],
        fills=[solid(0.2, 0.4, 1.0)],
        cornerRadius=8,
        itemSpacing=24,
        paddingLeft=16,
        paddingTop=16,
        effects=[{
            "type": "DROP_SHADOW",
            "radius": 12,
            "offset": {"x": 0, "y": 4},
            "color": {"r": 0, "g": 0, "b": 0, "a": 0.25},
        }],
    )
    return node_from_dict(document(card))


def test_empty_tree_yields_documented_defaults() -> None:
    tokens = extract_design_tokens(node_from_dict(document()))
    assert tokens == DesignTokens.defaults()
    assert tokens.primary_font == SYSTEM_FONT_STACK
    assert tokens.spacing["md"] == "16px"
    assert tokens.typography.line_heights == {"tight": "1.25", "normal": "1.5", "relaxed": "1.75"}


def test_raw_values_are_collected_in_one_pass() -> None:
    raw = extract_raw_tokens(_styled_tree())
    assert raw.colors == {"card": "#3366ff"}
    assert raw.font_families == ["Inter"]
    assert raw.radii == [8]
    assert raw.spacing == [24, 16, 16]
    assert raw.line_height_ratios == [1.5]
    assert len(raw.shadows) == 1


def test_normalized_tokens_from_styled_tree() -> None:
    tokens = extract_design_tokens(_styled_tree())
    assert tokens.colors.custom == {"card": "#3366ff"}
    assert tokens.border_radius["md"] == "8px"
    assert tokens.typography.font_weights["normal"] == 400
    assert tokens.typography.font_weights["bold"] == 700
    assert set(tokens.typography.line_heights.values()) == {"1.5"}
    assert tokens.shadows["md"] == "0px 4px 12px 0 rgba(0, 0, 0, 0.2)"


def test_extraction_is_deterministic_and_maps_nearest_values() -> None:
    tree = node_from_dict(document(frame("Page", 1440, 900, children=[
        text("a", 13), text("b", 15), text("c", 40),
    ])))
    first = extract_design_tokens(tree)
    second = extract_design_tokens(tree)
    assert first == second
    sizes = first.typography.font_sizes
    assert sizes["xs"] == "13px"
    assert sizes["sm"] == "13px"
    assert sizes["base"] == "15px"
    assert sizes["4xl"] == "40px"


def test_scale_ties_resolve_to_smaller_value() -> None:
    assert assign_to_scale([10, 6], {"md": 8}) == {"md": 6}
    assert assign_to_scale([6, 10], {"md": 8}) == {"md": 6}


def test_first_named_color_wins() -> None:
    tree = node_from_dict(document(
        frame("Accent", 100, 100, fills=[solid(1, 0, 0)]),
        frame("Accent", 100, 100, fills=[solid(0, 1, 0)]),
        frame("", 100, 100, fills=[{"type": "SOLID", "visible": False, "color": {"r": 0, "g": 0, "b": 1}}]),
    ))
    assert extract_raw_tokens(tree).colors == {"accent": "#ff0000"}


def test_color_key_normalizes_names() -> None:
    assert color_key("  Brand Blue ", 0) == "brand-blue"
    assert color_key("", 2) == "color-3"


def test_semantic_roles_are_assigned_in_order() -> None:
    roles = map_to_semantic_colors({"dark": "#000000", "light": "#ffffff", "brand": "#ff0000"})
    assert roles == {
        "text": "#000000",
        "background": "#ffffff",
        "primary": "#ff0000",
        "secondary": "#2c3e50",
    }


def test_primary_never_reuses_text_color() -> None:
    roles = map_to_semantic_colors({"only": "#1a1aff"})
    assert roles["text"] == "#1a1aff"
    assert roles["primary"] != roles["text"]
    assert roles["primary"] == "#51a351"


def test_shadows_ordered_by_blur() -> None:
    shadows = normalize_shadows([
        ShadowSample(blur=20, offset_x=0, offset_y=10),
        ShadowSample(blur=2, offset_x=0, offset_y=1),
        ShadowSample(blur=8, offset_x=0, offset_y=4),
    ])
    assert shadows["sm"].startswith("0px 1px 2px")
    assert shadows["md"].startswith("0px 4px 8px")
    assert shadows["lg"].startswith("0px 10px 20px")


def test_tokens_from_partial_dict_fill_missing_keys() -> None:
    tokens = DesignTokens.from_dict({
        "colors": {"primary": "#ff0000"},
        "spacing": {"md": 20},
        "typography": {"fontWeights": {"bold": "800"}},
    })
    assert tokens.colors.primary == "#ff0000"
    assert tokens.colors.text == "#333333"
    assert tokens.spacing["md"] == "20px"
    assert tokens.spacing["xs"] == "4px"
    assert tokens.typography.font_weights["bold"] == 800


def test_normalizing_a_normalized_scale_is_stable() -> None:
    once = assign_to_scale([5, 30, 70], SPACING_SCALE)
    twice = assign_to_scale(once.values(), SPACING_SCALE)
    assert once == twice
    assert assign_to_scale([], SPACING_SCALE) == SPACING_SCALE


def test_normalizing_with_ties_is_stable() -> None:
    once = assign_to_scale([10, 6], SPACING_SCALE)
    assert once["sm"] == 6
    assert assign_to_scale(once.values(), SPACING_SCALE) == once
