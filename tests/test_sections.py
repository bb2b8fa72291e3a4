from extraction.content_extractor import ContentExtractor, looks_like_action
from extraction.section_classifier import SectionClassifier, classify_by_name
from figma_nodes import frame, rect, text
from messages.design_messages import SectionKind, node_from_dict


def _features_block(second_size=(210, 290)):
    return node_from_dict(frame("Block", 1200, 600, children=[
        text("Why choose us", 36),
        frame("Card 1", 200, 300, children=[
            text("Fast", 24), text("Pages load in under a second.", 16),
        ]),
        frame("Card 2", *second_size, children=[
            text("Secure", 24), text("Data is encrypted end to end.", 16),
        ]),
    ]))


# ============================================================
# 内容提取
# ============================================================


def test_text_roles_follow_font_size() -> None:
    node = node_from_dict(frame("Intro", 1200, 500, children=[
        text("This is a longer paragraph of text.", 16),
        text("Build faster sites", 40),
        text("Get started", 16),
        text("A short subtitle here", 20),
        text("Tiny", 14),
        text("   ", 30),
    ]))
    content = ContentExtractor().extract(node)
    assert content.heading == "Build faster sites"
    assert content.subheading == "A short subtitle here"
    assert content.body == ["This is a longer paragraph of text."]
    assert content.buttons == ["Get started"]
    assert content.items == []


def test_button_detected_from_ancestor_name() -> None:
    node = node_from_dict(frame("Section", 1200, 400, children=[
        frame("Primary Button", 160, 48, children=[text("Submit the form right now", 16)]),
    ]))
    assert ContentExtractor().extract(node).buttons == ["Submit the form right now"]


def test_action_words_match_word_prefixes() -> None:
    assert looks_like_action("Signup")
    assert looks_like_action("Contact")
    assert not looks_like_action("Learn more about our product line")
    assert not looks_like_action("Targeted results")


def test_repeating_frames_become_items() -> None:
    content = ContentExtractor().extract(_features_block())
    assert content.heading == "Why choose us"
    assert len(content.items) == 2
    assert content.items[0].heading == "Fast"
    assert content.items[0].body == ["Pages load in under a second."]


def test_dissimilar_frames_are_not_items() -> None:
    content = ContentExtractor().extract(_features_block(second_size=(400, 300)))
    assert content.items == []


# ============================================================
# 区块分类
# ============================================================


def test_classify_by_name_uses_first_matching_rule() -> None:
    assert classify_by_name("Header Nav") is SectionKind.HERO
    assert classify_by_name("Main Menu") is SectionKind.NAVIGATION
    assert classify_by_name("Customer Reviews") is SectionKind.TESTIMONIALS
    assert classify_by_name("Random") is None


def test_sections_are_ordered_filtered_and_classified() -> None:
    children = [
        node_from_dict(frame("Site Footer", 1440, 200, y=900, children=[
            text("© 2024 Company. All rights reserved.", 14),
        ])),
        node_from_dict(frame("Hero Banner", 1440, 600, y=0, children=[
            text("Welcome to Acme", 48),
        ])),
        node_from_dict(frame("Icon", 40, 40, y=100, children=[text("Tiny icon label", 16)])),
        node_from_dict(frame("Divider", 800, 200, y=500, children=[rect("Line", 800, 2)])),
    ]
    sections = SectionClassifier().identify_sections(children)
    assert [s.kind for s in sections] == [SectionKind.HERO, SectionKind.FOOTER]
    assert sections[0].content.heading == "Welcome to Acme"


def test_structural_hero_detection() -> None:
    node = node_from_dict(frame("Intro", 1440, 700, children=[
        text("Welcome home friends", 48),
        rect("Image", 800, 500),
        frame("Button", 160, 48, children=[text("Go", 16)]),
    ]))
    assert SectionClassifier().classify_section(node) is SectionKind.HERO


def test_repeating_children_classify_as_features() -> None:
    sections = SectionClassifier().identify_sections([_features_block()])
    assert sections[0].kind is SectionKind.FEATURES
    assert len(sections[0].content.items) == 2


def test_short_section_with_button_is_cta() -> None:
    node = node_from_dict(frame("Strip", 1200, 200, children=[
        text("Ready when you are", 32),
        frame("btn-primary", 160, 48, children=[text("Go", 16)]),
    ]))
    assert SectionClassifier().classify_section(node) is SectionKind.CTA


def test_unmatched_section_is_content() -> None:
    node = node_from_dict(frame("Story", 1200, 500, children=[text("Our story so far", 32)]))
    assert SectionClassifier().classify_section(node) is SectionKind.CONTENT


def test_section_size_thresholds_are_configurable() -> None:
    small = node_from_dict(frame("Hero", 90, 90, children=[text("Hello there", 32)]))
    assert SectionClassifier().identify_sections([small]) == []
    assert len(SectionClassifier(min_width=50, min_height=50).identify_sections([small])) == 1
