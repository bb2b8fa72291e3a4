"""
组件分类 — 按名字把 Figma 发布的组件归入与站点相关的类别
"""
import logging
from typing import Dict, List, Sequence, Tuple

from messages.design_messages import FigmaComponent

logger = logging.getLogger(__name__)

COMPONENT_RULES: List[Tuple[str, Tuple[str, ...]]] = [
    ("buttons", ("button", "btn", "cta")),
    ("cards", ("card", "tile", "box")),
    ("headers", ("header", "hero", "banner")),
    ("forms", ("form", "input", "field", "select", "checkbox")),
    ("navigation", ("nav", "menu", "breadcrumb", "tab")),
    ("footers", ("footer",)),
    ("testimonials", ("testimonial", "review", "quote")),
    ("pricing", ("pricing", "plan", "package")),
    ("features", ("feature", "benefit", "icon-text")),
]

CATEGORIES = [name for name, _ in COMPONENT_RULES] + ["other"]


def categorize_component(component: FigmaComponent) -> str:
    name = component.name.lower()
    for category, hints in COMPONENT_RULES:
        if any(hint in name for hint in hints):
            return category
    return "other"


def classify_components(components: Sequence[FigmaComponent]) -> Dict[str, List[FigmaComponent]]:
    """返回 类别 → 组件列表（所有类别都有键）。"""
    classified: Dict[str, List[FigmaComponent]] = {name: [] for name in CATEGORIES}
    for component in components:
        classified[categorize_component(component)].append(component)
    logger.info(
        "[组件分类] %s",
        ", ".join(f"{name}={len(items)}" for name, items in classified.items() if items) or "无组件",
    )
    return classified
