"""
区块分类 — 把页面的顶层子节点切分为有序的语义区块

流程：
  1. 按纵坐标升序排序
  2. 过滤过小的节点（图标 / 装饰），阈值可配置
  3. 名字匹配（固定顺序表，先命中先得）→ 结构特征兜底
  4. 只保留提取出标题、正文或按钮的区块
"""
import logging
from typing import List, Optional, Sequence, Tuple

from config import settings
from extraction.content_extractor import ContentExtractor, has_button_name
from messages.design_messages import Section, SectionKind, VisualNode
from utils.node_walker import iter_nodes

logger = logging.getLogger(__name__)

# 名字关键词表（顺序即优先级）
NAME_RULES: List[Tuple[SectionKind, Tuple[str, ...]]] = [
    (SectionKind.HERO, ("hero", "header", "banner")),
    (SectionKind.FEATURES, ("feature",)),
    (SectionKind.TESTIMONIALS, ("testimonial", "review", "quote")),
    (SectionKind.CTA, ("cta", "call-to-action", "action")),
    (SectionKind.FOOTER, ("footer",)),
    (SectionKind.NAVIGATION, ("nav", "menu")),
    (SectionKind.GALLERY, ("gallery", "grid", "portfolio")),
    (SectionKind.CONTACT, ("contact", "form")),
    (SectionKind.ABOUT, ("about",)),
    (SectionKind.PRICING, ("pricing", "plan")),
    (SectionKind.TEAM, ("team", "member")),
    (SectionKind.FAQ, ("faq", "question")),
    (SectionKind.STATS, ("stat", "number", "metric")),
]

IMAGE_TYPES = ("RECTANGLE", "VECTOR")
LARGE_IMAGE_WIDTH = 200
LARGE_IMAGE_HEIGHT = 150
HERO_MIN_HEIGHT = 400
CTA_MAX_HEIGHT = 300


def classify_by_name(name: str) -> Optional[SectionKind]:
    lowered = name.lower()
    for kind, hints in NAME_RULES:
        if any(hint in lowered for hint in hints):
            return kind
    return None


def has_large_image(node: VisualNode) -> bool:
    return any(
        n.type in IMAGE_TYPES and n.width > LARGE_IMAGE_WIDTH and n.height > LARGE_IMAGE_HEIGHT
        for n in iter_nodes(node)
    )


def has_button(node: VisualNode) -> bool:
    return any(has_button_name(n) for n in iter_nodes(node))


class SectionClassifier:
    """页面区块分类器（尺寸阈值可配置）。"""

    def __init__(
        self,
        min_width: Optional[float] = None,
        min_height: Optional[float] = None,
        extractor: Optional[ContentExtractor] = None,
    ) -> None:
        self.min_width = settings.SECTION_MIN_WIDTH if min_width is None else min_width
        self.min_height = settings.SECTION_MIN_HEIGHT if min_height is None else min_height
        self.extractor = extractor or ContentExtractor()

    def identify_sections(self, children: Sequence[VisualNode]) -> List[Section]:
        sections: List[Section] = []
        for child in sorted(children, key=lambda c: c.box.y):
            if child.width < self.min_width or child.height < self.min_height:
                continue
            kind = self.classify_section(child)
            content = self.extractor.extract(child)
            if not content.has_content():
                continue
            sections.append(Section(kind=kind, source_node=child, content=content))
            logger.debug("[区块] %s - %r", kind.value, content.heading or "无标题")
        return sections

    def classify_section(self, node: VisualNode) -> SectionKind:
        by_name = classify_by_name(node.name)
        if by_name is not None:
            return by_name

        button = has_button(node)
        if node.height > HERO_MIN_HEIGHT and has_large_image(node) and button:
            return SectionKind.HERO
        if self.extractor.has_repeating_pattern(node):
            return SectionKind.FEATURES
        if node.height < CTA_MAX_HEIGHT and button:
            return SectionKind.CTA
        return SectionKind.CONTENT
