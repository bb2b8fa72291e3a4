"""
页面识别 — 在 CANVAS 的顶层 FRAME 中区分页面设计稿与组件 / 图标
"""
import logging
import re
from typing import List, Optional

from config import settings
from messages.design_messages import PageInfo, VisualNode

logger = logging.getLogger(__name__)

PAGE_NAME_HINTS = ("page", "home", "about", "contact", "landing", "screen")
_NUMBERED_PREFIX = re.compile(r"^\d+\s*[-–]")


def looks_like_page(
    frame: VisualNode,
    min_width: Optional[float] = None,
    min_height: Optional[float] = None,
) -> bool:
    """尺寸足够大，或名字带有页面特征（含 'NN - ' 编号前缀）即视为页面。"""
    min_width = settings.PAGE_MIN_WIDTH if min_width is None else min_width
    min_height = settings.PAGE_MIN_HEIGHT if min_height is None else min_height

    if frame.width > min_width and frame.height > min_height:
        return True
    name = frame.name.lower()
    if any(hint in name for hint in PAGE_NAME_HINTS):
        return True
    return bool(_NUMBERED_PREFIX.match(frame.name))


def normalize_page_name(name: str) -> str:
    """'01 - Home Page - Desktop' → 'Home'"""
    text = re.sub(r"^\d+\s*[-–]\s*", "", name)
    text = re.sub(r"\s*-\s*desktop$", "", text, flags=re.IGNORECASE)
    text = re.sub(r"\s*-\s*mobile$", "", text, flags=re.IGNORECASE)
    text = re.sub(r"\s*page\s*$", "", text, flags=re.IGNORECASE)
    text = re.sub(r"\s*screen\s*$", "", text, flags=re.IGNORECASE)
    return text.strip() or name.strip()


def analyze_pages(document: VisualNode) -> List[PageInfo]:
    """收集文档中所有 CANVAS 下被识别为页面的 FRAME。"""
    pages: List[PageInfo] = []
    for canvas in document.children:
        if canvas.type != "CANVAS":
            continue
        for frame in canvas.children:
            if frame.type != "FRAME" or not looks_like_page(frame):
                continue
            page = PageInfo(id=frame.id, name=normalize_page_name(frame.name), node=frame)
            pages.append(page)
            logger.debug("[页面识别] %r → %r", frame.name, page.name)
    logger.info("[页面识别] 共识别 %d 个页面", len(pages))
    return pages


def is_homepage(page: PageInfo, index: int) -> bool:
    """第一个页面或名为 home / homepage 的页面作为首页。"""
    return index == 0 or page.name.strip().lower() in ("home", "homepage")
