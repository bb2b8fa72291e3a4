"""
区块内容提取 — 收集文字并按字号与上下文归类为标题 / 副标题 / 正文 / 按钮

规则：
  - 收集所有非空 TEXT 节点（去首尾空白），字号缺失按 16 处理
  - 按钮判定：任一祖先容器（含区块根节点）名字含 button / btn / cta，
    或文字不超过 4 个词且包含动作词（以动作词开头的单词）
  - 按字号降序（稳定排序）依次分配：
      按钮 → buttons；第一个 ≥24 → heading；第一个 18~24 → subheading；
      其余 ≥12 且长度 >10 → body
  - 重复子项：≥2 个尺寸相近的直接 FRAME / GROUP 子节点，递归提取，
    只保留有标题或正文的子项
"""
import re
from dataclasses import dataclass
from typing import List, Optional

from config import settings
from messages.design_messages import ExtractedContent, TextNode, VisualNode
from utils.node_walker import walk_with_ancestors

BUTTON_NAME_HINTS = ("button", "btn", "cta")
ACTION_WORDS = ("get", "start", "learn", "sign", "join", "contact", "buy", "shop", "try", "download")

DEFAULT_FONT_SIZE = 16
HEADING_MIN_SIZE = 24
SUBHEADING_MIN_SIZE = 18
BODY_MIN_SIZE = 12
BODY_MIN_LENGTH = 10
BUTTON_MAX_WORDS = 4

REPEATING_TYPES = ("FRAME", "GROUP")


@dataclass
class TextRun:
    """一段待分类的文字"""

    text: str
    font_size: float
    is_button: bool = False


def has_button_name(node: VisualNode) -> bool:
    name = node.name.lower()
    return any(hint in name for hint in BUTTON_NAME_HINTS)


def looks_like_action(text: str) -> bool:
    """短文字且含动作词（如 'Get started'、'Sign up'）。"""
    words = text.split()
    if len(words) > BUTTON_MAX_WORDS:
        return False
    for word in words:
        word = re.sub(r"^[^a-z]+", "", word.lower())
        if word.startswith(ACTION_WORDS):
            return True
    return False


class ContentExtractor:
    """从节点子树中提取 ExtractedContent。"""

    def __init__(self, size_tolerance: Optional[float] = None) -> None:
        self.size_tolerance = (
            settings.REPEAT_SIZE_TOLERANCE if size_tolerance is None else size_tolerance
        )

    # ------------------------------------------------------------------
    # 对外接口
    # ------------------------------------------------------------------

    def extract(self, node: VisualNode) -> ExtractedContent:
        content = self.classify_runs(self.collect_text_runs(node))
        content.items = self.extract_repeating_items(node)
        return content

    def collect_text_runs(self, node: VisualNode) -> List[TextRun]:
        runs: List[TextRun] = []

        def visit(current: VisualNode, ancestors: List[VisualNode]) -> None:
            if not isinstance(current, TextNode):
                return
            text = current.characters.strip()
            if not text:
                return
            runs.append(TextRun(
                text=text,
                font_size=current.style.font_size or DEFAULT_FONT_SIZE,
                is_button=self.is_button_context(text, ancestors),
            ))

        walk_with_ancestors(node, visit)
        return runs

    @staticmethod
    def is_button_context(text: str, ancestors: List[VisualNode]) -> bool:
        if any(has_button_name(a) for a in ancestors):
            return True
        return looks_like_action(text)

    @staticmethod
    def classify_runs(runs: List[TextRun]) -> ExtractedContent:
        """按字号降序分配角色；每段文字只进入一个槽位。"""
        content = ExtractedContent()
        for run in sorted(runs, key=lambda r: r.font_size, reverse=True):
            if run.is_button:
                content.buttons.append(run.text)
            elif not content.heading and run.font_size >= HEADING_MIN_SIZE:
                content.heading = run.text
            elif (
                not content.subheading
                and SUBHEADING_MIN_SIZE <= run.font_size < HEADING_MIN_SIZE
            ):
                content.subheading = run.text
            elif run.font_size >= BODY_MIN_SIZE and len(run.text) > BODY_MIN_LENGTH:
                content.body.append(run.text)
        return content

    # ------------------------------------------------------------------
    # 重复子项
    # ------------------------------------------------------------------

    def repeating_frames(self, node: VisualNode) -> List[VisualNode]:
        """尺寸相近的直接 FRAME / GROUP 子节点（不足 2 个时返回空列表）。"""
        frames = [c for c in node.children if c.type in REPEATING_TYPES]
        if len(frames) < 2:
            return []
        first = frames[0]
        similar = all(
            abs(f.width - first.width) < self.size_tolerance
            and abs(f.height - first.height) < self.size_tolerance
            for f in frames
        )
        return frames if similar else []

    def has_repeating_pattern(self, node: VisualNode) -> bool:
        return bool(self.repeating_frames(node))

    def extract_repeating_items(self, node: VisualNode) -> List[ExtractedContent]:
        items: List[ExtractedContent] = []
        for frame in self.repeating_frames(node):
            item = self.extract(frame)
            if item.heading or item.body:
                items.append(item)
        return items
