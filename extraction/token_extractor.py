"""
设计令牌提取 — 单次遍历节点树，收集原始样式值（尚未归一化）

收集内容：
  - 颜色：每个不同名字的节点第一个可见 SOLID 填充（同名先写优先）
  - 字体：TEXT 节点的字体族、字号、字重、行高
  - 圆角：统一圆角或四角圆角中的正值
  - 间距：自动布局的 itemSpacing、paddingLeft、paddingTop 中的正值
  - 阴影：可见 DROP_SHADOW 的模糊半径、偏移、颜色
重复值全部保留，去重与聚合交给归一化步骤。
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List

from messages.design_messages import ContainerNode, TextNode, VisualNode
from utils.node_walker import walk_nodes


@dataclass
class ShadowSample:
    """一条原始投影"""

    blur: float
    offset_x: float
    offset_y: float
    color: str = "#000000"


@dataclass
class RawTokens:
    """从节点树收集到的原始样式值"""

    colors: Dict[str, str] = field(default_factory=dict)     # 颜色键 → hex
    font_families: List[str] = field(default_factory=list)
    font_sizes: List[float] = field(default_factory=list)
    font_weights: List[float] = field(default_factory=list)
    line_heights: List[float] = field(default_factory=list)  # 行高（px）
    line_height_ratios: List[float] = field(default_factory=list)
    radii: List[float] = field(default_factory=list)
    spacing: List[float] = field(default_factory=list)
    shadows: List[ShadowSample] = field(default_factory=list)


def color_key(name: str, index: int) -> str:
    """节点名 → 颜色键：小写、空白转连字符；无名时为 color-N。"""
    key = re.sub(r"\s+", "-", (name or "").strip().lower())
    return key or f"color-{index + 1}"


def extract_raw_tokens(root: VisualNode) -> RawTokens:
    """遍历整棵树，返回原始样式值集合。纯读取，缺失字段直接跳过。"""
    raw = RawTokens()

    def visit(node: VisualNode) -> None:
        _collect_color(node, raw)
        if isinstance(node, TextNode):
            _collect_text(node, raw)
        _collect_radius(node, raw)
        if isinstance(node, ContainerNode):
            _collect_spacing(node, raw)
        _collect_shadows(node, raw)

    walk_nodes(root, visit)
    return raw


# ------------------------------------------------------------------
# 各类值的收集
# ------------------------------------------------------------------


def _collect_color(node: VisualNode, raw: RawTokens) -> None:
    for fill in node.fills:
        if fill.type == "SOLID" and fill.visible and fill.color is not None:
            key = color_key(node.name, len(raw.colors))
            if key not in raw.colors:
                raw.colors[key] = fill.color.to_hex()
            return


def _collect_text(node: TextNode, raw: RawTokens) -> None:
    style = node.style
    if style.font_family:
        raw.font_families.append(style.font_family)
    if style.font_size:
        raw.font_sizes.append(style.font_size)
    if style.font_weight:
        raw.font_weights.append(style.font_weight)
    if style.line_height_px:
        raw.line_heights.append(style.line_height_px)
        if style.font_size:
            raw.line_height_ratios.append(style.line_height_px / style.font_size)


def _collect_radius(node: VisualNode, raw: RawTokens) -> None:
    if node.corner_radius is not None and node.corner_radius > 0:
        raw.radii.append(node.corner_radius)
    for value in node.corner_radii:
        if value > 0:
            raw.radii.append(value)


def _collect_spacing(node: ContainerNode, raw: RawTokens) -> None:
    for value in (node.item_spacing, node.padding_left, node.padding_top):
        if value is not None and value > 0:
            raw.spacing.append(value)


def _collect_shadows(node: VisualNode, raw: RawTokens) -> None:
    for effect in node.effects:
        if effect.type == "DROP_SHADOW" and effect.visible:
            raw.shadows.append(ShadowSample(
                blur=effect.radius,
                offset_x=effect.offset_x,
                offset_y=effect.offset_y,
                color=effect.color.to_hex() if effect.color is not None else "#000000",
            ))
