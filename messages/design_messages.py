"""
设计稿数据类 — 节点树、设计令牌、区块与内容，与提取逻辑解耦

节点按类型拆分为带标签的变体：
  - ContainerNode: DOCUMENT / CANVAS / FRAME / GROUP / COMPONENT / INSTANCE ...
  - TextNode:      TEXT（携带文字与字体信息）
  - ShapeNode:     RECTANGLE / VECTOR / ELLIPSE ...（其余所有类型）
共享的“可定位 / 有名字”能力放在 VisualNode 基类中。
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any

# ============================================================
# 固定刻度与默认值
# ============================================================

SPACING_SCALE: Dict[str, float] = {
    "xs": 4, "sm": 8, "md": 16, "lg": 24, "xl": 32, "2xl": 48, "3xl": 64,
}
RADIUS_SCALE: Dict[str, float] = {
    "none": 0, "sm": 4, "md": 8, "lg": 12, "xl": 16, "full": 9999,
}
FONT_SIZE_SCALE: Dict[str, float] = {
    "xs": 12, "sm": 14, "base": 16, "lg": 18, "xl": 20, "2xl": 24, "3xl": 30, "4xl": 36,
}
LINE_HEIGHT_SCALE: Dict[str, float] = {
    "tight": 1.25, "normal": 1.5, "relaxed": 1.75,
}
FONT_WEIGHT_DEFAULTS: Dict[str, int] = {
    "normal": 400, "medium": 500, "semibold": 600, "bold": 700,
}
SHADOW_DEFAULTS: Dict[str, str] = {
    "sm": "0 1px 2px 0 rgba(0, 0, 0, 0.05)",
    "md": "0 4px 6px -1px rgba(0, 0, 0, 0.1)",
    "lg": "0 10px 15px -3px rgba(0, 0, 0, 0.1)",
}
COLOR_DEFAULTS: Dict[str, str] = {
    "primary": "#51a351",
    "secondary": "#2c3e50",
    "text": "#333333",
    "background": "#ffffff",
}

SYSTEM_FONT_STACK = 'system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif'

CONTAINER_TYPES = {
    "DOCUMENT", "CANVAS", "FRAME", "GROUP", "SECTION",
    "COMPONENT", "COMPONENT_SET", "INSTANCE",
}


def format_px(value: float) -> str:
    """数值 → 'Npx'（四舍五入，半数向上）。"""
    return f"{int(value + 0.5) if value >= 0 else -int(-value + 0.5)}px"


def parse_px(value: Any) -> Optional[float]:
    """'16px' / 16 → 16.0；无法解析返回 None。"""
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text.endswith("px"):
            text = text[:-2]
        try:
            return float(text)
        except ValueError:
            return None
    return None


def _num(value: Any) -> Optional[float]:
    """宽松读取数值字段（布尔值与非数字一律视为缺失）。"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


# ============================================================
# 节点树基础类型
# ============================================================


@dataclass
class BoundingBox:
    """节点包围盒（设计稿坐标）"""

    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0

    @classmethod
    def from_dict(cls, data: Any) -> "BoundingBox":
        if not isinstance(data, dict):
            return cls()
        return cls(
            x=_num(data.get("x")) or 0,
            y=_num(data.get("y")) or 0,
            width=_num(data.get("width")) or 0,
            height=_num(data.get("height")) or 0,
        )


@dataclass
class Color:
    """RGBA 颜色，通道取值 0-1（与 Figma 一致）"""

    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Color"]:
        if not isinstance(data, dict):
            return None
        r, g, b = _num(data.get("r")), _num(data.get("g")), _num(data.get("b"))
        if r is None or g is None or b is None:
            return None
        a = _num(data.get("a"))
        return cls(r=r, g=g, b=b, a=1.0 if a is None else a)

    @classmethod
    def from_hex(cls, value: str) -> Optional["Color"]:
        text = value.strip().lstrip("#")
        if len(text) != 6:
            return None
        try:
            channels = [int(text[i:i + 2], 16) / 255 for i in (0, 2, 4)]
        except ValueError:
            return None
        return cls(*channels)

    def to_hex(self) -> str:
        def channel(v: float) -> int:
            return max(0, min(255, int(v * 255 + 0.5)))

        return "#{:02x}{:02x}{:02x}".format(channel(self.r), channel(self.g), channel(self.b))

    @property
    def luminance(self) -> float:
        return 0.299 * self.r + 0.587 * self.g + 0.114 * self.b

    @property
    def saturation(self) -> float:
        high = max(self.r, self.g, self.b)
        low = min(self.r, self.g, self.b)
        if high == 0:
            return 0.0
        return (high - low) / high


@dataclass
class Fill:
    """填充（只关心 SOLID 的颜色）"""

    type: str
    visible: bool = True
    color: Optional[Color] = None


@dataclass
class Effect:
    """效果（阴影、模糊等）"""

    type: str
    visible: bool = True
    radius: float = 0
    offset_x: float = 0
    offset_y: float = 0
    color: Optional[Color] = None


@dataclass
class TextStyle:
    """文字样式"""

    font_family: Optional[str] = None
    font_size: Optional[float] = None
    font_weight: Optional[float] = None
    line_height_px: Optional[float] = None


# ============================================================
# 节点变体
# ============================================================


@dataclass
class VisualNode:
    """节点树中的一个节点（所有变体共享的部分）"""

    id: str = ""
    name: str = ""
    type: str = ""
    box: BoundingBox = field(default_factory=BoundingBox)
    fills: List[Fill] = field(default_factory=list)
    effects: List[Effect] = field(default_factory=list)
    corner_radius: Optional[float] = None
    corner_radii: List[float] = field(default_factory=list)
    children: List["VisualNode"] = field(default_factory=list)

    @property
    def width(self) -> float:
        return self.box.width

    @property
    def height(self) -> float:
        return self.box.height


@dataclass
class ContainerNode(VisualNode):
    """容器节点：FRAME / GROUP / CANVAS 等，可带自动布局信息"""

    layout_mode: Optional[str] = None
    item_spacing: Optional[float] = None
    padding_left: Optional[float] = None
    padding_top: Optional[float] = None


@dataclass
class TextNode(VisualNode):
    """文字节点"""

    characters: str = ""
    style: TextStyle = field(default_factory=TextStyle)


@dataclass
class ShapeNode(VisualNode):
    """形状节点：RECTANGLE / VECTOR / ELLIPSE / LINE ..."""


def _parse_fills(raw: Any) -> List[Fill]:
    fills: List[Fill] = []
    if not isinstance(raw, list):
        return fills
    for item in raw:
        if not isinstance(item, dict):
            continue
        fills.append(Fill(
            type=str(item.get("type", "")),
            visible=item.get("visible") is not False,
            color=Color.from_dict(item.get("color")),
        ))
    return fills


def _parse_effects(raw: Any) -> List[Effect]:
    effects: List[Effect] = []
    if not isinstance(raw, list):
        return effects
    for item in raw:
        if not isinstance(item, dict):
            continue
        offset = item.get("offset") if isinstance(item.get("offset"), dict) else {}
        effects.append(Effect(
            type=str(item.get("type", "")),
            visible=item.get("visible") is not False,
            radius=_num(item.get("radius")) or 0,
            offset_x=_num(offset.get("x")) or 0,
            offset_y=_num(offset.get("y")) or 0,
            color=Color.from_dict(item.get("color")),
        ))
    return effects


def node_from_dict(data: Dict[str, Any]) -> VisualNode:
    """把原始 Figma 节点字典解析为对应的节点变体。

    宽松解析：缺失或格式错误的字段直接跳过，不抛异常。
    """
    if not isinstance(data, dict):
        return ShapeNode()

    node_type = str(data.get("type", "")).upper()
    box_raw = data.get("absoluteBoundingBox") or data.get("boundingBox")
    radii_raw = data.get("rectangleCornerRadii")
    children_raw = data.get("children")

    common: Dict[str, Any] = {
        "id": str(data.get("id", "")),
        "name": data.get("name") if isinstance(data.get("name"), str) else "",
        "type": node_type,
        "box": BoundingBox.from_dict(box_raw),
        "fills": _parse_fills(data.get("fills")),
        "effects": _parse_effects(data.get("effects")),
        "corner_radius": _num(data.get("cornerRadius")),
        "corner_radii": [
            v for v in (_num(r) for r in radii_raw) if v is not None
        ] if isinstance(radii_raw, list) else [],
        "children": [
            node_from_dict(child) for child in children_raw if isinstance(child, dict)
        ] if isinstance(children_raw, list) else [],
    }

    if node_type == "TEXT":
        style_raw = data.get("style") if isinstance(data.get("style"), dict) else {}
        family = style_raw.get("fontFamily")
        characters = data.get("characters")
        return TextNode(
            characters=characters if isinstance(characters, str) else "",
            style=TextStyle(
                font_family=family if isinstance(family, str) and family else None,
                font_size=_num(style_raw.get("fontSize")),
                font_weight=_num(style_raw.get("fontWeight")),
                line_height_px=_num(style_raw.get("lineHeightPx")),
            ),
            **common,
        )

    if node_type in CONTAINER_TYPES:
        layout_mode = data.get("layoutMode")
        return ContainerNode(
            layout_mode=layout_mode if isinstance(layout_mode, str) else None,
            item_spacing=_num(data.get("itemSpacing")),
            padding_left=_num(data.get("paddingLeft")),
            padding_top=_num(data.get("paddingTop")),
            **common,
        )

    return ShapeNode(**common)


# ============================================================
# 设计令牌（不可变值对象）
# ============================================================


def _filled(data: Any, defaults: Dict[str, Any], convert) -> Dict[str, Any]:
    """按固定键补齐：缺失或无法转换的键回退到默认值。"""
    source = data if isinstance(data, dict) else {}
    result: Dict[str, Any] = {}
    for key, default in defaults.items():
        value = convert(source.get(key)) if key in source else None
        result[key] = default if value is None else value
    return result


def _px_or_none(value: Any) -> Optional[str]:
    number = parse_px(value)
    return None if number is None else format_px(number)


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value.strip() else None


def _ratio_or_none(value: Any) -> Optional[str]:
    number = parse_px(value)
    return None if number is None else f"{number:g}"


def _int_or_none(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class ColorTokens:
    """语义颜色 + 原始颜色表"""

    primary: str = COLOR_DEFAULTS["primary"]
    secondary: str = COLOR_DEFAULTS["secondary"]
    text: str = COLOR_DEFAULTS["text"]
    background: str = COLOR_DEFAULTS["background"]
    custom: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Typography:
    """字体令牌：字体族列表 + 字号 / 字重 / 行高三个固定刻度"""

    font_families: List[str] = field(default_factory=list)
    font_sizes: Dict[str, str] = field(
        default_factory=lambda: {k: format_px(v) for k, v in FONT_SIZE_SCALE.items()}
    )
    font_weights: Dict[str, int] = field(default_factory=lambda: dict(FONT_WEIGHT_DEFAULTS))
    line_heights: Dict[str, str] = field(
        default_factory=lambda: {k: f"{v:g}" for k, v in LINE_HEIGHT_SCALE.items()}
    )


@dataclass(frozen=True)
class DesignTokens:
    """归一化后的设计令牌。

    不变量：每个固定刻度的每个键都有值，缺失数据回退到文档化默认值。
    """

    colors: ColorTokens = field(default_factory=ColorTokens)
    typography: Typography = field(default_factory=Typography)
    spacing: Dict[str, str] = field(
        default_factory=lambda: {k: format_px(v) for k, v in SPACING_SCALE.items()}
    )
    border_radius: Dict[str, str] = field(
        default_factory=lambda: {k: format_px(v) for k, v in RADIUS_SCALE.items()}
    )
    shadows: Dict[str, str] = field(default_factory=lambda: dict(SHADOW_DEFAULTS))

    @classmethod
    def defaults(cls) -> "DesignTokens":
        return cls()

    @property
    def primary_font(self) -> str:
        return self.typography.font_families[0] if self.typography.font_families else SYSTEM_FONT_STACK

    @property
    def secondary_font(self) -> str:
        families = self.typography.font_families
        return families[1] if len(families) > 1 else self.primary_font

    @classmethod
    def from_dict(cls, data: Any) -> "DesignTokens":
        """从 camelCase 字典（模型输出或缓存）构建，缺失键补默认值。"""
        data = data if isinstance(data, dict) else {}
        colors_raw = data.get("colors") if isinstance(data.get("colors"), dict) else {}
        typo_raw = data.get("typography") if isinstance(data.get("typography"), dict) else {}

        custom_raw = colors_raw.get("custom")
        colors = ColorTokens(
            custom={
                str(k): v for k, v in custom_raw.items() if isinstance(v, str)
            } if isinstance(custom_raw, dict) else {},
            **_filled(colors_raw, COLOR_DEFAULTS, _str_or_none),
        )

        families_raw = typo_raw.get("fontFamilies")
        typography = Typography(
            font_families=[
                f for f in families_raw if isinstance(f, str) and f
            ] if isinstance(families_raw, list) else [],
            font_sizes=_filled(
                typo_raw.get("fontSizes"),
                {k: format_px(v) for k, v in FONT_SIZE_SCALE.items()},
                _px_or_none,
            ),
            font_weights=_filled(typo_raw.get("fontWeights"), FONT_WEIGHT_DEFAULTS, _int_or_none),
            line_heights=_filled(
                typo_raw.get("lineHeights"),
                {k: f"{v:g}" for k, v in LINE_HEIGHT_SCALE.items()},
                _ratio_or_none,
            ),
        )

        return cls(
            colors=colors,
            typography=typography,
            spacing=_filled(
                data.get("spacing"),
                {k: format_px(v) for k, v in SPACING_SCALE.items()},
                _px_or_none,
            ),
            border_radius=_filled(
                data.get("borderRadius"),
                {k: format_px(v) for k, v in RADIUS_SCALE.items()},
                _px_or_none,
            ),
            shadows=_filled(data.get("shadows"), SHADOW_DEFAULTS, _str_or_none),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "colors": {
                "primary": self.colors.primary,
                "secondary": self.colors.secondary,
                "text": self.colors.text,
                "background": self.colors.background,
                "custom": dict(self.colors.custom),
            },
            "typography": {
                "fontFamilies": list(self.typography.font_families),
                "fontSizes": dict(self.typography.font_sizes),
                "fontWeights": dict(self.typography.font_weights),
                "lineHeights": dict(self.typography.line_heights),
            },
            "spacing": dict(self.spacing),
            "borderRadius": dict(self.border_radius),
            "shadows": dict(self.shadows),
        }


# ============================================================
# 区块与内容
# ============================================================


class SectionKind(Enum):
    """区块语义类型（封闭集合）"""

    HERO = "hero"
    FEATURES = "features"
    TESTIMONIALS = "testimonials"
    CTA = "cta"
    FOOTER = "footer"
    NAVIGATION = "navigation"
    GALLERY = "gallery"
    CONTACT = "contact"
    ABOUT = "about"
    PRICING = "pricing"
    TEAM = "team"
    FAQ = "faq"
    STATS = "stats"
    CONTENT = "content"


@dataclass
class ExtractedContent:
    """一个区块（或重复子项）提取出的文字内容"""

    heading: str = ""
    subheading: str = ""
    body: List[str] = field(default_factory=list)
    buttons: List[str] = field(default_factory=list)
    items: List["ExtractedContent"] = field(default_factory=list)

    def has_content(self) -> bool:
        """是否值得保留为区块：有标题、正文或按钮。"""
        return bool(self.heading or self.body or self.buttons)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "heading": self.heading,
            "subheading": self.subheading,
            "body": list(self.body),
            "buttons": list(self.buttons),
        }
        if self.items:
            result["items"] = [item.to_dict() for item in self.items]
        return result


@dataclass
class Section:
    """页面中一个已分类的顶层区块"""

    kind: SectionKind
    source_node: VisualNode
    content: ExtractedContent


@dataclass
class PageInfo:
    """设计稿中被识别为页面的顶层 FRAME"""

    id: str
    name: str                                      # 归一化后的页面名
    node: VisualNode

    @property
    def children(self) -> List[VisualNode]:
        return self.node.children


@dataclass
class FigmaComponent:
    """Figma 文件中发布的组件"""

    key: str
    name: str
    description: str = ""


@dataclass
class FigmaAnalysis:
    """一次 Figma 文件分析的完整结果，供构建阶段使用"""

    file_key: str
    file_name: str
    pages: List[PageInfo] = field(default_factory=list)
    design_tokens: DesignTokens = field(default_factory=DesignTokens)
    components: List[FigmaComponent] = field(default_factory=list)
    style_names: List[str] = field(default_factory=list)     # 文件中发布的样式名

    def summary(self) -> Dict[str, Any]:
        return {
            "fileKey": self.file_key,
            "fileName": self.file_name,
            "pages": [page.name for page in self.pages],
            "components": len(self.components),
            "styles": list(self.style_names),
            "designTokens": self.design_tokens.to_dict(),
        }
