"""
设计令牌归一化 — 把原始值映射到固定语义刻度，并分配语义颜色

规则：
  - 刻度映射：原始值去重后升序排列，每个刻度槽（按参考值从小到大）选取距离最近的原始值，
    距离相同取较小的值；原始值为空时全部取参考值。
    该过程确定且幂等。
  - 字重：按区间取第一个落入的值，否则取默认值
  - 阴影：按模糊半径排序，取最小 / 中位 / 最大作为 sm / md / lg
  - 颜色：text → background → primary → secondary 依次分配，后者排除已被占用的颜色
"""
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from extraction.token_extractor import RawTokens, ShadowSample, extract_raw_tokens
from messages.design_messages import (
    COLOR_DEFAULTS,
    FONT_SIZE_SCALE,
    FONT_WEIGHT_DEFAULTS,
    LINE_HEIGHT_SCALE,
    RADIUS_SCALE,
    SHADOW_DEFAULTS,
    SPACING_SCALE,
    Color,
    ColorTokens,
    DesignTokens,
    Typography,
    VisualNode,
    format_px,
)

logger = logging.getLogger(__name__)

# 字重区间：(槽位, 下限, 上限)；上限为 None 表示不设上限
WEIGHT_BANDS: List[Tuple[str, float, Optional[float]]] = [
    ("normal", 300, 500),
    ("medium", 500, 600),
    ("semibold", 600, 700),
    ("bold", 700, None),
]


# ============================================================
# 刻度映射
# ============================================================


def _nearest(candidates: Sequence[float], target: float) -> float:
    best = candidates[0]
    best_diff = abs(best - target)
    for value in candidates[1:]:
        diff = abs(value - target)
        if diff < best_diff:
            best, best_diff = value, diff
    return best


def assign_to_scale(values: Iterable[float], scale: Dict[str, float]) -> Dict[str, float]:
    """把原始值分配到刻度槽，返回槽位 → 数值。"""
    slots = sorted(scale.items(), key=lambda item: item[1])
    ordered = sorted(set(values))
    if not ordered:
        return {name: reference for name, reference in slots}
    return {name: _nearest(ordered, reference) for name, reference in slots}


def normalize_to_scale(values: Iterable[float], scale: Dict[str, float]) -> Dict[str, str]:
    """把原始值映射到像素刻度，返回槽位 → 'Npx'。"""
    return {name: format_px(value) for name, value in assign_to_scale(values, scale).items()}


def normalize_line_heights(ratios: Iterable[float]) -> Dict[str, str]:
    """行高比例（lineHeightPx / fontSize）映射到 tight / normal / relaxed。"""
    return {
        name: f"{round(value, 2):g}"
        for name, value in assign_to_scale(ratios, LINE_HEIGHT_SCALE).items()
    }


def normalize_weights(weights: Iterable[float]) -> Dict[str, int]:
    ordered = sorted(weights)
    result: Dict[str, int] = {}
    for name, low, high in WEIGHT_BANDS:
        match = next(
            (w for w in ordered if w >= low and (high is None or w <= high)),
            None,
        )
        result[name] = int(match) if match is not None else FONT_WEIGHT_DEFAULTS[name]
    return result


# ============================================================
# 阴影
# ============================================================


def _number(value: float) -> str:
    return f"{value:g}"


def _hex_to_rgba(hex_color: str, alpha: float) -> str:
    color = Color.from_hex(hex_color)
    if color is None:
        return f"rgba(0, 0, 0, {alpha})"
    r, g, b = (int(c * 255 + 0.5) for c in (color.r, color.g, color.b))
    return f"rgba({r}, {g}, {b}, {alpha})"


def shadow_to_css(shadow: ShadowSample) -> str:
    return (
        f"{_number(shadow.offset_x)}px {_number(shadow.offset_y)}px "
        f"{_number(shadow.blur)}px 0 {_hex_to_rgba(shadow.color, 0.2)}"
    )


def normalize_shadows(shadows: Sequence[ShadowSample]) -> Dict[str, str]:
    if not shadows:
        return dict(SHADOW_DEFAULTS)
    ordered = sorted(shadows, key=lambda s: s.blur)
    return {
        "sm": shadow_to_css(ordered[0]),
        "md": shadow_to_css(ordered[len(ordered) // 2]),
        "lg": shadow_to_css(ordered[-1]),
    }


# ============================================================
# 语义颜色分配
# ============================================================


def map_to_semantic_colors(colors: Dict[str, str]) -> Dict[str, str]:
    """为 text / background / primary / secondary 分配颜色。

    按顺序分配并维护已占用集合（按 hex 值），保证 primary 不会与 text、background 相同。
    """
    candidates: List[Tuple[str, Color]] = []
    seen = set()
    for value in colors.values():
        hex_value = value.lower()
        color = Color.from_hex(hex_value)
        if color is None or hex_value in seen:
            continue
        seen.add(hex_value)
        candidates.append((hex_value, color))

    claimed = set()

    def pick(eligible, key) -> Optional[str]:
        best: Optional[Tuple[str, Color]] = None
        for hex_value, color in candidates:
            if hex_value in claimed or not eligible(color):
                continue
            if best is None or key(color) > key(best[1]):
                best = (hex_value, color)
        if best is None:
            return None
        claimed.add(best[0])
        return best[0]

    roles: Dict[str, str] = {}

    text = pick(lambda c: c.luminance < 0.3, lambda c: -c.luminance)
    roles["text"] = text or COLOR_DEFAULTS["text"]

    background = pick(lambda c: c.luminance > 0.8, lambda c: c.luminance)
    roles["background"] = background or COLOR_DEFAULTS["background"]

    primary = pick(lambda c: c.saturation > 0.3, lambda c: c.saturation)
    roles["primary"] = primary or COLOR_DEFAULTS["primary"]

    secondary = next((h for h, _ in candidates if h not in claimed), None)
    roles["secondary"] = secondary or COLOR_DEFAULTS["secondary"]

    return roles


# ============================================================
# 组装
# ============================================================


def _unique(values: Iterable[str]) -> List[str]:
    result: List[str] = []
    for value in values:
        if value not in result:
            result.append(value)
    return result


def build_design_tokens(raw: RawTokens) -> DesignTokens:
    """原始值 → 归一化后的 DesignTokens。"""
    semantic = map_to_semantic_colors(raw.colors)

    tokens = DesignTokens(
        colors=ColorTokens(custom=dict(raw.colors), **semantic),
        typography=Typography(
            font_families=_unique(raw.font_families),
            font_sizes=normalize_to_scale(raw.font_sizes, FONT_SIZE_SCALE),
            font_weights=normalize_weights(raw.font_weights),
            line_heights=normalize_line_heights(raw.line_height_ratios),
        ),
        spacing=normalize_to_scale(raw.spacing, SPACING_SCALE),
        border_radius=normalize_to_scale(raw.radii, RADIUS_SCALE),
        shadows=normalize_shadows(raw.shadows),
    )

    logger.info(
        "[设计令牌] 颜色 %d 个，字体 %d 种，字号 %d 个，间距 %d 个，圆角 %d 个，阴影 %d 个",
        len(raw.colors), len(tokens.typography.font_families), len(raw.font_sizes),
        len(raw.spacing), len(raw.radii), len(raw.shadows),
    )
    return tokens


def extract_design_tokens(root: VisualNode) -> DesignTokens:
    """从节点树直接得到设计令牌。"""
    return build_design_tokens(extract_raw_tokens(root))
