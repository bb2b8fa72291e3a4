"""
Figma 文件分析 — 把 API 返回的文件数据整理为 FigmaAnalysis

  文件数据 → 节点树 → 页面列表 + 设计令牌
  组件 / 样式数据 → FigmaComponent 列表 + 样式名
"""
import logging
from typing import Any, Dict, List, Optional

from extraction.page_detector import analyze_pages
from extraction.token_normalizer import extract_design_tokens
from messages.design_messages import FigmaAnalysis, FigmaComponent, node_from_dict
from tools.figma_client import FigmaClient, extract_file_key
from utils.errors import ValidationError

logger = logging.getLogger(__name__)


def _meta_list(data: Optional[Dict[str, Any]], key: str) -> List[Any]:
    meta = (data or {}).get("meta")
    raw = meta.get(key) if isinstance(meta, dict) else None
    return raw if isinstance(raw, list) else []


def parse_components(components_data: Optional[Dict[str, Any]]) -> List[FigmaComponent]:
    components: List[FigmaComponent] = []
    for item in _meta_list(components_data, "components"):
        if not isinstance(item, dict) or not item.get("name"):
            continue
        components.append(FigmaComponent(
            key=str(item.get("key") or item.get("node_id") or ""),
            name=str(item["name"]),
            description=str(item.get("description") or ""),
        ))
    return components


def parse_style_names(styles_data: Optional[Dict[str, Any]]) -> List[str]:
    return [
        str(item["name"]) for item in _meta_list(styles_data, "styles")
        if isinstance(item, dict) and item.get("name")
    ]


def analyze_figma_file(
    file_key: str,
    file_data: Dict[str, Any],
    components_data: Optional[Dict[str, Any]] = None,
    styles_data: Optional[Dict[str, Any]] = None,
) -> FigmaAnalysis:
    """整理一份 Figma 文件。

    Raises:
        ValidationError: 文件数据缺少 document 节点
    """
    document_raw = file_data.get("document") if isinstance(file_data, dict) else None
    if not isinstance(document_raw, dict):
        raise ValidationError("Figma 文件数据缺少 document 节点")

    document = node_from_dict(document_raw)
    analysis = FigmaAnalysis(
        file_key=file_key,
        file_name=str(file_data.get("name") or "Untitled"),
        pages=analyze_pages(document),
        design_tokens=extract_design_tokens(document),
        components=parse_components(components_data),
        style_names=parse_style_names(styles_data),
    )
    logger.info(
        "[Figma 分析] %s: %d 个页面, %d 个组件, %d 个样式",
        analysis.file_name, len(analysis.pages), len(analysis.components),
        len(analysis.style_names),
    )
    return analysis


def analyze_figma_url(url: str, client: Optional[FigmaClient] = None) -> FigmaAnalysis:
    """从 Figma 链接获取并分析文件（文件、样式、组件依次串行请求）。"""
    file_key = extract_file_key(url)
    if not file_key:
        raise ValidationError(f"无法从链接中识别 Figma 文件: {url}")
    client = client or FigmaClient()
    file_data = client.get_file(file_key)
    styles_data = client.get_styles(file_key)
    components_data = client.get_components(file_key)
    return analyze_figma_file(file_key, file_data, components_data, styles_data)
