"""
模型输出 JSON 恢复 — 从不可靠的自由文本中取出一个 JSON 值

依次尝试三种策略，先成功者为准：
  1. Markdown 代码块（可带 json 标记），解析去空白后的内容
  2. 完成标记之后的第一个 '{'，按字符串感知的括号配平扫描出完整对象
  3. 兜底：全文中贪婪匹配第一个 '{' 到最后一个 '}'（失败再对同一起点做配平扫描）
全部失败时返回 None（表示“模型尚未给出结构”），不是异常。
"""
import json
import logging
import re
from enum import Enum
from typing import Any, Optional

from config import settings
from utils.errors import ParseFailure

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_GREEDY_OBJECT = re.compile(r"\{[\s\S]*\}")


class ScanState(Enum):
    """括号配平扫描的状态"""

    OUTSIDE = "outside"            # 字符串之外
    IN_STRING = "in_string"        # 字符串之内
    ESCAPED = "escaped"            # 字符串内紧跟反斜杠之后


def scan_balanced_object(text: str, start: int) -> Optional[str]:
    """从 text[start]（必须是 '{'）开始扫描，返回配平后的对象子串。

    字符串内的括号不计数；反斜杠转义下一个字符。未配平时返回 None。
    """
    if start < 0 or start >= len(text) or text[start] != "{":
        return None

    state = ScanState.OUTSIDE
    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if state is ScanState.ESCAPED:
            state = ScanState.IN_STRING
        elif state is ScanState.IN_STRING:
            if char == "\\":
                state = ScanState.ESCAPED
            elif char == '"':
                state = ScanState.OUTSIDE
        else:
            if char == '"':
                state = ScanState.IN_STRING
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
    return None


def _try_parse(candidate: Optional[str], strategy: str) -> Any:
    if candidate is None:
        return None
    try:
        return json.loads(candidate.strip())
    except ValueError as e:
        logger.debug("[JSON 提取] %s 策略解析失败: %s", strategy, e)
        return None


class ResponseJsonExtractor:
    """从模型输出中恢复 JSON。无状态，可复用。"""

    def __init__(self, marker: Optional[str] = None) -> None:
        self.marker = marker or settings.COMPLETION_MARKER

    def extract(self, text: str) -> Any:
        """返回解析出的 JSON 值；三种策略都失败时返回 None。"""
        if not text:
            return None

        fence = _FENCE.search(text)
        if fence:
            result = _try_parse(fence.group(1), "代码块")
            if result is not None:
                return result

        marker_at = text.find(self.marker)
        if marker_at != -1:
            tail_start = marker_at + len(self.marker)
            brace = text.find("{", tail_start)
            if brace != -1:
                result = _try_parse(scan_balanced_object(text, brace), "完成标记")
                if result is not None:
                    return result

        greedy = _GREEDY_OBJECT.search(text)
        if greedy:
            result = _try_parse(greedy.group(0), "贪婪匹配")
            if result is not None:
                return result
            # 贪婪范围吞进了对象之后的其他括号时，退回配平扫描
            result = _try_parse(scan_balanced_object(text, greedy.start()), "配平扫描")
            if result is not None:
                return result

        logger.debug("[JSON 提取] 未找到可解析的结构")
        return None

    def extract_or_raise(self, text: str) -> Any:
        """与 extract 相同，但失败时抛出 ParseFailure。"""
        result = self.extract(text)
        if result is None:
            raise ParseFailure("模型输出中没有可解析的 JSON")
        return result


def extract_json(text: str, marker: Optional[str] = None) -> Any:
    return ResponseJsonExtractor(marker).extract(text)
