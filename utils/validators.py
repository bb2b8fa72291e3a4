"""
输入清洗与安全校验

职责：
  - 生成 PHP / 区块内容前清洗字符串（slug、显示名、PHP 字面量、页面内容）
  - 校验外部传入的标识符，拒绝路径穿越
  - WP-CLI 命令白名单（只允许构建需要的子命令，拒绝危险操作）
"""
import os
import re
from typing import List, Sequence

from utils.errors import ValidationError

# 可作为路径片段的标识符（站点名、子主题名等）
IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

_SCRIPT_TAG = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"\son\w+\s*=", re.IGNORECASE)
_HTML_TAG = re.compile(r"<[^>]*>")


# ============================================================
# 字符串清洗
# ============================================================


def sanitize_slug(value: str) -> str:
    """转换为 WordPress slug：小写、空白转连字符、只保留 [a-z0-9_-]。"""
    if not value:
        return ""
    slug = value.lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-z0-9_-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def sanitize_name(value: str) -> str:
    """显示名：去掉 HTML 标签与空字节，最长 200 字符。"""
    if not value:
        return ""
    text = _HTML_TAG.sub("", value).replace("\0", "")
    return text[:200].strip()


def sanitize_for_php(value: str) -> str:
    """可安全放入 PHP 单引号字符串的文本。"""
    if not value:
        return ""
    text = value.replace("\0", "")
    text = re.sub(r"<\?php", "", text, flags=re.IGNORECASE)
    text = text.replace("<?", "").replace("?>", "")
    return text.replace("\\", "\\\\").replace("'", "\\'")


def sanitize_for_wordpress(value: str) -> str:
    """写入页面内容前去掉脚本、事件处理器与危险 URL 协议。"""
    if not value:
        return ""
    text = _SCRIPT_TAG.sub("", value)
    text = _EVENT_HANDLER.sub(" data-removed=", text)
    text = re.sub(r"javascript:", "", text, flags=re.IGNORECASE)
    text = re.sub(r"data:", "", text, flags=re.IGNORECASE)
    return text.replace("\0", "")


# ============================================================
# 路径安全
# ============================================================


def validate_identifier(value: str, label: str = "标识符") -> str:
    """校验外部传入、将用于拼接路径的标识符。

    Raises:
        ValidationError: 含有路径分隔符、.. 或其他非法字符
    """
    if not isinstance(value, str) or not IDENTIFIER_PATTERN.match(value):
        raise ValidationError(f"{label}不合法: {value!r}")
    return value


def safe_join(root: str, *parts: str) -> str:
    """在 root 下拼接路径，结果逃出 root 时抛出 ValidationError。"""
    for part in parts:
        if "\0" in part or os.path.isabs(part):
            raise ValidationError(f"非法路径片段: {part!r}")
    base = os.path.realpath(root)
    candidate = os.path.realpath(os.path.join(base, *parts))
    if candidate != base and not candidate.startswith(base + os.sep):
        raise ValidationError(f"路径越界: {os.path.join(*parts) if parts else ''}")
    return candidate


def resolve_site_path(sites_root: str, site_name: str) -> str:
    """根据站点名推导站点目录（站点名必须是合法标识符）。"""
    validate_identifier(site_name, "站点名")
    return safe_join(sites_root, site_name)


# ============================================================
# WP-CLI 白名单
# ============================================================

# 顶层命令 → 允许的子命令（空列表表示全部子命令）
ALLOWED_CLI_COMMANDS = {
    "post": [],
    "page": [],
    "term": [],
    "option": ["get", "update"],
    "theme": ["list", "activate", "install", "get", "is-installed"],
    "plugin": ["list", "activate", "deactivate", "install", "get", "is-installed"],
    "media": [],
    "menu": [],
    "user": ["get", "list"],
    "rewrite": ["flush"],
    "core": ["is-installed", "version"],
    "db": ["check"],
}

DANGEROUS_CLI_COMMANDS = [
    ("db", "drop"), ("db", "reset"), ("db", "export"), ("db", "import"),
    ("core", "download"), ("core", "update"), ("core", "install"),
    ("config", "create"), ("config", "set"), ("config", "delete"),
    ("user", "create"), ("user", "delete"), ("user", "update"),
    ("eval",), ("eval-file",), ("shell",), ("search-replace",),
    ("export",), ("import",),
]


def validate_cli_command(args: Sequence[str]) -> List[str]:
    """校验一条 WP-CLI 命令（不含 'wp' 本身）。

    Raises:
        ValidationError: 命令为空、命中危险列表或不在白名单内
    """
    args = [str(a) for a in args]
    if not args:
        raise ValidationError("WP-CLI 命令为空")
    if any("\0" in a for a in args):
        raise ValidationError("WP-CLI 参数含空字节")

    command = args[0]
    subcommand = args[1] if len(args) > 1 else ""

    for dangerous in DANGEROUS_CLI_COMMANDS:
        if tuple(args[:len(dangerous)]) == dangerous:
            raise ValidationError(f"禁止执行危险命令: wp {' '.join(dangerous)}")

    if command not in ALLOWED_CLI_COMMANDS:
        raise ValidationError(f"命令不在白名单内: wp {command}")
    allowed_subs = ALLOWED_CLI_COMMANDS[command]
    if allowed_subs and subcommand not in allowed_subs:
        raise ValidationError(f"子命令不在白名单内: wp {command} {subcommand}")
    return args
