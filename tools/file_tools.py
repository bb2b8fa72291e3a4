"""
文件读写工具函数

构建阶段写入站点目录（主题、mu-plugins、acf-json），CLI 把分析结果写入 output/。
所有写操作都限定在给定根目录之内，越界路径直接拒绝。
"""
import json
import os
from typing import Any, Optional

from config import settings
from utils.validators import safe_join


# ============================================================
# 文本文件读写
# ============================================================


def write_file(root: str, file_path: str, content: str) -> str:
    """将内容写入 root 下的指定文件，必要时创建父目录。

    Args:
        root: 允许写入的根目录（如站点的 wp-content）
        file_path: 相对于 root 的文件路径（如 'themes/child/style.css'）
        content: 文件内容

    Returns:
        写入后的完整路径

    Raises:
        ValidationError: 路径逃出 root
    """
    full_path = safe_join(root, file_path)
    os.makedirs(os.path.dirname(full_path), exist_ok=True)
    with open(full_path, "w", encoding="utf-8") as f:
        f.write(content)
    return full_path


def read_file(root: str, file_path: str) -> Optional[str]:
    """读取 root 下的文件；不存在时返回 None。"""
    full_path = safe_join(root, file_path)
    if not os.path.exists(full_path):
        return None
    with open(full_path, "r", encoding="utf-8") as f:
        return f.read()


def append_once(root: str, file_path: str, snippet: str, marker: str) -> bool:
    """文件中尚未包含 marker 时追加 snippet。

    Returns:
        是否发生了追加（文件不存在或已包含 marker 时返回 False）
    """
    existing = read_file(root, file_path)
    if existing is None or marker in existing:
        return False
    write_file(root, file_path, existing + snippet)
    return True


# ============================================================
# 输出目录
# ============================================================


def save_output_json(filename: str, data: Any) -> str:
    """把结构化结果保存到 output/ 目录，返回完整路径。"""
    return write_file(
        settings.OUTPUT_DIR, filename, json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    )
