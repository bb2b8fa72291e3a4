"""
Jinja2 模板环境 — 所有渲染器共用

  - 区块标记模板开启 HTML 自动转义（设计稿文字直接进入页面）
  - PHP / CSS 模板关闭自动转义，需要时显式使用 php 过滤器
"""
from typing import Dict

from jinja2 import DictLoader, Environment, StrictUndefined, select_autoescape

from utils.validators import sanitize_for_php, sanitize_slug


def create_environment(templates: Dict[str, str]) -> Environment:
    """基于内存模板表创建环境（.html 模板自动转义）。"""
    env = Environment(
        loader=DictLoader(templates),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["php"] = sanitize_for_php
    env.filters["slug"] = sanitize_slug
    return env
