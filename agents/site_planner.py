"""
站点规划智能体

职责：
  - 通过多轮对话了解用户要建的网站（用途、内容类型、分类方式、功能）
  - 信息足够时输出 READY_TO_BUILD 标记 + JSON 方案
  - 把模型给出的方案整理为经过校验的 BuildPlan

模型回复中没有可解析的方案时视为“尚未完成”，继续对话，不作为错误处理。
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from autogen_agentchat.agents import AssistantAgent
from autogen_agentchat.messages import TextMessage
from autogen_core import CancellationToken
from autogen_core.models import ChatCompletionClient

from config import settings
from messages.plan_messages import BuildPlan, parse_build_plan
from utils.errors import ValidationError
from utils.response_parser import ResponseJsonExtractor

logger = logging.getLogger(__name__)

MAX_USER_MESSAGE_LENGTH = 5000
DEFAULT_COMPLETION_REPLY = "信息已经足够，下面是为你设计的站点结构。"

# 功能关键词 → 自动补充的插件（模型未推荐时）
FEATURE_PLUGINS: List[Dict[str, Any]] = [
    {"keyword": "contact form", "slug": "contact-form-7", "name": "Contact Form 7",
     "reason": "Handle contact form submissions", "required": True, "confidence": 95},
    {"keyword": "seo", "slug": "wordpress-seo", "name": "Yoast SEO",
     "reason": "SEO optimization", "required": True, "confidence": 90},
    {"keyword": "social media", "slug": "social-warfare", "name": "Social Warfare",
     "reason": "Social media sharing", "required": False, "confidence": 70},
]


def create_site_planner(model_client: ChatCompletionClient) -> AssistantAgent:
    """创建站点规划智能体。

    Args:
        model_client: LLM 客户端

    Returns:
        配置好的 AssistantAgent
    """
    marker = settings.COMPLETION_MARKER
    system_message = f"""你是 **WordPress 站点规划专家**，熟悉自定义文章类型与 Advanced Custom Fields (ACF)。
你的目标是通过自然的对话弄清用户想建什么样的网站。

━━━━━━━━━━━━━━━━━━━━
对话规则
━━━━━━━━━━━━━━━━━━━━
1. 每次只问一个问题，语气友好
2. 结合用户之前的回答继续追问
3. 6-8 个问题之后通常已经可以给出方案
4. 重点了解：站点用途与受众、需要的内容类型、内容的组织方式（分类法）、关键功能、设计偏好

━━━━━━━━━━━━━━━━━━━━
字段类型（ACF）
━━━━━━━━━━━━━━━━━━━━
text / textarea / wysiwyg / image / gallery / date_picker / number / true_false

━━━━━━━━━━━━━━━━━━━━
完成方式
━━━━━━━━━━━━━━━━━━━━
信息足够时，先输出 "{marker}"，随后用 json 代码块给出方案：

{marker}
```json
{{
  "purpose": "站点用途",
  "audience": "目标受众",
  "contentTypes": [
    {{"name": "Project", "slug": "project", "description": "...",
      "fields": [{{"name": "client_name", "type": "text", "label": "Client Name"}}],
      "supports": ["title", "thumbnail"]}}
  ],
  "taxonomies": [
    {{"name": "Project Type", "slug": "project-type", "postTypes": ["project"], "hierarchical": true}}
  ],
  "features": ["contact form", "seo"],
  "recommendedPlugins": [
    {{"slug": "advanced-custom-fields", "name": "ACF", "reason": "自定义字段", "required": true}}
  ]
}}
```

slug 只使用小写字母、数字和连字符，文章类型 slug 不超过 20 个字符。
"""
    return AssistantAgent(
        name="site_planner",
        description="站点规划智能体，通过对话了解需求并输出站点结构方案。",
        model_client=model_client,
        system_message=system_message,
    )


# ============================================================
# 回复解析
# ============================================================


@dataclass
class PlannerTurn:
    """一轮对话的结果"""

    reply: str                                     # 展示给用户的文本（不含 JSON）
    completed: bool
    plan: Optional[BuildPlan] = None
    understanding: Optional[Dict[str, Any]] = None
    confidence: int = 0


def recommend_plugins(features: List[str], recommended: List[Any]) -> List[Dict[str, Any]]:
    """模型推荐的插件 + 按功能关键词补充的插件（按 slug 去重）。"""
    plugins: List[Dict[str, Any]] = []
    for item in recommended:
        if isinstance(item, dict) and item.get("slug") and item.get("reason"):
            plugins.append({
                "slug": item["slug"],
                "name": item.get("name") or item["slug"],
                "reason": item["reason"],
                "required": item.get("required", True),
                "confidence": item.get("confidence", 85),
            })

    slugs = {p["slug"] for p in plugins}
    lowered = [str(f).lower() for f in features]
    for rule in FEATURE_PLUGINS:
        if rule["slug"] in slugs or not any(rule["keyword"] in f for f in lowered):
            continue
        plugins.append({k: v for k, v in rule.items() if k != "keyword"})
        slugs.add(rule["slug"])
    return plugins


def _list_field(data: Dict[str, Any], key: str) -> List[Any]:
    """读取列表字段；缺失视为空列表，其他类型视为方案不合法。"""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"方案字段 {key} 应为列表，实际为 {type(value).__name__}")
    return value


def structure_from_understanding(understanding: Dict[str, Any]) -> BuildPlan:
    """把模型的需求理解整理为 BuildPlan。

    Raises:
        ValidationError: 方案结构不合法
    """
    content_types = _list_field(understanding, "contentTypes")
    taxonomies = [t for t in _list_field(understanding, "taxonomies") if isinstance(t, dict)]
    features = _list_field(understanding, "features")
    for taxonomy in taxonomies:
        _list_field(taxonomy, "postTypes")

    post_types = []
    for ct in content_types:
        if not isinstance(ct, dict):
            continue
        post_types.append({
            **ct,
            "taxonomies": [
                {"name": t.get("name"), "slug": t.get("slug"),
                 "hierarchical": t.get("hierarchical", True)}
                for t in taxonomies if ct.get("slug") in _list_field(t, "postTypes")
            ],
        })

    return parse_build_plan({
        "content": {"status": "ready", "postTypes": post_types},
        "design": {"status": "ready", "theme": {
            "base": settings.DEFAULT_BASE_THEME,
            "childThemeName": settings.DEFAULT_CHILD_THEME,
        }},
        "features": {
            "status": "ready",
            "plugins": recommend_plugins(features, _list_field(understanding, "recommendedPlugins")),
        },
    })


def interpret_reply(reply: str, questions_asked: int = 0) -> PlannerTurn:
    """解析模型的一条回复。

    含完成标记且能恢复出合法方案时 completed=True；否则继续对话。
    """
    marker = settings.COMPLETION_MARKER
    confidence = min(questions_asked * 15, 85)
    if marker not in reply:
        return PlannerTurn(reply=reply, completed=False, confidence=confidence)

    data = ResponseJsonExtractor(marker=marker).extract(reply)
    if not isinstance(data, dict):
        logger.debug("[站点规划] 回复含完成标记但未找到方案 JSON")
        return PlannerTurn(reply=reply, completed=False, confidence=confidence)

    try:
        plan = structure_from_understanding(data)
    except ValidationError as e:
        logger.warning("[站点规划] 方案结构不合法，继续对话: %s", e)
        return PlannerTurn(reply=reply, completed=False, confidence=confidence)

    visible = reply.split(marker)[0].strip() or DEFAULT_COMPLETION_REPLY
    return PlannerTurn(
        reply=visible, completed=True, plan=plan, understanding=data, confidence=100
    )


# ============================================================
# 对话会话
# ============================================================


class SitePlanner:
    """一次规划对话：智能体自带历史，本类只负责计数与解析。"""

    def __init__(self, agent: AssistantAgent) -> None:
        self.agent = agent
        self.questions_asked = 0

    async def send_message(self, text: str) -> PlannerTurn:
        message = TextMessage(content=text[:MAX_USER_MESSAGE_LENGTH], source="user")
        response = await self.agent.on_messages([message], CancellationToken())
        content = response.chat_message.content
        reply = content if isinstance(content, str) else str(content)
        self.questions_asked += 1
        turn = interpret_reply(reply, self.questions_asked)
        logger.info(
            "[站点规划] 第 %d 轮，完成度 %d%%%s",
            self.questions_asked, turn.confidence, "（方案已生成）" if turn.completed else "",
        )
        return turn
