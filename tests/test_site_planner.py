import asyncio
import json
from types import SimpleNamespace

from agents.site_planner import (
    DEFAULT_COMPLETION_REPLY,
    MAX_USER_MESSAGE_LENGTH,
    SitePlanner,
    interpret_reply,
    recommend_plugins,
)

UNDERSTANDING = {
    "purpose": "Portfolio",
    "contentTypes": [{
        "name": "Project",
        "slug": "project",
        "fields": [{"name": "client_name", "type": "text"}],
    }],
    "taxonomies": [{"name": "Project Type", "slug": "project-type", "postTypes": ["project"]}],
    "features": ["Contact form", "SEO"],
    "recommendedPlugins": [{"slug": "advanced-custom-fields", "name": "ACF", "reason": "Custom fields"}],
}


def _completed_reply(prefix: str = "Great, here is the plan.") -> str:
    return f"{prefix}\nREADY_TO_BUILD\n```json\n{json.dumps(UNDERSTANDING)}\n```"


def test_reply_without_marker_continues_dialog() -> None:
    turn = interpret_reply("What kind of content will you publish?", questions_asked=2)
    assert not turn.completed
    assert turn.plan is None
    assert turn.confidence == 30
    assert interpret_reply("Anything else?", questions_asked=10).confidence == 85


def test_completed_reply_yields_plan() -> None:
    turn = interpret_reply(_completed_reply(), questions_asked=3)
    assert turn.completed
    assert turn.confidence == 100
    assert turn.reply == "Great, here is the plan."
    plan = turn.plan
    assert plan.content.status == "ready"
    assert plan.design.status == "ready"
    project = plan.content.post_types[0]
    assert project.slug == "project"
    assert project.taxonomies[0].slug == "project-type"
    assert project.taxonomies[0].hierarchical is True
    assert [p.slug for p in plan.features.plugins] == [
        "advanced-custom-fields", "contact-form-7", "wordpress-seo",
    ]


def test_marker_only_reply_gets_default_text() -> None:
    turn = interpret_reply(_completed_reply(prefix=""))
    assert turn.completed
    assert turn.reply == DEFAULT_COMPLETION_REPLY


def test_marker_without_json_is_not_an_error() -> None:
    turn = interpret_reply("READY_TO_BUILD (plan coming soon)", questions_asked=1)
    assert not turn.completed
    assert turn.confidence == 15


def test_invalid_plan_keeps_dialog_open() -> None:
    bad = dict(UNDERSTANDING, contentTypes=[{"name": "X", "slug": "!!!"}])
    turn = interpret_reply(f"READY_TO_BUILD\n{json.dumps(bad)}")
    assert not turn.completed
    assert turn.plan is None


def test_wrongly_typed_fields_keep_dialog_open() -> None:
    taxonomy = {"name": "Kind", "slug": "kind", "postTypes": 5}
    for bad in (
        {"contentTypes": 3},
        dict(UNDERSTANDING, taxonomies=[taxonomy]),
        dict(UNDERSTANDING, recommendedPlugins="acf"),
    ):
        turn = interpret_reply(f"READY_TO_BUILD {json.dumps(bad)}", questions_asked=3)
        assert not turn.completed
        assert turn.plan is None
        assert turn.confidence == 45


def test_feature_plugins_are_deduplicated() -> None:
    plugins = recommend_plugins(
        ["contact form", "social media sharing"],
        [
            {"slug": "contact-form-7", "reason": "Forms", "confidence": 99},
            {"slug": "no-reason"},
            "junk",
        ],
    )
    assert [p["slug"] for p in plugins] == ["contact-form-7", "social-warfare"]
    assert plugins[0]["confidence"] == 99
    assert plugins[1]["required"] is False


class FakeAgent:
    def __init__(self, replies) -> None:
        self.replies = list(replies)
        self.received = []

    async def on_messages(self, messages, cancellation_token):
        self.received.append(messages[0].content)
        return SimpleNamespace(chat_message=SimpleNamespace(content=self.replies.pop(0)))


def test_planner_session_counts_questions() -> None:
    agent = FakeAgent(["Who is the audience?", _completed_reply()])
    planner = SitePlanner(agent)

    async def scenario():
        first = await planner.send_message("x" * (MAX_USER_MESSAGE_LENGTH + 100))
        second = await planner.send_message("Designers")
        return first, second

    first, second = asyncio.run(scenario())
    assert len(agent.received[0]) == MAX_USER_MESSAGE_LENGTH
    assert not first.completed
    assert first.confidence == 15
    assert second.completed
    assert planner.questions_asked == 2
