import pytest

from messages.plan_messages import parse_build_plan
from utils.errors import ValidationError
from utils.validators import (
    resolve_site_path,
    safe_join,
    sanitize_for_php,
    sanitize_for_wordpress,
    sanitize_name,
    sanitize_slug,
    validate_cli_command,
    validate_identifier,
)


# ============================================================
# 清洗与路径
# ============================================================


def test_sanitizers() -> None:
    assert sanitize_slug("Hello World!") == "hello-world"
    assert sanitize_slug("  --a   b-- ") == "a-b"
    assert sanitize_name("<b>Team</b>") == "Team"
    assert sanitize_for_php("it's") == "it\\'s"
    assert "<?php" not in sanitize_for_php("<?php echo 1; ?>")


def test_wordpress_content_is_stripped_of_scripts() -> None:
    cleaned = sanitize_for_wordpress(
        '<p onclick="steal()">Hi</p><script>alert(1)</script><a href="javascript:x">a</a>'
    )
    assert "<script" not in cleaned
    assert "onclick" not in cleaned
    assert "javascript:" not in cleaned
    assert "<p" in cleaned


def test_identifiers_reject_traversal(tmp_path) -> None:
    assert validate_identifier("my-site_1") == "my-site_1"
    for bad in ("../etc", "a/b", "", "a b"):
        with pytest.raises(ValidationError):
            validate_identifier(bad)
    with pytest.raises(ValidationError):
        safe_join(str(tmp_path), "..", "outside.txt")
    with pytest.raises(ValidationError):
        resolve_site_path(str(tmp_path), "../other")
    assert safe_join(str(tmp_path), "themes", "x.css").startswith(str(tmp_path.resolve()))


def test_cli_allowlist() -> None:
    assert validate_cli_command(["post", "create", "--post_type=page"])[0] == "post"
    assert validate_cli_command(["option", "update", "show_on_front", "page"])
    for bad in (
        [], ["db", "drop"], ["eval", "echo 1;"], ["option", "delete", "x"],
        ["config", "set", "A", "b"], ["cron", "event", "run"],
    ):
        with pytest.raises(ValidationError):
            validate_cli_command(bad)


# ============================================================
# 构建计划校验
# ============================================================


def test_plan_accepts_camel_case_and_sanitizes_slugs() -> None:
    plan = parse_build_plan({
        "content": {
            "status": "ready",
            "postTypes": [{
                "name": "Case Study",
                "slug": "Case Study",
                "fields": [{"name": "client_name"}],
            }],
            "pages": [{"title": "About Us"}],
        },
        "design": {"status": "ready", "theme": {"childThemeName": "acme-child"}},
    })
    post_type = plan.content.post_types[0]
    assert post_type.slug == "case-study"
    assert post_type.fields[0].label == "Client Name"
    assert post_type.supports == ["title", "editor", "thumbnail"]
    assert plan.content.pages[0].slug == "about-us"
    assert plan.design.theme.child_theme_name == "acme-child"
    assert plan.features.status == "pending"


def test_plan_rejects_bad_structures() -> None:
    bad_plans = [
        "not a dict",
        {"content": {"postTypes": [{"name": "X", "slug": "a" * 21}]}},
        {"content": {"postTypes": [{"name": "X", "slug": "!!!"}]}},
        {"design": {"theme": {"childThemeName": "../evil"}}},
        {"features": {"status": "finished"}},
    ]
    for data in bad_plans:
        with pytest.raises(ValidationError):
            parse_build_plan(data)


def test_plan_round_trips_through_aliases() -> None:
    plan = parse_build_plan({"features": {"status": "ready", "plugins": [{"slug": "wordpress-seo"}]}})
    data = plan.to_dict()
    assert data["features"]["plugins"][0]["slug"] == "wordpress-seo"
    assert parse_build_plan(data) == plan
