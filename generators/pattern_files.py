"""
区块模式生成 — 把分类后的 Figma 组件转为 WordPress 区块模式并生成注册 PHP

只有 cards / testimonials / pricing / features / headers 五类组件生成模式，
其余类别（按钮、表单、导航……）由主题样式覆盖。
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from generators.environment import create_environment
from messages.design_messages import DesignTokens, FigmaComponent

PATTERN_CATEGORY = "figma-import"
PATTERNS_FILE = "figma-patterns.php"

_CARD = """\
<!-- wp:group {"style":{"border":{"radius":"{{ radius }}"},"spacing":{"padding":{"top":"{{ spacing }}","bottom":"{{ spacing }}","left":"{{ spacing }}","right":"{{ spacing }}"}},"shadow":"{{ shadow }}"}} -->
<div class="wp-block-group" style="border-radius:{{ radius }};padding:{{ spacing }};box-shadow:{{ shadow }}">
<!-- wp:heading {"level":3,"style":{"typography":{"fontSize":"20px"}}} -->
<h3 style="font-size:20px">{{ title }}</h3>
<!-- /wp:heading -->
<!-- wp:paragraph -->
<p>{{ description or "Card description text goes here." }}</p>
<!-- /wp:paragraph -->
<!-- wp:buttons -->
<div class="wp-block-buttons">
<!-- wp:button -->
<div class="wp-block-button"><a class="wp-block-button__link wp-element-button">Learn More</a></div>
<!-- /wp:button -->
</div>
<!-- /wp:buttons -->
</div>
<!-- /wp:group -->
"""

_TESTIMONIAL = """\
<!-- wp:group {"style":{"spacing":{"padding":{"top":"{{ spacing }}","bottom":"{{ spacing }}"}}}} -->
<div class="wp-block-group" style="padding-top:{{ spacing }};padding-bottom:{{ spacing }}">
<!-- wp:quote {"className":"is-style-large","style":{"border":{"left":{"color":"{{ primary }}","width":"4px"}}}} -->
<blockquote class="wp-block-quote is-style-large" style="border-left:4px solid {{ primary }}"><p>{{ description or "This product has completely transformed how we work." }}</p><cite>Customer Name</cite></blockquote>
<!-- /wp:quote -->
</div>
<!-- /wp:group -->
"""

_PRICING = """\
<!-- wp:group {"style":{"border":{"radius":"{{ radius }}","width":"1px","color":"#e0e0e0"},"spacing":{"padding":{"top":"32px","bottom":"32px","left":"{{ spacing }}","right":"{{ spacing }}"}}}} -->
<div class="wp-block-group" style="border:1px solid #e0e0e0;border-radius:{{ radius }};padding:32px {{ spacing }}">
<!-- wp:heading {"textAlign":"center","level":3} -->
<h3 class="has-text-align-center">{{ title }}</h3>
<!-- /wp:heading -->
<!-- wp:paragraph {"align":"center","style":{"typography":{"fontSize":"36px","fontWeight":"700"}}} -->
<p class="has-text-align-center" style="font-size:36px;font-weight:700">$29/month</p>
<!-- /wp:paragraph -->
<!-- wp:buttons {"layout":{"type":"flex","justifyContent":"center"}} -->
<div class="wp-block-buttons">
<!-- wp:button {"width":100,"style":{"color":{"background":"{{ primary }}"}}} -->
<div class="wp-block-button has-custom-width wp-block-button__width-100"><a class="wp-block-button__link has-background wp-element-button" style="background-color:{{ primary }}">Get Started</a></div>
<!-- /wp:button -->
</div>
<!-- /wp:buttons -->
</div>
<!-- /wp:group -->
"""

_FEATURE = """\
<!-- wp:group {"style":{"spacing":{"padding":{"top":"{{ spacing }}","bottom":"{{ spacing }}"}}}} -->
<div class="wp-block-group" style="padding-top:{{ spacing }};padding-bottom:{{ spacing }}">
<!-- wp:paragraph {"style":{"typography":{"fontSize":"32px"},"color":{"text":"{{ primary }}"}}} -->
<p class="has-text-color" style="color:{{ primary }};font-size:32px">✓</p>
<!-- /wp:paragraph -->
<!-- wp:heading {"level":4} -->
<h4>{{ title }}</h4>
<!-- /wp:heading -->
<!-- wp:paragraph -->
<p>{{ description or "Brief description of this feature." }}</p>
<!-- /wp:paragraph -->
</div>
<!-- /wp:group -->
"""

_HEADER = """\
<!-- wp:cover {"dimRatio":50,"minHeight":500,"align":"full","style":{"color":{"background":"{{ primary }}"}}} -->
<div class="wp-block-cover alignfull" style="min-height:500px">
<div class="wp-block-cover__inner-container">
<!-- wp:heading {"textAlign":"center","level":1,"style":{"color":{"text":"#ffffff"},"typography":{"fontSize":"48px"}}} -->
<h1 class="has-text-align-center has-text-color" style="color:#ffffff;font-size:48px">{{ title }}</h1>
<!-- /wp:heading -->
<!-- wp:buttons {"layout":{"type":"flex","justifyContent":"center"}} -->
<div class="wp-block-buttons">
<!-- wp:button {"backgroundColor":"white","textColor":"primary"} -->
<div class="wp-block-button"><a class="wp-block-button__link has-primary-color has-white-background-color has-text-color has-background wp-element-button">Get Started</a></div>
<!-- /wp:button -->
</div>
<!-- /wp:buttons -->
</div>
</div>
<!-- /wp:cover -->
"""

_PATTERNS_PHP = """\
<?php
/**
 * Block Patterns imported from Figma
 * Generated by AI Site Builder
 */

if (!defined('ABSPATH')) {
    exit;
}

add_action('init', function() {
    register_block_pattern_category(
        '{{ category }}',
        array('label' => __('Figma Imports', 'ai-site-builder'))
    );
{% for pattern in patterns %}

    register_block_pattern(
        '{{ pattern.name|php }}',
        array(
            'title'       => '{{ pattern.title|php }}',
            'description' => '{{ pattern.description|php }}',
            'categories'  => array({% for c in pattern.categories %}'{{ c|php }}'{% if not loop.last %}, {% endif %}{% endfor %}),
            'content'     => '{{ pattern.content|php }}',
        )
    );
{% endfor %}
});
"""

# 组件类别 → 模式模板
PATTERN_KINDS: Dict[str, str] = {
    "cards": "card.html",
    "testimonials": "testimonial.html",
    "pricing": "pricing.html",
    "features": "feature.html",
    "headers": "header.html",
}

_env = create_environment({
    "card.html": _CARD,
    "testimonial.html": _TESTIMONIAL,
    "pricing.html": _PRICING,
    "feature.html": _FEATURE,
    "header.html": _HEADER,
    "patterns.php": _PATTERNS_PHP,
})


@dataclass
class BlockPattern:
    """一个待注册的区块模式"""

    name: str                                      # figma/<slug>
    title: str
    categories: List[str] = field(default_factory=list)
    content: str = ""
    description: str = ""


def pattern_slug(name: str) -> str:
    """组件名 → 模式 slug：非字母数字折叠为连字符。"""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "component"


def generate_patterns(
    classified: Dict[str, List[FigmaComponent]],
    tokens: DesignTokens,
) -> List[BlockPattern]:
    """按类别生成模式；同名组件的 slug 追加序号保证唯一。"""
    patterns: List[BlockPattern] = []
    seen: Dict[str, int] = {}
    for category, template_name in PATTERN_KINDS.items():
        template = _env.get_template(template_name)
        kind_label = category.rstrip("s").title()
        for component in classified.get(category, []):
            slug = pattern_slug(component.name)
            seen[slug] = seen.get(slug, 0) + 1
            if seen[slug] > 1:
                slug = f"{slug}-{seen[slug]}"
            patterns.append(BlockPattern(
                name=f"figma/{slug}",
                title=component.name,
                categories=[category, PATTERN_CATEGORY],
                description=component.description or f"{kind_label} component imported from Figma",
                content=template.render(
                    title=component.name,
                    description=component.description,
                    primary=tokens.colors.primary,
                    radius=tokens.border_radius["lg"],
                    spacing=tokens.spacing["lg"],
                    shadow=tokens.shadows["md"],
                ),
            ))
    return patterns


def render_patterns_php(patterns: Sequence[BlockPattern]) -> str:
    """渲染模式注册文件；没有模式时返回空串。"""
    if not patterns:
        return ""
    return _env.get_template("patterns.php").render(
        category=PATTERN_CATEGORY, patterns=patterns,
    )


def patterns_include_statement() -> str:
    return (
        "\n// Include Figma-generated block patterns\n"
        f"require_once get_stylesheet_directory() . '/{PATTERNS_FILE}';\n"
    )
