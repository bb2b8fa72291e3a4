"""
区块标记渲染 — 已分类的 Section → WordPress 区块编辑器标记

纯函数：输入区块内容与设计令牌，输出标记文本。
未提供专用模板的区块类型使用通用 content 模板。
"""
from typing import Dict, List, Sequence

from generators.environment import create_environment
from messages.design_messages import DesignTokens, ExtractedContent, Section, SectionKind

_HERO = """\
<!-- wp:cover {"dimRatio":50,"minHeight":600,"align":"full","style":{"color":{"background":"{{ primary }}"}}} -->
<div class="wp-block-cover alignfull" style="min-height:600px">
<div class="wp-block-cover__inner-container">
<!-- wp:heading {"textAlign":"center","level":1,"style":{"typography":{"fontSize":"48px"}}} -->
<h1 class="has-text-align-center" style="font-size:48px">{{ c.heading or "Welcome" }}</h1>
<!-- /wp:heading -->
{% if c.subheading %}
<!-- wp:paragraph {"align":"center","style":{"typography":{"fontSize":"20px"}}} -->
<p class="has-text-align-center" style="font-size:20px">{{ c.subheading }}</p>
<!-- /wp:paragraph -->
{% endif %}
{% if c.buttons %}
<!-- wp:buttons {"layout":{"type":"flex","justifyContent":"center"}} -->
<div class="wp-block-buttons">
{% for label in c.buttons[:2] %}
{% if loop.index0 == 1 %}
<!-- wp:button {"className":"is-style-outline"} -->
<div class="wp-block-button is-style-outline"><a class="wp-block-button__link wp-element-button">{{ label }}</a></div>
{% else %}
<!-- wp:button -->
<div class="wp-block-button"><a class="wp-block-button__link wp-element-button">{{ label }}</a></div>
{% endif %}
<!-- /wp:button -->
{% endfor %}
</div>
<!-- /wp:buttons -->
{% endif %}
</div>
</div>
<!-- /wp:cover -->
"""

_SECTION_OPEN = """\
<!-- wp:group {"align":"full","style":{"spacing":{"padding":{"top":"80px","bottom":"80px"}}}} -->
<div class="wp-block-group alignfull" style="padding-top:80px;padding-bottom:80px">
"""

_SECTION_CLOSE = """\
</div>
<!-- /wp:group -->
"""

_HEADING = """\
{% if c.heading %}
<!-- wp:heading {"textAlign":"center","level":2} -->
<h2 class="has-text-align-center">{{ c.heading }}</h2>
<!-- /wp:heading -->
{% endif %}
{% if c.subheading %}
<!-- wp:paragraph {"align":"center"} -->
<p class="has-text-align-center">{{ c.subheading }}</p>
<!-- /wp:paragraph -->
{% endif %}
"""

_FEATURES = _SECTION_OPEN + _HEADING + """\
<!-- wp:columns {"style":{"spacing":{"padding":{"top":"40px"}}}} -->
<div class="wp-block-columns" style="padding-top:40px">
{% if c.items %}
{% for item in c.items[:4] %}
<!-- wp:column -->
<div class="wp-block-column">
{% if item.heading %}
<!-- wp:heading {"level":3,"style":{"typography":{"fontSize":"20px"}}} -->
<h3 style="font-size:20px">{{ item.heading }}</h3>
<!-- /wp:heading -->
{% endif %}
{% if item.body %}
<!-- wp:paragraph -->
<p>{{ item.body[0] }}</p>
<!-- /wp:paragraph -->
{% endif %}
</div>
<!-- /wp:column -->
{% endfor %}
{% else %}
{% for text in c.body[:3] %}
<!-- wp:column -->
<div class="wp-block-column">
<!-- wp:paragraph -->
<p>{{ text }}</p>
<!-- /wp:paragraph -->
</div>
<!-- /wp:column -->
{% endfor %}
{% endif %}
</div>
<!-- /wp:columns -->
""" + _SECTION_CLOSE

_TESTIMONIALS = """\
<!-- wp:group {"align":"full","style":{"spacing":{"padding":{"top":"80px","bottom":"80px"}},"color":{"background":"#f8f9fa"}}} -->
<div class="wp-block-group alignfull has-background" style="background-color:#f8f9fa;padding-top:80px;padding-bottom:80px">
""" + _HEADING + """\
<!-- wp:columns -->
<div class="wp-block-columns">
{% for item in quotes[:3] %}
<!-- wp:column -->
<div class="wp-block-column">
<!-- wp:quote {"className":"is-style-large"} -->
<blockquote class="wp-block-quote is-style-large"><p>{{ item.body[0] if item.body else item.heading }}</p>{% if item.heading and item.body %}<cite>{{ item.heading }}</cite>{% endif %}</blockquote>
<!-- /wp:quote -->
</div>
<!-- /wp:column -->
{% endfor %}
</div>
<!-- /wp:columns -->
""" + _SECTION_CLOSE

_CTA = """\
<!-- wp:group {"align":"full","style":{"spacing":{"padding":{"top":"60px","bottom":"60px"}},"color":{"background":"{{ primary }}"}}} -->
<div class="wp-block-group alignfull has-background" style="background-color:{{ primary }};padding-top:60px;padding-bottom:60px">
{% if c.heading %}
<!-- wp:heading {"textAlign":"center","level":2,"style":{"color":{"text":"#ffffff"}}} -->
<h2 class="has-text-align-center has-text-color" style="color:#ffffff">{{ c.heading }}</h2>
<!-- /wp:heading -->
{% endif %}
{% if c.subheading or c.body %}
<!-- wp:paragraph {"align":"center","style":{"color":{"text":"#ffffff"}}} -->
<p class="has-text-align-center has-text-color" style="color:#ffffff">{{ c.subheading or c.body[0] }}</p>
<!-- /wp:paragraph -->
{% endif %}
<!-- wp:buttons {"layout":{"type":"flex","justifyContent":"center"}} -->
<div class="wp-block-buttons">
<!-- wp:button {"backgroundColor":"white","textColor":"primary"} -->
<div class="wp-block-button"><a class="wp-block-button__link has-primary-color has-white-background-color has-text-color has-background wp-element-button">{{ c.buttons[0] if c.buttons else "Get Started" }}</a></div>
<!-- /wp:button -->
</div>
<!-- /wp:buttons -->
""" + _SECTION_CLOSE

_GALLERY = _SECTION_OPEN + _HEADING + """\
<!-- wp:gallery {"columns":3,"linkTo":"none"} -->
<figure class="wp-block-gallery has-nested-images columns-3 is-cropped">
{% for _ in range(3) %}
<!-- wp:image {"sizeSlug":"large"} -->
<figure class="wp-block-image size-large"><img alt=""/></figure>
<!-- /wp:image -->
{% endfor %}
</figure>
<!-- /wp:gallery -->
""" + _SECTION_CLOSE

_STATS = """\
<!-- wp:group {"align":"full","style":{"spacing":{"padding":{"top":"60px","bottom":"60px"}},"color":{"background":"#f8f9fa"}}} -->
<div class="wp-block-group alignfull has-background" style="background-color:#f8f9fa;padding-top:60px;padding-bottom:60px">
<!-- wp:columns -->
<div class="wp-block-columns">
{% for item in stats[:4] %}
<!-- wp:column -->
<div class="wp-block-column">
<!-- wp:heading {"textAlign":"center","level":3,"style":{"typography":{"fontSize":"36px"}}} -->
<h3 class="has-text-align-center" style="font-size:36px">{{ item.heading or "100+" }}</h3>
<!-- /wp:heading -->
{% if item.body %}
<!-- wp:paragraph {"align":"center"} -->
<p class="has-text-align-center">{{ item.body[0] }}</p>
<!-- /wp:paragraph -->
{% endif %}
</div>
<!-- /wp:column -->
{% endfor %}
</div>
<!-- /wp:columns -->
""" + _SECTION_CLOSE

_PRICING = _SECTION_OPEN + _HEADING + """\
<!-- wp:columns -->
<div class="wp-block-columns">
{% for item in plans[:3] %}
<!-- wp:column {"style":{"border":{"radius":"{{ radius }}","width":"1px"},"spacing":{"padding":{"top":"32px","bottom":"32px","left":"24px","right":"24px"}}}} -->
<div class="wp-block-column" style="border-radius:{{ radius }};border-width:1px;padding:32px 24px">
<!-- wp:heading {"textAlign":"center","level":3} -->
<h3 class="has-text-align-center">{{ item.heading or "Plan" }}</h3>
<!-- /wp:heading -->
{% if item.body %}
<!-- wp:paragraph {"align":"center","style":{"typography":{"fontSize":"32px","fontWeight":"700"}}} -->
<p class="has-text-align-center" style="font-size:32px;font-weight:700">{{ item.body[0] }}</p>
<!-- /wp:paragraph -->
{% endif %}
<!-- wp:buttons {"layout":{"type":"flex","justifyContent":"center"}} -->
<div class="wp-block-buttons">
<!-- wp:button -->
<div class="wp-block-button"><a class="wp-block-button__link wp-element-button">Choose Plan</a></div>
<!-- /wp:button -->
</div>
<!-- /wp:buttons -->
</div>
<!-- /wp:column -->
{% endfor %}
</div>
<!-- /wp:columns -->
""" + _SECTION_CLOSE

_FAQ = _SECTION_OPEN + """\
<!-- wp:heading {"textAlign":"center","level":2} -->
<h2 class="has-text-align-center">{{ c.heading or "Frequently Asked Questions" }}</h2>
<!-- /wp:heading -->
{% for item in questions[:6] %}
<!-- wp:group {"style":{"spacing":{"padding":{"top":"16px","bottom":"16px"}}}} -->
<div class="wp-block-group" style="padding-top:16px;padding-bottom:16px">
<!-- wp:heading {"level":4} -->
<h4>{{ item.heading or "Question?" }}</h4>
<!-- /wp:heading -->
<!-- wp:paragraph -->
<p>{{ item.body[0] if item.body else "Answer goes here." }}</p>
<!-- /wp:paragraph -->
</div>
<!-- /wp:group -->
{% endfor %}
""" + _SECTION_CLOSE

_CONTACT = _SECTION_OPEN + """\
<!-- wp:heading {"textAlign":"center","level":2} -->
<h2 class="has-text-align-center">{{ c.heading or "Contact Us" }}</h2>
<!-- /wp:heading -->
{% if c.subheading %}
<!-- wp:paragraph {"align":"center"} -->
<p class="has-text-align-center">{{ c.subheading }}</p>
<!-- /wp:paragraph -->
{% endif %}
<!-- wp:paragraph {"align":"center"} -->
<p class="has-text-align-center">{{ c.body[0] if c.body else "Please use the contact form below to get in touch with us." }}</p>
<!-- /wp:paragraph -->
""" + _SECTION_CLOSE

_CONTENT = _SECTION_OPEN + """\
{% if c.heading %}
<!-- wp:heading {"level":2} -->
<h2>{{ c.heading }}</h2>
<!-- /wp:heading -->
{% endif %}
{% if c.subheading %}
<!-- wp:heading {"level":3} -->
<h3>{{ c.subheading }}</h3>
<!-- /wp:heading -->
{% endif %}
{% for text in c.body %}
<!-- wp:paragraph -->
<p>{{ text }}</p>
<!-- /wp:paragraph -->
{% endfor %}
{% if c.buttons %}
<!-- wp:buttons -->
<div class="wp-block-buttons">
{% for label in c.buttons[:2] %}
<!-- wp:button -->
<div class="wp-block-button"><a class="wp-block-button__link wp-element-button">{{ label }}</a></div>
<!-- /wp:button -->
{% endfor %}
</div>
<!-- /wp:buttons -->
{% endif %}
""" + _SECTION_CLOSE

TEMPLATES: Dict[str, str] = {
    "hero.html": _HERO,
    "features.html": _FEATURES,
    "testimonials.html": _TESTIMONIALS,
    "cta.html": _CTA,
    "gallery.html": _GALLERY,
    "stats.html": _STATS,
    "pricing.html": _PRICING,
    "faq.html": _FAQ,
    "contact.html": _CONTACT,
    "content.html": _CONTENT,
}

_env = create_environment(TEMPLATES)


def _template_for(kind: SectionKind) -> str:
    name = f"{kind.value}.html"
    return name if name in TEMPLATES else "content.html"


def render_section(section: Section, tokens: DesignTokens) -> str:
    """渲染单个区块。"""
    content = section.content
    stats = content.items or [ExtractedContent(heading=text) for text in content.body[:4]]
    plans = content.items or [
        ExtractedContent(heading="Basic", body=["$9/month"]),
        ExtractedContent(heading="Pro", body=["$29/month"]),
    ]
    questions = content.items or [ExtractedContent(heading=text) for text in content.body]
    quotes = content.items or [ExtractedContent(body=[text]) for text in content.body[:3]]
    template = _env.get_template(_template_for(section.kind))
    return template.render(
        c=content,
        primary=tokens.colors.primary,
        radius=tokens.border_radius["lg"],
        stats=stats,
        plans=plans,
        questions=questions,
        quotes=quotes,
    )


def render_page(sections: Sequence[Section], tokens: DesignTokens) -> str:
    """渲染整页；没有可用区块时输出一个空段落，保证页面可创建。"""
    blocks: List[str] = [render_section(section, tokens) for section in sections]
    if not blocks:
        return "<!-- wp:paragraph -->\n<p></p>\n<!-- /wp:paragraph -->\n"
    return "\n".join(blocks)
