"""
子主题文件生成 — style.css / functions.php / theme.json

设计令牌通过 CSS 自定义属性（style.css）与 theme.json 预设两条路径进入主题，
块编辑器与前台使用同一套值。
"""
import json
from typing import Any, Dict, List

from generators.environment import create_environment
from messages.design_messages import DesignTokens
from utils.validators import sanitize_name

_STYLE_CSS = """\
/*
Theme Name: {{ child_theme }}
Template: {{ parent_theme }}
Description: AI-generated child theme with design tokens from Figma
Author: AI Site Builder
Version: 1.0.0
*/

/* ==========================================================================
   Design Tokens from Figma
   ========================================================================== */

:root {
  /* Colors */
{% for slug, value in colors.items() %}
  --wp--preset--color--{{ slug }}: {{ value }};
{% endfor %}

  /* Font Families */
  --wp--preset--font-family--primary: {{ tokens.primary_font }};
  --wp--preset--font-family--secondary: {{ tokens.secondary_font }};

  /* Font Sizes */
{% for slug, value in tokens.typography.font_sizes.items() %}
  --wp--preset--font-size--{{ slug }}: {{ value }};
{% endfor %}

  /* Font Weights */
{% for slug, value in tokens.typography.font_weights.items() %}
  --wp--custom--font-weight--{{ slug }}: {{ value }};
{% endfor %}

  /* Line Heights */
{% for slug, value in tokens.typography.line_heights.items() %}
  --wp--custom--line-height--{{ slug }}: {{ value }};
{% endfor %}

  /* Spacing */
{% for slug, value in tokens.spacing.items() %}
  --wp--custom--spacing--{{ slug }}: {{ value }};
{% endfor %}

  /* Border Radius */
{% for slug, value in tokens.border_radius.items() %}
  --wp--custom--radius--{{ slug }}: {{ value }};
{% endfor %}

  /* Shadows */
{% for slug, value in tokens.shadows.items() %}
  --wp--custom--shadow--{{ slug }}: {{ value }};
{% endfor %}
}

body {
  font-family: var(--wp--preset--font-family--primary);
  font-size: var(--wp--preset--font-size--base);
  line-height: var(--wp--custom--line-height--normal);
  color: var(--wp--preset--color--text);
  background-color: var(--wp--preset--color--background);
}

h1, h2, h3, h4, h5, h6 {
  font-family: var(--wp--preset--font-family--secondary);
  font-weight: var(--wp--custom--font-weight--bold);
  line-height: var(--wp--custom--line-height--tight);
}

a {
  color: var(--wp--preset--color--primary);
}

a:hover {
  color: var(--wp--preset--color--secondary);
}

.wp-block-button__link {
  background-color: var(--wp--preset--color--primary);
  border-radius: var(--wp--custom--radius--md);
  font-weight: var(--wp--custom--font-weight--semibold);
  box-shadow: var(--wp--custom--shadow--sm);
}

.wp-block-button.is-style-outline .wp-block-button__link {
  background-color: transparent;
  border: 2px solid var(--wp--preset--color--primary);
  color: var(--wp--preset--color--primary);
}
"""

_FUNCTIONS_PHP = """\
<?php
/**
 * {{ child_theme|php }} Functions
 *
 * Child theme for AI-generated site structure
 */

if (!defined('ABSPATH')) {
    exit;
}

add_action('wp_enqueue_scripts', function() {
    wp_enqueue_style('parent-style', get_template_directory_uri() . '/style.css');
    wp_enqueue_style('child-style',
        get_stylesheet_directory_uri() . '/style.css',
        array('parent-style'),
        wp_get_theme()->get('Version')
    );
});

add_action('after_setup_theme', function() {
    add_theme_support('post-thumbnails');
    add_theme_support('responsive-embeds');
    add_theme_support('editor-styles');
    add_theme_support('wp-block-styles');
});
"""

_env = create_environment({"style.css": _STYLE_CSS, "functions.php": _FUNCTIONS_PHP})

_SCALE_NAMES = {
    "xs": "Extra Small", "sm": "Small", "base": "Base", "md": "Medium",
    "lg": "Large", "xl": "Extra Large", "2xl": "2X Large", "3xl": "3X Large",
    "4xl": "4X Large",
}


def palette(tokens: DesignTokens) -> Dict[str, str]:
    """主题调色板只收语义颜色；原始颜色表不进入主题。"""
    return {
        "primary": tokens.colors.primary,
        "secondary": tokens.colors.secondary,
        "text": tokens.colors.text,
        "background": tokens.colors.background,
    }


def _presets(values: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        {"slug": slug, "size": size, "name": _SCALE_NAMES.get(slug, slug)}
        for slug, size in values.items()
    ]


def render_style_css(child_theme: str, parent_theme: str, tokens: DesignTokens) -> str:
    return _env.get_template("style.css").render(
        child_theme=sanitize_name(child_theme),
        parent_theme=sanitize_name(parent_theme),
        tokens=tokens,
        colors=palette(tokens),
    )


def render_functions_php(child_theme: str) -> str:
    return _env.get_template("functions.php").render(child_theme=child_theme)


def build_theme_json(tokens: DesignTokens) -> Dict[str, Any]:
    """生成 theme.json（version 2）的字典结构。"""
    typography = tokens.typography
    return {
        "$schema": "https://schemas.wp.org/trunk/theme.json",
        "version": 2,
        "settings": {
            "color": {
                "defaultPalette": False,
                "palette": [
                    {"slug": slug, "color": value, "name": slug.title()}
                    for slug, value in palette(tokens).items()
                ],
            },
            "typography": {
                "fontFamilies": [
                    {"slug": "primary", "fontFamily": tokens.primary_font, "name": "Primary"},
                    {"slug": "secondary", "fontFamily": tokens.secondary_font, "name": "Secondary"},
                ],
                "fontSizes": _presets(typography.font_sizes),
            },
            "spacing": {
                "units": ["px", "em", "rem", "%"],
                "spacingSizes": _presets(tokens.spacing),
            },
            "custom": {
                "spacing": dict(tokens.spacing),
                "borderRadius": dict(tokens.border_radius),
                "shadows": dict(tokens.shadows),
                "fontWeights": dict(typography.font_weights),
                "lineHeights": dict(typography.line_heights),
            },
        },
        "styles": {
            "color": {
                "background": tokens.colors.background,
                "text": tokens.colors.text,
            },
            "typography": {
                "fontFamily": "var(--wp--preset--font-family--primary)",
                "fontSize": typography.font_sizes["base"],
                "lineHeight": typography.line_heights["normal"],
            },
            "elements": {
                "button": {
                    "color": {"background": tokens.colors.primary, "text": "#ffffff"},
                    "border": {"radius": tokens.border_radius["md"]},
                    "typography": {
                        "fontFamily": "var(--wp--preset--font-family--primary)",
                        "fontWeight": str(typography.font_weights["semibold"]),
                    },
                },
                "link": {
                    "color": {"text": tokens.colors.primary},
                    ":hover": {"color": {"text": tokens.colors.secondary}},
                },
                "heading": {
                    "typography": {
                        "fontFamily": "var(--wp--preset--font-family--secondary)",
                        "fontWeight": str(typography.font_weights["bold"]),
                        "lineHeight": typography.line_heights["tight"],
                    },
                    "color": {"text": tokens.colors.text},
                },
                "h1": {"typography": {"fontSize": typography.font_sizes["4xl"]}},
                "h2": {"typography": {"fontSize": typography.font_sizes["3xl"]}},
                "h3": {"typography": {"fontSize": typography.font_sizes["2xl"]}},
                "h4": {"typography": {"fontSize": typography.font_sizes["xl"]}},
            },
            "blocks": {
                "core/quote": {
                    "border": {
                        "left": {"color": tokens.colors.primary, "width": "4px", "style": "solid"},
                    },
                    "spacing": {"padding": {"left": tokens.spacing["lg"]}},
                },
            },
        },
    }


def render_theme_json(tokens: DesignTokens) -> str:
    return json.dumps(build_theme_json(tokens), indent=2, ensure_ascii=False) + "\n"
