"""
内容结构文件生成 — 自定义文章类型插件（mu-plugin）与 ACF 字段组 JSON

  - mu-plugin 自动加载，无需激活
  - 字段组以 ACF JSON 同步格式写出，ACF 在首次加载后台时自动导入
"""
import json
from typing import Any, Dict, List, Sequence

from generators.environment import create_environment
from messages.plan_messages import ContentField, ContentType

STRUCTURES_PLUGIN_SLUG = "ai-site-builder-structures"

# 计划中的字段类型 → ACF 字段类型；未知类型按 text 处理
ACF_FIELD_TYPES = {
    "text": "text",
    "textarea": "textarea",
    "wysiwyg": "wysiwyg",
    "image": "image",
    "gallery": "gallery",
    "date_picker": "date_picker",
    "number": "number",
    "true_false": "true_false",
}

_PLUGIN_PHP = """\
<?php
/**
 * Plugin Name: AI Site Builder - Custom Structures
 * Description: Custom post types and taxonomies generated by AI Site Builder
 * Version: 1.0.0
 * Author: AI Site Builder
 */

if (!defined('ABSPATH')) {
    exit;
}

add_action('init', function() {
{% for pt in post_types %}
    {% set name = pt.name|php %}
    // {{ name }}
    register_post_type('{{ pt.slug|slug }}', array(
        'labels' => array(
            'name' => '{{ name }}s',
            'singular_name' => '{{ name }}',
            'menu_name' => '{{ name }}s',
            'add_new' => 'Add New',
            'add_new_item' => 'Add New {{ name }}',
            'edit_item' => 'Edit {{ name }}',
            'new_item' => 'New {{ name }}',
            'view_item' => 'View {{ name }}',
            'search_items' => 'Search {{ name }}s',
            'not_found' => 'No {{ name|lower }}s found',
            'not_found_in_trash' => 'No {{ name|lower }}s found in trash'
        ),
        'description' => '{{ pt.description|php }}',
        'public' => true,
        'show_ui' => true,
        'show_in_menu' => true,
        'show_in_rest' => true,
        'menu_icon' => '{{ pt.icon|php }}',
        'supports' => array({% for s in pt.supports %}'{{ s|php }}'{% if not loop.last %}, {% endif %}{% endfor %}),
        'has_archive' => true,
        'rewrite' => array('slug' => '{{ pt.slug|slug }}')
    ));
{% for tax in pt.taxonomies %}
    {% set tax_name = tax.name|php %}
    register_taxonomy('{{ tax.slug|slug }}', '{{ pt.slug|slug }}', array(
        'labels' => array(
            'name' => '{{ tax_name }}s',
            'singular_name' => '{{ tax_name }}',
            'search_items' => 'Search {{ tax_name }}s',
            'all_items' => 'All {{ tax_name }}s',
            'parent_item' => 'Parent {{ tax_name }}',
            'parent_item_colon' => 'Parent {{ tax_name }}:',
            'edit_item' => 'Edit {{ tax_name }}',
            'update_item' => 'Update {{ tax_name }}',
            'add_new_item' => 'Add New {{ tax_name }}',
            'new_item_name' => 'New {{ tax_name }} Name',
            'menu_name' => '{{ tax_name }}s'
        ),
        'hierarchical' => {{ 'true' if tax.hierarchical else 'false' }},
        'show_ui' => true,
        'show_admin_column' => true,
        'query_var' => true,
        'show_in_rest' => true,
        'rewrite' => array('slug' => '{{ tax.slug|slug }}')
    ));
{% endfor %}

{% endfor %}
});
"""

_env = create_environment({"structures.php": _PLUGIN_PHP})


def render_structures_plugin(post_types: Sequence[ContentType]) -> str:
    """渲染注册文章类型与分类法的 mu-plugin。"""
    return _env.get_template("structures.php").render(post_types=post_types)


# ============================================================
# ACF 字段组
# ============================================================


def acf_field(field: ContentField, group_key: str) -> Dict[str, Any]:
    return {
        "key": f"{group_key}_{field.name}",
        "label": field.label,
        "name": field.name,
        "type": ACF_FIELD_TYPES.get(field.type, "text"),
        "instructions": field.instructions,
        "required": 1 if field.required else 0,
        "conditional_logic": 0,
        "wrapper": {"width": "", "class": "", "id": ""},
    }


def build_field_groups(post_types: Sequence[ContentType]) -> Dict[str, Dict[str, Any]]:
    """文件名 → 字段组。没有字段的文章类型不生成字段组。"""
    groups: Dict[str, Dict[str, Any]] = {}
    for post_type in post_types:
        if not post_type.fields:
            continue
        group_key = f"group_{post_type.slug}"
        fields: List[Dict[str, Any]] = [acf_field(f, group_key) for f in post_type.fields]
        groups[f"{group_key}.json"] = {
            "key": group_key,
            "title": f"{post_type.name} Fields",
            "fields": fields,
            "location": [[
                {"param": "post_type", "operator": "==", "value": post_type.slug},
            ]],
            "menu_order": 0,
            "position": "normal",
            "style": "default",
            "label_placement": "top",
            "instruction_placement": "label",
            "hide_on_screen": "",
            "active": True,
            "description": "",
        }
    return groups


def render_field_group(group: Dict[str, Any]) -> str:
    return json.dumps(group, indent=2, ensure_ascii=False) + "\n"
