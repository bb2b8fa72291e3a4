"""测试用的 Figma 节点字典构造函数（与 REST API 返回的结构一致）。"""


def solid(r: float, g: float, b: float, a: float = 1.0) -> dict:
    return {"type": "SOLID", "color": {"r": r, "g": g, "b": b, "a": a}}


def text(characters: str, size: float = 16, name: str = "Text", y: float = 0, **style) -> dict:
    return {
        "type": "TEXT",
        "name": name,
        "characters": characters,
        "absoluteBoundingBox": {"x": 0, "y": y, "width": 200, "height": size * 1.5},
        "style": {"fontSize": size, **style},
    }


def frame(name: str, width: float, height: float, children=(), y: float = 0, **extra) -> dict:
    node = {
        "type": extra.pop("type", "FRAME"),
        "name": name,
        "absoluteBoundingBox": {"x": 0, "y": y, "width": width, "height": height},
        "children": list(children),
    }
    node.update(extra)
    return node


def rect(name: str, width: float, height: float) -> dict:
    return frame(name, width, height, type="RECTANGLE")


def document(*frames) -> dict:
    return {
        "type": "DOCUMENT",
        "name": "Document",
        "children": [{"type": "CANVAS", "name": "Page 1", "children": list(frames)}],
    }
