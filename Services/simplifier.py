import logging

from Services.colors import convert_color, format_rgba_color
from Services.common import (
    format_px,
    has_value,
    is_number,
    is_stroke_weights,
    is_truthy,
    remove_empty_keys,
)
from Services.errors import UnknownPaintTypeError
from Services.global_vars import GlobalVars
from Services.layout_parser import build_simplified_layout
from Services.vector_grouping import apply_vector_grouping

logger = logging.getLogger(__name__)

GRADIENT_TYPES = {
    "GRADIENT_LINEAR",
    "GRADIENT_RADIAL",
    "GRADIENT_ANGULAR",
    "GRADIENT_DIAMOND",
}

COLOR_FORMATS = {"hex", "rgba"}


def _is_non_empty_list(value) -> bool:
    return isinstance(value, list) and len(value) > 0


def _is_non_empty_dict(value) -> bool:
    return isinstance(value, dict) and len(value) > 0


# ===============================
# PAINT (fills, strokes)
# ===============================

def _color_token(color, opacity, color_format):
    if color_format == "rgba":
        return format_rgba_color(color, opacity)
    return convert_color(color, opacity)


def parse_paint(raw: dict, color_format: str = "hex") -> dict:
    paint_type = raw.get("type")

    if paint_type == "SOLID":
        token = _color_token(raw.get("color") or {}, raw.get("opacity", 1), color_format)
        if color_format == "rgba":
            return {"type": "SOLID", "rgba": token}
        return {"type": "SOLID", **token}

    if paint_type == "IMAGE":
        return {
            "type": "IMAGE",
            "imageRef": raw.get("imageRef"),
            "scaleMode": raw.get("scaleMode"),
        }

    if paint_type in GRADIENT_TYPES:
        return {
            "type": paint_type,
            "gradientHandlePositions": raw.get("gradientHandlePositions"),
            "gradientStops": [
                {
                    "position": stop.get("position"),
                    "color": _color_token(stop.get("color") or {}, 1, color_format),
                }
                for stop in raw.get("gradientStops") or []
            ],
        }

    raise UnknownPaintTypeError(paint_type)


def _parse_paints(paints, node_id, color_format):
    try:
        return [parse_paint(p, color_format) for p in paints]
    except UnknownPaintTypeError as e:
        raise UnknownPaintTypeError(e.paint_type, node_id=node_id) from e


# ===============================
# TEXT
# ===============================

def build_text_style(style: dict) -> dict:
    font_size = style.get("fontSize")
    line_height = style.get("lineHeightPx") or font_size
    letter_spacing = style.get("letterSpacing")

    return {
        "fontFamily": style.get("fontFamily"),
        "fontWeight": style.get("fontWeight"),
        "fontSize": font_size,
        "lineHeight": format_px(line_height) if line_height else None,
        "letterSpacing": format_px(letter_spacing) if letter_spacing else None,
        "textCase": style.get("textCase"),
        "textAlignHorizontal": style.get("textAlignHorizontal"),
        "textAlignVertical": style.get("textAlignVertical"),
    }


# ===============================
# NODE
# ===============================

def parse_node(global_vars: GlobalVars, node: dict, parent: dict = None, color_format: str = "hex"):
    """
    Simplify one raw Figma node (and its subtree).

    Returns None for invisible nodes. Styles, paints, layouts and stroke
    weights are moved into `global_vars` and referenced by id.
    """
    if not node or node.get("visible") is False:
        return None

    simplified = {
        "id": node.get("id"),
        "name": node.get("name"),
        "type": node.get("type"),
    }

    if has_value("style", node, _is_non_empty_dict):
        text_style = remove_empty_keys(build_text_style(node["style"]))
        if text_style:
            simplified["textStyle"] = global_vars.find_or_create(text_style, "style")

    if has_value("fills", node, _is_non_empty_list):
        fills = _parse_paints(node["fills"], node.get("id"), color_format)
        simplified["fills"] = global_vars.find_or_create(remove_empty_keys(fills), "fill")

    if has_value("strokes", node, _is_non_empty_list):
        strokes = _parse_paints(node["strokes"], node.get("id"), color_format)
        simplified["strokes"] = global_vars.find_or_create(remove_empty_keys(strokes), "stroke")

    # A lone {"mode": "none"} is not worth a variable
    layout = build_simplified_layout(node, parent)
    if len(layout) > 1:
        simplified["layout"] = global_vars.find_or_create(layout, "layout")

    if has_value("characters", node, is_truthy):
        simplified["text"] = node["characters"]

    if has_value("strokeWeight", node, is_number) and simplified.get("strokes"):
        simplified["strokeWeight"] = node["strokeWeight"]

    if has_value("strokeDashes", node, _is_non_empty_list):
        simplified["strokeDashes"] = node["strokeDashes"]

    if has_value("individualStrokeWeights", node, is_stroke_weights):
        weights = node["individualStrokeWeights"]
        simplified["individualStrokeWeights"] = global_vars.find_or_create(
            {
                "top": weights["top"],
                "right": weights["right"],
                "bottom": weights["bottom"],
                "left": weights["left"],
            },
            "weights",
        )

    if has_value("opacity", node, is_number):
        simplified["opacity"] = node["opacity"]

    if has_value("cornerRadius", node, is_number):
        simplified["borderRadius"] = format_px(node["cornerRadius"])

    children = []
    for child in node.get("children") or []:
        parsed = parse_node(global_vars, child, node, color_format)
        if parsed is not None:
            children.append(parsed)
    if children:
        simplified["children"] = children

    if has_value("absoluteBoundingBox", node, _is_non_empty_dict):
        box = node["absoluteBoundingBox"]
        simplified["size"] = {"width": box.get("width"), "height": box.get("height")}

    simplified = remove_empty_keys(simplified)

    if simplified.get("type") == "VECTOR":
        payload = {k: v for k, v in simplified.items() if k != "id"}
        vector_id = global_vars.find_or_create(payload, "vector")
        if parent:
            global_vars.record_vector_parent(parent, vector_id)

    return simplified


# ===============================
# COMPONENTS
# ===============================

def _simplify_components(raw: dict, with_set_id: bool = False) -> dict:
    out = {}
    for key, component in (raw or {}).items():
        if not isinstance(component, dict):
            continue
        entry = {
            "key": component.get("key"),
            "name": component.get("name"),
            "description": component.get("description"),
        }
        if with_set_id:
            entry["componentSetId"] = component.get("componentSetId")
        out[key] = remove_empty_keys(entry)
    return out


# ===============================
# RESPONSE
# ===============================

def _root_documents(data: dict):
    if "nodes" in data:
        for entry in (data.get("nodes") or {}).values():
            if entry and entry.get("document"):
                yield entry["document"], entry
        return

    document = data.get("document") or {}
    for child in document.get("children") or []:
        yield child, data


def parse_figma_response(data: dict, file_key: str = None, color_format: str = "hex") -> dict:
    """
    Turn a Figma GET /files or GET /files/:key/nodes response into
    { name, lastModified, thumbnailUrl, nodes, components, componentSets, globalVars }.
    """
    if color_format not in COLOR_FORMATS:
        raise ValueError(f"Unsupported color format: {color_format}")

    global_vars = GlobalVars()
    nodes = []
    components = {}
    component_sets = {}
    seen_sources = set()

    for document, source in _root_documents(data):
        parsed = parse_node(global_vars, document, color_format=color_format)
        if parsed is not None:
            nodes.append(parsed)
        if id(source) not in seen_sources:
            seen_sources.add(id(source))
            components.update(_simplify_components(source.get("components"), with_set_id=True))
            component_sets.update(_simplify_components(source.get("componentSets")))

    nodes, children_to_parents = apply_vector_grouping(global_vars, nodes, file_key)

    logger.debug(
        "[SIMPLIFY] %s: %d root nodes, %d variables, %d vector groups",
        data.get("name"),
        len(nodes),
        len(global_vars),
        len(children_to_parents),
    )

    result = {
        "name": data.get("name"),
        "lastModified": data.get("lastModified"),
        "nodes": nodes,
        "globalVars": {
            **global_vars.as_dict(),
            "childrenToParents": children_to_parents,
        },
    }
    if data.get("thumbnailUrl"):
        result["thumbnailUrl"] = data["thumbnailUrl"]
    if components:
        result["components"] = components
    if component_sets:
        result["componentSets"] = component_sets
    return result
