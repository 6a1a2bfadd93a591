from Services.common import format_px, remove_empty_keys

FRAME_TYPES = {"FRAME", "COMPONENT", "COMPONENT_SET", "INSTANCE", "SECTION"}

AUTO_LAYOUT_MODES = {"HORIZONTAL": "row", "VERTICAL": "column"}


def is_frame(node) -> bool:
    if not node or not isinstance(node, dict):
        return False
    return node.get("type") in FRAME_TYPES or "layoutMode" in node


def is_layout(node) -> bool:
    return isinstance(node, dict) and isinstance(node.get("absoluteBoundingBox"), dict)


def is_in_auto_layout_flow(node, parent) -> bool:
    if not is_frame(parent):
        return False
    return (
        parent.get("layoutMode") in AUTO_LAYOUT_MODES
        and node.get("layoutPositioning") != "ABSOLUTE"
    )


# ===============================
# ALIGNMENT
# ===============================

def _direction(axis, mode):
    if axis == "primary":
        return "horizontal" if mode == "row" else "vertical"
    return "vertical" if mode == "row" else "horizontal"


def convert_align(axis_align, children=None, axis=None, mode="none"):
    # Every in-flow child filling the axis means the container stretches them
    if children and mode != "none":
        sizing_key = (
            "layoutSizingHorizontal"
            if _direction(axis, mode) == "horizontal"
            else "layoutSizingVertical"
        )
        if all(
            c.get("layoutPositioning") == "ABSOLUTE" or c.get(sizing_key) == "FILL"
            for c in children
        ):
            return "stretch"

    return {
        "MAX": "flex-end",
        "CENTER": "center",
        "SPACE_BETWEEN": "space-between",
        "BASELINE": "baseline",
    }.get(axis_align)


def convert_self_align(align):
    return {
        "MIN": "flex-start",
        "MAX": "flex-end",
        "CENTER": "center",
        "STRETCH": "stretch",
    }.get(align)


def convert_sizing(sizing):
    return {"FIXED": "fixed", "FILL": "fill", "HUG": "hug"}.get(sizing)


def css_shorthand(top=0, right=0, bottom=0, left=0):
    if not any((top, right, bottom, left)):
        return None
    if top == right == bottom == left:
        return format_px(top)
    if top == bottom and right == left:
        return f"{format_px(top)} {format_px(right)}"
    if right == left:
        return f"{format_px(top)} {format_px(right)} {format_px(bottom)}"
    return f"{format_px(top)} {format_px(right)} {format_px(bottom)} {format_px(left)}"


# ===============================
# CONTAINER (AUTO-LAYOUT)
# ===============================

def _frame_values(node):
    if not is_frame(node):
        return {"mode": "none"}

    mode = AUTO_LAYOUT_MODES.get(node.get("layoutMode"), "none")
    out = {"mode": mode}

    overflow = node.get("overflowDirection") or ""
    scroll = [axis for key, axis in (("HORIZONTAL", "x"), ("VERTICAL", "y")) if key in overflow]
    if scroll:
        out["overflowScroll"] = scroll

    if mode == "none":
        return out

    children = [c for c in node.get("children") or [] if isinstance(c, dict)]
    out["justifyContent"] = convert_align(
        node.get("primaryAxisAlignItems", "MIN"), children, "primary", mode
    )
    out["alignItems"] = convert_align(
        node.get("counterAxisAlignItems", "MIN"), children, "counter", mode
    )
    out["alignSelf"] = convert_self_align(node.get("layoutAlign"))
    out["wrap"] = True if node.get("layoutWrap") == "WRAP" else None
    out["gap"] = format_px(node["itemSpacing"]) if node.get("itemSpacing") else None
    out["padding"] = css_shorthand(
        node.get("paddingTop", 0),
        node.get("paddingRight", 0),
        node.get("paddingBottom", 0),
        node.get("paddingLeft", 0),
    )
    return out


# ===============================
# CHILD (SIZING & POSITION)
# ===============================

def _layout_values(node, parent, mode):
    if not is_layout(node):
        return {}

    out = {
        "sizing": {
            "horizontal": convert_sizing(node.get("layoutSizingHorizontal")),
            "vertical": convert_sizing(node.get("layoutSizingVertical")),
        }
    }

    if is_frame(parent) and not is_in_auto_layout_flow(node, parent):
        if node.get("layoutPositioning") == "ABSOLUTE":
            out["position"] = "absolute"
        parent_box = parent.get("absoluteBoundingBox")
        if isinstance(parent_box, dict):
            box = node["absoluteBoundingBox"]
            out["locationRelativeToParent"] = {
                "x": box.get("x", 0) - parent_box.get("x", 0),
                "y": box.get("y", 0) - parent_box.get("y", 0),
            }

    box = node["absoluteBoundingBox"]
    horizontal = node.get("layoutSizingHorizontal")
    vertical = node.get("layoutSizingVertical")
    dimensions = {}

    if mode == "row":
        if not node.get("layoutGrow") and horizontal == "FIXED":
            dimensions["width"] = box.get("width")
        if node.get("layoutAlign") != "STRETCH" and vertical == "FIXED":
            dimensions["height"] = box.get("height")
    elif mode == "column":
        if node.get("layoutAlign") != "STRETCH" and horizontal == "FIXED":
            dimensions["width"] = box.get("width")
        if not node.get("layoutGrow") and vertical == "FIXED":
            dimensions["height"] = box.get("height")
    else:
        if horizontal in (None, "FIXED"):
            dimensions["width"] = box.get("width")
        if vertical in (None, "FIXED"):
            dimensions["height"] = box.get("height")

    if node.get("preserveRatio") and dimensions.get("width") and dimensions.get("height"):
        dimensions["aspectRatio"] = dimensions["width"] / dimensions["height"]

    out["dimensions"] = dimensions
    return out


def build_simplified_layout(node, parent=None) -> dict:
    """
    Describe how a node lays out its children and sits inside its parent,
    in flexbox vocabulary. Empty values are already stripped.

    Example (auto-layout frame):
        {"mode": "row", "alignItems": "center", "gap": "8px", "padding": "16px"}
    """
    frame_values = _frame_values(node)
    layout = {**frame_values, **_layout_values(node, parent, frame_values["mode"])}
    return remove_empty_keys(layout)
