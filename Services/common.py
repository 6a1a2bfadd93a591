import json
import numbers

from Services.errors import SerializationError, TreeTooDeepError


# ===============================
# IDENTITY PREDICATES
# ===============================

def has_value(key, node, predicate=None) -> bool:
    """
    True when `node` has `key`, the value is not None and, if given,
    `predicate(value)` holds.
    """
    if not isinstance(node, dict) or key not in node:
        return False
    value = node[key]
    if value is None:
        return False
    if predicate is not None:
        return bool(predicate(value))
    return True


def is_truthy(value) -> bool:
    return bool(value)


def is_number(value) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def is_stroke_weights(value) -> bool:
    if not isinstance(value, dict):
        return False
    return all(is_number(value.get(side)) for side in ("top", "right", "bottom", "left"))


def format_px(value) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value}px"


# ===============================
# EMPTY KEY PRUNING
# ===============================

def _is_empty(value) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, dict)) and len(value) == 0:
        return True
    return False


def remove_empty_keys(value):
    """
    Drop keys whose value is None, [] or {} (recursively).
    Lists are cleaned element-wise, scalars come back unchanged.
    """
    if isinstance(value, list):
        return [remove_empty_keys(item) for item in value]

    if not isinstance(value, dict):
        return value

    out = {}
    for key, item in value.items():
        cleaned = remove_empty_keys(item)
        if _is_empty(cleaned):
            continue
        out[key] = cleaned
    return out


# ===============================
# JSON
# ===============================

def stringify(data, indent=2) -> str:
    try:
        return json.dumps(data, indent=indent, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError("Failed to stringify file") from e


def parse(text: str):
    try:
        return json.loads(text)
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError("Failed to parse JSON") from e


# ===============================
# DEPTH GUARD
# ===============================

def check_tree_depth(root, max_depth: int) -> int:
    """
    Walk a raw Figma tree without recursion and raise TreeTooDeepError
    once a node sits deeper than `max_depth`. Returns the depth found.
    """
    deepest = 0
    stack = [(root, 1)]
    while stack:
        node, depth = stack.pop()
        if not isinstance(node, dict):
            continue
        if depth > max_depth:
            raise TreeTooDeepError(max_depth)
        deepest = max(deepest, depth)
        for child in node.get("children") or []:
            stack.append((child, depth + 1))
    return deepest
