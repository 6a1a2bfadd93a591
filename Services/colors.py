import math


def _channel(value) -> int:
    # Math.round semantics: halves go up
    return int(math.floor(value * 255 + 0.5))


def _alpha(color: dict, opacity) -> float:
    # Alpha defaults to 1. Paint opacity and alpha are multiplicative.
    a = math.floor(opacity * color.get("a", 1) * 100 + 0.5) / 100
    return min(max(a, 0), 1)


def convert_color(color: dict, opacity=1) -> dict:
    """
    Convert a Figma RGBA color (0-1 channels) into { hex, opacity }.

    Example:
        {"r": 1, "g": 0, "b": 0, "a": 0.5}, 0.5 -> {"hex": "#FF0000", "opacity": 0.25}
    """
    r = _channel(color.get("r", 0))
    g = _channel(color.get("g", 0))
    b = _channel(color.get("b", 0))

    return {
        "hex": "#{:02X}{:02X}{:02X}".format(r, g, b),
        "opacity": _alpha(color, opacity),
    }


def format_rgba_color(color: dict, opacity=1) -> str:
    r = _channel(color.get("r", 0))
    g = _channel(color.get("g", 0))
    b = _channel(color.get("b", 0))
    a = _alpha(color, opacity)
    if float(a).is_integer():
        a = int(a)

    return f"rgba({r}, {g}, {b}, {a})"
