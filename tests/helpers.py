def text_node(node_id, characters, letter_spacing=0, **extra):
    node = {
        "id": node_id,
        "name": characters,
        "type": "TEXT",
        "characters": characters,
        "style": {
            "fontFamily": "Inter",
            "fontWeight": 400,
            "fontSize": 14,
            "lineHeightPx": 20,
            "letterSpacing": letter_spacing,
            "textAlignHorizontal": "LEFT",
            "textAlignVertical": "TOP",
        },
    }
    node.update(extra)
    return node


def vector_node(node_id, name="Vector"):
    return {
        "id": node_id,
        "name": name,
        "type": "VECTOR",
        "fills": [{"type": "SOLID", "color": {"r": 0, "g": 0, "b": 0, "a": 1}}],
    }


def collect_ids(nodes):
    ids = []
    for node in nodes:
        ids.append(node["id"])
        ids.extend(collect_ids(node.get("children") or []))
    return ids
