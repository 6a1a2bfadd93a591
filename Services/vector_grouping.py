import logging

from Services.common import remove_empty_keys

logger = logging.getLogger(__name__)

FIGMA_IMAGES_URL = "https://api.figma.com/v1/images/{file_key}?ids={node_id}"


def group_vector_parents(records: dict) -> dict:
    """
    { parentId: {childrenId, ...} } -> { childrenId: [parentId, ...] }

    Parents whose vector children share the same content id end up in
    the same group, in the order they were recorded.
    """
    children_to_parents = {}
    for parent_id, record in records.items():
        children_to_parents.setdefault(record["childrenId"], []).append(parent_id)
    return children_to_parents


def image_placeholder(node: dict, image_ref: str = None) -> dict:
    """
    Flattened stand-in for a parent of vector art. Children and styling
    are dropped; only the id (and size, when an image url exists) survive.
    """
    if image_ref is None:
        return {"id": node["id"], "type": "IMAGE"}

    return remove_empty_keys({
        "id": node["id"],
        "name": "Image",
        "type": "IMAGE",
        "size": node.get("size"),
        "fills": [
            {
                "type": "IMAGE",
                "scaleMode": "FILL",
                "imageRef": image_ref,
                "opacity": 1,
            }
        ],
    })


def _rewrite(nodes, image_refs, found):
    out = []
    for node in nodes:
        node_id = node.get("id")
        if node_id in image_refs:
            found.add(node_id)
            out.append(image_placeholder(node, image_refs[node_id]))
            continue

        children = node.get("children")
        if children:
            node = {**node, "children": _rewrite(children, image_refs, found)}
        out.append(node)
    return out


def collapse_vector_parents(nodes: list, children_to_parents: dict, file_key: str = None) -> list:
    """
    Return a new node list where every recorded vector parent is replaced
    by an IMAGE placeholder. The input tree is left untouched.

    With a file key, each placeholder points at the Figma render of the
    first parent of its group, so one bitmap serves the whole group.
    """
    image_refs = {}
    for parent_ids in children_to_parents.values():
        image_ref = None
        if file_key:
            image_ref = FIGMA_IMAGES_URL.format(file_key=file_key, node_id=parent_ids[0])
        for parent_id in parent_ids:
            image_refs[parent_id] = image_ref

    found = set()
    rewritten = _rewrite(nodes, image_refs, found)

    missing = [parent_id for parent_id in image_refs if parent_id not in found]
    if missing:
        logger.info(
            "[SIMPLIFY] %d vector parent(s) not found in output tree (pruned or inside a collapsed parent): %s",
            len(missing),
            ", ".join(map(str, missing)),
        )

    return rewritten


def apply_vector_grouping(global_vars, nodes: list, file_key: str = None):
    records = global_vars.pop_vector_parents()
    children_to_parents = group_vector_parents(records)
    nodes = collapse_vector_parents(nodes, children_to_parents, file_key)
    return nodes, children_to_parents
