import hashlib
import json


VAR_ID_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
VAR_ID_LENGTH = 6


def _normalize_numbers(value):
    # 14 and 14.0 are the same payload
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {k: _normalize_numbers(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize_numbers(v) for v in value]
    return value


def canonical_key(value) -> str:
    return json.dumps(
        _normalize_numbers(value), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def generate_var_id(canonical: str, prefix: str = "var", salt: int = 0) -> str:
    """
    Short id for a payload, e.g. "fill_K3Q9ZB".

    Derived from a SHA-1 of the canonical payload so the same design gives
    the same ids on every run.
    """
    seed = canonical if not salt else f"{canonical}#{salt}"
    number = int.from_bytes(hashlib.sha1(seed.encode("utf-8")).digest(), "big")

    chars = []
    for _ in range(VAR_ID_LENGTH):
        number, index = divmod(number, len(VAR_ID_CHARS))
        chars.append(VAR_ID_CHARS[index])

    return f"{prefix}_{''.join(chars)}"


class GlobalVars:
    """
    Content-addressed store of shared style payloads for one simplification run.

    Structurally equal payloads (deep equality, key order ignored) always map
    to the same id. Not safe to share between concurrent runs.
    """

    def __init__(self):
        self._values = {}
        self._ids_by_key = {}
        self._vector_parents = {}

    def __len__(self):
        return len(self._values)

    def __contains__(self, var_id):
        return var_id in self._values

    def __getitem__(self, var_id):
        return self._values[var_id]

    def find_or_create(self, value, prefix: str = "var") -> str:
        key = canonical_key(value)

        existing = self._ids_by_key.get(key)
        if existing is not None:
            return existing

        salt = 0
        var_id = generate_var_id(key, prefix)
        while var_id in self._values:
            salt += 1
            var_id = generate_var_id(key, prefix, salt)

        self._values[var_id] = value
        self._ids_by_key[key] = var_id
        return var_id

    # ---------- transient vector bookkeeping ----------

    def record_vector_parent(self, parent: dict, children_id: str):
        parent_id = parent.get("id")
        self._vector_parents[parent_id] = {
            "parentId": parent_id,
            "parentName": parent.get("name"),
            "parentType": parent.get("type"),
            "childrenId": children_id,
        }

    def pop_vector_parents(self) -> dict:
        records = self._vector_parents
        self._vector_parents = {}
        return records

    def as_dict(self) -> dict:
        return dict(self._values)
