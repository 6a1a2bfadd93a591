import pytest

from helpers import text_node, vector_node
from Services.global_vars import GlobalVars


@pytest.fixture
def global_vars():
    return GlobalVars()


@pytest.fixture
def nodes_response():
    return {
        "name": "Checkout",
        "lastModified": "2024-05-01T10:00:00Z",
        "thumbnailUrl": "https://example.com/thumb.png",
        "nodes": {
            "1:1": {
                "document": {
                    "id": "1:1",
                    "name": "Card",
                    "type": "FRAME",
                    "children": [
                        text_node("2:1", "Total"),
                        {
                            "id": "2:2",
                            "name": "Icon",
                            "type": "GROUP",
                            "children": [vector_node("3:1")],
                        },
                    ],
                },
                "components": {
                    "5:1": {"key": "abc", "name": "Button", "description": "", "componentSetId": "5:0"}
                },
                "componentSets": {
                    "5:0": {"key": "def", "name": "Buttons", "description": "All buttons"}
                },
            }
        },
    }
