import os
import logging

import requests
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware

from models import ImageRequest, NodeRequest
from Services.common import check_tree_depth, stringify
from Services.errors import TreeTooDeepError, UnknownPaintTypeError
from Services.figma_service import (
    extract_file_key,
    extract_node_id,
    get_figma_file,
    get_figma_images,
    get_figma_nodes,
)
from Services.simplifier import parse_figma_response

load_dotenv()

FIGMA_COLOR_FORMAT = os.getenv("FIGMA_COLOR_FORMAT", "hex")
FIGMA_MAX_TREE_DEPTH = int(os.getenv("FIGMA_MAX_TREE_DEPTH", "200"))

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _resolve_file_key(req) -> str:
    if req.file_key:
        return req.file_key
    return extract_file_key(req.figma_url)


def _check_depth(figma_json: dict):
    if "nodes" in figma_json:
        for entry in (figma_json.get("nodes") or {}).values():
            if entry:
                check_tree_depth(entry.get("document"), FIGMA_MAX_TREE_DEPTH)
    else:
        check_tree_depth(figma_json.get("document"), FIGMA_MAX_TREE_DEPTH)


@app.get("/")
def root():
    return {"message": "Figma simplifier running"}


@app.post("/node")
def get_node(req: NodeRequest):
    try:
        file_key = _resolve_file_key(req)
        node_id = req.node_id or (extract_node_id(req.figma_url) if req.figma_url else None)

        if node_id:
            figma_json = get_figma_nodes(file_key, node_id, req.depth)
        else:
            figma_json = get_figma_file(file_key, req.depth)

        _check_depth(figma_json)
        design = parse_figma_response(figma_json, file_key, color_format=FIGMA_COLOR_FORMAT)
        logger.info(
            "[SIMPLIFY] %s: %d node(s), %d global var(s)",
            design.get("name"),
            len(design["nodes"]),
            len(design["globalVars"]),
        )

        return Response(content=stringify(design), media_type="application/json")

    except HTTPException:
        raise
    except UnknownPaintTypeError as e:
        logger.exception("[SIMPLIFY] Failed on node paint")
        raise HTTPException(status_code=422, detail=str(e))
    except TreeTooDeepError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except requests.HTTPError as e:
        logger.exception("[FIGMA] Request failed")
        raise HTTPException(status_code=502, detail=f"Error fetching node: {e}")
    except Exception as e:
        logger.exception("[SIMPLIFY] Unexpected failure")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/image")
def get_image(req: ImageRequest):
    try:
        file_key = _resolve_file_key(req)
        images = get_figma_images(file_key, req.node_ids, req.format)
        return {"images": images}

    except HTTPException:
        raise
    except requests.HTTPError as e:
        logger.exception("[FIGMA] Image request failed")
        raise HTTPException(status_code=502, detail=f"Error fetching images: {e}")
    except Exception as e:
        logger.exception("[FIGMA] Unexpected failure")
        raise HTTPException(status_code=500, detail=str(e))


"""
Figma simplifier backend.
FastAPI server exposing the tree simplification engine as tools:
/node returns the simplified design, /image renders node bitmaps.
"""
