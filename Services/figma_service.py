import os
import re
import time
import logging

import requests
from dotenv import load_dotenv
from fastapi import HTTPException

from Services.common import parse

load_dotenv()

logger = logging.getLogger(__name__)

FIGMA_API_BASE = os.getenv("FIGMA_API_BASE", "https://api.figma.com/v1").rstrip("/")
FIGMA_REQUEST_TIMEOUT = float(os.getenv("FIGMA_REQUEST_TIMEOUT", "30"))
FIGMA_IMAGE_MAX_RETRIES = int(os.getenv("FIGMA_IMAGE_MAX_RETRIES", "2"))
FIGMA_IMAGE_RETRY_BACKOFF = float(os.getenv("FIGMA_IMAGE_RETRY_BACKOFF", "2"))
FIGMA_IMAGE_COOLDOWN_SECONDS = int(os.getenv("FIGMA_IMAGE_COOLDOWN_SECONDS", "60"))

IMAGE_BATCH_SIZE = 100

_FIGMA_IMAGE_COOLDOWN = {}


def _headers() -> dict:
    token = os.getenv("FIGMA_TOKEN")
    if not token:
        raise RuntimeError("FIGMA_TOKEN not set")
    return {"X-Figma-Token": token}


def _cooldown_active(file_key: str) -> bool:
    last = _FIGMA_IMAGE_COOLDOWN.get(file_key)
    if not last:
        return False
    return (time.time() - last) < FIGMA_IMAGE_COOLDOWN_SECONDS


def _mark_cooldown(file_key: str):
    _FIGMA_IMAGE_COOLDOWN[file_key] = time.time()


# ------------------------------------------------------------------
# URL HELPERS
# ------------------------------------------------------------------

def extract_file_key(figma_url: str) -> str:
    figma_url = str(figma_url)

    match = re.search(r"/(file|design|make)/([a-zA-Z0-9]+)", figma_url)
    if not match:
        raise HTTPException(status_code=400, detail="Invalid Figma URL")

    return match.group(2)


def extract_node_id(figma_url: str):
    """
    "...?node-id=12-34" -> "12:34". Returns None when the url has no node id.
    """
    match = re.search(r"[?&]node-id=([^&#]+)", str(figma_url))
    if not match:
        return None
    return match.group(1).replace("%3A", ":").replace("-", ":")


# ------------------------------------------------------------------
# FILE / NODES
# ------------------------------------------------------------------

def _get(path: str, params: dict = None) -> dict:
    response = requests.get(
        f"{FIGMA_API_BASE}{path}",
        headers=_headers(),
        params=params,
        timeout=FIGMA_REQUEST_TIMEOUT,
    )
    response.raise_for_status()
    return parse(response.text)


def get_figma_file(file_key: str, depth: int = None) -> dict:
    params = {"depth": depth} if depth is not None else None
    logger.info("[FIGMA] Fetching file %s (depth: %s)", file_key, depth or "default")
    return _get(f"/files/{file_key}", params)


def get_figma_nodes(file_key: str, node_id: str, depth: int = None) -> dict:
    params = {"ids": node_id}
    if depth is not None:
        params["depth"] = depth
    logger.info("[FIGMA] Fetching node %s from file %s (depth: %s)", node_id, file_key, depth or "default")
    return _get(f"/files/{file_key}/nodes", params)


# ------------------------------------------------------------------
# FIGMA IMAGE API
# ------------------------------------------------------------------

def get_figma_images(file_key: str, node_ids: list, image_format: str = "png") -> dict:
    """
    Ask Figma to render nodes. Returns { node_id: image_url }.

    Requests go out in batches of 100 ids. HTTP 429 is retried with
    Retry-After (or exponential backoff); once retries run out the file
    enters a cooldown and whatever was fetched so far is returned.
    """
    if not node_ids:
        return {}

    if _cooldown_active(file_key):
        logger.warning("[FIGMA] Image fetch cooldown active, skipping API call")
        return {}

    url = f"{FIGMA_API_BASE}/images/{file_key}"
    images = {}

    for i in range(0, len(node_ids), IMAGE_BATCH_SIZE):
        chunk = node_ids[i : i + IMAGE_BATCH_SIZE]
        params = {
            "ids": ",".join(chunk),
            "format": image_format
        }

        for attempt in range(FIGMA_IMAGE_MAX_RETRIES + 1):
            response = requests.get(url, headers=_headers(), params=params, timeout=FIGMA_REQUEST_TIMEOUT)
            if response.status_code == 429:
                retry_after = response.headers.get("Retry-After")
                try:
                    wait = float(retry_after) if retry_after else FIGMA_IMAGE_RETRY_BACKOFF * (2 ** attempt)
                except ValueError:
                    wait = FIGMA_IMAGE_RETRY_BACKOFF * (2 ** attempt)
                if attempt < FIGMA_IMAGE_MAX_RETRIES:
                    time.sleep(wait)
                    continue
                logger.warning("[FIGMA] Image fetch rate-limited; skipping remaining images.")
                _mark_cooldown(file_key)
                return images

            response.raise_for_status()
            images.update(parse(response.text).get("images") or {})
            break

    logger.info("[FIGMA] Rendered %d image(s) for file %s", len(images), file_key)
    return images
