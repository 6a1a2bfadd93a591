from typing import List, Literal, Optional

from pydantic import BaseModel, Field, HttpUrl, model_validator


class FigmaTarget(BaseModel):
    figma_url: Optional[HttpUrl] = None
    file_key: Optional[str] = None

    @model_validator(mode="after")
    def _require_file(self):
        if not self.figma_url and not self.file_key:
            raise ValueError("figma_url or file_key is required")
        return self


class NodeRequest(FigmaTarget):
    node_id: Optional[str] = None
    depth: Optional[int] = Field(default=None, ge=1)


class ImageRequest(FigmaTarget):
    node_ids: List[str] = Field(min_length=1)
    format: Literal["png", "jpg", "svg", "pdf"] = "png"
