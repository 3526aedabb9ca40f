"""Pydantic schemas for Pastec server responses and search results."""
from typing import Annotated, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict

T = TypeVar("T")


def _array_or_empty(value):
    """Treat a missing or non-array field as an empty array."""
    return value if isinstance(value, list) else []


# Server arrays are optional and loosely typed
LenientList = Annotated[list[T], BeforeValidator(_array_or_empty)]


def _scalar_to_str(value):
    """Render numeric tags as text; other non-strings still fail."""
    if isinstance(value, (int, float)):
        return str(value)
    return value


Tag = Annotated[str | None, BeforeValidator(_scalar_to_str)]


class BoundingRect(BaseModel):
    """Region of the indexed image that matched the query."""
    model_config = ConfigDict(frozen=True)

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0


class SearchMatch(BaseModel):
    """Single match returned by an image query."""
    model_config = ConfigDict(frozen=True)

    image_id: int
    tag: str = ""
    score: float = 0.0
    bounding_rect: BoundingRect = BoundingRect()


class PastecResponse(BaseModel):
    """Any server reply. Only the type discriminant is mandatory."""
    model_config = ConfigDict(extra="allow")

    type: str


class ImageIdResponse(PastecResponse):
    """Reply to index/remove image requests."""
    image_id: int | None = None


class ImageIdsResponse(PastecResponse):
    """Reply to the image id listing request."""
    image_ids: LenientList[int] = []


class SearchResultsResponse(PastecResponse):
    """Reply to an image query.

    The server returns four parallel arrays. Only image_ids decides how many
    matches there are; the companion arrays may be shorter or missing.
    """
    image_ids: LenientList[int] = []
    tags: LenientList[Tag] = []
    scores: LenientList[float] = []
    bounding_rects: LenientList[BoundingRect] = []

    def matches(self) -> list[SearchMatch]:
        """Zip the parallel arrays into index-aligned matches."""
        results = []
        for i, image_id in enumerate(self.image_ids):
            tag = self.tags[i] if i < len(self.tags) else None
            results.append(SearchMatch(
                image_id=image_id,
                tag=tag or "",
                score=self.scores[i] if i < len(self.scores) else 0.0,
                bounding_rect=(
                    self.bounding_rects[i] if i < len(self.bounding_rects)
                    else BoundingRect()
                ),
            ))
        return results
