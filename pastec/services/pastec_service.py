"""Pastec server operations."""
import logging
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from pastec.api.schemas import (
    ImageIdResponse, ImageIdsResponse, SearchMatch, SearchResultsResponse
)
from pastec.exceptions import PastecServerError, ResponseDecodeError
from pastec.services.transport import (
    DEFAULT_HOST, DEFAULT_PORT, Dispatcher, Endpoint, verify_response
)

logger = logging.getLogger(__name__)

JPEG = "image/jpeg"
TEXT = "text/plain; charset=utf-8"

M = TypeVar("M", bound=BaseModel)


class PastecClient:
    """One method per server operation.

    Every call is a single round trip: build the request, dispatch it,
    verify the reply type, then decode the payload. Server error types are
    raised as PastecServerError.
    """

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                 use_ssl: bool = False, timeout: float | None = None):
        self.endpoint = Endpoint.create(host, port, use_ssl)
        self._dispatcher = Dispatcher(self.endpoint, timeout=timeout)

    @classmethod
    def from_config(cls, cfg: dict) -> "PastecClient":
        """Build a client from the 'server' section of a loaded config."""
        server = cfg.get("server", {})
        return cls(
            host=server.get("host", DEFAULT_HOST),
            port=server.get("port", DEFAULT_PORT),
            use_ssl=server.get("use_ssl", False),
            timeout=server.get("timeout"),
        )

    @property
    def host(self) -> str:
        return self.endpoint.base_url

    def _call(self, expected_type: str, method: str, path: str, **body) -> dict:
        response = self._dispatcher.dispatch(method, path, **body)
        try:
            verify_response(expected_type, response)
        except PastecServerError as e:
            logger.warning("%s %s failed: %s", method, path, e.code)
            raise
        return response

    @staticmethod
    def _decode(model: type[M], response: dict) -> M:
        try:
            return model.model_validate(response)
        except ValidationError as e:
            raise ResponseDecodeError(
                f"unexpected {response.get('type')} payload: {e.error_count()} invalid field(s)"
            ) from e

    def ping(self) -> bool:
        """Check that the server is online."""
        self._call("PONG", "POST", "/", json={"type": "PING"})
        return True

    def index_image_data(self, image_id: int, image_data: bytes) -> int | None:
        """Add the signature of a JPEG image to the index.

        Returns:
            Image id echoed by the server, or None if the reply omitted it
        """
        response = self._call(
            "IMAGE_ADDED", "PUT", f"/index/images/{image_id}",
            data=image_data, content_type=JPEG
        )
        return self._decode(ImageIdResponse, response).image_id

    def index_image_file(self, image_id: int, file_path: str | Path) -> int | None:
        """Read an image file and index its bytes."""
        return self.index_image_data(image_id, Path(file_path).read_bytes())

    def index_image_url(self, image_id: int, image_url: str) -> int | None:
        """Let the server download and index the image at image_url."""
        response = self._call(
            "IMAGE_ADDED", "PUT", f"/index/images/{image_id}",
            json={"url": image_url}
        )
        return self._decode(ImageIdResponse, response).image_id

    def remove_image(self, image_id: int) -> int | None:
        """Remove an image signature from the index.

        Slow on large indexes; avoid calling it in a tight loop.
        """
        response = self._call("IMAGE_REMOVED", "DELETE", f"/index/images/{image_id}")
        return self._decode(ImageIdResponse, response).image_id

    def add_tag(self, image_id: int, tag: str) -> bool:
        self._call(
            "IMAGE_TAG_ADDED", "PUT", f"/index/images/{image_id}/tag",
            data=tag, content_type=TEXT
        )
        return True

    def remove_tag(self, image_id: int) -> bool:
        self._call("IMAGE_TAG_REMOVED", "DELETE", f"/index/images/{image_id}/tag")
        return True

    def load_index(self, path: str = "") -> bool:
        """Load the image index from a path on the server."""
        self._call(
            "INDEX_LOADED", "POST", "/index/io",
            json={"type": "LOAD", "index_path": path}
        )
        return True

    def write_index(self, path: str = "") -> bool:
        """Save the image index to a path on the server."""
        self._call(
            "INDEX_WRITTEN", "POST", "/index/io",
            json={"type": "WRITE", "index_path": path}
        )
        return True

    def load_index_tags(self, path: str = "") -> bool:
        """Load the tag index from a path on the server."""
        self._call(
            "INDEX_TAGS_LOADED", "POST", "/index/io",
            json={"type": "LOAD_TAGS", "index_tags_path": path}
        )
        return True

    def write_index_tags(self, path: str = "") -> bool:
        """Save the tag index to a path on the server."""
        self._call(
            "INDEX_TAGS_WRITTEN", "POST", "/index/io",
            json={"type": "WRITE_TAGS", "index_tags_path": path}
        )
        return True

    def clear_index(self) -> bool:
        """Clear the loaded image index and its tags."""
        self._call("INDEX_CLEARED", "POST", "/index/io", json={"type": "CLEAR"})
        return True

    def get_image_ids(self) -> list[int]:
        """List every image id in the index, in server order."""
        response = self._call("INDEX_IMAGE_IDS", "GET", "/index/imageIds")
        return self._decode(ImageIdsResponse, response).image_ids

    def query_image_data(self, image_data: bytes) -> list[SearchMatch]:
        """Search the index for images similar to a JPEG query image."""
        response = self._call(
            "SEARCH_RESULTS", "POST", "/index/searcher",
            data=image_data, content_type=JPEG
        )
        results = self._decode(SearchResultsResponse, response).matches()
        logger.debug("Query returned %d matches", len(results))
        return results

    def query_image_file(self, file_path: str | Path) -> list[SearchMatch]:
        """Read an image file and search with its bytes."""
        return self.query_image_data(Path(file_path).read_bytes())
