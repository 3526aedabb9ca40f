"""HTTP dispatch and response verification for the Pastec server."""
import logging
from dataclasses import dataclass

import requests

from pastec.exceptions import PastecServerError, ResponseDecodeError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 4212


@dataclass(frozen=True)
class Endpoint:
    """Base address of a Pastec server."""
    scheme: str = "http"
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @classmethod
    def create(cls, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
               use_ssl: bool = False) -> "Endpoint":
        return cls(scheme="https" if use_ssl else "http", host=host, port=port)

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"


class Dispatcher:
    """Sends one request per call and decodes the JSON reply."""

    def __init__(self, endpoint: Endpoint, timeout: float | None = None):
        self.endpoint = endpoint
        self.timeout = timeout

    def dispatch(
        self, method: str, path: str, *, json=None,
        data: bytes | str | None = None, content_type: str | None = None
    ) -> dict:
        """Send a request and return the decoded JSON object.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: Path appended to the endpoint base URL
            json: JSON-serializable body, sent as application/json
            data: Raw body; str is encoded as UTF-8
            content_type: Content-Type header for a raw body

        Raises:
            ValueError: If both json and data are given
            ResponseDecodeError: If the body is not a JSON object
        """
        if json is not None and data is not None:
            raise ValueError("Pass either a JSON body or raw data, not both")

        headers = {}
        if isinstance(data, str):
            data = data.encode("utf-8")
        if data is not None and content_type:
            headers["Content-Type"] = content_type

        url = f"{self.endpoint.base_url}{path}"
        logger.debug("%s %s", method, url)
        response = requests.request(
            method, url, json=json, data=data, headers=headers or None,
            timeout=self.timeout
        )

        try:
            body = response.json()
        except ValueError as e:
            raise ResponseDecodeError(
                f"body is not valid JSON (HTTP {response.status_code})"
            ) from e

        if not isinstance(body, dict):
            raise ResponseDecodeError("body is not a JSON object")
        return body


def verify_response(expected_type: str, response: dict) -> bool:
    """Check the reply type, raising PastecServerError on mismatch.

    The actual type is the error code: the server reports failures by
    replying with an error type instead of the expected one.
    """
    actual = response.get("type")
    if not isinstance(actual, str):
        raise ResponseDecodeError("missing 'type' field")
    if actual != expected_type:
        raise PastecServerError(actual)
    return True
