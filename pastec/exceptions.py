"""Custom exceptions for the Pastec client."""
from types import MappingProxyType

# Symbolic error types reported by the server in the "type" field
ERROR_MESSAGES = MappingProxyType({
    "ERROR_GENERIC": "Generic error.",
    "MISFORMATTED_REQUEST": "Misformatted request.",
    "TOO_MANY_CLIENTS": "Too many clients connected to the server.",

    "IMAGE_DATA_TOO_BIG": "Image data size too big.",
    "IMAGE_NOT_INDEXED": "Image not indexed.",
    "IMAGE_NOT_DECODED": "The query image could not be decoded.",
    "IMAGE_SIZE_TOO_SMALL": "Image size too small.",
    "IMAGE_NOT_FOUND": "Image not found.",
    "IMAGE_TAG_NOT_FOUND": "Image tag not found.",

    "INDEX_NOT_FOUND": "Index not found.",
    "INDEX_TAGS_NOT_FOUND": "Index tags not found.",
    "INDEX_NOT_WRITTEN": "Index not written.",
    "INDEX_TAGS_NOT_WRITTEN": "Index not written.",

    "IMAGE_DOWNLOADER_HTTP_ERROR": "HTTP error when downloading an image.",
})


def describe_error(code: str | None) -> str:
    """Return the human-readable message for a server error type."""
    if code is not None and code in ERROR_MESSAGES:
        return ERROR_MESSAGES[code]
    return f"Undefined error ({code})"


class PastecError(Exception):
    """Base exception."""
    pass


class PastecServerError(PastecError):
    """Server replied with a type other than the one the operation expects."""

    def __init__(self, code: str | None):
        super().__init__(describe_error(code))
        self.code = code


class ResponseDecodeError(PastecError):
    def __init__(self, reason: str):
        super().__init__(f"Invalid server response: {reason}")
        self.reason = reason
