"""Exceptions raised by the product search core."""

import threading
from typing import Optional


class ProductSearchError(RuntimeError):
    """Base class for product search failures."""


class SearchBackendError(ProductSearchError):
    """Raised when Elasticsearch cannot serve an index or search call."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InferenceTransportError(ProductSearchError):
    """Raised when the inference transport itself is unusable (bad base URL)."""


class SearchCancelledError(ProductSearchError):
    """Raised when the caller cancelled an in-flight search or inference call."""


def raise_if_cancelled(
    cancel_event: Optional[threading.Event],
    message: str = "Request cancelled by caller",
) -> None:
    """Raise SearchCancelledError if the caller has set ``cancel_event``."""
    if cancel_event is not None and cancel_event.is_set():
        raise SearchCancelledError(message)
