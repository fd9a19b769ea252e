from __future__ import annotations

from typing import Any


class PlacesError(Exception):
    """Base error rendered by the API as ``{"error": message, **details}``."""

    status_code = 500

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        payload.update({k: v for k, v in self.details.items() if v is not None})
        return payload


class InvalidInput(PlacesError):
    status_code = 400


class MissingConfiguration(PlacesError):
    status_code = 500


class UpstreamTransportError(PlacesError):
    status_code = 502


class UpstreamStatusError(PlacesError):
    status_code = 502


class InternalError(PlacesError):
    status_code = 500

    def __init__(self, message: str = "Internal server error", **details: Any) -> None:
        super().__init__(message, **details)
