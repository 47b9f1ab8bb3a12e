"""Typed failures raised by the Blizzard API pipeline."""

from __future__ import annotations


class ArmoryError(Exception):
    """Base class for everything the fetch/build pipeline can raise."""

    def user_message(self, name: str, server: str) -> str:
        return f"Failed to fetch {name} on {server}: {self}"


class AuthError(ArmoryError):
    """The client-credentials exchange failed, or a retried request was rejected again."""

    def user_message(self, name: str, server: str) -> str:
        return f"Failed to authenticate with Blizzard API: {self}"


class AuthRejected(ArmoryError):
    """A single request's bearer token was rejected (HTTP 401)."""


class NotFound(ArmoryError):
    def user_message(self, name: str, server: str) -> str:
        return f"Could not find {name} on {server}"


class NetworkError(ArmoryError):
    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class DecodeError(NetworkError):
    """Response body was not JSON, or not the shape we expect."""
