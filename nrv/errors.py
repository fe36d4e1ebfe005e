"""
Exception types shared across the nrv backend.

Store and hasher failures are raised as these types so the service layer
can turn them into an outcome without inspecting driver-specific errors.
"""


class NrvError(Exception):
    """Base class for nrv errors."""


class StorageError(NrvError):
    """The relational store failed to complete an operation."""


class UsernameTakenError(StorageError):
    """An identity with the requested username already exists."""

    def __init__(self, username: str):
        super().__init__(f"Username already exists: {username}")
        self.username = username


class HashingError(NrvError):
    """The password hashing primitive failed."""


class ChatError(NrvError):
    """The upstream chat model could not be reached or refused the request."""
