# livechat/core/exceptions.py

from __future__ import annotations


class ChatError(Exception):
    """Base class for errors raised by the chat registries."""


class ValidationError(ChatError):
    """A client request is missing required fields or carries bad values."""


class StateError(ChatError):
    """An operation needs a room the session is not (or no longer) in."""


class StorageError(ChatError):
    """The media store rejected a blob."""

    status_code = 400


class TooLargeError(StorageError):
    status_code = 413


class WrongKindError(StorageError):
    status_code = 415
