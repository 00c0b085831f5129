# board/errors.py

from __future__ import annotations


class ServiceError(Exception):
    """A call to the data service failed (network, database, missing row)."""


class NotFoundError(ServiceError):
    """A workspace or project the view depends on does not exist.

    Shown as a blocking message; ``back_to`` names where the user can go next.
    """

    def __init__(self, message: str, back_to: str = "workspaces") -> None:
        super().__init__(message)
        self.message = message
        self.back_to = back_to
