"""Error taxonomy shared by the file services and the stats store.

Every error carries the HTTP status it maps to; ``main.py`` turns them into
``{"error": "<message>"}`` responses.
"""


class BeamshareError(Exception):
    """Base exception for beamshare."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidPath(BeamshareError):
    """Client path is malformed or escapes the shared root."""

    status_code = 400


class PathTraversal(InvalidPath):
    """Client path resolves outside the shared root."""


class BadRequest(BeamshareError):
    """Request payload is missing or malformed."""

    status_code = 400


class NotFound(BeamshareError):
    """Requested file or directory does not exist."""

    status_code = 404


class AlreadyExists(BeamshareError):
    """Target of a create/rename already exists."""

    status_code = 409


class OperationFailed(BeamshareError):
    """Underlying filesystem call failed."""

    status_code = 500


class StoreError(BeamshareError):
    """Stats store is unreadable or its singleton row is missing."""

    status_code = 500
