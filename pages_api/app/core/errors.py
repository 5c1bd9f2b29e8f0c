"""
Error taxonomy shared by the store, the services and the HTTP layer.

Services raise these exceptions; ``main.create_app`` registers
handlers that translate them into JSON responses.  Keeping the
mapping in one place means endpoint functions do not need their own
``try``/``except`` blocks for the common cases.
"""

from typing import Dict, Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Input is malformed or violates a field constraint.

    ``errors`` maps each offending field to a single message.  The
    request is rejected before anything is written.
    """

    status_code = 400

    def __init__(self, errors: Dict[str, str], message: str = "Validation failed") -> None:
        super().__init__(message)
        self.errors = dict(errors)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls({field: message})


class NotFoundError(ServiceError):
    """The identifier does not resolve to a stored record."""

    status_code = 404

    def __init__(self, entity: str, identifier: Optional[str] = None) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.identifier = identifier


class UpstreamError(ServiceError):
    """A collaborator (the store or Cloudinary) failed or refused the call.

    ``message`` is what the caller sees; ``detail`` keeps the
    collaborator's own explanation for the logs only.
    """

    status_code = 502

    def __init__(self, message: str, detail: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ReconciliationWarning(UserWarning):
    """A best-effort playlist link step did not apply.

    Never raised to callers; instances are attached to ``LinkResult``
    objects and logged.
    """

    def __init__(self, playlist_id: str, track_id: str, action: str, reason: str) -> None:
        super().__init__(f"could not {action} track {track_id} for playlist {playlist_id}: {reason}")
        self.playlist_id = playlist_id
        self.track_id = track_id
        self.action = action
        self.reason = reason
