"""
Error taxonomy for the appointments service.

Every error carries the HTTP status it maps to; the API layer renders them
as ``{"msg": ..., **extra}``. ``MirrorFailure`` is only ever raised inside
the mirror synchronizer and never reaches a caller.
"""
from typing import Any


class AgendaError(Exception):
    status_code: int = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra


class Unauthenticated(AgendaError):
    status_code = 401


class Forbidden(AgendaError):
    status_code = 403


class ValidationError(AgendaError):
    status_code = 400


class Conflict(AgendaError):
    status_code = 400


class InvalidTransition(Conflict):
    """Requested state change is not allowed from the appointment's current status."""


class NotFound(AgendaError):
    status_code = 404


class MirrorFailure(AgendaError):
    pass
