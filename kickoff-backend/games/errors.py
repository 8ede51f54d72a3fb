"""
Domain errors raised by the registration, game store and check-in services.

Every error carries a stable ``code`` (the ``kind`` clients switch on), an HTTP
status used by ``config.exceptions.kickoff_exception_handler``, a human message
and optional structured ``data`` such as the measured distance.
"""
from typing import Any, Dict, Optional


class KickoffError(Exception):
    code = "error"
    http_status = 400
    default_message = "Request failed."

    def __init__(self, message: Optional[str] = None, **data: Any):
        self.message = message or self.default_message
        self.data: Dict[str, Any] = data
        super().__init__(self.message)

    def as_dict(self) -> Dict[str, Any]:
        return {"kind": self.code, "detail": self.message, **self.data}


class ValidationFailed(KickoffError):
    code = "validation_error"
    default_message = "Invalid input."


class NotFound(KickoffError):
    code = "not_found"
    http_status = 404
    default_message = "Not found."


class GameNotFound(NotFound):
    code = "game_not_found"
    default_message = "Game not found."


class PreconditionFailed(KickoffError):
    code = "precondition_failed"
    http_status = 409


class AlreadyRegistered(PreconditionFailed):
    code = "already_registered"
    default_message = "You are already registered for this game."


class NotRegistered(PreconditionFailed):
    code = "not_registered"
    default_message = "You are not registered for this game."


class RegistrationClosed(PreconditionFailed):
    code = "registration_closed"
    http_status = 403
    default_message = "Registration is closed."


class WaitlistFull(PreconditionFailed):
    code = "waitlist_full"
    default_message = "The game and its standby list are full."


class WindowClosed(PreconditionFailed):
    code = "window_closed"
    http_status = 403
    default_message = "Check-in is not open."


class InvalidCode(PreconditionFailed):
    code = "invalid_code"
    http_status = 400
    default_message = "Invalid QR code."


class AlreadyCheckedIn(PreconditionFailed):
    code = "already_checked_in"
    default_message = "You have already checked in."


class VenueNotConfigured(PreconditionFailed):
    code = "venue_not_configured"
    http_status = 503
    default_message = "The field location is not configured."


class GeofenceViolation(KickoffError):
    code = "geofence_violation"
    http_status = 403


class TooFar(GeofenceViolation):
    code = "too_far"

    def __init__(self, distance_meters: float, radius_meters: float):
        super().__init__(
            f"You are {round(distance_meters)} m from the field. Move within {radius_meters:g} m to check in.",
            distance_meters=distance_meters,
            radius_meters=radius_meters,
        )
        self.distance_meters = distance_meters


class ConcurrencyConflict(KickoffError):
    code = "concurrency_conflict"
    http_status = 409
    default_message = "The game is busy. Please retry."
