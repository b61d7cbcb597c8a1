"""
Exceptions raised by the game/session services and the hardware drivers.

Hierarchy:
- CoreError (base; carries `status_code` for the HTTP layer)
  - ValidationError (bad input, rejected before touching state)
    - InvalidClientId
    - InvalidDirection
    - NotSessionHolder
  - DriverError (GPIO / audio side effect failed; never fails a command)
"""


class CoreError(Exception):
    """Base exception for service-level errors."""
    retryable: bool = False
    status_code: int = 500


class ValidationError(CoreError):
    status_code = 400


class InvalidClientId(ValidationError):
    pass


class InvalidDirection(ValidationError):
    pass


class NotSessionHolder(ValidationError):
    status_code = 403


class DriverError(CoreError):
    retryable = True
