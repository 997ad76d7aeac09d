# services/exceptions.py
"""
Error taxonomy for the rental services.

Services raise these; ``main.py`` maps each class to its HTTP status and
a ``{"success": false, "message": ...}`` body. None of them is retried.
"""


class RentalServiceError(Exception):
     """Base class. ``status_code`` is the HTTP category for the API layer."""

     status_code = 500

     def __init__(self, message: str):
          super().__init__(message)
          self.message = message


class ValidationError(RentalServiceError):
     """Malformed or out-of-range input (bad duration, bad date, missing field)."""

     status_code = 400


class AuthenticationError(RentalServiceError):
     """Missing or invalid bearer credential."""

     status_code = 401


class AuthorizationError(RentalServiceError):
     """Caller's role or ownership does not match the operation."""

     status_code = 403


class NotFoundError(RentalServiceError):
     status_code = 404


class StateConflictError(RentalServiceError):
     """Target record is not in the state the operation requires."""

     status_code = 409


class InternalError(RentalServiceError):
     status_code = 500
