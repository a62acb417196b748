from typing import Optional


class CustomBaseError(Exception):
    """
    Expected failure with a user-facing message.

    `@Logger.io` logs these without a traceback. The exception handlers turn
    them into `{"detail": message, "code": code}` with `status_code`.
    Subclasses only override the class attributes.
    """

    code: str = 'error'
    status_code: int = 500
    default_message: str = 'Request failed'

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class DomainError(CustomBaseError):
    code = 'domain_error'
    status_code = 400


class ForbiddenError(CustomBaseError):
    code = 'forbidden'
    status_code = 403
    default_message = 'Forbidden'


class NotFoundError(CustomBaseError):
    code = 'not_found'
    status_code = 404
    default_message = 'Not found'


class ConflictError(CustomBaseError):
    code = 'conflict'
    status_code = 409


class AuthenticationError(CustomBaseError):
    code = 'not_authenticated'
    status_code = 401
    default_message = 'Not authenticated'


class TransactionAbortedError(CustomBaseError):
    """The store could not complete the transaction; the whole operation may be retried."""

    code = 'transaction_aborted'
    status_code = 503
    default_message = 'The request could not be completed, please retry'


class InvariantViolationError(CustomBaseError):
    """Stored state contradicts an internal consistency rule. Never corrected silently."""

    code = 'invariant_violation'
    default_message = 'Internal consistency check failed'
