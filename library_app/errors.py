"""Error taxonomy for the library circulation system.

Every domain failure is a ``LibraryError`` subclass carrying the HTTP status
it maps to. Route handlers let these propagate; a single error handler in the
application factory turns them into plain-text responses.
"""


class LibraryError(Exception):
    """Base class for all expected failures."""

    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ConfigurationError(LibraryError):
    default_message = 'Invalid configuration'


class ValidationError(LibraryError):
    status_code = 400
    default_message = 'Invalid input'


class ConstraintViolation(LibraryError):
    """A uniqueness or foreign-key constraint rejected the statement."""

    status_code = 400
    default_message = 'Constraint violation'


class DuplicateUsername(ConstraintViolation):
    default_message = 'Username already exists'


class AuthenticationError(LibraryError):
    status_code = 401
    default_message = 'Authentication required'


class InvalidCredentials(AuthenticationError):
    default_message = 'Invalid username or password'


class Unauthenticated(AuthenticationError):
    """No live session for the request."""

    default_message = 'Please login to access this page'


class AuthorizationError(LibraryError):
    status_code = 403
    default_message = 'Forbidden'


class NotFoundError(LibraryError):
    status_code = 404
    default_message = 'Not found'


class ConflictError(LibraryError):
    status_code = 409
    default_message = 'Conflict'


class AlreadyBorrowed(ConflictError):
    default_message = 'Book is already borrowed'


class NotBorrowed(ConflictError):
    default_message = 'Book is not borrowed'


class BookOnLoan(ConflictError):
    default_message = 'Book is currently borrowed and cannot be deleted'


class StoreError(LibraryError):
    """Any failure of the underlying database.

    The message shown to clients is always the generic default; the driver
    message is logged where the error is raised.
    """

    status_code = 500
    default_message = 'Internal storage error'
