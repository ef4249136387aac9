"""Domain exceptions raised by services and translated by the HTTP layer."""


class PlannerError(Exception):
    """Base class for all study planner errors."""


class ValidationError(PlannerError):
    """A required field is missing or malformed."""


class DuplicateEmailError(PlannerError):
    """A user with this email already exists."""


class NotFoundError(PlannerError):
    """The requested user (or other record) does not exist."""


class InvalidCredentialsError(PlannerError):
    """Password did not match the stored hash."""


class GenerationError(PlannerError):
    """Schedule generation failed."""


class GenerationParseError(GenerationError):
    """The model response is not a JSON array of valid schedule entries."""


class GenerationServiceError(GenerationError):
    """The external model could not be reached or refused the request."""


class PersistenceError(PlannerError):
    """The schedule transaction was rolled back."""


class SessionError(PlannerError):
    """The request carries no usable session token."""


class InvalidOrExpiredSessionError(SessionError):
    """The session token failed signature or expiry checks."""
