"""Error taxonomy shared by services and controllers.

Services raise these exceptions; controllers translate them into
`HTTPException` using the `status_code` carried by each class.
"""


class StudyPlannerError(Exception):
    """Base class for expected application failures."""
    status_code = 500


class ValidationError(StudyPlannerError):
    """Missing or malformed request input."""
    status_code = 400


class AuthError(StudyPlannerError):
    status_code = 401


class AccessDenied(AuthError):
    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class InvalidToken(AuthError):
    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class UserNotFound(AuthError):
    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class InvalidCredentials(AuthError):
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class NotFoundError(StudyPlannerError):
    status_code = 404


class DuplicateKeyError(StudyPlannerError):
    """Unique constraint violation (email already registered)."""
    status_code = 400

    def __init__(self, message: str = "Email already exists"):
        super().__init__(message)


class CorsRejected(StudyPlannerError):
    status_code = 403

    def __init__(self, origin: str, allowed: list):
        super().__init__("Origin not allowed by CORS")
        self.origin = origin
        self.allowed = list(allowed)
