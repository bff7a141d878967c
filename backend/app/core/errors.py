# app/core/errors.py
"""
Application error hierarchy.

Services and dependencies raise these; the handlers registered in
app.core.error_handlers turn them into the JSON envelope
{"success": false, "message": ..., "code": ...} with the class's status code.

    AppError (base)                      500
    ├── ValidationError                  400
    │   └── InvalidImageReference
    ├── AuthenticationError              401
    │   ├── MissingToken
    │   ├── InvalidToken
    │   ├── ExpiredToken
    │   ├── WrongTokenType
    │   ├── UnknownSubject
    │   └── InvalidCredentials
    ├── AuthorizationError               403
    │   └── InsufficientPrivilege
    ├── NotFoundError                    404
    │   ├── CategoryNotFound
    │   ├── PromptNotFound
    │   └── ImageNotFound
    ├── ConflictError                    409
    │   ├── CategoryInUse
    │   └── UsernameTaken
    └── UpstreamError                    500
"""
from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Base class for errors that map onto an HTTP response.

    Attributes:
        message: Client-facing description (safe to return in the response)
        code: Stable machine-readable error code
        context: Extra details for server-side logs only
    """
    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        if code:
            self.code = code
        self.context = context or {}
        super().__init__(self.message)


# ========== 400 ==========
class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class InvalidImageReference(ValidationError):
    code = "INVALID_IMAGE_REFERENCE"
    default_message = "One or more image IDs are invalid"


# ========== 401 ==========
class AuthenticationError(AppError):
    status_code = 401
    code = "AUTH_FAILED"
    default_message = "Authentication failed"


class MissingToken(AuthenticationError):
    code = "AUTH_REQUIRED"
    default_message = "No token provided or invalid format"


class InvalidToken(AuthenticationError):
    code = "AUTH_INVALID_TOKEN"
    default_message = "Invalid token"


class ExpiredToken(AuthenticationError):
    code = "AUTH_TOKEN_EXPIRED"
    default_message = "Token has expired"


class WrongTokenType(AuthenticationError):
    code = "AUTH_WRONG_TOKEN_TYPE"
    default_message = "Invalid token type"


class UnknownSubject(AuthenticationError):
    code = "AUTH_UNKNOWN_SUBJECT"
    default_message = "Invalid token"


class InvalidCredentials(AuthenticationError):
    code = "AUTH_INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


# ========== 403 ==========
class AuthorizationError(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied"


class InsufficientPrivilege(AuthorizationError):
    code = "FORBIDDEN_SUPER_ADMIN_ONLY"
    default_message = "Access denied. Super admin privileges required."


# ========== 404 ==========
class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class CategoryNotFound(NotFoundError):
    code = "CATEGORY_NOT_FOUND"
    default_message = "Category not found"


class PromptNotFound(NotFoundError):
    code = "PROMPT_NOT_FOUND"
    default_message = "Prompt not found"


class ImageNotFound(NotFoundError):
    code = "IMAGE_NOT_FOUND"
    default_message = "Image not found"


# ========== 409 ==========
class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Request conflicts with current state"


class CategoryInUse(ConflictError):
    code = "CATEGORY_IN_USE"

    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"Cannot delete category. It is used by {count} prompt(s)",
            context={"count": count},
        )


class UsernameTaken(ConflictError):
    code = "USERNAME_EXISTS"
    default_message = "Username already exists"


# ========== 500 (upstream) ==========
class UpstreamError(AppError):
    """Raised when the external image host or a generation provider fails."""
    status_code = 500
    code = "UPSTREAM_ERROR"
    default_message = "External service request failed"
