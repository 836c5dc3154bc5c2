"""Custom exception classes for the application"""

from typing import Optional, Dict, Any


class BaseAPIException(Exception):
    """Base exception for all API errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.headers = headers or {}
        super().__init__(self.message)


# Authentication Errors (401)
class AuthenticationError(BaseAPIException):
    """Base authentication error"""
    reason = "authentication"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class MissingTokenError(AuthenticationError):
    """No bearer token was supplied"""
    reason = "missing_token"

    def __init__(self):
        super().__init__("Access token required")


class MalformedHeaderError(AuthenticationError):
    """Authorization header is not `Bearer <token>`"""
    reason = "malformed_header"

    def __init__(self):
        super().__init__("Invalid authorization header format. Use: Bearer <token>")


class MalformedTokenError(AuthenticationError):
    """Token does not have the expected JWT shape or payload"""
    reason = "malformed_token"

    def __init__(self, message: str = "Invalid token format"):
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password"""
    reason = "invalid_credentials"

    def __init__(self):
        super().__init__("Invalid email or password")


# Token rejection (403)
class TokenRejectedError(BaseAPIException):
    """Token is well formed but cannot be trusted"""
    reason = "token_rejected"

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, status_code=403)


class InvalidSignatureError(TokenRejectedError):
    """Signature does not verify under the configured secret"""
    reason = "invalid_signature"


class TokenExpiredError(TokenRejectedError):
    """JWT token has expired"""
    reason = "expired"


# Authorization Errors (403)
class AuthorizationError(BaseAPIException):
    """Insufficient permissions"""
    reason = "authorization"

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, status_code=403)


class IdentityNotFoundOrInactiveError(AuthorizationError):
    """Token subject no longer exists or was deactivated"""
    reason = "identity_inactive"

    def __init__(self):
        super().__init__("User account not found or deactivated")


class InsufficientRoleError(AuthorizationError):
    """Authenticated identity lacks the required role"""
    reason = "insufficient_role"


# Resource Errors
class ResourceNotFoundError(BaseAPIException):
    """Resource not found"""
    def __init__(self, resource: str):
        super().__init__(f"{resource} not found", status_code=404)


class ResourceAlreadyExistsError(BaseAPIException):
    """Resource already exists"""
    def __init__(self, message: str):
        super().__init__(message, status_code=409)


# Business Logic Errors
class BusinessLogicError(BaseAPIException):
    """Business logic error"""
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class RateLimitExceededError(BaseAPIException):
    """Rate limit exceeded"""
    def __init__(
        self,
        message: str = "Too many requests from this IP, please try again later.",
        retry_after: Optional[int] = None
    ):
        headers = {"Retry-After": str(retry_after)} if retry_after is not None else None
        super().__init__(message, status_code=429, headers=headers)


# Internal, never returned to clients
class AuditWriteFailure(Exception):
    """An audit record could not be persisted"""

    def __init__(self, action: str, actor_id: str, cause: Exception, transient: bool = False):
        self.action = action
        self.actor_id = actor_id
        self.cause = cause
        self.transient = transient
        super().__init__(f"Audit write failed for {action} by {actor_id}: {cause}")
