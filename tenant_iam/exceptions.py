"""
Custom Exception Classes for Tenant IAM

This module defines the exception hierarchy used by the services and
guards. Each exception carries an HTTP status code and a machine-readable
error code so the global handlers can render a consistent error body.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in error responses."""

    # Authentication
    AUTH_FAILED = "AUTH_FAILED"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_ACCOUNT_LOCKED = "AUTH_ACCOUNT_LOCKED"
    AUTH_ACCOUNT_DEACTIVATED = "AUTH_ACCOUNT_DEACTIVATED"
    AUTH_TENANT_DEACTIVATED = "AUTH_TENANT_DEACTIVATED"
    AUTH_INVALID_TENANT = "AUTH_INVALID_TENANT"
    AUTH_TOKEN_EXPIRED = "AUTH_TOKEN_EXPIRED"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"

    # Resources
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_USER_NOT_FOUND = "RESOURCE_USER_NOT_FOUND"
    RESOURCE_ROLE_NOT_FOUND = "RESOURCE_ROLE_NOT_FOUND"
    RESOURCE_TENANT_NOT_FOUND = "RESOURCE_TENANT_NOT_FOUND"
    RESOURCE_PERMISSION_NOT_FOUND = "RESOURCE_PERMISSION_NOT_FOUND"

    # Validation
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_DUPLICATE_RESOURCE = "VALIDATION_DUPLICATE_RESOURCE"

    # Server
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class IAMError(Exception):
    """Base exception class for all Tenant IAM exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(IAMError):
    """Raised when authentication fails"""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: dict[str, Any] | None = None,
        error_code: ErrorCode = ErrorCode.AUTH_FAILED,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details or {},
            error_code=error_code,
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid"""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_INVALID_CREDENTIALS)


class AccountLockedError(AuthenticationError):
    """Raised when an account is temporarily locked after repeated failures"""

    def __init__(self, locked_until: datetime):
        self.locked_until = locked_until
        super().__init__(
            message=f"Account is locked. Try again after {locked_until.isoformat()}",
            details={"locked_until": locked_until.isoformat()},
            error_code=ErrorCode.AUTH_ACCOUNT_LOCKED,
        )


class AccountDeactivatedError(AuthenticationError):
    """Raised when a deactivated user attempts to log in"""

    def __init__(self, message: str = "Account is deactivated"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_ACCOUNT_DEACTIVATED)


class TenantDeactivatedError(AuthenticationError):
    """Raised when the user's tenant is missing or deactivated"""

    def __init__(self, message: str = "Tenant is deactivated"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_TENANT_DEACTIVATED)


class InvalidTenantError(AuthenticationError):
    """Raised when a login names a tenant that does not exist"""

    def __init__(self, message: str = "Invalid tenant ID"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_INVALID_TENANT)


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired"""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_TOKEN_EXPIRED)


class InvalidTokenError(AuthenticationError):
    """Raised when JWT token is invalid"""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_TOKEN_INVALID)


class AuthorizationError(IAMError):
    """Raised when the requester lacks privilege for an action"""

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        reason: str | None = None,
        required_permission: str | None = None,
    ):
        details: dict[str, Any] = {}
        if reason:
            details["reason"] = reason
        if required_permission:
            details["required_permission"] = required_permission
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
            error_code=ErrorCode.AUTH_PERMISSION_DENIED,
        )


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class ResourceNotFoundError(IAMError):
    """Base class for resource not found errors"""

    def __init__(
        self,
        resource_type: str,
        resource_id: Any | None = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
    ):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
            error_code=error_code,
        )


class UserNotFoundError(ResourceNotFoundError):
    """Raised when a user is not found"""

    def __init__(self, user_id: Any | None = None):
        super().__init__(resource_type="User", resource_id=user_id, error_code=ErrorCode.RESOURCE_USER_NOT_FOUND)


class RoleNotFoundError(ResourceNotFoundError):
    """Raised when a role is not found"""

    def __init__(self, role_id: Any | None = None):
        super().__init__(resource_type="Role", resource_id=role_id, error_code=ErrorCode.RESOURCE_ROLE_NOT_FOUND)


class TenantNotFoundError(ResourceNotFoundError):
    """Raised when a tenant is not found"""

    def __init__(self, tenant_id: Any | None = None):
        super().__init__(
            resource_type="Tenant", resource_id=tenant_id, error_code=ErrorCode.RESOURCE_TENANT_NOT_FOUND
        )


class PermissionNotFoundError(ResourceNotFoundError):
    """Raised when a permission is not found"""

    def __init__(self, permission_id: Any | None = None):
        super().__init__(
            resource_type="Permission",
            resource_id=permission_id,
            error_code=ErrorCode.RESOURCE_PERMISSION_NOT_FOUND,
        )


# ============================================================================
# Validation & Conflict Exceptions
# ============================================================================


class ValidationError(IAMError):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=error_details,
            error_code=ErrorCode.VALIDATION_FAILED,
        )


class DuplicateResourceError(IAMError):
    """Raised when attempting to create a duplicate resource"""

    def __init__(self, resource_type: str, field: str, value: Any):
        super().__init__(
            message=f"{resource_type} with {field} '{value}' already exists",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource_type": resource_type, "field": field, "value": value},
            error_code=ErrorCode.VALIDATION_DUPLICATE_RESOURCE,
        )


# ============================================================================
# Database Exceptions
# ============================================================================


class DatabaseError(IAMError):
    """Raised when a database operation fails"""

    def __init__(self, message: str = "A database error occurred", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code=ErrorCode.DATABASE_ERROR,
        )
