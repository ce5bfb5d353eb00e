"""
Scrol Backend — Custom Exception Hierarchy
===========================================

What:  Defines application-specific exceptions for every failure a request can hit.
How:   Each exception class carries a user-facing message, a machine-readable code,
       the HTTP status it maps to, and an optional context dict for logs.
       One handler registered in main.py turns any ScrolError into the shared
       JSON error envelope; services never build HTTP responses themselves.
Who:   Raised by services, collaborators and dependencies; caught by the global handler.

Exception Hierarchy:
    ScrolError (base)                   → 500
    ├── ValidationError                 → 400 malformed request, missing params
    ├── InvalidTokenError               → 400 verifier rejected the token
    ├── CandidateNotFoundError          → 400 no candidate for the given key
    ├── OperationFailedError            → 400 friend operation could not complete
    ├── BlobNotFoundError               → 404 no blob under the resolved key
    ├── FeatureDisabledError            → 404 capability switched off
    ├── DatabaseError                   → 500 store failure
    ├── BlobStorageError                → 500 blob store failure
    └── NotificationError               → 500 notification sink rejected the message

Error envelope (every error response):
    {"error": "<message>", "code": "<code>", "request_id": "<id>"}
"""

from typing import Any, Dict, Optional


class ScrolError(Exception):
    """
    Base exception for all Scrol application errors.

    Attributes:
        message:     User-facing error description (returned as "error")
        code:        Machine-readable error code (returned as "code")
        status_code: HTTP status the boundary maps this error to
        context:     Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    code: str = "internal_error"

    def __init__(
        self,
        message: str = "Internal Server Error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ScrolError):
    """
    Raised when the request itself is malformed.

    When:    Unparseable JSON body, missing token, missing query parameter,
             missing multipart file, photo too large or of the wrong type.
    """

    status_code = 400
    code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidTokenError(ScrolError):
    """Raised when the identity verifier rejects a token or returns no email claim."""

    status_code = 400
    code = "invalid_token"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="invalid_token", context=context)


class CandidateNotFoundError(ScrolError):
    """
    Raised when a candidate lookup by id or email finds nothing.

    HTTP:    400 Bad Request. Clients of this API treat an unknown
             candidate as a bad request, not as a missing route.
    """

    status_code = 400
    code = "candidate_not_found"

    def __init__(
        self,
        message: Optional[str] = None,
        lookup_value: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if lookup_value is not None:
            ctx["lookup_value"] = lookup_value
        super().__init__(
            message=message or f"No user found with id {lookup_value}",
            context=ctx,
        )


class OperationFailedError(ScrolError):
    """
    Raised when a friend operation fails after its input was accepted.

    The caller cannot tell a duplicate edge from a store outage or a failed
    notification; all of them surface with the operation's own message.
    """

    status_code = 400
    code = "operation_failed"


class BlobNotFoundError(ScrolError):
    """Raised when the blob store has no object under the resolved key."""

    status_code = 404
    code = "blob_not_found"

    def __init__(self, key: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["key"] = key
        super().__init__(message="File not found", context=ctx)
        self.key = key


class FeatureDisabledError(ScrolError):
    """Raised when a route belongs to a capability that is switched off."""

    status_code = 404
    code = "not_found"

    def __init__(self, feature: str):
        super().__init__(message="Not found", context={"feature": feature})
        self.feature = feature


class DatabaseError(ScrolError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    code = "internal_error"

    def __init__(
        self,
        message: str = "Internal Server Error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BlobStorageError(ScrolError):
    """Raised when the blob store cannot read, write, or delete an object."""

    code = "internal_error"

    def __init__(
        self,
        message: str = "Internal Server Error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotificationError(ScrolError):
    """Raised when the notification sink answers with a non-success status."""

    code = "notification_failed"

    def __init__(
        self,
        message: str = "Unable to send notification",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
