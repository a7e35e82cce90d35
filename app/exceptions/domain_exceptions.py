# app/exceptions/domain_exceptions.py

from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base class for all domain exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Exception raised when a resource is not found"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=404,
            details=details
        )


class BadRequestException(DomainException):
    """Exception raised for invalid client requests"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            details=details
        )


class ConflictException(DomainException):
    """Exception raised when there's a conflict with current state"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=409,
            details=details
        )


class ForbiddenException(DomainException):
    """Exception raised for forbidden access"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=403,
            details=details
        )


# ================ Relationship errors ================

class SelfReferenceException(BadRequestException):
    """A user tried to befriend themselves"""

    def __init__(self, user_id: int):
        super().__init__(
            message="Cannot add yourself as a friend",
            details={"user_id": user_id}
        )


class UnknownTargetException(NotFoundException):
    """The requested friend does not exist"""

    def __init__(self, user_id: int):
        super().__init__(
            message="User not found",
            details={"user_id": user_id}
        )


class DuplicateEdgeException(ConflictException):
    """An edge already exists for the pair, in either direction"""

    MESSAGES = {
        "pending": "Friend request already pending",
        "accepted": "Already friends",
    }

    def __init__(self, existing_status: str, friendship_id: Optional[int] = None):
        self.existing_status = existing_status
        super().__init__(
            message=self.MESSAGES.get(existing_status, "Friendship already exists"),
            details={"status": existing_status, "friendship_id": friendship_id}
        )


class PermissionDeniedException(ForbiddenException):
    """The pair is blocked, new requests are refused"""

    def __init__(self, friendship_id: Optional[int] = None):
        super().__init__(
            message="Cannot send friend request",
            details={"friendship_id": friendship_id}
        )


class EdgeNotFoundException(NotFoundException):
    """No friendship matched the criteria for the acting user"""

    def __init__(self, message: str = "Friendship not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, details=details)


class NotAuthorizedException(ForbiddenException):
    """Only the target of a request may accept it"""

    def __init__(self, friendship_id: int, user_id: int):
        super().__init__(
            message="Not authorized to accept this request",
            details={"friendship_id": friendship_id, "user_id": user_id}
        )


class AlreadyAcceptedException(ConflictException):
    """The request was accepted before; nothing changed"""

    def __init__(self, friendship_id: int):
        super().__init__(
            message="Friend request already accepted",
            details={"friendship_id": friendship_id}
        )


# ================ Presence errors ================

class InvalidStatusTypeException(BadRequestException):
    """Status type outside the supported enumeration"""

    def __init__(self, status_type: Any, allowed: list[str]):
        super().__init__(
            message="Invalid status type",
            details={"status_type": status_type, "allowed": allowed}
        )


class StatusTextTooLongException(BadRequestException):
    """Status text over the length limit"""

    def __init__(self, length: int, max_length: int):
        super().__init__(
            message=f"Status text must be {max_length} characters or less",
            details={"length": length, "max_length": max_length}
        )
