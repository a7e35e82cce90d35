# app/exceptions/__init__.py

from exceptions.domain_exceptions import (
    DomainException,
    NotFoundException,
    BadRequestException,
    ConflictException,
    ForbiddenException,
    SelfReferenceException,
    UnknownTargetException,
    DuplicateEdgeException,
    PermissionDeniedException,
    EdgeNotFoundException,
    NotAuthorizedException,
    AlreadyAcceptedException,
    InvalidStatusTypeException,
    StatusTextTooLongException,
)

__all__ = [
    'DomainException',
    'NotFoundException',
    'BadRequestException',
    'ConflictException',
    'ForbiddenException',
    'SelfReferenceException',
    'UnknownTargetException',
    'DuplicateEdgeException',
    'PermissionDeniedException',
    'EdgeNotFoundException',
    'NotAuthorizedException',
    'AlreadyAcceptedException',
    'InvalidStatusTypeException',
    'StatusTextTooLongException',
]
