# app/api/exception_handlers.py

import logging
from typing import TYPE_CHECKING
from fastapi import Request, status
from fastapi.responses import JSONResponse
from exceptions.domain_exceptions import DomainException
from services.user_manager import UsernameAlreadyExists, EmailAlreadyExists

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """
    Global exception handler for domain exceptions in FastAPI

    Returns a consistent JSON response format for all domain exceptions
    """
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.__class__.__name__}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.__class__.__name__,
            "message": exc.message,
            "details": exc.details,
            "path": request.url.path
        }
    )


async def registration_conflict_handler(request: Request, exc: Exception) -> JSONResponse:
    """Username or email already taken during registration or profile update"""
    field = "username" if isinstance(exc, UsernameAlreadyExists) else "email"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {"field": field, "message": str(exc)}}
    )


def register_exception_handlers(app: "FastAPI") -> None:
    """
    Register all domain exception handlers with FastAPI app

    Subclasses are dispatched through the DomainException handler.
    """
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(UsernameAlreadyExists, registration_conflict_handler)
    app.add_exception_handler(EmailAlreadyExists, registration_conflict_handler)
