"""
Custom exception classes and error handlers
Provides consistent error responses across the application
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, Optional
import logging

from storefront.schemas.response import ApiResponse

logger = logging.getLogger(__name__)

class StorefrontException(HTTPException):
    """Base exception class for the storefront application"""
    
    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

class ValidationException(StorefrontException):
    """400 Missing or malformed input"""
    
    def __init__(self, detail: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )

class UnauthorizedException(StorefrontException):
    """401 Unauthorized"""
    
    def __init__(self, detail: str = "Unauthorized", error_code: str = "UNAUTHORIZED"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"}
        )

class ForbiddenException(StorefrontException):
    """403 Forbidden"""
    
    def __init__(self, detail: str = "Forbidden", error_code: str = "FORBIDDEN"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code
        )

class NotFoundException(StorefrontException):
    """404 Not Found"""
    
    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code
        )

class ConflictException(StorefrontException):
    """Duplicate unique key, reported as 400 like every other client error"""
    
    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )

class BusinessRuleException(StorefrontException):
    """400 Request is well formed but violates a business rule"""
    
    def __init__(self, detail: str, error_code: str = "BUSINESS_RULE"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )

# Business logic exceptions
class EmptyCartException(BusinessRuleException):
    """Order placement on a cart without lines"""
    
    def __init__(self, detail: str = "The cart is empty"):
        super().__init__(detail=detail, error_code="EMPTY_CART")

class ProductUnavailableException(BusinessRuleException):
    """Product missing or inactive"""
    
    def __init__(self, product_name: Optional[str] = None):
        super().__init__(
            detail=f"Product {product_name or 'unknown'} is not available",
            error_code="PRODUCT_UNAVAILABLE"
        )

class InsufficientStockException(BusinessRuleException):
    """Product stock insufficient"""
    
    def __init__(self, product_name: str, available: int):
        super().__init__(
            detail=f"Insufficient stock for {product_name}. Available: {available}",
            error_code="INSUFFICIENT_STOCK"
        )

class InvalidStateTransitionException(BusinessRuleException):
    """Order status change not allowed from the current status"""
    
    def __init__(self, current: str, target: str):
        super().__init__(
            detail=f"Cannot move an order from {current} to {target}",
            error_code="INVALID_STATE_TRANSITION"
        )

class CategoryInUseException(BusinessRuleException):
    """Category still referenced by active products"""
    
    def __init__(self, product_count: int):
        super().__init__(
            detail=f"Cannot delete category. {product_count} active products are using it",
            error_code="CATEGORY_IN_USE"
        )

class DuplicateResourceException(ConflictException):
    """Resource already exists"""
    
    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            detail=f"{resource} with {field} '{value}' already exists",
            error_code="DUPLICATE_RESOURCE"
        )

class DuplicateReviewException(ConflictException):
    """User already reviewed the product"""
    
    def __init__(self, detail: str = "You have already reviewed this product"):
        super().__init__(detail=detail, error_code="DUPLICATE_REVIEW")

# Error handlers
def _error_response(status_code: int, error: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.failure(error),
        headers=headers
    )

def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return ", ".join(messages) or "Invalid request"

async def storefront_exception_handler(request: Request, exc: StorefrontException) -> JSONResponse:
    return _error_response(exc.status_code, exc.detail, exc.headers)

async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, _format_validation_errors(exc))

async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return _error_response(status.HTTP_400_BAD_REQUEST, "Duplicate value violates a unique constraint")

async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

def register_exception_handlers(app: FastAPI) -> None:
    """Translate every failure into the uniform error envelope"""
    app.add_exception_handler(StorefrontException, storefront_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
