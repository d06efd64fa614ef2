"""
Centralized error handling for the web app API.
Provides consistent error responses, logging, and HTTP status codes across all services.
"""

import traceback
from typing import Dict, Any, Optional
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from datetime import datetime, timezone

from src.core.exceptions.base import InconsistentStateError, ServiceError, ServiceErrorCode
from src.core.logger.logger import get_logger
from src.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()


class ErrorResponseBuilder:
    """Builds standardized error responses"""

    @staticmethod
    def build_error_response(
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Build standardized error response"""

        response = {
            "success": False,
            "error": {
                "code": error_code,
                "message": message,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }

        if details:
            response["error"]["details"] = details

        if request_id:
            response["error"]["request_id"] = request_id

        return response

    @staticmethod
    def build_validation_error_response(
        validation_errors: list,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Build validation error response"""

        return ErrorResponseBuilder.build_error_response(
            error_code=ServiceErrorCode.INVALID_INPUT,
            message="Validation failed",
            details={
                "validation_errors": validation_errors
            },
            request_id=request_id
        )


class GlobalErrorHandler:
    """Global error handler for all application errors"""

    @staticmethod
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        """Handle ServiceError exceptions"""

        request_id = request.headers.get("X-Request-ID", "unknown")

        log_context = {
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": exc.status_code,
            "details": exc.details,
            "context": exc.context,
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method
        }
        # Inconsistent state needs manual reconciliation
        if exc.status_code >= 500 or isinstance(exc, InconsistentStateError):
            logger.error(f"Service error: {exc.code}", extra=log_context)
        else:
            logger.warning(f"Service error: {exc.code}", extra=log_context)

        response = ErrorResponseBuilder.build_error_response(
            error_code=exc.code,
            message=exc.message,
            details=exc.details,
            request_id=request_id
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=response
        )

    @staticmethod
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle Pydantic validation errors"""

        request_id = request.headers.get("X-Request-ID", "unknown")

        validation_errors = []
        for error in exc.errors():
            field = '.'.join(str(loc) for loc in error['loc'])
            validation_errors.append({
                'field': field,
                'message': error['msg'],
                'input': error.get('input')
            })

        logger.warning(
            f"Validation error: {len(validation_errors)} errors",
            extra={
                "validation_errors": validation_errors,
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method
            }
        )

        response = ErrorResponseBuilder.build_validation_error_response(
            validation_errors=validation_errors,
            request_id=request_id
        )

        return JSONResponse(
            status_code=422,
            content=response
        )

    @staticmethod
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions"""

        request_id = request.headers.get("X-Request-ID", "unknown")

        # Log full traceback for debugging
        logger.error(
            f"Unexpected error: {type(exc).__name__}",
            extra={
                "error_type": type(exc).__name__,
                "error_message": str(exc),
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method,
            },
            exc_info=True
        )

        # Never expose internal errors in production
        if settings.DEBUG:
            message = f"Internal error: {str(exc)}"
            details = {"traceback": traceback.format_exc()}
        else:
            message = "An unexpected error occurred. Please try again."
            details = {}

        response = ErrorResponseBuilder.build_error_response(
            error_code=ServiceErrorCode.INTERNAL_ERROR,
            message=message,
            details=details,
            request_id=request_id
        )

        return JSONResponse(
            status_code=500,
            content=response
        )
