import time
import json
import traceback
from datetime import datetime
from typing import Any, Dict
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from src.core.logger.logger import logger


def _request_context(request: Request, request_id: str) -> Dict[str, Any]:
    return {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "query": request.url.query or None,
        "client_ip": request.client.host if request.client else None,
        "timestamp": datetime.utcnow().isoformat() + "Z"
    }


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One JSON log line per request; the request id is echoed in `X-Request-ID`."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        log_context = _request_context(request, request_id)

        try:
            response = await call_next(request)
        except Exception as e:
            log_context.update({
                "error": str(e),
                "error_type": e.__class__.__name__,
                "stack_trace": traceback.format_exc(),
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2)
            })
            logger.error(json.dumps(log_context))
            raise

        log_context.update({
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - start_time) * 1000, 2)
        })
        response.headers["X-Request-ID"] = request_id

        if response.status_code >= 500:
            logger.error(json.dumps(log_context))
        elif response.status_code >= 400:
            logger.warning(json.dumps(log_context))
        else:
            logger.info(json.dumps(log_context))

        return response
