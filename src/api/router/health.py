from fastapi import APIRouter, Request, status
from datetime import datetime
from typing import Dict

from src.core.dependencies import get_chain_ledger
from src.core.exceptions.base import ServiceError
from src.infra.config.redis import get_redis
from src.infra.database import get_record_store

router = APIRouter()


async def check_redis_health() -> Dict[str, str]:
    """Check Redis connection health."""
    try:
        await get_redis()
        return {"status": "healthy", "message": "Connected"}
    except Exception as e:
        return {"status": "unhealthy", "message": f"Connection failed: {str(e)}"}


async def check_database_health() -> Dict[str, str]:
    """Check PostgreSQL connection health."""
    try:
        await get_record_store().ping()
        return {"status": "healthy", "message": "Connected"}
    except Exception as e:
        return {"status": "unhealthy", "message": f"Connection failed: {str(e)}"}


async def check_chain_health() -> Dict[str, str]:
    """Check chain RPC reachability; an unreachable RPC only degrades the service."""
    ledger = get_chain_ledger()
    if not await ledger.is_connected():
        return {"status": "degraded", "message": "RPC unreachable"}
    try:
        block_time = await ledger.latest_block_timestamp()
    except ServiceError as e:
        return {"status": "degraded", "message": e.message}
    return {"status": "healthy", "message": f"Connected to chain {ledger.chain_id}, latest block at {block_time}"}


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    """
    Health check endpoint.
    Returns the status of Redis, PostgreSQL and the chain RPC.
    """
    services = {
        "redis": (await check_redis_health())["status"],
        "database": (await check_database_health())["status"],
        "chain": (await check_chain_health())["status"],
        "api_gateway": "healthy"
    }

    overall_status = "healthy"
    if any(s == "unhealthy" for s in services.values()):
        overall_status = "unhealthy"
    elif any(s == "degraded" for s in services.values()):
        overall_status = "degraded"

    return {
        "status": overall_status,
        "services": services,
        "request_id": request.headers.get("X-Request-ID", "N/A"),
        "timestamp": datetime.utcnow().isoformat() + "Z"
    }
