"""
HTTP client configuration for the external content and player-account APIs.
NO RETRY mechanisms - retries are the caller's responsibility.
NO GLOBAL instances - each service manages its own lifecycle.
"""

import httpx
from typing import Optional, Dict, Any

from src.infra.config.settings import get_settings

settings = get_settings()


class HTTPClientConfig:
    """HTTP client configuration shared by the external API clients"""

    @classmethod
    def get_timeout(cls, service: str) -> float:
        """Get timeout for specific service"""
        timeout_map = {
            "default": settings.HTTP_DEFAULT_TIMEOUT,
            "notion": settings.HTTP_NOTION_TIMEOUT,
            "playfab": settings.HTTP_PLAYFAB_TIMEOUT,
        }
        return timeout_map.get(service, settings.HTTP_DEFAULT_TIMEOUT)

    @classmethod
    def get_base_headers(cls) -> Dict[str, str]:
        """Get base headers for HTTP requests"""
        return {
            "User-Agent": f"{settings.APP_NAME}-Backend/{settings.APP_VERSION}",
            "Accept": "application/json",
        }

    @classmethod
    def create_client_config(cls, service: str = "default", timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        Create HTTP client configuration (NOT the client itself).
        Each service should create its own client instance using this config.

        Args:
            service: Service name for timeout configuration
            timeout: Override timeout (optional)

        Returns:
            Dict with client configuration
        """
        client_timeout = timeout or cls.get_timeout(service)

        return {
            "timeout": client_timeout,
            "limits": httpx.Limits(
                max_connections=settings.HTTP_MAX_CONNECTIONS,
                max_keepalive_connections=settings.HTTP_MAX_KEEPALIVE_CONNECTIONS
            ),
            "headers": cls.get_base_headers(),
            "follow_redirects": False,  # Explicit control
            # NO RETRIES - fail fast
        }


def create_client(service: str = "default", **kwargs) -> httpx.AsyncClient:
    """
    Create an HTTP client for one of the external services.
    WARNING: Remember to close the client after use!

    Args:
        service: Service name for configuration
        **kwargs: Additional httpx.AsyncClient arguments (e.g. `transport` in tests)

    Returns:
        httpx.AsyncClient: Configured client (must be closed!)
    """
    config = HTTPClientConfig.create_client_config(service)
    config.update(kwargs)
    return httpx.AsyncClient(**config)
