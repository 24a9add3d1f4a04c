"""
Llama Stack model registration.

Registers a model identifier with a Llama Stack server so the agent's model
can be served from it. Registration is a single ``POST /v1/models``.
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp

from workday_agent.config import settings
from workday_agent.config.logging_config import get_logger
from workday_agent.utils.error_handling import ApiError, handle_exception

logger = get_logger(__name__)


class ModelRegistryClient:
    """HTTP client for the Llama Stack model registry."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Llama Stack server URL (defaults to settings)
            timeout: Total request timeout in seconds (defaults to settings)
        """
        self.base_url = (base_url or settings.registry.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.registry.timeout

    async def register_model(self, model_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Register ``model_id`` with the server.

        Args:
            model_id: Identifier to register (defaults to settings)

        Returns:
            The registered model as returned by the server, or None on failure
        """
        model_id = model_id or settings.registry.model_id
        url = f"{self.base_url}/v1/models"
        logger.info(f"Registering model {model_id} at {url}")

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    url,
                    json={"model_id": model_id},
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status >= 400:
                        error_text = await response.text()
                        raise ApiError(
                            f"Model registration failed (HTTP {response.status}): {error_text}",
                            details={"model_id": model_id, "status": response.status}
                        )
                    model = await response.json()

        except (aiohttp.ClientError, asyncio.TimeoutError, ApiError) as e:
            handle_exception(
                e,
                context={"model_id": model_id, "base_url": self.base_url},
                error_class=ApiError
            )
            return None

        if not isinstance(model, dict):
            model = {"identifier": model_id, "response": model}

        logger.info(f"Registered model {model.get('identifier', model_id)}")
        return model
