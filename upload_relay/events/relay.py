"""Relay lifespan event: upload directory, shared HTTP client and the relay handler."""

import asyncio

import httpx

from upload_relay.core.lifespan import BaseEvent
from upload_relay.core.logger import LogIcon, logger
from upload_relay.core.settings import RelayConfig
from upload_relay.core.settings import settings as st
from upload_relay.services.relay import UploadRelay


def create_http_client(config: RelayConfig) -> httpx.AsyncClient:
    """Create the shared outbound client; ``forward_timeout=None`` disables timeouts."""
    limits = httpx.Limits(max_connections=100, max_keepalive_connections=20)
    return httpx.AsyncClient(timeout=config.forward_timeout, limits=limits)


class RelayEvent(BaseEvent[UploadRelay]):
    """Manages the UploadRelay and its httpx client lifecycle."""

    name = "relay"

    def __init__(self, config: RelayConfig | None = None) -> None:
        self.config = config or st.relay_config

    async def startup(self) -> UploadRelay:
        """Ensure the upload directory exists and build the relay."""
        await asyncio.to_thread(self.config.upload_dir.mkdir, parents=True, exist_ok=True)
        logger.info("Upload directory ready", icon=LogIcon.FILE, path=str(self.config.upload_dir))
        return UploadRelay(self.config, create_http_client(self.config))

    async def shutdown(self, instance: UploadRelay) -> None:
        """Close the outbound client."""
        await instance.aclose()
