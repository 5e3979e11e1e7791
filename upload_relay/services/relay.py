"""Upload relay: stage every received file, forward it to the external endpoint, clean up."""

import asyncio

import httpx

from upload_relay.core.exceptions import RelayError
from upload_relay.core.logger import LogIcon, logger
from upload_relay.core.settings import RelayConfig
from upload_relay.models.core import UploadFile
from upload_relay.models.relay import ForwardingPayload, ForwardOutcome, RelayReport, UploadedFile
from upload_relay.services import staging


class UploadRelay:
    """Forwards uploaded files one outbound multipart POST per file."""

    def __init__(self, config: RelayConfig, client: httpx.AsyncClient) -> None:
        self._config = config
        self._client = client

    @property
    def config(self) -> RelayConfig:
        return self._config

    async def aclose(self) -> None:
        await self._client.aclose()

    async def relay(self, files: UploadFile) -> RelayReport:
        """Forward all files concurrently and collect one outcome per file."""
        local_names = staging.assign_local_names(name for name, _ in files)
        outcomes = await asyncio.gather(
            *(self.relay_file(name, content, local_names[name]) for name, content in files)
        )
        report = RelayReport(outcomes=list(outcomes))
        if report.ok:
            logger.info("Files relayed", icon=LogIcon.SUCCESS, count=len(report.outcomes))
        else:
            logger.error(
                "Relay failed for some files",
                icon=LogIcon.ERROR,
                failed=[outcome.filename for outcome in report.failed],
                count=len(report.outcomes),
            )
        return report

    async def relay_file(self, filename: str, content: bytes, local_name: str | None = None) -> ForwardOutcome:
        """Stage, relocate, read back and forward a single file; its local copy is always removed."""
        try:
            uploaded = await staging.stage(self._config.upload_dir, filename, content)
        except OSError as ex:
            logger.error("Staging failed", icon=LogIcon.ERROR, filename=filename, error=str(ex))
            return ForwardOutcome(filename=filename, forwarded=False, error=str(ex))

        try:
            await staging.relocate(uploaded, self._config.upload_dir, local_name)
            data = await staging.read(uploaded)
            await self.forward(ForwardingPayload(content=data, filename=uploaded.original_name))
        except (OSError, RelayError, httpx.HTTPError) as ex:
            logger.error("Error sending data to external server", icon=LogIcon.ERROR, filename=filename, error=str(ex))
            return ForwardOutcome(filename=filename, forwarded=False, error=str(ex))
        finally:
            await self._cleanup(uploaded)

        logger.info("Data sent to external server", icon=LogIcon.UPLOAD, filename=filename)
        return ForwardOutcome(filename=filename, forwarded=True)

    async def forward(self, payload: ForwardingPayload) -> httpx.Response:
        """POST one payload as multipart to the external endpoint; non-2xx raises."""
        logger.info(
            "Forwarding payload",
            icon=LogIcon.NETWORK,
            filename=payload.filename,
            content_type=payload.content_type,
            size=len(payload.content),
            endpoint=self._config.external_endpoint,
        )
        response = await self._client.post(
            self._config.external_endpoint,
            files=payload.as_multipart(),
            timeout=self._config.forward_timeout,
        )
        response.raise_for_status()
        return response

    async def _cleanup(self, uploaded: UploadedFile) -> None:
        try:
            await staging.remove(uploaded)
        except OSError as ex:
            logger.warning("Could not remove local copy", icon=LogIcon.WARNING, path=str(uploaded.path), error=str(ex))
