"""Upload endpoint: relays every posted file to the external endpoint."""

from robyn import Request, status_codes

from upload_relay.core.logger import LogIcon, bind_request_id, logger
from upload_relay.core.router import Router
from upload_relay.models.core import UploadFile
from upload_relay.models.relay import FileStatus, RelayReport, UploadErrorResponse, UploadSuccessResponse
from upload_relay.services.relay import UploadRelay

router = Router(__file__, prefix="")


def render_report(report: RelayReport) -> tuple[int, UploadSuccessResponse | UploadErrorResponse]:
    """One response for the whole request: 200 when every file went through, else 500 listing each file."""
    if report.ok:
        return status_codes.HTTP_200_OK, UploadSuccessResponse()
    return status_codes.HTTP_500_INTERNAL_SERVER_ERROR, UploadErrorResponse(
        files=[FileStatus(filename=outcome.filename, forwarded=outcome.forwarded) for outcome in report.outcomes]
    )


async def relay_upload(relay: UploadRelay, files: UploadFile) -> tuple[int, UploadSuccessResponse | UploadErrorResponse]:
    logger.info("Upload received", icon=LogIcon.UPLOAD, files=files.keys())
    report = await relay.relay(files)
    return render_report(report)


@router.post("/upload")
async def upload(request: Request, files: UploadFile, global_dependencies):
    """Upload files and forward each one to the external server."""
    bind_request_id(request.headers.get("x-request-id"))
    relay: UploadRelay = global_dependencies["state"].relay
    return await relay_upload(relay, files)
