"""Upload form page."""

import asyncio
from pathlib import Path

from robyn import Response, status_codes

from upload_relay.core.router import Router
from upload_relay.core.settings import settings as st

router = Router(__file__, prefix="")

UPLOAD_PAGE = "upload.html"


async def render_page(path: Path) -> Response:
    page = await asyncio.to_thread(path.read_text, encoding="utf-8")
    return Response(
        status_code=status_codes.HTTP_200_OK,
        headers={"content-type": "text/html; charset=utf-8"},
        description=page,
    )


@router.get("/")
async def index() -> Response:
    return await render_page(st.PUBLIC_DIR / UPLOAD_PAGE)
