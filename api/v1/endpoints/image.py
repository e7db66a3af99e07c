# api/v1/endpoints/image.py
from fastapi import APIRouter, Query, Request, status
from fastapi.responses import PlainTextResponse, Response
from loguru import logger

from core.exceptions import FetchError

router = APIRouter()

CACHE_CONTROL = "public, max-age=86400"
DEFAULT_IMAGE_TYPE = "image/jpeg"


@router.get("/image")
async def proxy_image(request: Request, url: str = Query(default="")):
    """Stream a remote image through this host so translated pages render it."""
    url = url.strip()
    if not url.lower().startswith(("http://", "https://")):
        return PlainTextResponse("bad url", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        image = await request.app.state.fetcher.fetch_image(url)
    except FetchError as exc:
        logger.debug(f"Image proxy miss for {url}: {exc.message}")
        return PlainTextResponse("image fetch failed", status_code=status.HTTP_404_NOT_FOUND)

    return Response(
        content=image.content,
        media_type=image.content_type or DEFAULT_IMAGE_TYPE,
        headers={"Cache-Control": CACHE_CONTROL},
    )
