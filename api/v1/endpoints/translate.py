# api/v1/endpoints/translate.py
import asyncio

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from models.requests import TranslateTextRequest, TranslateUrlRequest, TranslateWordRequest
from models.responses import (
    ErrorResponse,
    TranslateTextResponse,
    TranslateUrlResponse,
    TranslateWordResponse,
)
from services.orchestrator import Done

router = APIRouter()

# How often a running translate-url checks whether the caller went away.
DISCONNECT_POLL_SECONDS = 0.5


def _error(message: str) -> dict:
    return ErrorResponse(error=message).model_dump(exclude_none=True)


async def _run_unless_disconnected(request: Request, coro):
    """Run ``coro`` as a task and cancel it if the HTTP client disconnects.

    Returns ``None`` when the request was abandoned.
    """
    task = asyncio.ensure_future(coro)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info(f"Client disconnected, cancelling {request.url.path}")
                task.cancel()
                return None
    finally:
        if not task.done():
            task.cancel()


@router.post(
    "/translate-url",
    response_model=TranslateUrlResponse,
    responses={code: {"model": ErrorResponse} for code in (422, 499, 500, 502, 504)},
)
async def translate_url(body: TranslateUrlRequest, request: Request):
    logger.info(f"Processing translate-url request for URL: {body.url}")
    orchestrator = request.app.state.orchestrator

    outcome = await _run_unless_disconnected(request, orchestrator.run(body.url))
    if outcome is None:
        # 499 is what nginx logs for a client-closed request; nobody reads it.
        return JSONResponse(status_code=499, content=_error("Запрос отменён"))

    if isinstance(outcome, Done):
        return TranslateUrlResponse(**outcome.to_dict())
    return JSONResponse(status_code=outcome.status_code, content=outcome.to_dict())


@router.post(
    "/translate-text",
    response_model=TranslateTextResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def translate_text(body: TranslateTextRequest, request: Request):
    if not body.text or not body.text.strip():
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error("Текст не предоставлен"),
        )

    client = request.app.state.translation_client
    try:
        translated = await client.translate_text(body.text, body.source, body.target)
    except Exception as exc:
        logger.exception(f"translate-text failed: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error(f"Ошибка перевода: {str(exc) or 'unknown'}"),
        )
    return TranslateTextResponse(translated=translated)


@router.post(
    "/translate-word",
    response_model=TranslateWordResponse,
    responses={404: {"model": ErrorResponse}},
)
async def translate_word(body: TranslateWordRequest, request: Request):
    dictionary = request.app.state.dictionary
    translation = dictionary.translate_word(body.word, body.direction)
    if translation is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error("Слово не найдено"),
        )
    return TranslateWordResponse(translation=translation)
