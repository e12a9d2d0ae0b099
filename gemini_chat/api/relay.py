"""Relay endpoint forwarding chat turns to Gemini.

Holds the server-side credential, composes the upstream request and
normalizes the reply or error. Every response, including failures and the
pre-flight request, carries the permissive CORS headers.
"""

import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from gemini_chat.models.schemas import RelayErrorResponse, RelayRequest, RelayResponse
from gemini_chat.relay.config import get_relay_config
from gemini_chat.relay.gemini import GeminiClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["relay"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def get_upstream_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for the Gemini call; None uses the default network transport."""
    return None


@router.options("/gemini-chat")
async def gemini_chat_preflight() -> PlainTextResponse:
    """Answer cross-origin pre-flight requests."""
    return PlainTextResponse("ok", headers=CORS_HEADERS)


@router.post(
    "/gemini-chat",
    response_model=RelayResponse,
    responses={500: {"model": RelayErrorResponse}},
)
async def gemini_chat(
    request: Request,
    transport: httpx.AsyncBaseTransport | None = Depends(get_upstream_transport),
) -> JSONResponse:
    """Relay one chat turn to Gemini.

    Accepts ``{"message": str, "imageUrl"?: data-URI}`` and returns
    ``{"response": str}``.

    Raises:
        500: Invalid body, missing GEMINI_API_KEY, upstream or transport error.
    """
    try:
        payload = RelayRequest.model_validate(await request.json())
        config = get_relay_config()
        reply = await GeminiClient(config, transport=transport).generate(
            payload.message, payload.image_url
        )
    except Exception as e:
        logger.error(f"Error in gemini-chat relay: {e}")
        return JSONResponse(
            RelayErrorResponse(error=str(e) or type(e).__name__).model_dump(),
            status_code=500,
            headers=CORS_HEADERS,
        )

    return JSONResponse(RelayResponse(response=reply).model_dump(), headers=CORS_HEADERS)
