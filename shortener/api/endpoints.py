"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request body checks (content type, size, JSON shape)
- Rate limiting
- Error handling and HTTP responses
- Delegating to the link store

Malformed input is answered with an explicit HTTP error (400/413/415)
instead of dropping the connection.
"""

import logging

from fastapi import APIRouter, Request, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from shortener.api.schemas import ShortenRequest, ShortenResponse, StatsResponse
from shortener.core.exceptions import (
    InvalidPayloadError,
    InvalidURLError,
    PayloadTooLargeError,
    ShortCodeNotFoundError,
    UnsupportedMediaTypeError,
)
from shortener.core.rate_limit import limiter, RATE_LIMITS
from shortener.core.setting import Settings
from shortener.core.validators import sanitize_short_code
from shortener.services.link_store import LinkStore

logger = logging.getLogger(__name__)

router = APIRouter()


def get_link_store(request: Request) -> LinkStore:
    """Dependency returning the link store created at application startup."""
    return request.app.state.link_store


def get_settings(request: Request) -> Settings:
    """Dependency returning the settings the application was built with."""
    return request.app.state.settings


async def read_shorten_request(request: Request, max_body_bytes: int) -> ShortenRequest:
    """
    Read and validate a shorten request body.

    Args:
        request: The incoming request
        max_body_bytes: Largest accepted body

    Returns:
        Parsed ShortenRequest

    Raises:
        UnsupportedMediaTypeError: If the body is not declared as JSON
        PayloadTooLargeError: If the body exceeds max_body_bytes
        InvalidPayloadError: If the body is not JSON or lacks longUrl
    """
    content_type = request.headers.get("content-type", "")
    if content_type.split(";", 1)[0].strip().lower() != "application/json":
        raise UnsupportedMediaTypeError(content_type)

    declared_length = request.headers.get("content-length", "")
    if declared_length.isdigit() and int(declared_length) > max_body_bytes:
        raise PayloadTooLargeError(max_body_bytes)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_body_bytes:
            raise PayloadTooLargeError(max_body_bytes)

    try:
        return ShortenRequest.model_validate_json(bytes(body))
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error.get("loc", ()))
        reason = f"{location}: {error['msg']}" if location else error["msg"]
        raise InvalidPayloadError(reason)


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    summary="Create a short URL",
    description="Takes a long URL and returns its short link; the same long URL always gets the same link"
)
@router.post("/", response_model=ShortenResponse, include_in_schema=False)
@limiter.limit(RATE_LIMITS["shorten"])
async def create_short_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    store: LinkStore = Depends(get_link_store),
    settings: Settings = Depends(get_settings)
) -> ShortenResponse:
    """
    Create (or return the existing) short URL for a long URL.

    Returns:
        ShortenResponse with shortUrl, shortCode and longUrl
    """
    try:
        body = await read_shorten_request(request, settings.MAX_BODY_BYTES)
        short_code = store.shorten(body.long_url)
    except UnsupportedMediaTypeError as e:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=str(e)
        )
    except PayloadTooLargeError as e:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(e)
        )
    except (InvalidPayloadError, InvalidURLError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return ShortenResponse(
        short_url=f"{settings.PREFIX}{short_code}",
        short_code=short_code,
        long_url=body.long_url.strip()
    )


@router.get(
    "/stats/{short_code}",
    response_model=StatsResponse,
    summary="Get URL statistics",
    description="Returns click count and creation time for a short URL"
)
@limiter.limit(RATE_LIMITS["stats"])
async def get_url_stats(
    short_code: str,
    request: Request,  # Required for rate limiting
    store: LinkStore = Depends(get_link_store)
) -> StatsResponse:
    """
    Get statistics for a short URL. Looking up stats does not count a click.

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
    """
    sanitized_code = sanitize_short_code(short_code)
    if not sanitized_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid short code format: '{short_code}'. Short codes must contain only lowercase letters."
        )

    try:
        record = store.get_record(sanitized_code)
    except ShortCodeNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    return StatsResponse(
        short_code=sanitized_code,
        long_url=record.long_url,
        clicks=record.clicks,
        created_at=record.created_at
    )


@router.get(
    "/{short_code}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Takes a short code and redirects to the original long URL"
)
@limiter.limit(RATE_LIMITS["redirect"])
async def redirect_to_url(
    short_code: str,
    request: Request,
    store: LinkStore = Depends(get_link_store)
) -> RedirectResponse:
    """
    Redirect to the original URL for a given short code and count the click.

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
        HTTPException 429: If rate limit exceeded
    """
    sanitized_code = sanitize_short_code(short_code)
    if not sanitized_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid short code format: '{short_code}'. Short codes must contain only lowercase letters."
        )

    long_url = store.resolve(sanitized_code)
    if long_url is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short code '{sanitized_code}' not found"
        )

    logger.info(f"Redirecting {sanitized_code} -> {long_url}")
    return RedirectResponse(
        url=long_url,
        status_code=status.HTTP_302_FOUND
    )
