"""Short URL management endpoints: create, list and delete."""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.api import schemas
from shorturl.api.dependencies import get_shortener_service
from shorturl.db.session import get_db
from shorturl.services.shortener import ShortenedURLService
from shorturl.services.exceptions import (
    InvalidAPIKeyError,
    URLNotFoundError,
    URLStorageError,
    URLValidationError,
)

router = APIRouter(tags=["URLs"])


@router.post(
    "/",
    response_model=schemas.URLCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    responses={
        400: {"model": schemas.ValidationErrorResponse, "description": "Invalid request body"},
        403: {"model": schemas.ErrorResponse, "description": "Invalid API key"},
        500: {"model": schemas.ErrorResponse, "description": "Failed to create short URL"},
    }
)
async def create_short_url(
    url_data: schemas.URLCreateRequest,
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenedURLService = Depends(get_shortener_service),
):
    try:
        short_url = await shortener_service.create_short_url(
            db=db,
            original_url=url_data.url,
            api_key=url_data.key,
            expiration=url_data.expiration,
        )
        return schemas.URLCreateResponse(short_url=short_url)
    except InvalidAPIKeyError:
        logger.warning("Rejected short URL creation with an invalid API key")
        raise HTTPException(status_code=403, detail="Invalid API key")
    except URLValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except URLStorageError:
        raise HTTPException(status_code=500, detail="Failed to create short URL")


@router.get(
    "/",
    response_model=List[schemas.URLResponse],
    summary="Get a list of all URLs",
    responses={
        500: {"model": schemas.ErrorResponse, "description": "Failed to retrieve URLs"},
    }
)
async def list_urls(
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenedURLService = Depends(get_shortener_service),
):
    try:
        urls = await shortener_service.list_urls(db)
    except URLStorageError:
        raise HTTPException(status_code=500, detail="Failed to retrieve URLs")
    return [schemas.URLResponse.model_validate(url) for url in urls]


@router.delete(
    "/{url_id}",
    response_model=schemas.MessageResponse,
    summary="Delete a short URL",
    responses={
        400: {"model": schemas.ValidationErrorResponse, "description": "Invalid URL id or missing API key"},
        403: {"model": schemas.ErrorResponse, "description": "Invalid API key"},
        404: {"model": schemas.ErrorResponse, "description": "URL not found"},
        500: {"model": schemas.ErrorResponse, "description": "Failed to delete URL"},
    }
)
async def delete_short_url(
    url_id: uuid.UUID = Path(..., description="The URL id"),
    key: str = Query(..., description="The API key for authorization"),
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenedURLService = Depends(get_shortener_service),
):
    try:
        await shortener_service.delete_url(db=db, url_id=url_id, api_key=key)
    except InvalidAPIKeyError:
        logger.warning(f"Rejected delete of {url_id} with an invalid API key")
        raise HTTPException(status_code=403, detail="Invalid API key")
    except URLNotFoundError:
        raise HTTPException(status_code=404, detail="URL not found")
    except URLStorageError:
        raise HTTPException(status_code=500, detail="Failed to delete URL")
    return schemas.MessageResponse(message="URL deleted successfully")
