"""URL redirection endpoint."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Path, status
from starlette.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.api import schemas
from shorturl.api.dependencies import get_shortener_service
from shorturl.db.session import get_db
from shorturl.services.shortener import ShortenedURLService
from shorturl.services.exceptions import URLExpiredError, URLNotFoundError, URLStorageError

# Create router with tags
router = APIRouter(tags=["redirect"])


@router.get(
    "/{url_id}",
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to the original URL",
    responses={
        400: {"model": schemas.ValidationErrorResponse, "description": "Invalid URL id"},
        404: {"model": schemas.ErrorResponse, "description": "URL not found"},
        410: {"model": schemas.ErrorResponse, "description": "URL has expired"},
        500: {"model": schemas.ErrorResponse, "description": "Failed to retrieve URL"},
    }
)
async def redirect_to_original_url(
    url_id: uuid.UUID = Path(..., description="The URL id"),
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenedURLService = Depends(get_shortener_service),
):
    """Redirect to the original URL unless it is unknown or expired."""
    try:
        original_url = await shortener_service.resolve(db, url_id)
    except URLNotFoundError:
        raise HTTPException(status_code=404, detail="URL not found")
    except URLExpiredError:
        raise HTTPException(status_code=410, detail="URL has expired")
    except URLStorageError:
        raise HTTPException(status_code=500, detail="Failed to retrieve URL")

    return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)
