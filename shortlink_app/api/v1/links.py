from fastapi import APIRouter, Depends, HTTPException, Request, status
from shortlink_app.models.link import ShortLinkRecord
from shortlink_app.schemas.link import (
    LinkBatchCreate,
    LinkBatchResponse,
    LinkResponse,
    RedirectDirective,
    StatisticsSummary,
)
from shortlink_app.services.exceptions import (
    BatchValidationError,
    LinkExpiredError,
    LinkNotFoundError,
    ShortcodeExhaustedError,
    StoreError,
)
from shortlink_app.services.link_service import LinkService
from shortlink_app.dependencies import get_link_service

router = APIRouter(tags=["links"])


def to_response(record: ShortLinkRecord) -> LinkResponse:
    return LinkResponse.model_validate(record.model_dump(by_alias=True))


@router.post("/links", response_model=LinkBatchResponse, status_code=status.HTTP_201_CREATED)
async def create_links(
    payload: LinkBatchCreate,
    link_service: LinkService = Depends(get_link_service)
):
    """Shorten up to 5 URLs at once; nothing is stored unless every entry is valid"""
    try:
        records = await link_service.create_links(payload.urls)
    except BatchValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": "Please fix the errors below",
                "errors": [error.model_dump(mode="json") for error in e.errors],
            }
        )
    except ShortcodeExhaustedError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate unique shortcode. Please try again."
        )
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while shortening URLs. Please try again."
        )

    return LinkBatchResponse(links=[to_response(record) for record in records])


@router.get("/links/{shortcode}", response_model=LinkResponse)
async def get_link(
    shortcode: str,
    link_service: LinkService = Depends(get_link_service)
):
    """Get a stored record, expired or not, without recording a click"""
    try:
        record = await link_service.get_link(shortcode)
    except LinkNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short link not found"
        )
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while processing your request"
        )
    return to_response(record)


@router.get("/stats", response_model=StatisticsSummary)
async def get_statistics(link_service: LinkService = Depends(get_link_service)):
    """Totals plus per-link click statistics"""
    try:
        return await link_service.get_statistics()
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error loading statistics"
        )


@router.get("/resolve/{shortcode}", response_model=RedirectDirective)
async def resolve_link(
    shortcode: str,
    request: Request,
    link_service: LinkService = Depends(get_link_service)
):
    """
    Resolve a shortcode as JSON (records a click).

    For clients that render their own "redirecting..." notice.
    """
    try:
        return await link_service.resolve(
            shortcode,
            referrer=request.headers.get("referer"),
            user_agent=request.headers.get("user-agent"),
        )
    except LinkNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short link not found"
        )
    except LinkExpiredError:
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail="Short link has expired"
        )
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while processing your request"
        )
