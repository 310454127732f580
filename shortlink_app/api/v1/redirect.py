from html import escape

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse
from shortlink_app.services.exceptions import LinkExpiredError, LinkNotFoundError, StoreError
from shortlink_app.services.link_service import LinkService
from shortlink_app.services.validators import to_ascii_url
from shortlink_app.dependencies import get_redirect_service

router = APIRouter(tags=["redirect"])

PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{title}</title>{head}</head>
<body>
<h1>{title}</h1>
<p>{body}</p>
</body>
</html>
"""


def render(title: str, body: str, head: str = "") -> str:
    return PAGE.format(title=escape(title), body=body, head=head)


@router.get("/{shortcode}", response_class=HTMLResponse)
async def redirect_to_long_url(
    shortcode: str,
    request: Request,
    link_service: LinkService = Depends(get_redirect_service)
):
    """
    Show a short "redirecting" notice, then send the browser on.

    Flow:
    1. Resolve the shortcode; the click is saved before we answer
    2. Answer with a Refresh header (and meta refresh) after the display delay
    3. Remote log events go out after the page has been sent
    """
    try:
        directive = await link_service.resolve(
            shortcode,
            referrer=request.headers.get("referer"),
            user_agent=request.headers.get("user-agent"),
        )
    except LinkNotFoundError:
        return HTMLResponse(
            render(
                "Link Not Found",
                f'The requested short link "{escape(shortcode)}" does not exist or has been removed.',
            ),
            status_code=status.HTTP_404_NOT_FOUND,
        )
    except LinkExpiredError:
        return HTMLResponse(
            render("Link Expired", "This short link has expired and is no longer valid."),
            status_code=status.HTTP_410_GONE,
        )
    except StoreError:
        return HTMLResponse(
            render("Error", "An error occurred while processing your request. Please try again."),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # Header values must be latin-1; IDN hosts and Unicode paths are not
    location = to_ascii_url(directive.target_url)
    refresh = f"{directive.delay_seconds}; url={location}"
    return HTMLResponse(
        render(
            "Redirecting...",
            f'Taking you to <a href="{escape(location, quote=True)}">{escape(directive.target_url)}</a> '
            f'in {directive.delay_seconds} seconds.',
            head=f'<meta http-equiv="refresh" content="{escape(refresh, quote=True)}">',
        ),
        headers={"Refresh": refresh},
    )
