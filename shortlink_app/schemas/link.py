from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from shortlink_app.config import settings
from shortlink_app.models.link import ClickEvent, ShortLinkRecord


class LinkEntry(BaseModel):
    """One row of the shorten form. Blank strings mean "not given"."""
    long_url: Optional[str] = Field(None, alias="longURL", description="The URL to shorten")
    validity: Optional[Union[int, str]] = Field(None, description="Validity in minutes (default 30)")
    shortcode: Optional[str] = Field(None, description="Optional custom shortcode, 4-10 letters/digits")

    model_config = ConfigDict(populate_by_name=True)


class LinkBatchCreate(BaseModel):
    urls: List[LinkEntry] = Field(..., description="Up to 5 URLs to shorten at once")


class LinkResponse(ShortLinkRecord):
    """A stored record plus its public short URL"""

    @computed_field
    @property
    def short_url(self) -> str:
        """Computed field - automatically generated from shortcode"""
        return f"{settings.base_url}/{self.shortcode}"

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class LinkBatchResponse(BaseModel):
    links: List[LinkResponse]


class RedirectDirective(BaseModel):
    """Tells the caller where to send the visitor and how long to show the notice first"""
    shortcode: str
    target_url: str
    delay_seconds: int
    clicks: int


class LinkStatus(str, Enum):
    ACTIVE = "active"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


class LinkStats(BaseModel):
    shortcode: str
    long_url: str = Field(..., alias="longURL")
    created: datetime
    expiry: datetime
    clicks: int
    status: LinkStatus
    minutes_left: int
    click_share: float = Field(..., description="Percentage of all recorded clicks")
    recent_clicks: List[ClickEvent] = Field(default_factory=list, alias="recentClicks")

    model_config = ConfigDict(populate_by_name=True)


class StatisticsSummary(BaseModel):
    total_links: int
    total_clicks: int
    active_links: int
    expired_links: int
    links: List[LinkStats]
