"""
Link table models.

Field names are serialized in camelCase (longURL, clickData, userAgent) so the
persisted blob keeps the same shape the table always had.
"""

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ClickEvent(BaseModel):
    """One successful resolution of an active shortcode"""

    timestamp: datetime = Field(..., description="When the link was resolved")
    source: str = Field("direct", description="Referrer, or 'direct' when there was none")
    location: str = Field("Unknown", description="Best-effort location of the visitor")
    user_agent: str = Field("Unknown", alias="userAgent", description="Client identifier")

    model_config = ConfigDict(populate_by_name=True)


class ShortLinkRecord(BaseModel):
    """
    One entry of the link table.

    shortcode, longURL, created and expiry are frozen once the record exists;
    only clicks and clickData change, and only through record_click().
    """

    long_url: str = Field(..., alias="longURL", frozen=True)
    shortcode: str = Field(..., frozen=True)
    created: datetime = Field(..., frozen=True)
    expiry: datetime = Field(..., frozen=True)
    clicks: int = Field(0, ge=0)
    click_data: List[ClickEvent] = Field(default_factory=list, alias="clickData")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "longURL": "https://example.com",
                "shortcode": "aB3dE9",
                "created": "2026-10-19T10:00:00Z",
                "expiry": "2026-10-19T10:30:00Z",
                "clicks": 1,
                "clickData": [
                    {
                        "timestamp": "2026-10-19T10:05:00Z",
                        "source": "direct",
                        "location": "Unknown",
                        "userAgent": "Mozilla/5.0",
                    }
                ],
            }
        },
    )

    def is_expired(self, now: datetime) -> bool:
        # Equality still counts as active
        return now > self.expiry

    def minutes_left(self, now: datetime) -> int:
        """Whole minutes until expiry, 0 once expired"""
        if self.is_expired(now):
            return 0
        return int((self.expiry - now).total_seconds() // 60)

    def record_click(self, event: ClickEvent) -> None:
        self.click_data.append(event)
        self.clicks += 1


Table = Dict[str, ShortLinkRecord]

# Parses / serializes a whole table in one go
TableAdapter = TypeAdapter(Dict[str, ShortLinkRecord])
