import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence, Set

from shortlink_app.config import settings
from shortlink_app.models.link import ClickEvent, ShortLinkRecord
from shortlink_app.remote_log.logger import RemoteLogger
from shortlink_app.schemas.link import (
    LinkEntry,
    LinkStats,
    LinkStatus,
    RedirectDirective,
    StatisticsSummary,
)
from shortlink_app.services.exceptions import (
    BatchValidationError,
    ErrorKind,
    FieldError,
    InvalidShortcodeError,
    LinkExpiredError,
    LinkNotFoundError,
    ShortcodeExhaustedError,
    StoreError,
)
from shortlink_app.services.short_code_factory import ShortCodeFactory, generate_short_code
from shortlink_app.services.short_code_strategies import ShortCodeStrategy
from shortlink_app.services.validators import ValidatedEntry, validate_batch
from shortlink_app.store.strategies import TableStore


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LinkService:
    """
    Link service with dependency injection for the table store and logger.

    - The table store is injected (never reached through globals)
    - Every read-modify-write runs inside store.transaction()
    - Remote log events are emitted after the transaction, never inside it
    """

    STACK = "backend"

    def __init__(
        self,
        store: TableStore,
        remote_logger: RemoteLogger,
        short_code_strategy: Optional[ShortCodeStrategy] = None,
        clock: Callable[[], datetime] = utc_now,
        defer: Optional[Callable[..., None]] = None,
    ):
        """
        Initialize link service with dependencies.

        Args:
            store: Table store holding the shortcode -> record mapping
            remote_logger: Structured remote logger
            short_code_strategy: Generator for codes not supplied by the user
            clock: Returns the current (timezone-aware) time
            defer: Schedules a call to run after the response is sent
                (e.g. BackgroundTasks.add_task); log events are awaited inline without it
        """
        self.store = store
        self.remote_logger = remote_logger
        self.short_code_strategy = short_code_strategy or ShortCodeFactory.create_strategy()
        self.clock = clock
        self.defer = defer

    async def create_links(self, entries: Sequence[LinkEntry]) -> List[ShortLinkRecord]:
        """
        Validate a batch and create one record per entry.

        All or nothing: either every entry gets a record or the table is
        left exactly as it was.

        Raises:
            BatchValidationError: Per-field problems (caller may resubmit)
            ShortcodeExhaustedError: No free code could be generated
            StoreError: The table could not be read or written
        """
        try:
            validated = validate_batch(entries)
        except BatchValidationError:
            await self._log("error", "handler", "Form validation failed")
            raise

        try:
            with self.store.transaction() as table:
                created = self._insert_records(table, validated)
        except BatchValidationError:
            await self._log("error", "service", "Shortcode already in use, batch rejected")
            raise
        except ShortcodeExhaustedError as e:
            await self._log("error", "service", f"Failed to generate unique shortcode: {e}")
            raise
        except StoreError as e:
            await self._log("fatal", "repository", f"Error shortening URLs: {e}")
            raise

        await asyncio.gather(*(
            self._log("info", "service", f"Shortened {record.long_url} to {record.shortcode}")
            for record in created
        ))

        return created

    def _insert_records(self, table, validated: List[ValidatedEntry]) -> List[ShortLinkRecord]:
        """Allocate codes and insert records into a table that is not yet saved"""
        taken: Set[str] = set(table)
        now = self.clock()
        created = []

        for entry in validated:
            try:
                shortcode = generate_short_code(entry.custom_code, taken, self.short_code_strategy)
            except InvalidShortcodeError as e:
                # Custom code is well-formed but already in the table
                raise BatchValidationError([
                    FieldError(
                        entry=entry.index,
                        field="shortcode",
                        kind=ErrorKind.INVALID_SHORTCODE,
                        reason=e.reason.value,
                        message=e.message,
                    )
                ]) from e

            record = ShortLinkRecord(
                long_url=entry.long_url,
                shortcode=shortcode,
                created=now,
                expiry=now + timedelta(minutes=entry.validity_minutes),
                clicks=0,
                click_data=[],
            )
            table[shortcode] = record
            taken.add(shortcode)
            created.append(record)

        return created

    async def resolve(
        self,
        path: str,
        referrer: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> RedirectDirective:
        """
        Resolve a shortcode and record the click.

        NotFound and Expired leave the table untouched. For an active link
        the click is appended and the whole table saved BEFORE the redirect
        directive is returned.

        Raises:
            LinkNotFoundError: No such shortcode
            LinkExpiredError: The shortcode's validity window has passed
            StoreError: The table could not be read or written
        """
        shortcode = path.strip("/")

        try:
            with self.store.transaction() as table:
                record = table.get(shortcode)
                if record is None:
                    raise LinkNotFoundError(shortcode)

                now = self.clock()
                if record.is_expired(now):
                    raise LinkExpiredError(shortcode)

                record.record_click(ClickEvent(
                    timestamp=now,
                    source=referrer or "direct",
                    location="Unknown",
                    user_agent=user_agent or "Unknown",
                ))
        except LinkNotFoundError:
            await self._log("error", "handler", f"Invalid shortcode attempted: {shortcode}")
            raise
        except LinkExpiredError:
            await self._log("warn", "handler", f"Shortcode {shortcode} has expired")
            raise
        except StoreError as e:
            await self._log("error", "repository", f"Error during redirect: {e}")
            raise

        await self._log(
            "info", "handler",
            f"Redirecting {shortcode} to {record.long_url} (Click #{record.clicks})"
        )

        return RedirectDirective(
            shortcode=shortcode,
            target_url=record.long_url,
            delay_seconds=settings.redirect_delay_seconds,
            clicks=record.clicks,
        )

    async def get_link(self, shortcode: str) -> ShortLinkRecord:
        """
        Get one record without touching it.

        Raises:
            LinkNotFoundError: No such shortcode
            StoreError: The table could not be read
        """
        try:
            record = self.store.load().get(shortcode)
        except StoreError as e:
            await self._log("error", "repository", f"Error loading shortcode {shortcode}: {e}")
            raise

        if record is None:
            raise LinkNotFoundError(shortcode)
        return record

    async def get_statistics(self) -> StatisticsSummary:
        """Aggregate counts over the whole table (read-only)"""
        try:
            records = list(self.store.load().values())
        except StoreError as e:
            await self._log("error", "repository", f"Error loading statistics: {e}")
            raise

        now = self.clock()
        total_clicks = sum(record.clicks for record in records)
        soon = timedelta(minutes=settings.expiring_soon_minutes)

        links = []
        for record in records:
            if record.is_expired(now):
                status = LinkStatus.EXPIRED
            elif record.expiry - now < soon:
                status = LinkStatus.EXPIRING_SOON
            else:
                status = LinkStatus.ACTIVE

            links.append(LinkStats(
                shortcode=record.shortcode,
                long_url=record.long_url,
                created=record.created,
                expiry=record.expiry,
                clicks=record.clicks,
                status=status,
                minutes_left=record.minutes_left(now),
                click_share=round(record.clicks / max(1, total_clicks) * 100, 1),
                recent_clicks=record.click_data[-settings.recent_clicks_limit:][::-1],
            ))

        expired = sum(1 for link in links if link.status == LinkStatus.EXPIRED)

        await self._log("info", "service", f"Statistics loaded with {len(records)} URLs")

        return StatisticsSummary(
            total_links=len(records),
            total_clicks=total_clicks,
            active_links=len(records) - expired,
            expired_links=expired,
            links=links,
        )

    async def _log(self, level: str, package: str, message: str) -> None:
        if self.defer is not None:
            self.defer(self.remote_logger.log, self.STACK, level, package, message)
            return
        await self.remote_logger.log(self.STACK, level, package, message)
