"""
Top-level conversion loop.

RunController logs in once, enumerates forums, walks each forum's message
list and decides what happens to every message:

    skip counter left   -> SKIPPED   (not sent, limit untouched, no delay)
    record incomplete   -> MALFORMED (not sent, limit untouched, no delay)
    destination address -> SENT      (handed to the mail transport)
    otherwise           -> IGNORED   (dry run)

SENT and IGNORED consume the limit and are followed by the optional random
delay. The skip and limit counters span the whole run, not each forum, and
the run ends as soon as the limit reaches zero.
"""

import asyncio
import logging
import random
import time
from typing import Awaitable, Callable, Optional

from .config import Configuration
from .extractor import HeaderExtractor
from .models import DispatchOutcome, ForumRef, MailRecord, MessageEvent, RunCounters, RunSummary
from .reporter import ConsoleReporter
from .scraper import ForumScraper
from .session import ForumSession, LoginSubmitter
from .transport import MailTransport, SmtpTransport

logger = logging.getLogger(__name__)


class RunController:
    """
    Drives one conversion run.

    Usage:
        async with ForumSession() as session:
            summary = await RunController(config, session).run()
    """

    def __init__(
        self,
        config: Configuration,
        session: ForumSession,
        transport: Optional[MailTransport] = None,
        reporter: Optional[ConsoleReporter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.session = session
        self.transport = transport or SmtpTransport()
        self.reporter = reporter or ConsoleReporter()
        self.sleep = sleep
        self.rng = rng or random.Random()
        self.scraper = ForumScraper(session, max_pages=config.max_pages)
        self.extractor = HeaderExtractor(config.subject_strip_prefix)
        self.counters = RunCounters(
            remaining_skip=config.skip_count,
            remaining_limit=config.message_limit,
        )
        self.summary = RunSummary()

    def sample_delay(self) -> int:
        """Whole seconds to pause, uniform over the configured closed range."""
        delay = self.config.delay_range
        return self.rng.randint(delay.min, delay.max)

    async def fetch_record(self, url: str) -> MailRecord:
        page = await self.session.get(url)
        return self.extractor.extract(page.soup, source_url=url)

    def dispatch(self, record: MailRecord) -> DispatchOutcome:
        """Decide a record's fate and deliver it if it is to be sent."""
        if self.counters.take_skip():
            return DispatchOutcome.SKIPPED

        if not record.is_complete:
            logger.warning(
                "Not converting %s: missing %s",
                record.source_url, ", ".join(record.missing_headers),
            )
            return DispatchOutcome.MALFORMED

        if self.config.destination_address:
            self.transport.send(record, self.config.destination_address)
            return DispatchOutcome.SENT

        return DispatchOutcome.IGNORED

    async def process_message(self, url: str) -> DispatchOutcome:
        """Fetch, extract and dispatch one message; report and pace it."""
        started = time.perf_counter()
        record = await self.fetch_record(url)
        outcome = self.dispatch(record)

        self.summary.record(outcome)
        self.reporter.message_processed(MessageEvent(
            outcome=outcome,
            subject=record.subject,
            elapsed=time.perf_counter() - started,
            url=url,
        ))

        if outcome.consumes_limit:
            self.counters.consume_limit()
            if self.config.delay_range is not None:
                seconds = self.sample_delay()
                self.reporter.delaying(seconds)
                await self.sleep(seconds)

        return outcome

    async def process_forum(self, forum: ForumRef):
        started = time.perf_counter()
        self.reporter.forum_started(forum)
        self.summary.forums += 1

        urls = await self.scraper.get_message_links(forum)
        self.reporter.forum_messages_found(forum, len(urls))

        for url in urls:
            if self.counters.limit_reached:
                break
            await self.process_message(url)

        self.reporter.forum_finished(forum, time.perf_counter() - started)

    async def run(self) -> RunSummary:
        """
        Log in, then convert every selected forum in listing order.

        Returns:
            Per-outcome counts for the run
        """
        await LoginSubmitter(self.config.username, self.config.password).login(
            self.session, self.config.login_url
        )

        forums = await self.scraper.get_forums(self.config.forums_url, self.config.forum_filter)
        for forum in forums:
            await self.process_forum(forum)
            if self.counters.limit_reached:
                break

        self.reporter.run_finished(self.summary)
        return self.summary
