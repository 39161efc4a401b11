"""
Data models for the CollabNet mailer.

This module defines typed data structures for the pieces that flow through
the pipeline: forums found on the listing page, the mail record built from
each message page, the run-wide skip/limit counters and the events handed
to the console reporter.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .config import UNLIMITED
from .utils import format_headers

# Fixed synthetic headers added to every converted message
CONTENT_TYPE = "text/html; charset=UTF-8"
X_MAILER = "CollabNet to Google Groups v1.0"

# Header keys in the order they are written out
HEADER_ORDER = ('to', 'from', 'subject', 'date', 'content_type', 'x_mailer')

# Headers a record cannot be delivered without
REQUIRED_HEADERS = ('subject', 'from', 'date')


@dataclass(frozen=True)
class ForumRef:
    """
    A forum found on the project's forum listing page.

    Attributes:
        name: Link text of the forum, whitespace-trimmed (e.g. "dev")
        listing_url: Absolute URL of the forum's message summary
    """
    name: str
    listing_url: str


@dataclass
class MailRecord:
    """
    One forum message converted to mail.

    Attributes:
        headers: Header values keyed by lower-case record key, always in
                 HEADER_ORDER; a value is None when it was not found
        body: HTML body, used verbatim
        source_url: Message page the record was extracted from

    Example:
        record = MailRecord.build(
            to="dev@myproject.tigris.org",
            from_="alice@example.com",
            subject="Build broken",
            date="Mon, 1 Jan 2024 00:00:00 +0000",
            body="<p>hi</p>",
        )
        record.to_mail()
        # "To: dev@...\\nFrom: alice@...\\n...X-Mailer: ...\\n\\n<p>hi</p>"
    """
    headers: Dict[str, Optional[str]] = field(default_factory=dict)
    body: str = ""
    source_url: Optional[str] = None

    @classmethod
    def build(
        cls,
        to: Optional[str] = None,
        from_: Optional[str] = None,
        subject: Optional[str] = None,
        date: Optional[str] = None,
        body: str = "",
        source_url: Optional[str] = None,
    ) -> "MailRecord":
        """Create a record with the synthetic headers filled in."""
        headers = {
            'to': to,
            'from': from_,
            'subject': subject,
            'date': date,
            'content_type': CONTENT_TYPE,
            'x_mailer': X_MAILER,
        }
        return cls(headers=headers, body=body, source_url=source_url)

    @property
    def subject(self) -> str:
        return self.headers.get('subject') or ""

    @property
    def sender(self) -> str:
        return self.headers.get('from') or ""

    @property
    def missing_headers(self) -> List[str]:
        """Required headers that are absent or empty."""
        return [name for name in REQUIRED_HEADERS if not self.headers.get(name)]

    @property
    def is_complete(self) -> bool:
        return not self.missing_headers

    def to_mail(self) -> str:
        """Serialize as headers, a blank line, then the body."""
        return format_headers(self.headers) + self.body


class DispatchOutcome(Enum):
    """Terminal state of a processed message."""
    SKIPPED = "skipped"
    SENT = "sent"
    IGNORED = "ignored"
    MALFORMED = "malformed"

    @property
    def consumes_limit(self) -> bool:
        return self in (DispatchOutcome.SENT, DispatchOutcome.IGNORED)


@dataclass
class RunCounters:
    """
    Skip and limit counters shared by every forum in a run.

    Both only ever go down. A remaining_limit of -1 means the run is
    unbounded and the limit is never decremented.
    """
    remaining_skip: int = 0
    remaining_limit: int = UNLIMITED

    @property
    def limit_reached(self) -> bool:
        return self.remaining_limit == 0

    def take_skip(self) -> bool:
        """Consume one skip if any remain; return whether one was consumed."""
        if self.remaining_skip > 0:
            self.remaining_skip -= 1
            return True
        return False

    def consume_limit(self):
        if self.remaining_limit > 0:
            self.remaining_limit -= 1


@dataclass
class MessageEvent:
    """
    A dispatch result, as reported to the console.

    Attributes:
        outcome: What happened to the message
        subject: Subject of the record (may be empty)
        elapsed: Seconds spent fetching, extracting and dispatching
        url: Message page URL
    """
    outcome: DispatchOutcome
    subject: str
    elapsed: float
    url: Optional[str] = None


@dataclass
class RunSummary:
    """Per-outcome message counts for a whole run."""
    forums: int = 0
    counts: Dict[DispatchOutcome, int] = field(
        default_factory=lambda: {outcome: 0 for outcome in DispatchOutcome}
    )

    def record(self, outcome: DispatchOutcome):
        self.counts[outcome] += 1

    @property
    def total(self) -> int:
        return sum(self.counts.values())
