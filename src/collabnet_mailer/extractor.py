"""
Field extraction for CollabNet message pages.

A message page renders the post in a two-column table with class "axial".
Each row has a <th> label and a <td> value; the two rows that matter are:

    <tr><th>Header</th><td><pre>To: dev@...
    From: alice@...
    Subject: [dev] Build broken
    Date: Mon, 1 Jan 2024 00:00:00 +0000</pre></td></tr>
    <tr><th>Message</th><td><p>The build is broken.</p></td></tr>

The header block is plain text (HTML-escaped inside the <pre>); the message
cell is already HTML and is used as the mail body as-is.
"""

import logging
from typing import Dict, Optional

from bs4 import BeautifulSoup

from .models import MailRecord
from .utils import extract_mail_header, normalize_subject, strip_wrapper

logger = logging.getLogger(__name__)

ROW_SELECTOR = 'table.axial tr'

HEADER_LABEL = 'Header'
MESSAGE_LABEL = 'Message'

# Header fields pulled out of the header block, in output order
HEADER_FIELDS = ('to', 'from', 'subject', 'date')

# Wrappers around the cell markup, as rendered by BeautifulSoup
HEADER_CELL_OPEN = r'<td[^>]*>\s*<pre[^>]*>'
HEADER_CELL_CLOSE = r'</pre>\s*</td>'
MESSAGE_CELL_OPEN = r'<td[^>]*>'
MESSAGE_CELL_CLOSE = r'</td>'


class HeaderExtractor:
    """
    Builds a MailRecord from a message page.

    Args:
        strip_prefix: Subject prefix to remove (after any Re:/Fwd: markers)
    """

    def __init__(self, strip_prefix: str = ""):
        self.strip_prefix = strip_prefix

    def parse_header_block(self, markup: str) -> Dict[str, Optional[str]]:
        """Extract to/from/subject/date from the raw markup of a header cell."""
        text = strip_wrapper(markup, HEADER_CELL_OPEN, HEADER_CELL_CLOSE)
        return {name: extract_mail_header(text, name) for name in HEADER_FIELDS}

    def parse_body(self, markup: str) -> str:
        """Return the inner markup of a message cell."""
        return strip_wrapper(markup, MESSAGE_CELL_OPEN, MESSAGE_CELL_CLOSE)

    def extract(self, soup: BeautifulSoup, source_url: Optional[str] = None) -> MailRecord:
        """
        Extract a mail record from a parsed message page.

        Missing rows leave the corresponding fields empty; callers decide
        what to do with an incomplete record (see MailRecord.is_complete).
        """
        fields: Dict[str, Optional[str]] = {}
        body = ""

        for row in soup.select(ROW_SELECTOR):
            label = row.find('th')
            cell = row.find('td')
            if label is None or cell is None:
                continue

            kind = label.get_text().strip()
            if kind == HEADER_LABEL:
                fields = self.parse_header_block(str(cell))
            elif kind == MESSAGE_LABEL:
                body = self.parse_body(str(cell))

        if not fields:
            logger.warning("No header block found on %s", source_url or "message page")

        subject = fields.get('subject')
        if subject is not None:
            subject = normalize_subject(subject, self.strip_prefix)

        return MailRecord.build(
            to=fields.get('to'),
            from_=fields.get('from'),
            subject=subject,
            date=fields.get('date'),
            body=body,
            source_url=source_url,
        )


def extract_message(html: str, strip_prefix: str = "", source_url: Optional[str] = None) -> MailRecord:
    """Convenience wrapper: parse HTML and extract a MailRecord from it."""
    soup = BeautifulSoup(html, "lxml")
    return HeaderExtractor(strip_prefix).extract(soup, source_url)
