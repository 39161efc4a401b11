"""
String helpers for turning forum markup into mail text.

These are plain functions over plain strings: header lookup in a block of
text, header-name formatting, subject clean-up and console truncation.
"""

import html
import re
from typing import Mapping, Optional

# Reply/forward markers that may precede a subject prefix
REPLY_MARKERS = r'(?:re|fwd?):'


def extract_mail_header(text: str, name: str) -> Optional[str]:
    """
    Find a "<Name>: <value>" line in a block of header text.

    The match is case-insensitive and anchored to the start of a line. The
    value has HTML entities unescaped and surrounding whitespace removed.

    Args:
        text: Header block, one header per line
        name: Header name without the colon (e.g. "subject")

    Returns:
        The header value, or None if no such line exists

    Example:
        extract_mail_header("From: a@x.com\\nSubject: Hi", "subject")
        # Returns: "Hi"
    """
    pattern = re.compile(r'^' + re.escape(name) + r':[ \t]*(.+?)\s*$', re.IGNORECASE | re.MULTILINE)
    match = pattern.search(text)
    if not match:
        return None
    return html.unescape(match.group(1)).strip()


def strip_wrapper(markup: str, leading: str, trailing: str) -> str:
    """Remove a leading and a trailing regex (plus whitespace) from markup."""
    markup = re.sub(r'\A\s*' + leading + r'\s*', '', markup)
    return re.sub(r'\s*' + trailing + r'\s*\Z', '', markup)


def format_header_name(key: str) -> str:
    """
    Turn a record key into a mail header name.

    Underscores become hyphens and every hyphen-delimited segment is
    capitalized: "content_type" -> "Content-Type", "x_mailer" -> "X-Mailer".
    """
    return '-'.join(part.capitalize() for part in key.replace('_', '-').split('-'))


def format_headers(headers: Mapping[str, Optional[str]]) -> str:
    """Render headers as "Name: value" lines followed by the blank separator line."""
    lines = [
        f"{format_header_name(key)}: {value if value is not None else ''}\n"
        for key, value in headers.items()
    ]
    return ''.join(lines) + "\n"


def normalize_subject(subject: Optional[str], strip_prefix: str = "") -> str:
    """
    Remove a list prefix from a subject line, keeping reply markers.

    Any leading run of "Re:", "Fwd:" and "Fw:" markers (in any case) is kept
    exactly as written; the prefix that follows them is dropped. Applying
    the function to its own output changes nothing.

    Args:
        subject: Subject line as extracted (None is treated as "")
        strip_prefix: Literal text to remove, e.g. "[dev]"; "" only trims

    Returns:
        The cleaned subject, with surrounding whitespace trimmed

    Example:
        normalize_subject("Re: [Forum] Hello", "[Forum]")
        # Returns: "Re: Hello"
    """
    subject = subject or ""
    if strip_prefix:
        pattern = re.compile(
            r'^((?:\s*' + REPLY_MARKERS + r'\s*)*)' + re.escape(strip_prefix) + r'\s*',
            re.IGNORECASE,
        )
        # Markers and prefixes can alternate ("Re: [x] Re: [x] Hi")
        while True:
            stripped = pattern.sub(r'\1', subject, count=1)
            if stripped == subject:
                break
            subject = stripped
    return subject.strip()


def shorten(text: str, length: int) -> str:
    """Truncate text to fit in length characters, ending with "..." when cut."""
    if len(text) > length - 3:
        return text[:length - 3] + '...'
    return text
