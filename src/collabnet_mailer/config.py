"""
Run configuration for the CollabNet mailer.

The configuration is resolved exactly once, at startup, by the CLI and then
injected into the pipeline. Nothing below reads the environment on its own
except default_username(), which the CLI calls while building the record.
"""

import os
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .errors import ConfigurationError

# Path suffixes appended to the base URL
LOGIN_PATH = "/servlets/Login"
FORUM_LIST_PATH = "/ds/viewForums.do"

# A limit of -1 means "no limit"
UNLIMITED = -1

# Ceiling on listing pages walked per forum
DEFAULT_MAX_PAGES = 500

DELAY_PATTERN = re.compile(r'^(\d+):(\d+)$')

# Forces the first host label to "www" (and the scheme to plain http, as
# the login servlet only ever answered there)
_LOGIN_HOST_PATTERN = re.compile(r'^https?://\w+\.(.+)$')


@dataclass(frozen=True)
class DelayRange:
    """Inclusive range of whole seconds to pause between messages."""
    min: int
    max: int

    def __post_init__(self):
        if self.min < 0 or self.max < 0:
            raise ConfigurationError(f"delay bounds must be non-negative -- {self}")
        if self.min > self.max:
            raise ConfigurationError(
                f"delay minimum ({self.min}) is greater than maximum ({self.max})"
            )

    def __str__(self) -> str:
        return f"{self.min}:{self.max}"


@dataclass(frozen=True)
class Configuration:
    """
    Immutable configuration record for one run.

    Attributes:
        username: CollabNet login ID
        password: CollabNet password (prompted for, never a flag)
        base_url: Project base URL, e.g. "https://myproject.tigris.org/"
        forum_filter: Only convert the forum with exactly this name
        skip_count: Number of messages to skip before converting
        message_limit: Maximum messages to send/ignore (-1 = unbounded)
        subject_strip_prefix: Prefix removed from subjects ("" = none)
        delay_range: Optional pause between converted messages
        destination_address: Where to send mail; None means dry run
        max_pages: Pagination ceiling per forum
    """
    username: str
    password: str
    base_url: str
    forum_filter: Optional[str] = None
    skip_count: int = 0
    message_limit: int = UNLIMITED
    subject_strip_prefix: str = ""
    delay_range: Optional[DelayRange] = None
    destination_address: Optional[str] = None
    max_pages: int = DEFAULT_MAX_PAGES

    def __post_init__(self):
        if not self.base_url:
            raise ConfigurationError("You must specify a CollabNet base URL")
        if not self.username:
            raise ConfigurationError("No username given and none found in the environment")
        if self.skip_count < 0:
            raise ConfigurationError(f"skip count must be >= 0, got {self.skip_count}")
        if self.message_limit < UNLIMITED:
            raise ConfigurationError(
                f"message limit must be >= 0 or -1 for unlimited, got {self.message_limit}"
            )
        if self.max_pages < 1:
            raise ConfigurationError(f"max pages must be >= 1, got {self.max_pages}")

    @property
    def login_url(self) -> str:
        return derive_urls(self.base_url)[0]

    @property
    def forums_url(self) -> str:
        return derive_urls(self.base_url)[1]


def parse_delay_range(value: str) -> DelayRange:
    """
    Parse a "<min>:<max>" delay specification.

    Args:
        value: Text such as "2:5"

    Returns:
        DelayRange with both bounds

    Raises:
        ConfigurationError: if the text is not two colon-separated integers,
            or min > max
    """
    match = DELAY_PATTERN.match(value.strip())
    if not match:
        raise ConfigurationError(f"invalid delay range -- {value}")
    return DelayRange(int(match.group(1)), int(match.group(2)))


def default_username(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Return $USER, falling back to $USERNAME (Windows), or None."""
    if environ is None:
        environ = os.environ
    return environ.get('USER') or environ.get('USERNAME') or None


def derive_urls(base_url: str) -> Tuple[str, str]:
    """
    Derive the login and forum-listing URLs from a project base URL.

    Example:
        derive_urls("https://myproject.tigris.org/")
        # ("http://www.tigris.org/servlets/Login",
        #  "https://myproject.tigris.org/ds/viewForums.do")
    """
    base = re.sub(r'/$', '', base_url)
    login_url = _LOGIN_HOST_PATTERN.sub(r'http://www.\1', base) + LOGIN_PATH
    forums_url = base + FORUM_LIST_PATH
    return login_url, forums_url
