"""
Forum enumeration and message discovery for a CollabNet project.

Two steps happen here, both over an already-authenticated ForumSession:

1. **Forum enumeration**: the project's forum listing page links to one
   summary page per forum ("viewForumSummary.do?dsForumId=...").
2. **Pagination walk**: each forum summary is reopened in thread view,
   ordered by creation date ascending, and its "Next »" links are followed
   page by page, collecting every "viewMessage.do?..." link on the way.

The walk keeps a set of visited page URLs and a page ceiling, so a listing
that links back to itself fails loudly instead of looping forever.
"""

import logging
from typing import Dict, List, Optional, Set

from .config import DEFAULT_MAX_PAGES
from .errors import AuthenticationError, PaginationError
from .models import ForumRef
from .session import ForumSession, Page

logger = logging.getLogger(__name__)

# Raw href prefixes of the links we follow
FORUM_LINK_PREFIX = 'viewForumSummary'
MESSAGE_LINK_PREFIX = 'viewMessage'

# Thread view, oldest message first
LISTING_QUERY = 'viewType=thread&orderBy=createDate&orderType=asc'

# Visible text of the pagination control
NEXT_LINK_TEXT = 'Next »'


def listing_url(forum_url: str) -> str:
    """Append the thread-view ordering parameters to a forum summary URL."""
    separator = '&' if '?' in forum_url else '?'
    return f"{forum_url}{separator}{LISTING_QUERY}"


class ForumScraper:
    """
    Finds forums and the ordered message links inside them.

    Usage:
        scraper = ForumScraper(session)
        for forum in await scraper.get_forums(forums_url, forum_filter="dev"):
            urls = await scraper.get_message_links(forum)
    """

    def __init__(self, session: ForumSession, max_pages: int = DEFAULT_MAX_PAGES):
        self.session = session
        self.max_pages = max_pages

    def extract_forums_from_page(self, page: Page) -> Dict[str, str]:
        """
        Map forum name to forum URL for every forum link on a listing page.

        Names are the trimmed link text. Page order is kept; if two links
        share a name, the first position wins and the last URL is kept.
        """
        forums: Dict[str, str] = {}
        for link in page.filtered_links(FORUM_LINK_PREFIX):
            forums[link.text.strip()] = link.url
        return forums

    async def get_forums(self, forums_url: str, forum_filter: Optional[str] = None) -> List[ForumRef]:
        """
        List the project's forums, optionally restricted to one by exact name.

        Raises:
            AuthenticationError: if the listing has no forums at all, which
                is how a rejected login shows up
        """
        page = await self.session.get(forums_url)
        forums = self.extract_forums_from_page(page)
        logger.info("Found %d forum(s) on %s", len(forums), forums_url)

        if not forums:
            raise AuthenticationError(
                f"No forums found on {forums_url}; check the base URL and your credentials"
            )

        if forum_filter is not None:
            forums = {name: url for name, url in forums.items() if name == forum_filter}
            if not forums:
                logger.warning("No forum named %r", forum_filter)

        return [ForumRef(name=name, listing_url=url) for name, url in forums.items()]

    def extract_message_links_from_page(self, page: Page) -> List[str]:
        """Absolute message URLs on one listing page, in page order."""
        return [link.url for link in page.filtered_links(MESSAGE_LINK_PREFIX)]

    async def get_message_links(self, forum: ForumRef) -> List[str]:
        """
        Walk every page of a forum listing and collect its message URLs.

        Returns:
            All message URLs, oldest thread first, across all pages

        Raises:
            PaginationError: if a "Next" link leads to a page already seen,
                or the walk runs past max_pages
        """
        page = await self.session.get(listing_url(forum.listing_url))
        visited: Set[str] = {page.url}
        pages = 1
        messages = self.extract_message_links_from_page(page)
        logger.debug("%s page 1: %d message link(s)", forum.name, len(messages))

        while True:
            next_link = page.link_with_text(NEXT_LINK_TEXT)
            if next_link is None:
                break
            if next_link.url in visited:
                raise PaginationError(
                    f"Forum {forum.name!r}: 'Next' link on {page.url} leads back to "
                    f"already visited page {next_link.url}"
                )
            if pages >= self.max_pages:
                raise PaginationError(
                    f"Forum {forum.name!r}: more than {self.max_pages} listing pages"
                )

            page = await self.session.click(next_link, referer=page)
            visited.add(next_link.url)
            visited.add(page.url)
            pages += 1
            links = self.extract_message_links_from_page(page)
            logger.debug("%s page %d: %d message link(s)", forum.name, pages, len(links))
            messages.extend(links)

        logger.info("Forum %s: %d message(s) on %d page(s)", forum.name, len(messages), pages)
        return messages
