"""
Authenticated HTTP session for a CollabNet project site.

ForumSession wraps one httpx.AsyncClient for the whole run: cookies set by
the login servlet stay on the client, so every later fetch is made as the
logged-in user. Fetched pages come back as Page objects, which know their
own URL and can resolve and filter their links the way a browser would.

The pipeline is strictly sequential. There is never more than one request
in flight, because the login cookie and the "Next" pagination cursor both
depend on the order of requests.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup, Tag

from .errors import AuthenticationError, FetchError

logger = logging.getLogger(__name__)

# Desktop Safari on macOS; the site serves its full markup to this agent
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15"
)

REQUEST_TIMEOUT = 60.0

DEFAULT_HEADERS = {
    'User-Agent': USER_AGENT,
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Connection': 'close',
}


@dataclass(frozen=True)
class Link:
    """
    An anchor found on a page.

    Attributes:
        href: Link target exactly as written in the markup
        text: Visible link text
        url: Target resolved against the page URL
    """
    href: str
    text: str
    url: str


class Page:
    """
    A fetched HTML page with browser-style link and form helpers.

    Markup may be text or the raw response bytes. Bytes are decoded by
    BeautifulSoup: with the HTTP charset when the server sent one, otherwise
    from the document's own <meta> declaration.
    """

    def __init__(self, url: str, markup: Union[str, bytes], encoding: Optional[str] = None):
        self.url = url
        if isinstance(markup, bytes):
            self.soup = BeautifulSoup(markup, "lxml", from_encoding=encoding)
        else:
            self.soup = BeautifulSoup(markup, "lxml")

    @property
    def links(self) -> List[Link]:
        """Every anchor with an href, in document order."""
        links = []
        for anchor in self.soup.find_all('a', href=True):
            href = anchor['href']
            links.append(Link(href=href, text=anchor.get_text(), url=urljoin(self.url, href)))
        return links

    def filtered_links(self, prefix: str) -> List[Link]:
        """Links whose raw href starts with prefix."""
        return [link for link in self.links if link.href.startswith(prefix)]

    def link_with_text(self, text: str) -> Optional[Link]:
        """First link whose visible text equals text (ignoring surrounding whitespace)."""
        for link in self.links:
            if link.text.strip() == text:
                return link
        return None

    @property
    def forms(self) -> List[Tag]:
        return self.soup.find_all('form')


def form_fields(form: Tag) -> Dict[str, str]:
    """
    Collect the values a browser would submit for a form, before user input.

    Named inputs contribute their value attribute (checkboxes and radios
    only when checked), selects their selected (or first) option, textareas
    their text. Only the first submit button is included, as if clicked.
    """
    fields: Dict[str, str] = {}
    submit_seen = False

    for element in form.find_all(['input', 'select', 'textarea', 'button']):
        name = element.get('name')
        if not name:
            continue
        if element.name == 'input':
            input_type = (element.get('type') or 'text').lower()
            if input_type in ('checkbox', 'radio') and not element.has_attr('checked'):
                continue
            if input_type in ('submit', 'image', 'button', 'reset'):
                if input_type != 'submit' or submit_seen:
                    continue
                submit_seen = True
            fields[name] = element.get('value', '')
        elif element.name == 'button':
            if (element.get('type') or 'submit').lower() != 'submit' or submit_seen:
                continue
            submit_seen = True
            fields[name] = element.get('value', '')
        elif element.name == 'select':
            option = element.find('option', selected=True) or element.find('option')
            if option is not None:
                fields[name] = option.get('value', option.get_text())
        else:
            fields[name] = element.get_text()

    return fields


class ForumSession:
    """
    Cookie-retaining fetch capability bound to one CollabNet site.

    Usage:
        async with ForumSession() as session:
            page = await session.get("https://myproject.tigris.org/ds/viewForums.do")
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the session.

        Args:
            client: Optional preconfigured client (tests pass one with a
                    MockTransport). If None, one is created on entry.
        """
        self.client = client
        self._own_client = client is None

    async def __aenter__(self):
        if self._own_client:
            self.client = httpx.AsyncClient(
                headers=DEFAULT_HEADERS,
                timeout=REQUEST_TIMEOUT,
                follow_redirects=True,
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._own_client and self.client:
            await self.client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Page:
        logger.debug("%s %s", method, url)
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise FetchError(url, str(e) or type(e).__name__) from e
        return Page(str(response.url), response.content, response.charset_encoding)

    async def get(self, url: str) -> Page:
        """Fetch a page."""
        return await self._request('GET', url)

    async def click(self, link: Link, referer: Optional[Page] = None) -> Page:
        """Follow a link found on a page, sending that page as the Referer."""
        headers = {'Referer': referer.url} if referer is not None else None
        return await self._request('GET', link.url, headers=headers)

    async def submit(self, page: Page, form: Tag, values: Dict[str, str]) -> Page:
        """
        Submit a form from page with values overriding its defaults.

        The form's action is resolved against the page URL (an empty action
        posts back to the page itself) and its method defaults to GET.
        """
        fields = form_fields(form)
        fields.update(values)
        action = urljoin(page.url, form.get('action') or page.url)
        method = (form.get('method') or 'get').upper()
        headers = {'Referer': page.url}
        if method == 'POST':
            return await self._request('POST', action, data=fields, headers=headers)
        return await self._request('GET', action, params=fields, headers=headers)


class LoginSubmitter:
    """
    Logs in through the CollabNet login servlet.

    Contract: the login page carries at least two forms, and the SECOND one
    (index 1) is the working login form; the first is a non-functional
    duplicate. The submitter fills the "loginID" and "password" fields of
    that form and submits it. Nothing on the response says whether login
    succeeded; a failed login shows up later as an empty forum list.
    Swap this class out if the site's login markup changes.
    """

    FORM_INDEX = 1
    USERNAME_FIELD = 'loginID'
    PASSWORD_FIELD = 'password'

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    async def login(self, session: ForumSession, login_url: str) -> Page:
        """Fetch the login page and submit the credentials; return the response page."""
        page = await session.get(login_url)
        forms = page.forms
        if len(forms) <= self.FORM_INDEX:
            raise AuthenticationError(
                f"Login page {login_url} has {len(forms)} form(s); expected the login "
                f"form at position {self.FORM_INDEX + 1}"
            )

        logger.info("Logging in to %s as %s", login_url, self.username)
        return await session.submit(page, forms[self.FORM_INDEX], {
            self.USERNAME_FIELD: self.username,
            self.PASSWORD_FIELD: self.password,
        })
