"""Configure test paths and a fake CollabNet site served over httpx.MockTransport."""
import sys
from pathlib import Path

import httpx
import pytest

# Add src/ to path so tests can import the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from collabnet_mailer.transport import MailTransport  # noqa: E402

BASE_URL = "http://myproject.tigris.org/"
LOGIN_URL = "http://www.tigris.org/servlets/Login"
FORUMS_URL = "http://myproject.tigris.org/ds/viewForums.do"
DS_URL = "http://myproject.tigris.org/ds/"

LOGIN_HTML = """
<html><body>
<form action="/servlets/Search" method="get">
  <input type="text" name="loginID" />
  <input type="submit" value="Go" />
</form>
<form action="/servlets/Login" method="post">
  <input type="hidden" name="detour" value="/ds/viewForums.do" />
  <input type="text" name="loginID" value="" />
  <input type="password" name="password" value="" />
  <input type="submit" name="Login" value="Login" />
</form>
</body></html>
"""


def page_url(forum_id, page=None):
    """Forum listing URL: the first page in thread view, or a numbered later page."""
    base = f"{DS_URL}viewForumSummary.do?dsForumId={forum_id}"
    if page is None:
        return f"{base}&viewType=thread&orderBy=createDate&orderType=asc"
    return f"{base}&page={page}"


def message_url(mid):
    return f"{DS_URL}viewMessage.do?dsForumId=1&dsMessageId={mid}"


def forum_list_html(forums):
    """Forum listing page with one summary link per (name, forum_id)."""
    rows = "".join(
        f'<tr><td><a href="viewForumSummary.do?dsForumId={forum_id}"> {name} </a></td></tr>'
        for name, forum_id in forums
    )
    return (
        '<html><body><a href="/servlets/ProjectHome">Home</a>'
        f'<table>{rows}</table></body></html>'
    )


def listing_page_html(message_ids, next_href=None):
    """One page of a forum listing in thread view."""
    rows = "".join(
        f'<tr><td><a href="viewMessage.do?dsForumId=1&amp;dsMessageId={mid}">msg {mid}</a></td></tr>'
        for mid in message_ids
    )
    nav = f'<a href="{next_href.replace("&", "&amp;")}">Next »</a>' if next_href else ""
    return f"<html><body><table>{rows}</table><div>{nav}</div></body></html>"


def message_html(subject, sender="alice@example.com", to="dev@myproject.tigris.org",
                 date="Mon, 1 Jan 2024 00:00:00 +0000", body="<p>Hello</p>"):
    """A message detail page with the axial header/message table."""
    lines = []
    if to is not None:
        lines.append(f"To: {to}")
    if sender is not None:
        lines.append(f"From: {sender}")
    if subject is not None:
        lines.append(f"Subject: {subject}")
    if date is not None:
        lines.append(f"Date: {date}")
    header = "\n".join(lines)
    return f"""
<html><body>
<table class="axial">
  <tr><th>Author</th><td>alice</td></tr>
  <tr><th>Header</th><td><pre>{header}</pre></td></tr>
  <tr><th>Message</th><td>{body}</td></tr>
</table>
</body></html>
"""


class FakeSite:
    """
    In-memory web site: maps full URLs to HTML and records every request.

    Unknown URLs answer 404.
    """

    def __init__(self):
        self.pages = {}
        self.requests = []

    def add(self, url, html):
        self.pages[url] = html

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if request.method == "POST":
            return httpx.Response(200, html="<html><body>Welcome</body></html>")
        if url in self.pages:
            return httpx.Response(200, html=self.pages[url])
        return httpx.Response(404, html="<html><body>Not found</body></html>")

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def requested_urls(self, method="GET"):
        return [str(r.url) for r in self.requests if r.method == method]


@pytest.fixture
def site():
    return FakeSite()


class RecordingTransport(MailTransport):
    """Keeps (recipient, record) pairs in memory instead of sending them."""

    def __init__(self):
        self.sent = []

    def send(self, record, recipient):
        self.sent.append((recipient, record))
