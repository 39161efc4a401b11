"""Tests for message field extraction (no network access required)."""

from bs4 import BeautifulSoup

from collabnet_mailer.extractor import HeaderExtractor, extract_message

from conftest import message_html


SAMPLE_MESSAGE_HTML = """
<html><body>
<table class="axial">
  <tr><th>Author</th><td>alice</td></tr>
  <tr><th>Header</th><td><pre>
To: dev@myproject.tigris.org
From: Alice &lt;alice@example.com&gt;
Subject: Re: [dev] Build broken
Date: Mon, 1 Jan 2024 00:00:00 +0000
</pre></td></tr>
  <tr><th>Message</th><td>
    <p>The build is <b>broken</b> &amp; needs fixing.</p>
  </td></tr>
</table>
<table class="other"><tr><th>Header</th><td><pre>Subject: decoy</pre></td></tr></table>
</body></html>
"""


class TestHeaderExtractor:
    def test_extracts_headers(self):
        record = extract_message(SAMPLE_MESSAGE_HTML)
        assert record.headers['to'] == "dev@myproject.tigris.org"
        assert record.headers['from'] == "Alice <alice@example.com>"
        assert record.headers['date'] == "Mon, 1 Jan 2024 00:00:00 +0000"

    def test_subject_trimmed_without_prefix(self):
        record = extract_message(SAMPLE_MESSAGE_HTML)
        assert record.subject == "Re: [dev] Build broken"

    def test_subject_prefix_stripped(self):
        record = extract_message(SAMPLE_MESSAGE_HTML, strip_prefix="[dev]")
        assert record.subject == "Re: Build broken"

    def test_body_verbatim(self):
        record = extract_message(SAMPLE_MESSAGE_HTML)
        assert record.body == "<p>The build is <b>broken</b> &amp; needs fixing.</p>"

    def test_header_order_and_synthetic_headers(self):
        record = extract_message(SAMPLE_MESSAGE_HTML)
        assert list(record.headers) == ['to', 'from', 'subject', 'date', 'content_type', 'x_mailer']
        assert record.headers['content_type'] == "text/html; charset=UTF-8"
        assert record.headers['x_mailer'] == "CollabNet to Google Groups v1.0"

    def test_only_axial_table_is_read(self):
        record = extract_message(SAMPLE_MESSAGE_HTML)
        assert record.subject != "decoy"

    def test_source_url_kept(self):
        record = extract_message(SAMPLE_MESSAGE_HTML, source_url="http://x/viewMessage.do")
        assert record.source_url == "http://x/viewMessage.do"

    def test_complete_record(self):
        assert extract_message(SAMPLE_MESSAGE_HTML).is_complete

    def test_round_trip_from_fixture(self):
        html = message_html(
            "Test", sender="b@x.com", to="a@x.com",
            date="Mon, 1 Jan 2024 00:00:00 +0000", body="<p>hi</p>",
        )
        mail = extract_message(html).to_mail()
        head, body = mail.split("\n\n", 1)
        assert len(head.split("\n")) == 6
        assert head.startswith("To: a@x.com\nFrom: b@x.com\nSubject: Test\n")
        assert body == "<p>hi</p>"


class TestIncompletePages:
    def test_no_table(self):
        record = extract_message("<html><body><p>Login required</p></body></html>")
        assert record.body == ""
        assert record.headers['subject'] is None
        assert record.missing_headers == ['subject', 'from', 'date']
        assert list(record.headers) == ['to', 'from', 'subject', 'date', 'content_type', 'x_mailer']

    def test_missing_subject_line(self):
        record = extract_message(message_html(None))
        assert record.headers['subject'] is None
        assert record.missing_headers == ['subject']
        assert record.body == "<p>Hello</p>"

    def test_missing_message_row(self):
        html = """
        <table class="axial">
          <tr><th>Header</th><td><pre>Subject: Only headers</pre></td></tr>
        </table>
        """
        record = extract_message(html)
        assert record.subject == "Only headers"
        assert record.body == ""

    def test_rows_without_header_cell_ignored(self):
        html = """
        <table class="axial">
          <tr><td>Header</td><td><pre>Subject: nope</pre></td></tr>
        </table>
        """
        record = extract_message(html)
        assert record.headers['subject'] is None

    def test_extractor_reuses_strip_prefix(self):
        extractor = HeaderExtractor("[dev]")
        soup = BeautifulSoup(message_html("[dev] One"), "lxml")
        assert extractor.extract(soup).subject == "One"
