"""
Mail delivery for converted messages.

The default transport hands each message to the local mail relay over SMTP,
one connection per message. Errors are not caught here: a relay that is down
or rejects a message stops the run.
"""

import logging
import smtplib
from abc import ABC, abstractmethod

from .models import MailRecord

logger = logging.getLogger(__name__)

DEFAULT_SMTP_HOST = 'localhost'
DEFAULT_SMTP_PORT = 25


def wire_format(record: MailRecord) -> bytes:
    """
    Serialize a record for SMTP DATA: CRLF line endings, UTF-8 encoded.

    smtplib only rewrites line endings for str messages, so bytes must
    already carry CRLF.
    """
    text = record.to_mail().replace('\r\n', '\n').replace('\r', '\n')
    return text.replace('\n', '\r\n').encode('utf-8')


class MailTransport(ABC):
    """Delivers one mail record to one recipient."""

    @abstractmethod
    def send(self, record: MailRecord, recipient: str):
        ...


class SmtpTransport(MailTransport):
    """Submits messages to an SMTP relay (the local MTA by default)."""

    def __init__(self, host: str = DEFAULT_SMTP_HOST, port: int = DEFAULT_SMTP_PORT):
        self.host = host
        self.port = port

    def send(self, record: MailRecord, recipient: str):
        """
        Send the record with its From header as envelope sender.

        The message text is the record's serialized headers and body; the
        body is HTML, so it is encoded as UTF-8 on the wire.
        """
        logger.debug("SMTP %s:%d  %s -> %s", self.host, self.port, record.sender, recipient)
        with smtplib.SMTP(self.host, self.port) as smtp:
            smtp.sendmail(record.sender, [recipient], wire_format(record))
