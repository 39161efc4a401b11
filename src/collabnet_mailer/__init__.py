"""
CollabNet Mailer

This package migrates CollabNet (Tigris-style) discussion forums to mail:
it logs in to a project site, walks every forum's message listing, turns
each message page into a mail message and, optionally, relays it to an
address such as a Google Groups list.

Main components:
- RunController: the conversion loop (skip/limit/delay policy)
- ForumScraper: forum enumeration and paginated message discovery
- HeaderExtractor: message page -> MailRecord
- ForumSession / LoginSubmitter: authenticated HTTP session
- SmtpTransport: delivery through the local mail relay

Usage:
    from collabnet_mailer.runner import RunController
    from collabnet_mailer.session import ForumSession
    import asyncio

    async def convert(config):
        async with ForumSession() as session:
            return await RunController(config, session).run()

    asyncio.run(convert(config))
"""

__version__ = '1.0.0'

from .config import Configuration, DelayRange
from .extractor import HeaderExtractor, extract_message
from .models import DispatchOutcome, ForumRef, MailRecord, RunCounters
from .runner import RunController
from .scraper import ForumScraper
from .session import ForumSession, LoginSubmitter
from .transport import SmtpTransport

__all__ = [
    'Configuration',
    'DelayRange',
    'DispatchOutcome',
    'ForumRef',
    'ForumScraper',
    'ForumSession',
    'HeaderExtractor',
    'LoginSubmitter',
    'MailRecord',
    'RunController',
    'RunCounters',
    'SmtpTransport',
    'extract_message',
]
