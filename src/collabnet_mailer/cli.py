"""CLI interface for the CollabNet mailer."""

import asyncio
import logging
import os
import smtplib
import sys

import click

from . import __version__
from .config import DEFAULT_MAX_PAGES, UNLIMITED, Configuration, default_username, parse_delay_range
from .errors import ConfigurationError, MailerError
from .reporter import ConsoleReporter
from .runner import RunController
from .session import ForumSession
from .transport import SmtpTransport

logger = logging.getLogger(__name__)

PASSWORD_ENVVAR = 'COLLABNET_PASSWORD'


def _delay_option(ctx, param, value):
    if value is None:
        return None
    try:
        return parse_delay_range(value)
    except ConfigurationError as e:
        raise click.BadParameter(str(e)) from e


async def _convert(config: Configuration, smtp_host: str):
    async with ForumSession() as session:
        controller = RunController(
            config,
            session,
            transport=SmtpTransport(host=smtp_host),
            reporter=ConsoleReporter(),
        )
        await controller.run()


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.version_option(__version__, '-v', '--version', prog_name='collabnet-mailer')
@click.argument('base_url')
@click.option('-s', '--skip', 'skip', default=0, type=click.IntRange(min=0),
              metavar='<number>', help='Skip <number> messages before processing')
@click.option('-l', '--limit', 'limit', default=UNLIMITED, type=click.IntRange(min=UNLIMITED),
              metavar='<number>', help='Limit conversion to <number> messages (-1 = no limit)')
@click.option('-u', '--username', default=default_username, metavar='<username>',
              help='Username for logging in to CollabNet (default: $USER)')
@click.option('-f', '--forum', default=None, metavar='<forum>',
              help='Forum that is being converted (default: all forums)')
@click.option('-e', '--address', default=None, metavar='<address>',
              help='Send mail to <address> rather than ignoring')
@click.option('-t', '--strip', default='', metavar='<string>',
              help='Strip <string> from the start of subject lines')
@click.option('-d', '--delay', default=None, callback=_delay_option, metavar='<min>:<max>',
              help='Delay between <min> and <max> seconds between messages')
@click.option('--max-pages', default=DEFAULT_MAX_PAGES, type=click.IntRange(min=1),
              help='Give up on a forum listing longer than this many pages')
@click.option('--smtp-host', default='localhost', help='Mail relay to submit messages to')
@click.option('--verbose', is_flag=True, help='Enable debug logging')
def main(base_url, skip, limit, username, forum, address, strip, delay, max_pages, smtp_host, verbose):
    """Convert CollabNet discussions into mail messages.

    BASE_URL is the project's CollabNet address, e.g.
    https://myproject.tigris.org/
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if not username:
        raise click.UsageError("No username given and none found in $USER or $USERNAME")

    password = os.environ.get(PASSWORD_ENVVAR)
    if password is None:
        password = click.prompt(f"Password for '{username}'", hide_input=True)

    try:
        config = Configuration(
            username=username,
            password=password,
            base_url=base_url,
            forum_filter=forum,
            skip_count=skip,
            message_limit=limit,
            subject_strip_prefix=strip,
            delay_range=delay,
            destination_address=address,
            max_pages=max_pages,
        )
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e

    try:
        asyncio.run(_convert(config, smtp_host))
    except KeyboardInterrupt:
        click.echo("\nInterrupted.", err=True)
        sys.exit(130)
    except MailerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except (smtplib.SMTPException, OSError) as e:
        logger.debug("Mail transport failure", exc_info=True)
        click.echo(f"Error: mail delivery failed: {e}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
