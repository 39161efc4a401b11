"""
Console progress output for a conversion run.

Lines are written with tqdm.write so they stay above the per-forum progress
bar instead of being torn through it. The bar turns itself off when stdout
is not a terminal.
"""

import sys
from typing import Optional, TextIO

from tqdm import tqdm

from .models import DispatchOutcome, ForumRef, MessageEvent, RunSummary
from .utils import shorten

LINE_WIDTH = 80
SUBJECT_WIDTH = 69

OUTCOME_LABELS = {
    DispatchOutcome.SKIPPED: "Skipped",
    DispatchOutcome.SENT: "Sent",
    DispatchOutcome.IGNORED: "Ignored",
    DispatchOutcome.MALFORMED: "Malformed",
}


class ConsoleReporter:
    """Prints forum banners, one line per message and a final summary."""

    def __init__(self, file: Optional[TextIO] = None, progress: Optional[bool] = None):
        """
        Args:
            file: Where to write (stdout by default)
            progress: Show a progress bar; None lets tqdm decide from the terminal
        """
        self.file = file
        self.progress = progress
        self._bar: Optional[tqdm] = None

    def _write(self, line: str):
        tqdm.write(line, file=self.file or sys.stdout)

    def forum_started(self, forum: ForumRef):
        self._write(f"== Forum {forum.name}: extracting ".ljust(LINE_WIDTH, '='))

    def forum_messages_found(self, forum: ForumRef, count: int):
        disable = None if self.progress is None else not self.progress
        self._bar = tqdm(total=count, desc=forum.name, unit="msg", leave=False, disable=disable)

    def message_processed(self, event: MessageEvent):
        label = OUTCOME_LABELS[event.outcome]
        subject = event.subject or "(no subject)"
        self._write(shorten(f"-- {label} message ({subject}", SUBJECT_WIDTH) + ')')
        self._write(f"   -> {event.elapsed:.4f}s")
        if self._bar is not None:
            self._bar.update(1)

    def delaying(self, seconds: int):
        self._write(f"-- Delaying ({seconds}s)")

    def forum_finished(self, forum: ForumRef, elapsed: float):
        if self._bar is not None:
            self._bar.close()
            self._bar = None
        self._write(f"== Forum {forum.name}: extracted ({elapsed:.4f}s) ".ljust(LINE_WIDTH, '='))
        self._write("")

    def run_finished(self, summary: RunSummary):
        counts = ", ".join(
            f"{count} {outcome.value}" for outcome, count in summary.counts.items()
        )
        self._write(f"Processed {summary.total} message(s) in {summary.forums} forum(s): {counts}")
