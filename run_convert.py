#!/usr/bin/env python3
"""
Entry point for running the CollabNet mailer from a source checkout.

This script does exactly what the installed ``collabnet-mailer`` command
does; it only exists so the tool can be used without ``pip install``.

Usage:
    python run_convert.py [options] <cn_base_url>

Examples:
    # Dry run: list every message that would be converted
    python run_convert.py -u alice https://myproject.tigris.org/

    # Relay the "dev" forum to a Google Group, 2-5s apart, minus the list tag
    python run_convert.py -u alice -f dev -t "[dev]" -d 2:5 \\
        -e myproject-dev@googlegroups.com https://myproject.tigris.org/

    # Resume after the first 120 messages, converting at most 50
    python run_convert.py -u alice -s 120 -l 50 -e list@example.com \\
        https://myproject.tigris.org/
"""

import sys
from pathlib import Path

# Add src to path to import the package
# This allows running the script from repository root
sys.path.insert(0, str(Path(__file__).parent / "src"))

from collabnet_mailer.cli import main


if __name__ == "__main__":
    main()
