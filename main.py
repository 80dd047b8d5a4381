#!/usr/bin/env python3
"""
MsgClassifier main script.

Runs the interactive terminal inbox: messages you paste in (and the ones the
live simulator generates) are classified by Claude and grouped into
per-sender conversations.

Usage:
    python main.py [--storage sqlite|json] [--no-simulator] [--interval SECONDS]
"""

import sys

from msg_classifier.cli import main

if __name__ == "__main__":
    sys.exit(main())
