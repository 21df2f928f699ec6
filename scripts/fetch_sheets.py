#!/usr/bin/env python3
"""Write data/sheets.json with Google Sheet rows keyed by header."""
from __future__ import annotations

import sys

from site_data_feeds.main import main


if __name__ == "__main__":
    sys.exit(main(["sheets", *sys.argv[1:]]))
