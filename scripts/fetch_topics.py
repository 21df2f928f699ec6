#!/usr/bin/env python3
"""Write data/topics.json with tag counts over recently published articles."""
from __future__ import annotations

import sys

from site_data_feeds.main import main


if __name__ == "__main__":
    sys.exit(main(["topics", *sys.argv[1:]]))
