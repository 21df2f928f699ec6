#!/usr/bin/env python3
"""Write data/ga4.json with daily GA4 KPIs, top referrers and top authors."""
from __future__ import annotations

import sys

from site_data_feeds.main import main


if __name__ == "__main__":
    sys.exit(main(["ga4", *sys.argv[1:]]))
