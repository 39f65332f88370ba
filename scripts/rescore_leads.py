#!/usr/bin/env python3
"""
Recompute stored scores from each lead's metadata + tech analysis.

Scoring is idempotent, so this is safe to run any time: after a change to the
specialty boost policy, or to repair leads whose enrichment stopped between
the tech analysis write and the score write.

Usage:
    python scripts/rescore_leads.py              # every lead
    python scripts/rescore_leads.py 12 40 41     # selected lead ids
    python scripts/rescore_leads.py --limit 100

Requires: DATABASE_URL set (or defaults to sqlite:///local.db).
"""
import sys
import os
import argparse
import logging

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.logging_config import configure_logging
from app.pipeline.enrichment import rescore_lead
from app.services.db import list_lead_ids

logger = logging.getLogger('scripts.rescore_leads')


def main(argv=None):
    parser = argparse.ArgumentParser(description='Recompute lead scores')
    parser.add_argument('lead_ids', nargs='*', type=int, help='Lead ids (default: all)')
    parser.add_argument('--limit', type=int, default=None, help='Max leads when rescoring all')
    args = parser.parse_args(argv)

    configure_logging()
    lead_ids = args.lead_ids or list_lead_ids(limit=args.limit)

    failed = 0
    for lead_id in lead_ids:
        try:
            score = rescore_lead(lead_id)
            logger.info("Lead %s → %s (%s)", lead_id, score['final'], score['tier'])
        except Exception as e:
            failed += 1
            logger.error("Lead %s rescore failed: %s", lead_id, e)

    logger.info("Rescored %d leads, %d failed", len(lead_ids) - failed, failed)
    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
