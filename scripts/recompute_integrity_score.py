#!/usr/bin/env python3
"""Recompute one event's marketplace integrity score locally.

Usage:
    python scripts/recompute_integrity_score.py <event_id>
    python scripts/recompute_integrity_score.py <event_id> --company-id <uuid> --actor <uuid>

Reads every signal on file for the event and upserts its score row.
Exits 0 on success, 1 on failure.
"""

from __future__ import annotations

import argparse
import sys
import uuid
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from leakguard.db.session import SessionLocal
from leakguard.services.integrity import IntegrityStorageError, recompute_integrity_score


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Recompute a marketplace integrity score")
    parser.add_argument("event_id", type=uuid.UUID, help="Direct booking event UUID")
    parser.add_argument("--company-id", type=uuid.UUID, default=None, help="Company under review")
    parser.add_argument("--actor", type=uuid.UUID, default=None, help="User recorded as updated_by")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        score = recompute_integrity_score(
            db,
            event_id=args.event_id,
            company_id=args.company_id,
            actor_user_id=args.actor,
        )
        print(
            f"event_id={score.event_id} score={score.score} band={score.risk_band} "
            f"signals={score.contributing_signal_count}"
        )
        return 0
    except IntegrityStorageError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
