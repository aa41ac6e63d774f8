#!/usr/bin/env python3
"""
Run the meal expiry check once (same as POST /meal-expiry-check) and print the JSON response.
Exit code 1 when the run aborted.
Run: python scripts/run_meal_expiry_check.py [--at 2026-01-31T18:00:00+00:00]
"""
import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from foodsave.config import get_settings
from foodsave.core.constants import SUCCESS_MESSAGE
from foodsave.core.errors import ExpiryCheckError, failure_response
from foodsave.services.expiry import run_meal_expiry_check
from foodsave.services.store.factory import build_store


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--at", type=datetime.fromisoformat, default=None, help="Reference time (ISO 8601); default now (UTC)")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    settings = get_settings()
    store = build_store(settings)
    try:
        summary = run_meal_expiry_check(store, now=args.at, policy=settings.expiry_policy())
    except ExpiryCheckError as e:
        print(json.dumps(failure_response(e), indent=2))
        return 1
    finally:
        store.close()
    print(json.dumps({"success": True, "message": SUCCESS_MESSAGE, "data": summary.model_dump(mode="json")}, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
