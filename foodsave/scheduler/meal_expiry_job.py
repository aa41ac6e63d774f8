"""Runs every EXPIRY_CHECK_INTERVAL_MINUTES: expire meals past their deadline and notify merchants."""
import logging

from foodsave.config import get_settings
from foodsave.core.errors import ExpiryCheckError
from foodsave.services.expiry import run_meal_expiry_check
from foodsave.services.store.factory import build_store

logger = logging.getLogger(__name__)


def run_meal_expiry_check_job() -> None:
    store = None
    try:
        settings = get_settings()
        store = build_store(settings)
        summary = run_meal_expiry_check(store, policy=settings.expiry_policy())
        if summary.errors:
            logger.warning("Meal expiry job finished with errors: %s", [e.error for e in summary.errors])
    except ExpiryCheckError as e:
        logger.error("Meal expiry job aborted (%s): %s", e.kind.value, e)
    except Exception as e:
        logger.exception("Meal expiry job failed: %s", e)
    finally:
        if store is not None:
            store.close()
