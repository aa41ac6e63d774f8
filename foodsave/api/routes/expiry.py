"""
Meal expiry check trigger (cron / manual).

POST or GET runs one pass; no body. OPTIONS answers CORS preflight with an empty 200.
Success: 200 {success, message, data: RunSummary}. Fatal failure: 500 {success: false, error, timestamp}.
"""
import logging
from typing import Callable

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from foodsave.config import Settings, get_settings
from foodsave.core.constants import SUCCESS_MESSAGE
from foodsave.core.errors import STATUS_INTERNAL_ERROR, STATUS_OK, ExpiryCheckError, failure_response
from foodsave.services.expiry import ExpiryPolicy, run_meal_expiry_check
from foodsave.services.store.base import ExpiryStore
from foodsave.services.store.factory import build_store

router = APIRouter()
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
}


def get_store_factory(settings: Settings = Depends(get_settings)) -> Callable[[], ExpiryStore]:
    """Store constructor; called inside the handler so a bad STORE_URL gets the failure body."""
    return lambda: build_store(settings)


def get_policy(settings: Settings = Depends(get_settings)) -> ExpiryPolicy:
    return settings.expiry_policy()


@router.options("/meal-expiry-check")
def meal_expiry_check_preflight() -> Response:
    return Response(status_code=STATUS_OK, headers=CORS_HEADERS)


@router.api_route("/meal-expiry-check", methods=["POST", "GET"])
def meal_expiry_check(
    make_store: Callable[[], ExpiryStore] = Depends(get_store_factory),
    policy: ExpiryPolicy = Depends(get_policy),
) -> JSONResponse:
    """
    Expire meals past their deadline, notify merchants (expired + expiring soon) and purge
    old read notifications. Non-fatal stage failures are listed in data.errors (status 'partial').
    """
    store = None
    try:
        store = make_store()
        summary = run_meal_expiry_check(store, policy=policy)
    except ExpiryCheckError as e:
        logger.error("Meal expiry check aborted (%s): %s", e.kind.value, e)
        return JSONResponse(failure_response(e), status_code=STATUS_INTERNAL_ERROR, headers=CORS_HEADERS)
    except Exception as e:
        logger.exception("Meal expiry check failed: %s", e)
        return JSONResponse(failure_response(e), status_code=STATUS_INTERNAL_ERROR, headers=CORS_HEADERS)
    finally:
        if store is not None:
            store.close()
    return JSONResponse(
        {"success": True, "message": SUCCESS_MESSAGE, "data": summary.model_dump(mode="json")},
        status_code=STATUS_OK,
        headers=CORS_HEADERS,
    )
