import os
import hmac
import logging

from fastapi import Header, HTTPException, Request, status

logger = logging.getLogger(__name__)


def get_api_keys():
    keys = os.getenv("ADMIN_API_KEYS", "")
    return [k.strip() for k in keys.split(",") if k.strip()]


async def admin_api_key_protection(
    request: Request = None,  # keep Request type so FastAPI injects it; default None for direct calls/tests
    x_api_key: str = Header(default=None, alias="X-API-KEY"),
):
    debug = os.getenv("API_KEY_DEBUG", "").lower() in ("1", "true", "yes")
    path = request.url.path if request is not None else "<no-request>"

    valid_keys = get_api_keys()
    candidate = (x_api_key or "").strip()

    ok = bool(candidate) and any(hmac.compare_digest(candidate, k) for k in valid_keys)
    if debug:
        logger.info("Admin key check: path=%s ok=%s configured_keys=%d", path, ok, len(valid_keys))

    if not ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


# ============================================================================
# Services attached to app.state by storefront.api.main.create_app
# ============================================================================

def get_repository(request: Request):
    return request.app.state.repository


def get_payment_client(request: Request):
    return request.app.state.payment_client


def get_email_service(request: Request):
    return request.app.state.email_service


def get_webhook_service(request: Request):
    return request.app.state.webhook_service


def get_shop_config(request: Request):
    return request.app.state.config
