"""
HTTP endpoint for the board report.

GET/POST /api/monday (also /) runs one report and returns the JSON payload.
OPTIONS answers CORS preflight. An optional shared secret guards the
endpoint via `Authorization: Bearer <secret>` or `x-api-key: <secret>`.
"""

import asyncio
import hmac
import logging
from typing import Callable, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from ..clients.monday import MondayError
from ..clients.retry_handler import RetryExhaustedError, Sleep
from ..models.report import ErrorResponse
from ..pipeline import get_aggregator
from ..utils.config import (
    DEFAULT_BOARD_CONFIG,
    BoardConfig,
    ConfigurationError,
    Settings,
    get_monday_api_key,
    get_settings,
)

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, x-api-key",
}

REPORT_METHODS = ["GET", "POST", "OPTIONS"]


def _configure_logging(settings: Settings) -> None:
    """Configure root logging once for the API process."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _error(status_code: int, error: str, details=None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=CORS_HEADERS,
    )


def _presented_credential(request: Request) -> Optional[str]:
    """Credential from `x-api-key`, else from a Bearer Authorization header."""
    api_key = request.headers.get("x-api-key")
    if api_key:
        return api_key.strip()

    authorization = request.headers.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def is_authorized(request: Request, secret: Optional[str]) -> bool:
    """Check the caller's credential against the shared secret (open when unset)."""
    if not secret:
        return True
    presented = _presented_credential(request)
    if presented is None:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), secret.encode("utf-8"))


def create_app(
    settings_factory: Callable[[], Settings] = get_settings,
    board_config: BoardConfig = DEFAULT_BOARD_CONFIG,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Sleep = asyncio.sleep,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings_factory: Called per request so secrets can rotate without restart
        board_config: Board, groups and columns to report on
        transport: Optional httpx transport for upstream calls (tests)
        sleep: Awaitable sleep used between rate-limit retries
    """
    startup_settings = settings_factory()
    _configure_logging(startup_settings)
    if not startup_settings.client_secret:
        logger.warning("CLIENT_SECRET is not set; the report endpoint is open")

    application = FastAPI(title="monday board report", version="0.1.0")

    async def report(request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        settings = settings_factory()

        if not is_authorized(request, settings.client_secret):
            logger.warning(f"Rejected {request.method} {request.url.path}: bad credentials")
            return _error(401, "Unauthorized")

        try:
            get_monday_api_key(settings)
            aggregator = get_aggregator(
                settings, board_config, transport=transport, sleep=sleep
            )
            response = await aggregator.run()
        except ConfigurationError as e:
            logger.error(f"Configuration error: {e}")
            return _error(500, str(e), "Set it in the environment or .env file")
        except RetryExhaustedError as e:
            logger.error(f"Monday API still rate limited: {e}")
            return _error(500, "Monday API error", f"{e}: {e.last_error}")
        except MondayError as e:
            logger.error(f"Monday API error: {e}")
            return _error(500, "Monday API error", e.errors or e.message)
        except httpx.HTTPError as e:
            logger.error(f"Monday API unreachable: {e}")
            return _error(500, "Monday API error", str(e))
        except Exception as e:
            logger.exception(f"Unexpected failure while building the report: {e}")
            return _error(500, "Monday API error", f"{type(e).__name__}: {e}")

        return JSONResponse(
            status_code=200,
            content=response.to_payload(),
            headers=CORS_HEADERS,
        )

    application.add_api_route("/api/monday", report, methods=REPORT_METHODS)
    application.add_api_route("/", report, methods=REPORT_METHODS)

    @application.get("/health")
    def healthcheck() -> dict:
        return {"status": "ok"}

    return application
