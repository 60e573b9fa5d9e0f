"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError as BodyValidationError
from fastapi.responses import JSONResponse

from ..adapters.asset_adapters import BalanceSourceError
from ..checks import RequestValidationError, validate_request
from ..logger import get_logger, setup_logging
from ..pipeline import PipelineAdapters, run_history
from ..ratelimit import RateLimitExceeded, SlidingWindowRateLimiter
from ..settings import HistorySettings
from ..state import AppState
from .schemas import ErrorResponse, HistoryPointResponse, HistoryRequest

logger = get_logger(__name__)

BALANCE_FAILURE_MESSAGE = "Failed to fetch wallet balances"
TIMEOUT_MESSAGE = "Portfolio history request timed out"
INTERNAL_ERROR_MESSAGE = "Failed to compute portfolio history"


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "anonymous"


def enforce_rate_limit(request: Request) -> None:
    """Reject callers over quota before the body is validated or any provider is called."""
    limiter: SlidingWindowRateLimiter = request.app.state.limiter
    limiter.check(_client_key(request))


def create_app(
    settings: HistorySettings | None = None,
    *,
    state: AppState | None = None,
    limiter: SlidingWindowRateLimiter | None = None,
    adapters: PipelineAdapters | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Build the HTTP app.

    The price cache (inside ``state``) and the rate limiter are created here
    once and shared by every request served by this app.
    """
    if state is None:
        settings = settings or HistorySettings()
        state = AppState.from_settings(settings, get_logger("portfolio_history"))
    settings = state.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if configure_logging:
            setup_logging(settings.log_level)
        logger.info("Portfolio history API ready (network=%s)", settings.network.value)
        yield

    app = FastAPI(
        title="Portfolio History",
        description="Daily USD valuation history for Aptos wallets",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.history = state
    app.state.limiter = limiter or SlidingWindowRateLimiter(
        settings.rate_limit_requests, settings.rate_limit_window_seconds
    )
    app.state.adapters = adapters or PipelineAdapters.default(settings)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        logger.warning("Rate limit exceeded for %s", exc.key)
        return JSONResponse(
            status_code=429,
            content={"error": "Too many requests, please retry later"},
            headers={"Retry-After": exc.retry_after_header},
        )

    @app.exception_handler(RequestValidationError)
    async def request_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(BodyValidationError)
    async def body_error_handler(request: Request, exc: BodyValidationError) -> JSONResponse:
        logger.debug("Rejected malformed body: %s", exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(BalanceSourceError)
    async def balance_error_handler(request: Request, exc: BalanceSourceError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"error": BALANCE_FAILURE_MESSAGE})

    @app.get("/health")
    def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.post(
        "/portfolio-history",
        response_model=list[HistoryPointResponse],
        responses={
            400: {"model": ErrorResponse},
            429: {"model": ErrorResponse},
            502: {"model": ErrorResponse},
            504: {"model": ErrorResponse},
        },
        dependencies=[Depends(enforce_rate_limit)],
    )
    async def portfolio_history(body: HistoryRequest, request: Request):
        address, timeframe = validate_request(body.address, body.timeframe)
        history: AppState = request.app.state.history
        try:
            series = await run_history(
                history, address, timeframe, adapters=request.app.state.adapters
            )
        except TimeoutError:
            return JSONResponse(status_code=504, content={"error": TIMEOUT_MESSAGE})
        except BalanceSourceError:
            raise
        except Exception:
            logger.exception("Portfolio history failed for %s", address)
            return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})
        return [point.to_dict() for point in series]

    return app
