# main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from adapters.entry.http.views.prices_view import router as prices_router
from adapters.entry.http.views.swap_view import router as swap_router
from adapters.external.signing.local_account_signer import SignerRegistry
from config import get_settings
from core.use_cases.price_usecase import PriceUseCase

logger = logging.getLogger("swap_api")


def configure_logging() -> None:
    s = get_settings()
    logging.basicConfig(
        level=getattr(logging, (s.LOG_LEVEL or "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context.

    Nothing to warm up: price cache starts empty and Web3 providers connect
    lazily on first use.
    """
    s = get_settings()
    logger.info("Token swap backend starting env=%s router=%s", s.ENV, s.ROUTER_ADDRESS)
    yield


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Every error body carries an `error` field; swap failures also carry `details`.
    """
    if isinstance(exc.detail, dict):
        content = dict(exc.detail)
        content.setdefault("error", "Request failed")
    else:
        content = {"error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # `input` may echo the raw body (and with it a privateKey)
    details = [
        {k: v for k, v in err.items() if k not in ("input", "ctx", "url")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "Missing required parameters", "details": jsonable_encoder(details)},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Something went wrong!"})


def create_app(
    *,
    price_use_case: PriceUseCase | None = None,
    signer_registry: SignerRegistry | None = None,
) -> FastAPI:
    """
    Application factory for the token swap API.

    The price use case (and the cache it owns) and the signer registry live on
    `app.state` for the lifetime of this app instance.
    """
    app = FastAPI(
        title="Token Swap API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.price_use_case = price_use_case or PriceUseCase.from_settings()
    app.state.signer_registry = signer_registry or SignerRegistry.from_settings()

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(prices_router, prefix="/api")
    app.include_router(swap_router, prefix="/api")

    @app.get("/health", tags=["health"])
    async def health():
        return {"ok": True}

    return app


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().PORT)
