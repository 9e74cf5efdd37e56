# app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import router as api_router
from app.config import settings
from app.errors import AuditError, CrawlError, InputError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="UX Site Auditor")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS", "GET"],
    allow_headers=["Content-Type"],
)

app.include_router(api_router, prefix="/api")


# --------- エラーハンドラ ---------


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    # JSON でないボディなど。url 不正と同じく 400 で返す
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(InputError)
async def handle_input_error(request: Request, exc: InputError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(CrawlError)
async def handle_crawl_error(request: Request, exc: CrawlError) -> JSONResponse:
    logger.warning("[api] crawl failed: %s", exc.message)
    return JSONResponse(status_code=400, content={"error": exc.message, "step": exc.step})


@app.exception_handler(AuditError)
async def handle_audit_error(request: Request, exc: AuditError) -> JSONResponse:
    logger.error("[api] audit failed step=%s: %s", exc.step, exc.message)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": exc.message, "step": exc.step},
    )


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[api] unexpected error")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": str(exc), "step": "unknown"},
    )
