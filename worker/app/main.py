from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from worker.app.routers import analyze as analyze_router
from worker.app.routers import status as status_router
from worker.app.config import settings as C
from worker.app.errors import AnalyzeError
from worker.app.services.vision_openai import VisionAnalyzer

logging.basicConfig(
    level=C.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not C.OPENAI_API_KEY:
        log.error(
            "[worker] OPENAI_API_KEY is not configured. Add it to the environment or .env"
        )
        raise RuntimeError("OPENAI_API_KEY is not configured")

    log.info(f"[worker] OPENAI_API_KEY={C.api_key_hint}  model={C.OPENAI_MODEL}")
    analyzer = VisionAnalyzer.from_settings(C)

    if C.STARTUP_PROBE:
        log.info("[worker] testing OpenAI connection...")
        if not await run_in_threadpool(analyzer.probe):
            log.error("[worker] failed to connect to OpenAI; check the API key")
            raise RuntimeError("OpenAI connection test failed")
        log.info("[worker] OpenAI connection verified")
    else:
        log.warning("[worker] STARTUP_PROBE=0; skipping OpenAI connection test")

    app.state.analyzer = analyzer
    log.info("[worker] Routes: /api/analyze /health /status")
    try:
        yield
    finally:
        analyzer.client.close()


app = FastAPI(title="pixeltag-worker", lifespan=lifespan)

origins = C.cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials="*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analyze_router.router)
app.include_router(status_router.router)


@app.exception_handler(AnalyzeError)
async def _analyze_error(request: Request, exc: AnalyzeError):
    cause = exc.__cause__
    log.error(
        f"[worker] {request.method} {request.url.path} -> {exc.status_code} "
        f"{type(exc).__name__}: {exc}"
        + (f" (cause: {type(cause).__name__}: {cause})" if cause else "")
    )
    return JSONResponse(
        status_code=exc.status_code, content={"error": exc.public_message}
    )


@app.exception_handler(RequestValidationError)
async def _request_invalid(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    log.warning(f"[worker] {request.method} {request.url.path} -> 422 {errors}")
    msg = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=422, content={"error": msg})


@app.get("/")
async def root():
    return {"message": "pixeltag Worker Service"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=C.HOST, port=C.PORT)
