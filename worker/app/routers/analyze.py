# worker/app/routers/analyze.py
from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends
from starlette.datastructures import UploadFile

from worker.app.config import settings
from worker.app.dependencies.analyzer import get_analyzer
from worker.app.dependencies.upload import image_field
from worker.app.errors import (
    AnalyzeError,
    AuthError,
    ParseError,
    ValidationError,
)
from worker.app.models import AnalysisResult, ErrorOut
from worker.app.services.uploads import transient_upload, validate_image_upload
from worker.app.services.vision_openai import VisionAnalyzer
from worker.app.telemetry import telemetry

log = logging.getLogger(__name__)

router = APIRouter()

_FAILURE_COUNTER = {
    ValidationError: "upload_rejected",
    AuthError: "auth_failed",
    ParseError: "parse_failed",
}


def _count_failure(exc: AnalyzeError) -> None:
    for cls, counter in _FAILURE_COUNTER.items():
        if isinstance(exc, cls):
            telemetry.increment(counter)
            break
    telemetry.increment("analyze_failed")
    telemetry.set_error(f"{type(exc).__name__}: {exc}")


# Plain def: FastAPI runs it on the threadpool, so the blocking OpenAI call
# never stalls the event loop.
@router.post(
    "/api/analyze",
    response_model=AnalysisResult,
    responses={400: {"model": ErrorOut}, 401: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
def analyze(
    image: Optional[UploadFile] = Depends(image_field),
    analyzer: VisionAnalyzer = Depends(get_analyzer),
):
    telemetry.increment("analyze_total")
    t0 = time.time()
    name = image.filename if image is not None else None
    try:
        upload = validate_image_upload(image)
        with transient_upload(
            upload, settings.UPLOAD_DIR, settings.MAX_UPLOAD_BYTES
        ) as stored:
            log.info(f"[analyze] processing image: {stored.original_name} -> {stored.path.name}")
            result = analyzer.analyze(stored.read_bytes(), stored.mime)
    except AnalyzeError as e:
        _count_failure(e)
        telemetry.log_json(
            "analyze",
            level="error",
            filename=name,
            status=e.status_code,
            error=type(e).__name__,
            duration_ms=int((time.time() - t0) * 1000),
        )
        raise
    except Exception as e:
        log.exception(f"[analyze] unexpected failure: {e}")
        err = AnalyzeError(str(e))
        _count_failure(err)
        telemetry.log_json(
            "analyze",
            level="error",
            filename=name,
            status=500,
            error=type(e).__name__,
            duration_ms=int((time.time() - t0) * 1000),
        )
        raise err from e

    telemetry.increment("analyze_ok")
    telemetry.log_json(
        "analyze",
        filename=stored.original_name,
        mime=stored.mime,
        size=stored.size,
        tags=len(result.tags),
        status=200,
        duration_ms=int((time.time() - t0) * 1000),
    )
    return result
