# worker/app/dependencies/upload.py
from typing import AsyncIterator, Optional

from fastapi import Request
from starlette.datastructures import UploadFile

from worker.app.config import settings
from worker.app.errors import FileTooLargeError
from worker.app.telemetry import telemetry


def _declared_length(request: Request) -> Optional[int]:
    try:
        return int(request.headers.get("content-length", ""))
    except ValueError:
        return None


async def image_field(request: Request) -> AsyncIterator[Optional[UploadFile]]:
    """
    Yield the ``image`` part of a multipart body, or None when it is absent,
    empty, or a plain text field.

    Bodies whose declared length is over the upload ceiling plus multipart
    framing are rejected before the form is parsed. Bodies without a length
    header are still capped by transient_upload.
    """
    length = _declared_length(request)
    if length is not None and length > settings.MAX_UPLOAD_BYTES + settings.MULTIPART_OVERHEAD_BYTES:
        telemetry.increment("upload_rejected")
        raise FileTooLargeError()

    form = await request.form()
    try:
        value = form.get("image")
        if isinstance(value, UploadFile) and value.filename:
            yield value
        else:
            yield None
    finally:
        await form.close()
