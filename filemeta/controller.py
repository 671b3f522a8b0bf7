# filemeta/controller.py
from __future__ import annotations
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from .schemas import FileMetadata, FileMetadataResponse
from .uploads import MAX_UPLOAD_SIZE, UPLOAD_FIELD, MemoryUpload, UploadError, receive_upload
from .utils import file_extension, utc_timestamp

logger = logging.getLogger(__name__)

router = APIRouter()

INTERNAL_ERROR_MESSAGE = "Internal server error during file analysis."

_UPLOAD_REQUEST_BODY = {
    "required": True,
    "content": {
        "multipart/form-data": {
            "schema": {
                "type": "object",
                "required": [UPLOAD_FIELD],
                "properties": {UPLOAD_FIELD: {"type": "string", "format": "binary"}},
            }
        }
    },
}

def failure_response(status_code: int, message: str) -> JSONResponse:
    body = FileMetadataResponse.failure(message, utc_timestamp())
    return JSONResponse(status_code=status_code, content=body.to_json_dict())

def describe_upload(upload: MemoryUpload) -> FileMetadataResponse:
    metadata = FileMetadata(
        name=upload.filename,
        type=upload.content_type,
        size=upload.size,
        extension=file_extension(upload.filename),
    )
    return FileMetadataResponse.ok(metadata, utc_timestamp())

# ------------------------------ /api/fileanalyse ------------------------------
@router.post(
    "/api/fileanalyse",
    response_model=FileMetadataResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": FileMetadataResponse, "description": "No usable file part"},
        413: {"model": FileMetadataResponse, "description": "File exceeds maximum size"},
        500: {"model": FileMetadataResponse, "description": "Internal error"},
    },
    openapi_extra={"requestBody": _UPLOAD_REQUEST_BODY},
)
async def analyse_file(request: Request):
    """
    Single multipart file in field 'upfile' -> name, declared type, size and
    extension. The bytes live in memory for the duration of the request only.
    Client errors (missing file, oversized file) propagate as UploadError and
    are rendered by the app-level handler.
    """
    max_size = getattr(request.app.state, "max_upload_size", MAX_UPLOAD_SIZE)
    try:
        upload = await receive_upload(request, UPLOAD_FIELD, max_size)
        payload = describe_upload(upload).to_json_dict()
    except UploadError:
        raise
    except Exception:
        logger.exception("file analysis failed")
        return failure_response(500, INTERNAL_ERROR_MESSAGE)

    logger.info(
        "analysed upload",
        extra={"extra_data": {"file_name": upload.filename, "size": upload.size}},
    )
    return JSONResponse(content=payload)
