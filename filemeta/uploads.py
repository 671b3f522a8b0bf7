# filemeta/uploads.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from email.message import Message
from email.utils import collapse_rfc2231_value
from typing import Dict, List, Optional

from python_multipart.exceptions import FormParserError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.requests import Request

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "upfile"
MAX_UPLOAD_SIZE = 50 * 1024 * 1024  # 50 MiB
DEFAULT_PART_TYPE = "text/plain"  # RFC 7578, section 4.4
MAX_PART_HEADER_SIZE = 16 * 1024  # all header bytes of one part

# ---------------------------- Errors ----------------------------
class UploadError(Exception):
    """Client-side problem with the uploaded request body."""

    status_code = 400
    message = "Invalid upload."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message

class NoFileUploaded(UploadError):
    message = f"No file uploaded. Please provide a file with the field name '{UPLOAD_FIELD}'."

class UnexpectedFileField(UploadError):
    def __init__(self, field_name: str, expected: str = UPLOAD_FIELD):
        super().__init__(
            f"Unexpected file field '{field_name}'. "
            f"Only a single file in field '{expected}' is accepted."
        )
        self.field_name = field_name

class MalformedUpload(UploadError):
    message = "Malformed multipart request body."

class UploadTooLarge(UploadError):
    status_code = 413
    message = "File size exceeds maximum limit of 50MB."

# ---------------------------- Result ----------------------------
@dataclass
class MemoryUpload:
    field_name: str
    filename: str
    content_type: str
    body: bytes

    @property
    def size(self) -> int:
        return len(self.body)

def _decode(value: bytes) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return value.decode("latin-1")

def _extended_filename(disposition: bytes) -> Optional[str]:
    """RFC 5987 `filename*` from a raw Content-Disposition, if the client sent one."""
    msg = Message()
    msg["content-disposition"] = disposition.decode("latin-1")
    for key, value in msg.get_params(header="content-disposition", failobj=[])[1:]:
        if key == "filename" and isinstance(value, tuple):
            return collapse_rfc2231_value(value, errors="replace", fallback_charset="utf-8")
    return None

# ---------------------------- Streaming receiver ----------------------------
class _SingleFileCollector:
    """
    python-multipart callbacks that buffer exactly one file part in memory.
    Every other part is dropped as it streams past.
    """

    def __init__(self, field_name: str, max_size: int):
        self.field_name = field_name
        self.max_size = max_size
        self.result: Optional[MemoryUpload] = None

        self._headers: Dict[bytes, bytes] = {}
        self._header_field: List[bytes] = []
        self._header_value: List[bytes] = []
        self._header_bytes = 0
        self._capturing = False
        self._part_name = ""
        self._part_filename = ""
        self._part_type = DEFAULT_PART_TYPE
        self._buffer = bytearray()

    def callbacks(self):
        return {
            "on_part_begin": self.on_part_begin,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
        }

    def on_part_begin(self) -> None:
        self._headers = {}
        self._header_bytes = 0
        self._capturing = False
        self._buffer = bytearray()

    def _count_header_bytes(self, n: int) -> None:
        self._header_bytes += n
        if self._header_bytes > MAX_PART_HEADER_SIZE:
            raise MalformedUpload()

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._count_header_bytes(end - start)
        self._header_field.append(data[start:end])

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._count_header_bytes(end - start)
        self._header_value.append(data[start:end])

    def on_header_end(self) -> None:
        name = b"".join(self._header_field).strip().lower()
        self._headers[name] = b"".join(self._header_value).strip()
        self._header_field = []
        self._header_value = []

    def on_headers_finished(self) -> None:
        disposition = self._headers.get(b"content-disposition", b"")
        _, options = parse_options_header(disposition)
        filename = _extended_filename(disposition)
        if filename is None:
            if b"filename" not in options:
                return  # plain form field
            filename = _decode(options[b"filename"])
        name = _decode(options.get(b"name", b""))

        if name != self.field_name or self.result is not None:
            if not filename:
                return  # empty file input left in the form
            raise UnexpectedFileField(name, self.field_name)

        content_type = self._headers.get(b"content-type")
        if content_type:
            media_type, _ = parse_options_header(content_type)
            self._part_type = _decode(media_type).lower()
        else:
            self._part_type = DEFAULT_PART_TYPE
        self._part_name = name
        self._part_filename = filename
        self._capturing = True

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        if not self._capturing:
            return
        if len(self._buffer) + (end - start) > self.max_size:
            raise UploadTooLarge()
        self._buffer += data[start:end]

    def on_part_end(self) -> None:
        if not self._capturing:
            return
        self._capturing = False
        if not self._part_filename and not self._buffer:
            return  # empty file input
        self.result = MemoryUpload(
            field_name=self._part_name,
            filename=self._part_filename,
            content_type=self._part_type,
            body=bytes(self._buffer),
        )
        self._buffer = bytearray()

async def receive_upload(
    request: Request,
    field_name: str = UPLOAD_FIELD,
    max_size: int = MAX_UPLOAD_SIZE,
) -> MemoryUpload:
    """
    Stream the request body through a multipart parser and return the single
    file sent under `field_name`, held in memory.

    Raises UploadTooLarge as soon as the file grows past `max_size`; the rest
    of the body is left unread.
    """
    media_type, params = parse_options_header(request.headers.get("content-type", ""))
    if media_type.lower() != b"multipart/form-data":
        raise NoFileUploaded()
    boundary = params.get(b"boundary")
    if not boundary:
        raise MalformedUpload()

    collector = _SingleFileCollector(field_name, max_size)
    parser = MultipartParser(boundary, collector.callbacks())
    try:
        async for chunk in request.stream():
            parser.write(chunk)
        parser.finalize()
    except FormParserError as e:
        logger.debug("multipart parse failure: %s", e)
        raise MalformedUpload() from e

    if collector.result is None:
        raise NoFileUploaded()
    return collector.result
