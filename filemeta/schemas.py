# filemeta/schemas.py
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

def _check_iso8601(value: str) -> str:
    # fromisoformat only accepts a trailing "Z" from 3.11 on
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"not an ISO-8601 timestamp: {value!r}")
    return value

# ---------------------------- File Metadata ----------------------------
class FileMetadata(BaseModel):
    name: str
    type: str
    size: int = Field(ge=0)
    lastModified: Optional[str] = None
    extension: Optional[str] = None

    @field_validator("lastModified")
    @classmethod
    def validate_last_modified(cls, v):
        return v if v is None else _check_iso8601(v)

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v):
        if v is not None and not v.startswith("."):
            raise ValueError("extension must start with '.'")
        return v

# ---------------------------- Response Envelope ----------------------------
class FileMetadataResponse(BaseModel):
    success: bool
    data: Optional[FileMetadata] = None
    message: Optional[str] = None
    timestamp: str

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v):
        return _check_iso8601(v)

    @model_validator(mode="after")
    def check_outcome(self):
        if self.success:
            if self.data is None:
                raise ValueError("successful response requires data")
            if self.message is not None:
                raise ValueError("successful response carries no message")
        else:
            if self.data is not None:
                raise ValueError("failed response carries no data")
            if not self.message:
                raise ValueError("failed response requires a message")
        return self

    @classmethod
    def ok(cls, data: FileMetadata, timestamp: str) -> "FileMetadataResponse":
        return cls.model_validate(
            {"success": True, "data": data.model_dump(), "timestamp": timestamp}
        )

    @classmethod
    def failure(cls, message: str, timestamp: str) -> "FileMetadataResponse":
        return cls.model_validate(
            {"success": False, "message": message, "timestamp": timestamp}
        )

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
