# filemeta/utils.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

def file_extension(name: str) -> Optional[str]:
    """
    Extension of the last path segment, from the final '.' to the end.
    Leading dots mark hidden files, not extensions: ".gitignore" -> None.
    """
    base = name.rsplit("/", 1)[-1].lstrip(".")
    idx = base.rfind(".")
    if idx == -1:
        return None
    return base[idx:]

def utc_timestamp(moment: Optional[datetime] = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    stamp = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")
