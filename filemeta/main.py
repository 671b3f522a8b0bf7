# filemeta/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from .config import get_settings
from .controller import failure_response, router as upload_router
from .log_config import setup_logging
from .uploads import MAX_UPLOAD_SIZE, UPLOAD_FIELD, UploadError

logger = logging.getLogger(__name__)

INDEX_PAGE = f"""<!doctype html>
<html>
<head><meta charset="utf-8"><title>File Metadata Microservice</title></head>
<body>
<h2>File Metadata Microservice</h2>
<p>Upload a file to get its name, type, size and extension as JSON.</p>
<form method="POST" action="/api/fileanalyse" enctype="multipart/form-data">
  <input type="file" name="{UPLOAD_FIELD}" />
  <button type="submit">Upload</button>
</form>
</body>
</html>
"""

async def upload_error_handler(request: Request, exc: UploadError):
    logger.warning("rejected upload (%s): %s", exc.status_code, exc.message)
    return failure_response(exc.status_code, exc.message)

def create_app(max_upload_size: int = MAX_UPLOAD_SIZE) -> FastAPI:
    app = FastAPI(
        title="File Metadata API",
        version="1.0.0",
        description="Upload a single file as multipart field 'upfile' and get its metadata back as JSON.",
    )
    app.state.max_upload_size = max_upload_size

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(UploadError, upload_error_handler)
    app.include_router(upload_router, prefix="", tags=["File Analysis"])

    @app.get("/", response_class=HTMLResponse)
    async def root():
        return INDEX_PAGE

    return app

app = create_app()

def run():
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("File Metadata Microservice listening on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)

if __name__ == "__main__":
    run()
