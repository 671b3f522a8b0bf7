# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from filemeta.config import get_settings
from filemeta.main import create_app

ENDPOINT = "/api/fileanalyse"
SMALL_LIMIT = 1024


class MultipartBody:
    """
    Hand-built multipart/form-data body, for requests an HTTP client library
    would refuse to produce (missing part headers, empty filenames, ...).
    """

    def __init__(self, boundary="filemetaTestBoundary7MA4YWxkTrZu0gW"):
        self.boundary = boundary
        self.parts = []

    def part(self, name, data=b"", filename=None, content_type=None, disposition=None, extra_headers=()):
        if disposition is None:
            disposition = f'form-data; name="{name}"'
            if filename is not None:
                disposition += f'; filename="{filename}"'
        headers = [f"Content-Disposition: {disposition}"]
        if content_type is not None:
            headers.append(f"Content-Type: {content_type}")
        headers.extend(extra_headers)
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.parts.append("\r\n".join(headers).encode("utf-8") + b"\r\n\r\n" + data)
        return self

    @property
    def content_type(self):
        return f"multipart/form-data; boundary={self.boundary}"

    def encode(self):
        delimiter = b"--" + self.boundary.encode("ascii")
        body = b"".join(delimiter + b"\r\n" + p + b"\r\n" for p in self.parts)
        return body + delimiter + b"--\r\n"

    def post(self, client, url=ENDPOINT):
        return client.post(
            url, content=self.encode(), headers={"Content-Type": self.content_type}
        )


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def small_client():
    """Client for an app whose upload ceiling is SMALL_LIMIT bytes."""
    with TestClient(create_app(max_upload_size=SMALL_LIMIT)) as c:
        yield c


@pytest.fixture
def multipart_body():
    return MultipartBody


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
