"""
SVG Holder Backend — HTTP Endpoint Tests
==========================================

What:  End-to-end tests for /api/svgs and /health through the ASGI app.
How:   httpx.AsyncClient over ASGITransport; a fresh SQLite database per test.

Scenarios:
    ✅ Logo create → get → update → delete round trip
    ✅ 6 MiB upload rejected with 400; oversized bodies never spooled
    ✅ .txt filename accepted only with the SVG media type
    ✅ /search without q → 400
    ✅ malformed id → 404, unknown route → 404
    ✅ storage failure → 500, detail redacted in production
    ✅ PUT accepts JSON and form bodies
"""

from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.config import Settings
from app.main import create_app
from app.schemas.svg import SvgResponse

API = "/api/svgs"


async def upload(client, name="Logo", description="Company logo", content=None,
                 filename="logo.svg", content_type="image/svg+xml"):
    files = {}
    if content is not None:
        files["svgFile"] = (filename, content, content_type)
    data = {}
    if name is not None:
        data["name"] = name
    if description is not None:
        data["description"] = description
    return await client.post(API, data=data, files=files or None)


class TestCreate:
    @pytest.mark.asyncio
    async def test_upload_returns_201_with_record(self, test_client, sample_svg_bytes):
        response = await upload(test_client, name="  Logo ", content=sample_svg_bytes)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "SVG uploaded successfully"
        assert "error" not in body

        data = body["data"]
        assert set(data) == {
            "id", "name", "description", "content", "fileSize",
            "originalName", "createdAt", "updatedAt",
        }
        assert data["name"] == "Logo"
        assert data["content"] == sample_svg_bytes.decode()
        assert data["fileSize"] == len(sample_svg_bytes)
        assert data["originalName"] == "logo.svg"
        assert data["createdAt"] == data["updatedAt"]

    @pytest.mark.asyncio
    async def test_missing_name_rejected(self, test_client, sample_svg_bytes):
        response = await upload(test_client, name=None, content=sample_svg_bytes)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Name, description, and SVG file are required",
        }

    @pytest.mark.asyncio
    async def test_missing_file_rejected(self, test_client):
        response = await upload(test_client, content=None)

        assert response.status_code == 400
        assert response.json()["message"] == "Name, description, and SVG file are required"

    @pytest.mark.asyncio
    async def test_six_mib_upload_rejected(self, test_client):
        content = b"<svg>" + b" " * (6 * 1024 * 1024) + b"</svg>"

        response = await upload(test_client, content=content)

        assert response.status_code == 400
        assert response.json()["message"] == "File size too large. Maximum size is 5MB."
        assert (await test_client.get(API)).json()["data"] == []

    @pytest.mark.asyncio
    async def test_txt_name_with_svg_media_type_accepted(self, test_client, sample_svg_bytes):
        response = await upload(test_client, content=sample_svg_bytes, filename="drawing.txt")

        assert response.status_code == 201
        assert response.json()["data"]["originalName"] == "drawing.txt"

    @pytest.mark.asyncio
    async def test_txt_name_without_svg_media_type_rejected(self, test_client, sample_svg_bytes):
        response = await upload(
            test_client, content=sample_svg_bytes, filename="drawing.txt", content_type="text/plain"
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Only SVG files are allowed"

    @pytest.mark.asyncio
    async def test_content_without_svg_rejected(self, test_client):
        response = await upload(test_client, content=b"<html><body/></html>")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid SVG file content"


class TestReadAndSearch:
    @pytest.mark.asyncio
    async def test_list_newest_first(self, test_client, sample_svg_bytes):
        for name in ("one", "two", "three"):
            await upload(test_client, name=name, content=sample_svg_bytes)

        response = await test_client.get(API)

        assert response.status_code == 200
        assert [r["name"] for r in response.json()["data"]] == ["three", "two", "one"]

    @pytest.mark.asyncio
    async def test_list_with_trailing_slash(self, test_client):
        response = await test_client.get(f"{API}/")
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": []}

    @pytest.mark.asyncio
    async def test_get_by_id(self, test_client, sample_svg_bytes):
        created = (await upload(test_client, content=sample_svg_bytes)).json()["data"]

        response = await test_client.get(f"{API}/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"] == created

    @pytest.mark.asyncio
    async def test_malformed_id_is_404(self, test_client):
        response = await test_client.get(f"{API}/invalid-id")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "SVG not found"}

    @pytest.mark.asyncio
    async def test_search(self, test_client, sample_svg_bytes):
        await upload(test_client, name="Company Logo", content=sample_svg_bytes)
        await upload(test_client, name="Arrow", description="navigation", content=sample_svg_bytes)

        response = await test_client.get(f"{API}/search", params={"q": "LOGO"})
        assert [r["name"] for r in response.json()["data"]] == ["Company Logo"]

        response = await test_client.get(f"{API}/search", params={"q": "unmatched"})
        assert response.status_code == 200
        assert response.json()["data"] == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "?q="])
    async def test_search_without_query_is_400(self, test_client, query):
        response = await test_client.get(f"{API}/search{query}")

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Search query is required"}

    @pytest.mark.asyncio
    async def test_whitespace_query_is_searched(self, test_client, sample_svg_bytes):
        await upload(test_client, name="two  spaces", content=sample_svg_bytes)
        await upload(test_client, name="nospace", content=sample_svg_bytes)

        response = await test_client.get(f"{API}/search?q=%20%20")

        assert response.status_code == 200
        assert [r["name"] for r in response.json()["data"]] == ["two  spaces"]


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_logo_update_scenario(self, test_client, sample_svg_bytes):
        created = SvgResponse.model_validate(
            (await upload(test_client, content=sample_svg_bytes)).json()["data"]
        )

        response = await test_client.put(
            f"{API}/{created.id}",
            json={"name": "Logo v2", "description": "Updated logo"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "SVG updated successfully"
        updated = SvgResponse.model_validate(response.json()["data"])
        assert updated.name == "Logo v2"
        assert updated.description == "Updated logo"
        assert updated.content == created.content
        assert updated.created_at == created.created_at
        assert updated.updated_at > created.updated_at

    @pytest.mark.asyncio
    async def test_update_missing_description(self, test_client, sample_svg_bytes):
        created = (await upload(test_client, content=sample_svg_bytes)).json()["data"]

        response = await test_client.put(f"{API}/{created['id']}", json={"name": "x"})

        assert response.status_code == 400
        assert response.json()["message"] == "Name and description are required"

    @pytest.mark.asyncio
    async def test_update_without_body(self, test_client, sample_svg_bytes):
        created = (await upload(test_client, content=sample_svg_bytes)).json()["data"]

        response = await test_client.put(f"{API}/{created['id']}")

        assert response.status_code == 400
        assert response.json()["message"] == "Name and description are required"

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, test_client):
        response = await test_client.put(
            f"{API}/00000000-0000-0000-0000-000000000000",
            json={"name": "a", "description": "b"},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_twice(self, test_client, sample_svg_bytes):
        created = (await upload(test_client, content=sample_svg_bytes)).json()["data"]

        first = await test_client.delete(f"{API}/{created['id']}")
        assert first.status_code == 200
        assert first.json() == {"success": True, "message": "SVG deleted successfully"}

        second = await test_client.delete(f"{API}/{created['id']}")
        assert second.status_code == 404
        assert second.json()["message"] == "SVG not found"


class TestErrorsAndHealth:
    @pytest.mark.asyncio
    async def test_unknown_route(self, test_client):
        response = await test_client.get("/api/unknown")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route not found"}

    @pytest.mark.asyncio
    async def test_unsupported_method_is_route_not_found(self, test_client):
        response = await test_client.patch(API)

        assert response.status_code == 404
        assert response.json()["message"] == "Route not found"

    @pytest.mark.asyncio
    async def test_storage_failure_includes_detail_outside_production(self, test_client, database):
        with patch.object(database, "session", side_effect=SQLAlchemyError("connection refused")):
            response = await test_client.get(API)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Failed to fetch SVGs",
            "error": "connection refused",
        }

    @pytest.mark.asyncio
    async def test_storage_failure_redacted_in_production(self, test_settings, database):
        config = Settings(
            database_url=test_settings.database_url,
            environment="production",
            log_level="WARNING",
        )
        app = create_app(config, database)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            with patch.object(database, "session", side_effect=SQLAlchemyError("secret detail")):
                response = await client.get(API)

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Failed to fetch SVGs"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/health", "/api/health"])
    async def test_health(self, test_client, path):
        response = await test_client.get(path)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "SVG Holder API is running"
        assert body["data"]["status"] == "healthy"
        assert body["data"]["database"] == "connected"
        assert "uptimeSeconds" in body["data"]

    @pytest.mark.asyncio
    async def test_health_degraded_when_database_down(self, test_client, database):
        with patch.object(database, "ping", return_value=False):
            response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        generated = await test_client.get("/health")
        assert generated.headers["X-Request-ID"]

        echoed = await test_client.get("/health", headers={"X-Request-ID": "abc123"})
        assert echoed.headers["X-Request-ID"] == "abc123"

        dotted = await test_client.get("/health", headers={"X-Request-ID": "abc-123.x_y"})
        assert dotted.headers["X-Request-ID"] == "abc-123.x_y"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["x" * 65, "has space", "line\tbreak", "a;b=c"])
    async def test_unsafe_request_id_is_replaced(self, test_client, header):
        response = await test_client.get("/health", headers={"X-Request-ID": header})

        rid = response.headers["X-Request-ID"]
        assert rid != header
        assert len(rid) == 8


def multipart_body(boundary: str, content: bytes, filename="logo.svg",
                   content_type="image/svg+xml") -> bytes:
    fields = b"".join(
        f'--{boundary}\r\nContent-Disposition: form-data; name="{key}"\r\n\r\n{value}\r\n'.encode()
        for key, value in (("name", "Logo"), ("description", "Company logo"))
    )
    file_part = (
        f'--{boundary}\r\nContent-Disposition: form-data; name="svgFile"; '
        f'filename="{filename}"\r\nContent-Type: {content_type}\r\n\r\n'
    ).encode() + content + b"\r\n"
    return fields + file_part + f"--{boundary}--\r\n".encode()


async def in_chunks(data: bytes, size: int = 64 * 1024):
    for start in range(0, len(data), size):
        yield data[start:start + size]


class SpoolCounter:
    """Counts bytes written into multipart file spools."""

    def __init__(self):
        self.total = 0
        self._original = StarletteUploadFile.write

    def __enter__(self):
        counter = self

        async def counting_write(upload_file, data):
            counter.total += len(data)
            return await counter._original(upload_file, data)

        self._patch = patch.object(StarletteUploadFile, "write", counting_write)
        self._patch.start()
        return self

    def __exit__(self, *exc_info):
        self._patch.stop()


class TestUploadLimits:
    """Oversized bodies are refused before (or while) being read."""

    TOO_LARGE = {"success": False, "message": "File size too large. Maximum size is 5MB."}

    @pytest.mark.asyncio
    async def test_declared_oversize_refused_without_spooling(self, test_client):
        content = b"<svg>" + b" " * (8 * 1024 * 1024) + b"</svg>"

        with SpoolCounter() as spool:
            response = await upload(test_client, content=content)

        assert response.status_code == 400
        assert response.json() == self.TOO_LARGE
        assert spool.total == 0

    @pytest.mark.asyncio
    async def test_chunked_oversize_refused_without_spooling(self, test_client):
        boundary = "svgholderboundary"
        body = multipart_body(boundary, b"<svg>" + b" " * (8 * 1024 * 1024) + b"</svg>")

        with SpoolCounter() as spool:
            response = await test_client.post(
                API,
                content=in_chunks(body),
                headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
            )

        assert "content-length" not in {k.lower() for k in response.request.headers}
        assert response.status_code == 400
        assert response.json() == self.TOO_LARGE
        assert spool.total == 0

    @pytest.mark.asyncio
    async def test_chunked_upload_within_limit_is_accepted(self, test_client, sample_svg_bytes):
        boundary = "svgholderboundary"
        body = multipart_body(boundary, sample_svg_bytes)

        response = await test_client.post(
            API,
            content=in_chunks(body, size=16),
            headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
        )

        assert response.status_code == 201
        assert response.json()["data"]["content"] == sample_svg_bytes.decode()

    @pytest.mark.asyncio
    async def test_just_over_cap_spool_stays_bounded(self, test_client, test_settings):
        content = b"<svg>" + b" " * (test_settings.max_file_size - 4)
        assert len(content) == test_settings.max_file_size + 1

        with SpoolCounter() as spool:
            response = await upload(test_client, content=content)

        assert response.status_code == 400
        assert response.json() == self.TOO_LARGE
        assert spool.total <= test_settings.max_file_size + test_settings.upload_form_overhead

    @pytest.mark.asyncio
    async def test_oversized_non_svg_reports_type_first(self, test_client, test_settings):
        content = b"a" * (test_settings.max_file_size + 1)

        response = await upload(
            test_client, content=content, filename="notes.txt", content_type="text/plain"
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Only SVG files are allowed"

    @pytest.mark.asyncio
    async def test_other_routes_are_not_limited(self, test_client, sample_svg_bytes):
        created = (await upload(test_client, content=sample_svg_bytes)).json()["data"]

        response = await test_client.put(
            f"{API}/{created['id']}",
            json={"name": "Logo", "description": "d" * (1024 * 1024)},
        )

        assert response.status_code == 200


class TestUpdateBodies:
    @pytest.mark.asyncio
    async def test_update_with_urlencoded_form(self, test_client, sample_svg_bytes):
        created = (await upload(test_client, content=sample_svg_bytes)).json()["data"]

        response = await test_client.put(
            f"{API}/{created['id']}",
            data={"name": " Logo v2 ", "description": "From a form"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Logo v2"
        assert response.json()["data"]["description"] == "From a form"

    @pytest.mark.asyncio
    async def test_update_with_multipart_form(self, test_client, sample_svg_bytes):
        created = (await upload(test_client, content=sample_svg_bytes)).json()["data"]

        response = await test_client.put(
            f"{API}/{created['id']}",
            data={"name": "Logo v3", "description": "Multipart"},
            files={"unused": ("x.txt", b"x", "text/plain")},
        )

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Logo v3"

    @pytest.mark.asyncio
    async def test_update_form_missing_field(self, test_client, sample_svg_bytes):
        created = (await upload(test_client, content=sample_svg_bytes)).json()["data"]

        response = await test_client.put(f"{API}/{created['id']}", data={"name": "only"})

        assert response.status_code == 400
        assert response.json()["message"] == "Name and description are required"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"{not json", b'"just a string"', b'{"name": 5, "description": "x"}'])
    async def test_malformed_json_body(self, test_client, sample_svg_bytes, body):
        created = (await upload(test_client, content=sample_svg_bytes)).json()["data"]

        response = await test_client.put(
            f"{API}/{created['id']}",
            content=body,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request"
