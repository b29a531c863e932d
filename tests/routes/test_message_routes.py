import io

from PIL import Image
from cloudinary.exceptions import Error as CloudinaryError

from studio_cms.models import ContactMessage

from conftest import cloudinary_url


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color=(200, 120, 40)).save(buffer, format="PNG")
    return buffer.getvalue()


async def _message(store, **values):
    defaults = {"name": "Ana", "email": "ana@example.com", "message": "Are you free on 12 June?"}
    defaults.update(values)
    return await store.insert(ContactMessage, defaults)


class TestMessages:
    async def test_list_filters_by_status(self, client, auth_headers, store) -> None:
        pending = await _message(store)
        await _message(store, status="archived")

        response = await client.get("/api/cms/messages", params={"status": "pending"}, headers=auth_headers)

        assert [message["id"] for message in response.json()] == [pending.id]

    async def test_mark_read_stamps_responded_at(self, client, auth_headers, store) -> None:
        message = await _message(store)

        response = await client.put(
            f"/api/cms/messages/{message.id}/status",
            json={"status": "read", "notes": "  call back Monday "},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "read"
        assert body["notes"] == "call back Monday"
        assert body["responded_at"] is not None

    async def test_back_to_pending(self, client, auth_headers, store) -> None:
        message = await _message(store)

        response = await client.put(
            f"/api/cms/messages/{message.id}/status", json={"status": "pending"}, headers=auth_headers
        )

        assert response.json()["responded_at"] is None

    async def test_unknown_status(self, client, auth_headers, store) -> None:
        message = await _message(store)

        response = await client.put(
            f"/api/cms/messages/{message.id}/status", json={"status": "spam"}, headers=auth_headers
        )

        assert response.status_code == 400

    async def test_delete_missing(self, client, auth_headers) -> None:
        response = await client.delete("/api/cms/messages/nope", headers=auth_headers)

        assert response.status_code == 404


class TestDashboard:
    async def test_stats(self, client, auth_headers, store, make_service, make_portfolio_image) -> None:
        service = await make_service()
        await make_portfolio_image(service_id=service.id)
        await make_portfolio_image()
        await _message(store)
        await _message(store, status="read")

        response = await client.get("/api/cms/dashboard/stats", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["total_services"] == 1
        assert body["total_images"] == 2
        assert body["pending_messages"] == 1
        assert len(body["recent_messages"]) == 2


class TestUploads:
    async def test_upload(self, client, auth_headers, media, monkeypatch) -> None:
        calls = []

        async def _fake_upload(file, folder=None, public_id=None, max_retries=3):
            calls.append((file, folder))
            return {
                "url": cloudinary_url("services/new"),
                "resource_key": "services/new",
                "format": "webp",
                "width": 8,
                "height": 8,
                "bytes": len(file),
            }

        monkeypatch.setattr(media, "upload_image", _fake_upload)

        response = await client.post(
            "/api/cms/uploads",
            files={"file": ("photo.png", _png_bytes(), "image/png")},
            data={"folder": "services"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json() == {
            "url": cloudinary_url("services/new"),
            "resource_key": "services/new",
            "width": 8,
            "height": 8,
        }
        assert calls[0][1] == "services"

    async def test_rejects_non_images(self, client, auth_headers) -> None:
        response = await client.post(
            "/api/cms/uploads",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid file type"

    async def test_rejects_bad_folder(self, client, auth_headers) -> None:
        response = await client.post(
            "/api/cms/uploads",
            files={"file": ("photo.png", _png_bytes(), "image/png")},
            data={"folder": "../etc"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid folder"

    async def test_cloudinary_failure(self, client, auth_headers, media, monkeypatch) -> None:
        async def _failing_upload(file, folder=None, public_id=None, max_retries=3):
            raise CloudinaryError("Invalid Signature")

        monkeypatch.setattr(media, "upload_image", _failing_upload)

        response = await client.post(
            "/api/cms/uploads",
            files={"file": ("photo.png", _png_bytes(), "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 502
        assert response.json()["error"] == "Upload failed"
