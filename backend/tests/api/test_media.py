"""Media Routes — uploads, file serving and on-demand image generation.

Invariants:
    - Uploads land in <folder>/<sanitized-name>-<timestamp><ext> under the image root
    - Served paths with ".." answer 400; missing files and directories answer 404
    - Served files carry an extension-derived content type and an immutable cache header
    - Generation failures answer 500 with the default-image fallback hint
"""

import re

from aixchange.core.filenames import CACHE_CONTROL_IMMUTABLE


def _write(image_store, relative: str, data: bytes = b"img") -> None:
    target = image_store.root / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)


# --- upload ----------------------------------------------------------------

async def test_upload_into_folder(client, image_store):
    res = await client.post(
        "/api/upload",
        files={"file": ("My Photo.PNG", b"png-bytes", "image/png")},
        data={"type": "avatars"},
    )

    assert res.status_code == 200
    body = res.json()
    assert re.fullmatch(r"my_photo-\d+\.png", body["filename"])
    assert body["url"] == f"/api/external-images/avatars/{body['filename']}"
    assert body["status"] == "success"
    assert (image_store.root / "avatars" / body["filename"]).read_bytes() == b"png-bytes"


async def test_upload_defaults_to_solutions_folder(client):
    res = await client.post("/api/upload", files={"file": ("logo.jpg", b"x", "image/jpeg")})
    assert res.json()["url"].startswith("/api/external-images/solutions/logo-")


async def test_upload_without_file(client):
    res = await client.post("/api/upload", data={"type": "solutions"})
    assert res.status_code == 400
    assert res.json()["code"] == "NO_FILE"


async def test_upload_rejects_bad_folder(client):
    res = await client.post(
        "/api/upload",
        files={"file": ("a.png", b"x", "image/png")},
        data={"type": "../etc"},
    )
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_FOLDER"


# --- serving ---------------------------------------------------------------

async def test_serve_external_image(client, image_store):
    _write(image_store, "solutions/a.png", b"png-data")

    res = await client.get("/api/external-images/solutions/a.png")

    assert res.status_code == 200
    assert res.content == b"png-data"
    assert res.headers["content-type"] == "image/png"
    assert res.headers["cache-control"] == CACHE_CONTROL_IMMUTABLE


async def test_serve_public_file(client, image_store):
    _write(image_store, "events/banner.webp")

    res = await client.get("/public/events/banner.webp")

    assert res.status_code == 200
    assert res.headers["content-type"] == "image/webp"


async def test_unknown_extension_is_octet_stream(client, image_store):
    _write(image_store, "misc/blob.bin")
    res = await client.get("/api/external-images/misc/blob.bin")
    assert res.headers["content-type"] == "application/octet-stream"


async def test_dotdot_path_is_rejected(client, image_store):
    _write(image_store, "solutions/evil..png")
    res = await client.get("/api/external-images/solutions/evil..png")
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_PATH"


async def test_missing_file(client):
    res = await client.get("/api/external-images/solutions/none.png")
    assert res.status_code == 404


async def test_directory_is_not_served(client, image_store):
    _write(image_store, "solutions/a.png")
    res = await client.get("/api/external-images/solutions")
    assert res.status_code == 404


# --- generation ------------------------------------------------------------

async def test_generate_image(client, fake_images, image_store):
    res = await client.post(
        "/api/generate-image",
        json={"description": "summarizes long reports", "title": "Text Summarizer"},
    )

    assert res.status_code == 200
    body = res.json()
    assert re.fullmatch(r"text_summarizer-\d+\.png", body["filename"])
    assert body["imageUrl"] == f"/api/external-images/solutions/{body['filename']}"
    assert body["details"] == {"size": "1024x1024", "format": "png", "location": body["imageUrl"]}
    assert "summarizes long reports" in fake_images.prompts[0]
    assert (image_store.root / "solutions" / body["filename"]).exists()


async def test_generate_image_without_title(client):
    res = await client.post("/api/generate-image", json={"description": "does things"})
    assert re.fullmatch(r"solution-\d+\.png", res.json()["filename"])


async def test_generate_image_requires_description(client):
    res = await client.post("/api/generate-image", json={"title": "Nothing"})
    assert res.status_code == 400
    assert res.json()["code"] == "DESCRIPTION_REQUIRED"


async def test_generate_image_failure_falls_back(client, fake_images):
    fake_images.fail = True

    res = await client.post("/api/generate-image", json={"description": "does things"})

    assert res.status_code == 500
    body = res.json()
    assert body["useDefaultImage"] is True
    assert body["defaultImagePath"] == "/placeholder-image.jpg"
