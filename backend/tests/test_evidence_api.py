from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from conftest import create_property, create_user, grant, login_as
from passport.core.database import get_db
from passport.main import app
from passport.models.document import Document
from passport.models.enums import PropertyPermission
from passport.models.event import PropertyEvent

PDF = ("survey.pdf", b"%PDF-1.4 test survey", "application/pdf")
PHOTO = ("front.jpg", b"\xff\xd8\xff fake jpeg", "image/jpeg")


async def test_owner_uploads_document(client, db, session_factory, storage_provider):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)

    r = await client.post(
        f"/v1/properties/{prop.id}/documents",
        files={"file": PDF},
        data={"title": "Homebuyer survey", "document_type": "survey"},
    )

    assert r.status_code == 201, r.text
    body = r.json()
    assert body["success"] is True
    assert body["storage_path"].startswith(f"{prop.id}/")
    assert body["storage_path"].endswith("/survey.pdf")
    assert ("property-documents", body["storage_path"]) in storage_provider.objects

    async with session_factory() as check:
        document = (await check.execute(select(Document))).scalar_one()
        event = (await check.execute(select(PropertyEvent))).scalar_one()
    assert document.version == 1
    assert len(document.checksum) == 64
    assert event.event_type == "document_uploaded"
    assert event.event_payload["file_name"] == "survey.pdf"

    listed = await client.get(f"/v1/properties/{prop.id}/documents")
    assert listed.json()[0]["url"].startswith("https://storage.test/property-documents/")


async def test_upload_requires_title(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)

    r = await client.post(
        f"/v1/properties/{prop.id}/documents",
        files={"file": PDF},
        data={"document_type": "survey"},
    )

    assert r.status_code == 400
    assert r.json()["error"] == "Title is required"


async def test_upload_rejects_disallowed_type(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)

    r = await client.post(
        f"/v1/properties/{prop.id}/documents",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        data={"title": "Notes", "document_type": "other"},
    )

    assert r.status_code == 400
    assert r.json()["error"] == "File type not allowed: text/plain"


async def test_viewer_cannot_upload(client, db, storage_provider):
    owner = await create_user(db)
    viewer = await create_user(db)
    prop = await create_property(db, owner)
    await grant(db, prop, viewer, permission=PropertyPermission.VIEWER)
    login_as(viewer)

    r = await client.post(
        f"/v1/properties/{prop.id}/documents",
        files={"file": PDF},
        data={"title": "Survey", "document_type": "survey"},
    )

    assert r.status_code == 403
    assert r.json()["error"] == "You do not have permission to upload documents for this property"
    assert storage_provider.objects == {}


async def test_storage_failure_is_bad_gateway(client, db, storage_provider):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    storage_provider.fail_uploads = True
    login_as(owner)

    r = await client.post(
        f"/v1/properties/{prop.id}/documents",
        files={"file": PDF},
        data={"title": "Survey", "document_type": "survey"},
    )

    assert r.status_code == 502
    assert r.json()["error"] == "Upload failed: bucket unavailable"


async def test_failed_insert_removes_stored_object(client, db, session_factory, storage_provider):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)

    async def failing_db():
        async with session_factory() as session:
            async def commit():
                raise SQLAlchemyError("disk full")
            session.commit = commit
            yield session

    app.dependency_overrides[get_db] = failing_db

    r = await client.post(
        f"/v1/properties/{prop.id}/documents",
        files={"file": PDF},
        data={"title": "Survey", "document_type": "survey"},
    )

    assert r.status_code == 500
    assert r.json()["error"] == "Failed to save document: disk full"
    assert storage_provider.objects == {}
    assert storage_provider.deleted[0][0] == "property-documents"


async def test_owner_deletes_document(client, db, storage_provider):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)
    uploaded = await client.post(
        f"/v1/properties/{prop.id}/documents",
        files={"file": PDF},
        data={"title": "Survey", "document_type": "survey"},
    )
    document_id = uploaded.json()["id"]

    r = await client.delete(f"/v1/properties/{prop.id}/documents/{document_id}")

    assert r.json() == {"success": True}
    assert storage_provider.objects == {}
    missing = await client.delete(f"/v1/properties/{prop.id}/documents/{document_id}")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Document not found"


async def test_photo_upload_titles_from_file_name(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)

    r = await client.post(f"/v1/properties/{prop.id}/media", files={"file": PHOTO})
    assert r.status_code == 201, r.text

    listed = await client.get(f"/v1/properties/{prop.id}/media")
    item = listed.json()[0]
    assert item["title"] == "front.jpg"
    assert item["media_type"] == "photo"
    assert item["url"].startswith("https://storage.test/property-photos/")


async def test_video_media_type_is_refused(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)

    r = await client.post(
        f"/v1/properties/{prop.id}/media",
        files={"file": PHOTO},
        data={"media_type": "video"},
    )

    assert r.status_code == 400
    assert r.json()["error"] == "Media type must be photo, floorplan or other"
