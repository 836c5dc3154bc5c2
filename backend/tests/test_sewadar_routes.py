import logging

from sewadar_api.core.exceptions import AuditWriteFailure
from sewadar_api.core.permissions import UserRole
from sewadar_api.models.sewadar import Sewadar
from sewadar_api.services.audit_service import audit_service

SEWADARS = "/api/v1/sewadars/"


def test_create_attributes_record_to_requester(client, db_session, make_user, auth_headers, audit_rows):
    editor = make_user("editor@rssb.org", role=UserRole.EDITOR)
    other = make_user("other@rssb.org", role=UserRole.ADMINISTRATOR)

    response = client.post(
        SEWADARS,
        json={
            "first_name": "Ravi",
            "last_name": "Kumar",
            "age": 34,
            "badge_id": "B-204",
            "createdBy": other.id,
            "created_by": other.id,
        },
        headers=auth_headers(editor),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["created_by"] == editor.id
    assert body["created_by_name"] == editor.full_name

    sewadar = db_session.get(Sewadar, body["id"])
    assert sewadar.created_by == editor.id

    rows = audit_rows()
    assert len(rows) == 1
    assert rows[0].action == "CREATE_ENTITY"
    assert rows[0].entity_type == "SEWADAR"
    assert rows[0].entity_id == body["id"]
    assert rows[0].actor_id == editor.id
    assert rows[0].ip_address == "testclient"


def test_rejected_create_writes_nothing(client, db_session, make_user, auth_headers, audit_rows):
    viewer = make_user("viewer@rssb.org")

    response = client.post(SEWADARS, json={"first_name": "Ravi", "last_name": "Kumar"}, headers=auth_headers(viewer))

    assert response.status_code == 403
    assert db_session.query(Sewadar).count() == 0
    assert audit_rows() == []


def test_invalid_payload_is_422(client, make_user, auth_headers, audit_rows):
    editor = make_user("editor@rssb.org", role=UserRole.EDITOR)

    response = client.post(SEWADARS, json={"first_name": "Ravi", "last_name": "Kumar", "age": 0},
                           headers=auth_headers(editor))

    assert response.status_code == 422
    assert response.json()["error"] == "Validation failed"
    assert audit_rows() == []


def test_editor_route_with_login_token(client, make_user, make_sewadar):
    """Login, then use the issued token on an editor-only route"""
    editor = make_user("editor@rssb.org", role=UserRole.EDITOR)
    sewadar = make_sewadar(editor)

    login = client.post("/api/v1/auth/login", json={"email": "Editor@RSSB.org", "password": "secret123"})
    assert login.status_code == 200
    assert login.json()["user"]["role"] == "EDITOR"
    token = login.json()["access_token"]

    response = client.put(f"{SEWADARS}{sewadar.id}", json={"age": 41}, headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["age"] == 41


def test_update_writes_one_record(client, make_user, make_sewadar, auth_headers, audit_rows):
    editor = make_user("editor@rssb.org", role=UserRole.EDITOR)
    sewadar = make_sewadar(editor)

    response = client.put(f"{SEWADARS}{sewadar.id}", json={"badge_id": ""}, headers=auth_headers(editor))

    assert response.status_code == 200
    assert response.json()["badge_id"] is None
    rows = audit_rows(action="UPDATE_ENTITY")
    assert len(rows) == 1
    assert rows[0].entity_id == sewadar.id
    assert "badge_id" in rows[0].detail


def test_update_requires_a_field(client, make_user, make_sewadar, auth_headers):
    editor = make_user("editor@rssb.org", role=UserRole.EDITOR)
    sewadar = make_sewadar(editor)

    response = client.put(f"{SEWADARS}{sewadar.id}", json={}, headers=auth_headers(editor))

    assert response.status_code == 422


def test_delete_writes_one_record_with_entity_id(client, db_session, make_user, make_sewadar, auth_headers, audit_rows):
    editor = make_user("editor@rssb.org", role=UserRole.EDITOR)
    admin = make_user("admin@rssb.org", role=UserRole.ADMINISTRATOR)
    sewadar = make_sewadar(editor)
    sewadar_id = sewadar.id

    response = client.delete(f"{SEWADARS}{sewadar_id}", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["success"] is True
    db_session.expire_all()
    assert db_session.get(Sewadar, sewadar_id) is None

    rows = audit_rows()
    assert len(rows) == 1
    assert rows[0].action == "DELETE_ENTITY"
    assert rows[0].entity_id == sewadar_id
    assert rows[0].actor_id == admin.id


def test_delete_missing_is_404_without_audit(client, make_user, auth_headers, audit_rows):
    editor = make_user("editor@rssb.org", role=UserRole.EDITOR)

    response = client.delete(f"{SEWADARS}does-not-exist", headers=auth_headers(editor))

    assert response.status_code == 404
    assert response.json()["error"] == "Sewadar not found"
    assert audit_rows() == []


def test_audit_failure_does_not_fail_mutation(client, db_session, make_user, auth_headers, audit_rows, monkeypatch, caplog):
    editor = make_user("editor@rssb.org", role=UserRole.EDITOR)

    def broken_persist(db, **kwargs):
        raise AuditWriteFailure(kwargs["action"].value, kwargs["actor_id"], RuntimeError("disk full"))

    monkeypatch.setattr(audit_service, "_persist", broken_persist)
    caplog.set_level(logging.ERROR, logger="sewadar_api.services.audit_service")

    response = client.post(SEWADARS, json={"first_name": "Ravi", "last_name": "Kumar"}, headers=auth_headers(editor))

    assert response.status_code == 201
    assert db_session.get(Sewadar, response.json()["id"]) is not None
    assert audit_rows() == []
    assert any("Audit record dropped" in record.getMessage() for record in caplog.records)


def test_viewer_can_list_and_read(client, make_user, make_sewadar, auth_headers):
    editor = make_user("editor@rssb.org", role=UserRole.EDITOR)
    viewer = make_user("viewer@rssb.org")
    sewadar = make_sewadar(editor, first_name="Manjit")
    make_sewadar(editor, first_name="Harpal", badge_id="B-200")

    listing = client.get(SEWADARS, params={"search": "manj"}, headers=auth_headers(viewer))
    assert listing.status_code == 200
    assert listing.json()["pagination"]["total"] == 1
    assert listing.json()["data"][0]["id"] == sewadar.id

    detail = client.get(f"{SEWADARS}{sewadar.id}", headers=auth_headers(viewer))
    assert detail.status_code == 200
    assert detail.json()["created_by_name"] == editor.full_name
