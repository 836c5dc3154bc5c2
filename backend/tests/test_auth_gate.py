import logging
from types import SimpleNamespace

import pytest
from prometheus_client import REGISTRY

from sewadar_api.api import deps
from sewadar_api.core.exceptions import MalformedHeaderError, MissingTokenError
from sewadar_api.core.permissions import UserRole
from sewadar_api.main import app
from sewadar_api.services.token_service import TokenService, get_token_service

ME = "/api/v1/auth/me"
SEWADARS = "/api/v1/sewadars/"
USERS = "/api/v1/users/"


def _rejections(reason):
    return REGISTRY.get_sample_value("sewadar_auth_rejections_total", {"reason": reason}) or 0.0


class _SpyTokenService:
    def __init__(self):
        self.calls = []

    def verify(self, token):
        self.calls.append(token)
        raise AssertionError("token service must not be called")


@pytest.mark.parametrize(
    "header",
    [None, "", "Token abc.def.ghi", "bearer abc.def.ghi", "Bearer", "Bearer a.b.c extra", "Bearer  a.b.c"],
)
def test_bad_headers_are_401_without_verifying(client, header):
    spy = _SpyTokenService()
    app.dependency_overrides[get_token_service] = lambda: spy
    headers = {} if header is None else {"Authorization": header}

    response = client.get(ME, headers=headers)

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert spy.calls == []


def test_missing_header_message(client):
    response = client.get(ME)
    assert response.json()["error"] == "Access token required"


def test_wrong_scheme_message(client):
    response = client.get(ME, headers={"Authorization": "Token abc.def.ghi"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid authorization header format. Use: Bearer <token>"


def test_malformed_token_is_401(client):
    response = client.get(ME, headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid token format"


def test_expired_token_is_403(client, clock, make_user, auth_headers):
    user = make_user("viewer@rssb.org")
    headers = auth_headers(user)
    clock.advance(hours=1)

    response = client.get(ME, headers=headers)

    assert response.status_code == 403
    assert response.json()["error"] == "Invalid or expired token"


def test_foreign_signature_is_403(client, clock, make_user):
    user = make_user("viewer@rssb.org")
    forged = TokenService("not-the-configured-secret-000000000", clock=clock).issue(user.id, user.email, user.role)

    response = client.get(ME, headers={"Authorization": f"Bearer {forged}"})

    assert response.status_code == 403
    assert response.json()["error"] == "Invalid or expired token"


def test_valid_token_returns_live_user(client, make_user, auth_headers):
    user = make_user("viewer@rssb.org", first_name="Asha", last_name="Verma")

    response = client.get(ME, headers=auth_headers(user))

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == user.id
    assert body["first_name"] == "Asha"
    assert body["role"] == "VIEWER"


def test_inactive_identity_is_403(client, db_session, make_user, auth_headers):
    user = make_user("editor@rssb.org", role=UserRole.EDITOR)
    headers = auth_headers(user)
    user.is_active = False
    db_session.commit()

    response = client.get(ME, headers=headers)

    assert response.status_code == 403
    assert response.json()["error"] == "User account not found or deactivated"


def test_deleted_identity_is_403(client, db_session, make_user, auth_headers):
    user = make_user("viewer@rssb.org")
    headers = auth_headers(user)
    db_session.delete(user)
    db_session.commit()

    response = client.get(ME, headers=headers)

    assert response.status_code == 403
    assert response.json()["error"] == "User account not found or deactivated"


def test_viewer_cannot_use_editor_route(client, make_user, auth_headers):
    viewer = make_user("viewer@rssb.org")

    response = client.post(SEWADARS, json={"first_name": "Ravi", "last_name": "Kumar"}, headers=auth_headers(viewer))

    assert response.status_code == 403
    assert response.json()["error"] == "Insufficient permissions"


def test_editor_cannot_use_admin_route(client, make_user, auth_headers):
    editor = make_user("editor@rssb.org", role=UserRole.EDITOR)

    response = client.get(USERS, headers=auth_headers(editor))

    assert response.status_code == 403
    assert response.json()["error"] == "Insufficient permissions"


def test_admin_passes_every_role_check(client, make_user, auth_headers):
    admin = make_user("admin@rssb.org", role=UserRole.ADMINISTRATOR)
    headers = auth_headers(admin)

    assert client.get(USERS, headers=headers).status_code == 200
    assert client.post(SEWADARS, json={"first_name": "Ravi", "last_name": "Kumar"}, headers=headers).status_code == 201


def test_role_claim_is_used_until_reissued(client, db_session, make_user, auth_headers):
    user = make_user("viewer@rssb.org")
    stale = auth_headers(user)

    user.role = UserRole.EDITOR.value
    db_session.commit()
    payload = {"first_name": "Ravi", "last_name": "Kumar"}

    assert client.post(SEWADARS, json=payload, headers=stale).status_code == 403
    assert client.post(SEWADARS, json=payload, headers=auth_headers(user)).status_code == 201


def test_demotion_applies_after_reissue(client, db_session, make_user, auth_headers):
    user = make_user("editor@rssb.org", role=UserRole.EDITOR)
    stale = auth_headers(user)

    user.role = UserRole.VIEWER.value
    db_session.commit()
    payload = {"first_name": "Ravi", "last_name": "Kumar"}

    assert client.post(SEWADARS, json=payload, headers=stale).status_code == 201
    assert client.post(SEWADARS, json=payload, headers=auth_headers(user)).status_code == 403


def test_identity_combines_claims_and_live_names(db_session, token_service, make_user):
    user = make_user("editor@rssb.org", role=UserRole.EDITOR, first_name="Old", last_name="Name")
    token = token_service.issue(user.id, user.email, user.role)
    user.first_name = "New"
    db_session.commit()
    request = SimpleNamespace(
        state=SimpleNamespace(),
        method="GET",
        url=SimpleNamespace(path="/test"),
        client=SimpleNamespace(host="127.0.0.1"),
    )

    identity = deps.get_current_identity(request, authorization=f"Bearer {token}", db=db_session, tokens=token_service)

    assert identity.id == user.id
    assert identity.role is UserRole.EDITOR
    assert identity.full_name == "New Name"
    assert request.state.identity is identity


@pytest.mark.parametrize(
    "header,error",
    [
        (None, MissingTokenError),
        ("   ", MissingTokenError),
        ("Bearer ", MissingTokenError),
        ("Basic abc", MalformedHeaderError),
        ("Bearer a b", MalformedHeaderError),
    ],
)
def test_extract_bearer_token_errors(header, error):
    with pytest.raises(error):
        deps.extract_bearer_token(header)


def test_extract_bearer_token():
    assert deps.extract_bearer_token("Bearer a.b.c") == "a.b.c"


def test_rejections_are_logged_and_counted(client, caplog):
    before = _rejections("missing_token")
    caplog.set_level(logging.WARNING, logger="sewadar_api.api.deps")

    client.get(ME)

    assert _rejections("missing_token") == before + 1
    assert any("/api/v1/auth/me" in record.getMessage() for record in caplog.records)
