import jwt
import pytest

from app.config import get_settings
from app.utils.security import create_access_token, decode_access_token
from tests.helpers import PASSWORD, auth


def test_register_student_is_active_and_gets_token(client):
    res = client.post("/api/users/register", json={
        "name": "Asha", "email": "Asha@Example.com", "password": "hunter22",
    })
    assert res.status_code == 201
    body = res.json()
    assert body["email"] == "asha@example.com"
    assert body["role"] == "student"
    assert body["approved"] is True
    assert body["status"] == "active"
    assert "passwordHash" not in body
    assert decode_access_token(body["token"])["id"] == body["_id"]


def test_register_instructor_awaits_approval(client):
    res = client.post("/api/users/register", json={
        "name": "Ravi", "email": "ravi@example.com", "password": "hunter22", "role": "instructor",
    })
    assert res.status_code == 201
    assert res.json()["approved"] is False
    assert res.json()["status"] == "pending"
    assert res.json()["token"] is None

    login = client.post("/api/users/login", json={"email": "ravi@example.com", "password": "hunter22"})
    assert login.status_code == 401
    assert login.json()["message"] == "Your account is pending approval"


def test_register_duplicate_email(client, student):
    res = client.post("/api/users/register", json={
        "name": "Copy", "email": student.email, "password": "hunter22",
    })
    assert res.status_code == 400
    assert res.json()["message"] == "User already exists"


def test_register_validation_envelope(client):
    res = client.post("/api/users/register", json={
        "name": "", "email": "not-an-email", "password": "123", "role": "wizard",
    })
    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Validation failed"
    fields = {e["field"]: e["msg"] for e in body["errors"]}
    assert fields["name"] == "Name is required"
    assert fields["email"] == "Please include a valid email"
    assert fields["password"] == "Password must be at least 6 characters"
    assert fields["role"] == "Role must be student, instructor, or admin"


def test_login(client, student):
    res = client.post("/api/users/login", json={"email": student.email, "password": PASSWORD})
    assert res.status_code == 200
    assert res.json()["_id"] == student.id
    assert res.json()["token"]


def test_login_wrong_password(client, student):
    res = client.post("/api/users/login", json={"email": student.email, "password": "nope-nope"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid email or password"


def test_login_inactive_account(client, make_user):
    user = make_user("student", status="inactive")
    res = client.post("/api/users/login", json={"email": user.email, "password": PASSWORD})
    assert res.status_code == 401


def test_profile_requires_token(client):
    res = client.get("/api/users/profile")
    assert res.status_code == 401
    assert res.json()["message"] == "Not authorized, no token"


def test_profile_rejects_bad_token(client):
    res = client.get("/api/users/profile", headers={"Authorization": "Bearer garbage"})
    assert res.status_code == 401
    assert res.json()["message"] == "Not authorized, token failed"


def test_profile_update(client, student, make_user):
    other = make_user("student")

    res = client.put("/api/users/profile", headers=auth(student), json={"email": other.email})
    assert res.status_code == 400

    res = client.put("/api/users/profile", headers=auth(student), json={
        "name": "Renamed", "password": "newpass1",
    })
    assert res.status_code == 200
    assert res.json()["name"] == "Renamed"

    login = client.post("/api/users/login", json={"email": student.email, "password": "newpass1"})
    assert login.status_code == 200


def test_instructors_listing_only_shows_approved(client, make_user):
    approved = make_user("instructor")
    make_user("instructor", approved=False, status="pending")
    make_user("student")

    res = client.get("/api/users/instructors")
    assert res.status_code == 200
    assert [u["_id"] for u in res.json()] == [approved.id]


def test_logout(client, student):
    res = client.post("/api/users/logout", headers=auth(student))
    assert res.status_code == 200


def test_self_registered_admin_has_no_access(client):
    res = client.post("/api/users/register", json={
        "name": "Mallory", "email": "mallory@example.com", "password": "hunter22", "role": "admin",
    })
    assert res.status_code == 201
    assert res.json()["token"] is None

    token = create_access_token(res.json()["_id"])
    headers = {"Authorization": f"Bearer {token}"}
    for path in ("/api/admin/users", "/api/notifications", "/api/users/profile"):
        denied = client.get(path, headers=headers)
        assert denied.status_code == 401
        assert denied.json()["message"] == "Not authorized, account pending approval"


def test_deactivated_user_loses_access(client, admin, student):
    headers = auth(student)
    assert client.get("/api/users/profile", headers=headers).status_code == 200

    res = client.patch(f"/api/admin/users/{student.id}", headers=auth(admin), json={"status": "inactive"})
    assert res.status_code == 200

    denied = client.get("/api/users/profile", headers=headers)
    assert denied.status_code == 401
    assert denied.json()["message"] == "Not authorized, account not active"


def test_unset_jwt_secret_uses_random_key(monkeypatch):
    monkeypatch.setattr(get_settings(), "JWT_SECRET", "")

    token = create_access_token("user-1")
    assert decode_access_token(token)["id"] == "user-1"
    for guess in ("", "secret123"):
        with pytest.raises(jwt.PyJWTError):
            jwt.decode(token, guess, algorithms=["HS256"])
