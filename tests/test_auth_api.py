from app.services.auth.auth_utils import create_access_token, verify_access_token


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_register_returns_token_and_public_profile(client):
    resp = client.post("/api/auth/register", json={
        "name": "Ada Lovelace",
        "email": "Ada@Hub.edu",
        "password": "secret123",
        "faculty": "Science",
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["user"]["email"] == "ada@hub.edu"
    assert body["user"]["role"] == "student"
    assert body["user"]["isActive"] is True
    assert "password" not in body["user"]

    claims = verify_access_token(body["token"])
    assert claims.user_id == body["user"]["id"]
    assert claims.role == "student"


def test_register_with_role_embeds_it_in_token(register):
    token, user = register(role="supervisor")
    assert verify_access_token(token).role == user["role"] == "supervisor"


def test_duplicate_registration_is_case_insensitive(client, register):
    register(email="ada@hub.edu")
    resp = client.post("/api/auth/register", json={
        "name": "Other Ada",
        "email": "ADA@HUB.EDU",
        "password": "secret123",
        "faculty": "Science",
    })
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "User already exists with this email"}


def test_register_validation_errors(client):
    resp = client.post("/api/auth/register", json={
        "name": "",
        "email": "not-an-email",
        "password": "123",
        "role": "janitor",
    })
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation failed"
    fields = {error["field"] for error in body["errors"]}
    assert {"name", "email", "password", "role", "faculty"} <= fields


def test_login_success_stamps_last_login(client, register):
    register(email="ada@hub.edu", password="secret123")
    resp = client.post("/api/auth/login", json={"email": "ada@hub.edu", "password": "secret123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["token"]
    assert body["user"]["lastLogin"] is not None


def test_login_email_is_case_insensitive(client, register):
    register(email="ada@hub.edu", password="secret123")
    resp = client.post("/api/auth/login", json={"email": "ADA@hub.edu", "password": "secret123"})
    assert resp.status_code == 200


def test_login_wrong_password_and_unknown_email_look_the_same(client, register):
    register(email="ada@hub.edu", password="secret123")
    wrong = client.post("/api/auth/login", json={"email": "ada@hub.edu", "password": "nope-nope"})
    unknown = client.post("/api/auth/login", json={"email": "ghost@hub.edu", "password": "secret123"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"success": False, "message": "Invalid credentials"}
    assert wrong.headers["www-authenticate"] == "Bearer"


def test_login_requires_both_fields(client):
    resp = client.post("/api/auth/login", json={"email": "ada@hub.edu"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Please provide an email and password"


def test_me_requires_token(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not authorized to access this route"


def test_me_rejects_garbage_token(client):
    resp = client.get("/api/auth/me", headers=bearer("garbage"))
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid token"


def test_me_rejects_token_of_unknown_user(client):
    resp = client.get("/api/auth/me", headers=bearer(create_access_token("999", "student")))
    assert resp.status_code == 401
    assert resp.json()["message"] == "User not found"


def test_me_returns_profile(client, register):
    token, user = register(email="ada@hub.edu")
    resp = client.get("/api/auth/me", headers=bearer(token))
    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == user["id"]
    assert resp.json()["user"]["email"] == "ada@hub.edu"


def test_update_details_only_touches_given_fields(client, register):
    token, user = register(faculty="Engineering")
    resp = client.put("/api/auth/updatedetails", json={"department": "Robotics"}, headers=bearer(token))
    assert resp.status_code == 200
    updated = resp.json()["user"]
    assert updated["department"] == "Robotics"
    assert updated["faculty"] == "Engineering"
    assert updated["name"] == user["name"]


def test_update_details_rejects_long_name(client, register):
    token, _ = register()
    resp = client.put("/api/auth/updatedetails", json={"name": "n" * 51}, headers=bearer(token))
    assert resp.status_code == 400


def test_update_password(client, register):
    token, _ = register(email="ada@hub.edu", password="secret123")

    wrong = client.put(
        "/api/auth/updatepassword",
        json={"currentPassword": "bad-guess", "newPassword": "brand-new"},
        headers=bearer(token),
    )
    assert wrong.status_code == 401
    assert wrong.json()["message"] == "Current password is incorrect"

    resp = client.put(
        "/api/auth/updatepassword",
        json={"currentPassword": "secret123", "newPassword": "brand-new"},
        headers=bearer(token),
    )
    assert resp.status_code == 200
    assert resp.json()["token"]

    old = client.post("/api/auth/login", json={"email": "ada@hub.edu", "password": "secret123"})
    new = client.post("/api/auth/login", json={"email": "ada@hub.edu", "password": "brand-new"})
    assert old.status_code == 401
    assert new.status_code == 200


def test_update_password_enforces_minimum_length(client, register):
    token, _ = register(password="secret123")
    resp = client.put(
        "/api/auth/updatepassword",
        json={"currentPassword": "secret123", "newPassword": "123"},
        headers=bearer(token),
    )
    assert resp.status_code == 400
