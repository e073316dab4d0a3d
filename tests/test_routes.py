"""
API route tests
"""

from datetime import datetime, timedelta, timezone

from account_service import models
from account_service.auth import get_token_issuer
from tests.conftest import bearer, register_and_login


def token_for(user: models.User) -> str:
    return get_token_issuer().issue(user.id, user.role)


class TestRegisterAndLogin:
    def test_register_defaults_role_to_user(self, client):
        response = client.post(
            "/api/auth/register", json={"username": "alice", "email": "a@x.com", "password": "p1"}
        )
        assert response.status_code == 201
        data = response.json()
        assert data["user"]["role"] == "user"
        assert data["token_type"] == "bearer"
        assert "hashed_password" not in data["user"]

        me = client.get("/api/auth/me", headers=bearer(data["access_token"]))
        assert me.status_code == 200
        assert me.json()["user"]["username"] == "alice"

    def test_duplicate_email_conflicts(self, client):
        register_and_login(client)
        response = client.post(
            "/api/auth/register", json={"username": "alice2", "email": "a@x.com", "password": "p2"}
        )
        assert response.status_code == 409
        assert "Email" in response.json()["message"]

    def test_duplicate_phone_conflicts(self, client):
        register_and_login(client, phone="0900")
        response = client.post(
            "/api/auth/register",
            json={"username": "bob", "email": "b@x.com", "password": "p2", "phone": "0900"},
        )
        assert response.status_code == 409

    def test_blank_phone_is_not_a_claimed_value(self, client):
        for username, email in (("alice", "a@x.com"), ("bob", "b@x.com")):
            response = client.post(
                "/api/auth/register",
                json={"username": username, "email": email, "password": "p1", "phone": ""},
            )
            assert response.status_code == 201, response.text
            assert response.json()["user"]["phone"] is None

    def test_cannot_self_register_as_admin(self, client):
        response = client.post(
            "/api/auth/register",
            json={"username": "root", "email": "r@x.com", "password": "p1", "role": "admin"},
        )
        assert response.status_code == 403

    def test_register_as_trainer(self, client):
        response = client.post(
            "/api/auth/register",
            json={"username": "coach", "email": "c@x.com", "password": "p1", "role": "pt"},
        )
        assert response.status_code == 201
        assert response.json()["user"]["role"] == "pt"

    def test_invalid_email_is_rejected(self, client):
        response = client.post(
            "/api/auth/register", json={"username": "alice", "email": "not-an-email", "password": "p1"}
        )
        assert response.status_code == 422

    def test_login_success(self, client):
        register_and_login(client)
        response = client.post("/api/auth/login", json={"email": "a@x.com", "password": "p1"})
        assert response.status_code == 200
        assert response.json()["access_token"]

    def test_wrong_password_and_unknown_user_look_the_same(self, client):
        register_and_login(client)
        wrong_password = client.post("/api/auth/login", json={"email": "a@x.com", "password": "nope"})
        unknown_user = client.post("/api/auth/login", json={"email": "z@x.com", "password": "p1"})
        assert wrong_password.status_code == unknown_user.status_code == 401
        assert wrong_password.json() == unknown_user.json()

    def test_logout(self, client):
        assert client.post("/api/auth/logout").status_code == 200


class TestAccessControl:
    def test_missing_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token(self, client):
        assert client.get("/api/auth/me", headers=bearer("garbage")).status_code == 401

    def test_rejection_does_not_echo_token_errors(self, client):
        response = client.get("/api/auth/me", headers=bearer("garbage"))
        assert response.json() == {"message": "Could not validate credentials"}

    def test_expired_token(self, client, make_user):
        user = make_user()
        issued = datetime.now(timezone.utc) - timedelta(days=8)
        token = get_token_issuer().issue(user.id, user.role, now=issued)
        assert client.get("/api/auth/me", headers=bearer(token)).status_code == 401

    def test_admin_route(self, client, make_user):
        admin = make_user(username="root", email="r@x.com", role=models.Role.ADMIN)
        coach = make_user(username="coach", email="c@x.com", role=models.Role.PT)
        assert client.get("/api/auth/admin", headers=bearer(token_for(admin))).status_code == 200
        assert client.get("/api/auth/admin", headers=bearer(token_for(coach))).status_code == 403

    def test_pt_route(self, client, make_user):
        coach = make_user(username="coach", email="c@x.com", role=models.Role.PT)
        alice = make_user()
        assert client.get("/api/auth/pt", headers=bearer(token_for(coach))).status_code == 200
        assert client.get("/api/auth/pt", headers=bearer(token_for(alice))).status_code == 403


class TestProfile:
    def test_health_update_creates_record(self, client):
        token = register_and_login(client)
        response = client.put("/api/auth/profile", json={"height": 180, "weight": 81}, headers=bearer(token))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["username"] == "alice"
        assert data["health_info"]["gender"] == "male"
        assert data["health_info"]["bmi"] == 25.0
        assert data["health_info"]["bmi_category"] == "overweight"

    def test_identity_update_keeps_existing_health_record(self, client):
        token = register_and_login(client)
        client.put("/api/auth/profile", json={"gender": "female", "weight": 55}, headers=bearer(token))
        response = client.put("/api/auth/profile", json={"phone": "0911"}, headers=bearer(token))
        data = response.json()["data"]
        assert data["user"]["phone"] == "0911"
        assert data["health_info"]["gender"] == "female"
        assert data["health_info"]["weight"] == 55

    def test_no_health_record_yet(self, client):
        token = register_and_login(client)
        response = client.put("/api/auth/profile", json={"username": "alicia"}, headers=bearer(token))
        assert response.json()["data"]["health_info"] is None
        assert response.json()["data"]["user"]["username"] == "alicia"

    def test_zero_height_is_rejected(self, client):
        token = register_and_login(client)
        response = client.put("/api/auth/profile", json={"height": 0}, headers=bearer(token))
        assert response.status_code == 422

    def test_conflicting_username(self, client):
        register_and_login(client, username="bob", email="b@x.com")
        token = register_and_login(client)
        response = client.put("/api/auth/profile", json={"username": "bob"}, headers=bearer(token))
        assert response.status_code == 409

    def test_blank_phone_clears_instead_of_clashing(self, client):
        register_and_login(client, username="bob", email="b@x.com", phone="")
        token = register_and_login(client, phone="0900")
        response = client.put("/api/auth/profile", json={"phone": "  "}, headers=bearer(token))
        assert response.status_code == 200
        assert response.json()["data"]["user"]["phone"] is None

    def test_own_username_is_not_a_conflict(self, client):
        token = register_and_login(client)
        response = client.put(
            "/api/auth/profile", json={"username": "alice", "email": "a@x.com"}, headers=bearer(token)
        )
        assert response.status_code == 200

    def test_profile_me(self, client):
        token = register_and_login(client)
        client.put("/api/auth/profile", json={"height": 160, "weight": 45}, headers=bearer(token))
        response = client.get("/api/auth/profile/me", headers=bearer(token))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["premium_days_left"] == 0
        assert data["health_info"]["bmi_category"] == "underweight"


class TestTrainers:
    def test_trainer_profile_update(self, client):
        token = register_and_login(client, username="coach", email="c@x.com", role="pt")
        response = client.put(
            "/api/auth/trainer/profile",
            json={"specialty": "boxing", "location": "Hanoi", "prices": [{"sessions": 10, "price": 2000000}]},
            headers=bearer(token),
        )
        assert response.status_code == 200
        updated = response.json()["updated"]
        assert updated["specialty"] == "boxing"
        assert updated["email"] == "c@x.com"

    def test_trainer_profile_requires_pt_or_admin(self, client):
        token = register_and_login(client)
        response = client.put("/api/auth/trainer/profile", json={"specialty": "boxing"}, headers=bearer(token))
        assert response.status_code == 403

    def test_list_and_get_trainers(self, client, make_user):
        coach = make_user(username="coach", email="c@x.com", role=models.Role.PT)
        alice = make_user()

        listed = client.get("/api/auth/trainers").json()
        assert [trainer["id"] for trainer in listed] == [coach.id]

        assert client.get(f"/api/auth/trainers/{coach.id}").json()["username"] == "coach"
        assert client.get(f"/api/auth/trainers/{alice.id}").status_code == 404
        assert client.get("/api/auth/trainers/999").status_code == 404


class TestAvatarUpload:
    PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64

    def test_upload_and_fetch(self, client):
        token = register_and_login(client)
        response = client.post(
            "/api/auth/upload-avatar",
            files={"avatar": ("me.png", self.PNG, "image/png")},
            headers=bearer(token),
        )
        assert response.status_code == 200
        image = response.json()["user"]["image"]
        assert image.startswith("/uploads/avatars/") and image.endswith(".png")
        assert client.get(image).content == self.PNG

    def test_rejects_other_types(self, client):
        token = register_and_login(client)
        response = client.post(
            "/api/auth/upload-avatar",
            files={"avatar": ("me.gif", b"GIF89a", "image/gif")},
            headers=bearer(token),
        )
        assert response.status_code == 422

    def test_rejects_oversize_files(self, client):
        token = register_and_login(client)
        response = client.post(
            "/api/auth/upload-avatar",
            files={"avatar": ("big.jpg", b"\xff" * (5 * 1024 * 1024 + 1), "image/jpeg")},
            headers=bearer(token),
        )
        assert response.status_code == 422
