from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest
from httpx import AsyncClient

from thinky.core.database import utc_now
from thinky.server.services import rate_limiter
from thinky.server.services.rate_limiter import AUTH_LIMIT_MESSAGE, SlidingWindowRateLimiter

# Same password the account factory gives every user.
DEFAULT_PASSWORD = "Sup3r$ecret!"

pytestmark = pytest.mark.asyncio


def _token_from(link: str) -> str:
    return parse_qs(urlparse(link).query)["token"][0]


async def _register(client: AsyncClient, email="new@example.com", username="newbie", password=DEFAULT_PASSWORD):
    return await client.post("/api/auth/register", json={"email": email, "username": username, "password": password})


class TestRegister:
    async def test_register_sends_verification_link(self, client, repos, mailer):
        response = await _register(client, email="New@Example.com")

        assert response.status_code == 200
        assert "Verification link sent" in response.json()["message"]
        user = await repos.users.get_by_email("new@example.com")
        assert user is not None
        assert user.is_verified is False
        assert mailer.sent[0].to == "new@example.com"
        assert mailer.sent[0].template == "verification"
        assert "/api/auth/verify?token=" in mailer.sent[0].variables["link"]

    @pytest.mark.parametrize(
        "payload,error",
        [
            ({"email": "a@example.com", "username": "a"}, "All fields are required"),
            ({"email": "a@example.com", "username": "a", "password": "abc"}, "Password must be at least 6 characters"),
            ({"email": "a@example.com", "username": "a", "password": "abcdefgh"}, "Password is too weak"),
        ],
    )
    async def test_register_rejects_bad_input(self, client, payload, error):
        response = await client.post("/api/auth/register", json=payload)

        assert response.status_code == 400
        assert response.json()["error"].startswith(error)

    async def test_register_existing_verified_account(self, client, make_user):
        await make_user("taken")

        response = await _register(client, email="taken@example.com", username="someone")
        assert response.status_code == 400
        assert response.json() == {"error": "Email or username already exists"}

    async def test_register_again_resends_for_unverified(self, client, repos, mailer):
        await _register(client)
        response = await _register(client)

        assert response.status_code == 200
        assert await repos.users.count() == 1
        # The live token is reused.
        assert _token_from(mailer.sent[0].variables["link"]) == _token_from(mailer.sent[1].variables["link"])

    async def test_register_unverified_username_with_other_email(self, client):
        await _register(client)

        response = await _register(client, email="other@example.com")
        assert response.status_code == 400

    async def test_register_mail_failure_is_202(self, client, mailer, repos):
        mailer.ok = False

        response = await _register(client)
        assert response.status_code == 202
        assert await repos.users.get_by_email("new@example.com") is not None

    async def test_code_verification_is_gone(self, client):
        response = await client.post("/api/auth/register-verify", json={})

        assert response.status_code == 410


class TestVerify:
    async def test_verify_logs_in_and_redirects(self, client, repos, mailer):
        await _register(client)
        token = _token_from(mailer.sent[0].variables["link"])

        response = await client.get("/api/auth/verify", params={"token": token})

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard?verified=1"
        user = await repos.users.get_by_email("new@example.com")
        assert user.is_verified is True
        assert await repos.verifications.find_by_token(token) is None

        me = await client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["user"]["username"] == "newbie"

    async def test_verify_without_token(self, client):
        response = await client.get("/api/auth/verify")

        assert response.status_code == 400
        assert "Invalid verification link" in response.text

    async def test_verify_unknown_token(self, client):
        response = await client.get("/api/auth/verify", params={"token": "nope"})

        assert response.status_code == 400
        assert "Invalid or expired" in response.text

    async def test_expired_link_sends_a_new_one(self, client, repos, mailer, make_user):
        user = await make_user("late", is_verified=False)
        await repos.verifications.issue(user.email, "old-token", 10, user_id=user.id, now=utc_now() - timedelta(hours=1))

        response = await client.get("/api/auth/verify", params={"token": "old-token"})

        assert response.status_code == 200
        assert "A new verification link has been sent" in response.text
        assert await repos.verifications.find_by_token("old-token") is None
        assert len(mailer.sent) == 1
        new_token = _token_from(mailer.sent[0].variables["link"])
        assert await repos.verifications.find_active_by_token(new_token) is not None


class TestResendVerification:
    async def test_resend(self, client, mailer):
        await _register(client)

        response = await client.post("/api/auth/resend-verification", json={"email": "new@example.com"})
        assert response.status_code == 200
        assert response.json() == {"message": "Verification email resent"}
        assert len(mailer.sent) == 2

    async def test_resend_errors(self, client, make_user):
        await make_user("done")

        assert (await client.post("/api/auth/resend-verification", json={})).status_code == 400
        missing = await client.post("/api/auth/resend-verification", json={"email": "ghost@example.com"})
        assert missing.status_code == 404
        verified = await client.post("/api/auth/resend-verification", json={"email": "done@example.com"})
        assert verified.json() == {"error": "Account already verified"}


class TestPasswordReset:
    async def test_forgot_and_reset(self, client, repos, mailer, make_user):
        user = await make_user("forgetful")

        response = await client.post("/api/auth/forgot-password", json={"email": user.email})
        assert response.status_code == 200
        link = mailer.sent[0].variables["link"]
        assert "/auth/reset.html?token=" in link

        new_password = "N3w&Improved!"
        response = await client.post("/api/auth/reset", json={"token": _token_from(link), "password": new_password})
        assert response.status_code == 200
        assert await repos.password_resets.find_active_by_email(user.email) is None

        login = await client.post("/api/auth/login", json={"email": user.email, "password": new_password})
        assert login.status_code == 200

    async def test_forgot_unknown_email_looks_the_same(self, client, mailer):
        response = await client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

        assert response.status_code == 200
        assert response.json()["message"].startswith("If an account exists")
        assert mailer.sent == []

    async def test_reset_rejects_bad_token_and_weak_password(self, client, repos, make_user):
        user = await make_user("forgetful")
        await repos.password_resets.issue(user.email, "reset-token", 60, user_id=user.id)

        bad = await client.post("/api/auth/reset", json={"token": "wrong", "password": "N3w&Improved!"})
        assert bad.json() == {"error": "Invalid or expired reset token"}
        weak = await client.post("/api/auth/reset", json={"token": "reset-token", "password": "password"})
        assert weak.json() == {"error": "Password is too weak"}
        missing = await client.post("/api/auth/reset", json={"token": "reset-token"})
        assert missing.status_code == 400


class TestLogin:
    async def test_login_success(self, client, repos, make_user):
        user = await make_user("alice")

        response = await client.post("/api/auth/login", json={"email": "ALICE@example.com", "password": DEFAULT_PASSWORD})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["user"] == {"id": user.id, "email": user.email, "username": "alice", "role": "student"}
        assert await repos.online_users.get_by_id(user.id) is not None

    async def test_wrong_password(self, client, make_user):
        await make_user("alice")

        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}

    async def test_unverified_is_checked_before_password(self, client, make_user):
        await make_user("alice", is_verified=False)

        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope"})
        assert response.status_code == 403
        assert response.json()["error"].startswith("Account not verified")

    async def test_lockout_after_repeated_failures(self, client, make_user):
        await make_user("alice")

        for _ in range(5):
            response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope"})
            assert response.status_code == 401

        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD})
        assert response.status_code == 429
        assert response.json()["error"].startswith("Too many login attempts")

    async def test_temporary_ban(self, client, make_user, later):
        await make_user("alice", banned_until=later(days=3))

        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD})
        assert response.status_code == 403
        body = response.json()
        assert body["error"].startswith("Your account is banned until")
        assert body["banned_until"].endswith("Z")

    async def test_permanent_ban(self, client, make_user, later):
        await make_user("alice", banned_until=later(days=365 * 100))

        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD})
        assert response.status_code == 403
        assert response.json() == {"error": "Your account has been permanently banned and cannot log in."}

    async def test_missing_fields(self, client):
        response = await client.post("/api/auth/login", json={"email": "alice@example.com"})

        assert response.status_code == 400


class TestAuthRateLimit:
    @pytest.fixture
    def tight_auth_limit(self, monkeypatch):
        monkeypatch.setattr(rate_limiter, "auth_limiter", SlidingWindowRateLimiter(max_requests=2, window_seconds=900))

    async def test_login_over_the_window_is_rejected(self, client, make_user, tight_auth_limit):
        await make_user("alice")

        for _ in range(2):
            response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope"})
            assert response.status_code == 401

        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD})
        assert response.status_code == 429
        assert response.json() == {"error": AUTH_LIMIT_MESSAGE}

    async def test_window_is_shared_by_auth_routes(self, client, tight_auth_limit):
        for _ in range(2):
            response = await client.post("/api/auth/forgot-password", json={"email": "someone@example.com"})
            assert response.status_code != 429

        response = await _register(client)
        assert response.status_code == 429
        assert response.json() == {"error": AUTH_LIMIT_MESSAGE}

    async def test_disabled_rate_limit_lets_requests_through(self, client, monkeypatch, tight_auth_limit):
        monkeypatch.setattr(rate_limiter.settings, "rate_limit_enabled", False)

        for _ in range(3):
            response = await client.post("/api/auth/forgot-password", json={"email": "someone@example.com"})
            assert response.status_code != 429


class TestSession:
    async def test_me_requires_login(self, client):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    async def test_logout(self, login_as, make_user, repos):
        user = await make_user("alice")
        client = await login_as(user)

        response = await client.post("/api/auth/logout")
        assert response.status_code == 200
        assert await repos.online_users.get_by_id(user.id) is None
        assert (await client.get("/api/auth/me")).status_code == 401

    async def test_banned_session_is_rejected(self, login_as, make_user, repos, later):
        user = await make_user("alice")
        client = await login_as(user)
        user.banned_until = later(days=1)
        await repos.users.update(user)

        response = await client.get("/api/auth/me")
        assert response.status_code == 403
        assert response.json()["error"].startswith("Account banned until")

    async def test_single_session_mode(self, login_as, make_user, monkeypatch):
        from thinky.server.core.config import settings

        monkeypatch.setattr(settings, "single_session_per_user", True)
        user = await make_user("alice")
        first = await login_as(user)
        second = await login_as(user)

        assert (await second.get("/api/auth/me")).status_code == 200
        stale = await first.get("/api/auth/me")
        assert stale.status_code == 401
        assert stale.json() == {"error": "Session expired"}


class TestProfile:
    async def test_me_profile_fields(self, login_as, make_user):
        user = await make_user("alice", display_name="Alice A.")
        client = await login_as(user)

        body = (await client.get("/api/auth/me")).json()["user"]
        assert body["display_name"] == "Alice A."
        assert body["is_dev"] is False
        assert body["created_at"].endswith("Z")
        assert "password_hash" not in body

    async def test_update_profile(self, login_as, make_user):
        client = await login_as(await make_user("alice"))

        response = await client.put("/api/auth/me", json={"username": "alice2", "display_name": "Alice"})
        assert response.status_code == 200
        assert response.json()["user"]["username"] == "alice2"
        assert response.json()["user"]["display_name"] == "Alice"

    async def test_update_profile_taken_username(self, login_as, make_user):
        await make_user("bob")
        client = await login_as(await make_user("alice"))

        response = await client.put("/api/auth/me", json={"username": "bob"})
        assert response.status_code == 400
        assert response.json() == {"error": "Username already taken"}


class TestAvatar:
    async def test_upload_replaces_previous(self, login_as, make_user, storage):
        client = await login_as(await make_user("alice"))

        first = await client.post("/api/auth/me/avatar", files={"avatar": ("me.png", b"\x89PNG one", "image/png")})
        assert first.status_code == 200
        first_url = first.json()["user"]["profile_picture_url"]
        assert first_url.startswith("/uploads/")
        first_file = storage.root / storage.path_from_url(first_url)
        assert first_file.read_bytes() == b"\x89PNG one"

        second = await client.post("/api/auth/me/avatar", files={"avatar": ("me.jpg", b"jpeg two", "image/jpeg")})
        assert second.status_code == 200
        second_url = second.json()["user"]["profile_picture_url"]
        assert second_url != first_url
        assert (storage.root / storage.path_from_url(second_url)).exists()
        assert not first_file.exists()

    async def test_upload_requires_file(self, login_as, make_user):
        client = await login_as(await make_user("alice"))

        response = await client.post("/api/auth/me/avatar", files={"other": ("x.txt", b"x", "text/plain")})
        assert response.status_code == 400
        assert response.json() == {"error": "No file uploaded"}

    async def test_upload_rejects_non_images(self, login_as, make_user):
        client = await login_as(await make_user("alice"))

        response = await client.post("/api/auth/me/avatar", files={"avatar": ("x.txt", b"hello", "text/plain")})
        assert response.status_code == 400
        assert response.json() == {"error": "Only image files are allowed"}

    async def test_upload_too_large(self, login_as, make_user, monkeypatch):
        from thinky.server.core.config import settings

        monkeypatch.setattr(settings, "avatar_max_bytes", 4)
        client = await login_as(await make_user("alice"))

        response = await client.post("/api/auth/me/avatar", files={"avatar": ("me.png", b"12345", "image/png")})
        assert response.status_code == 413
