"""
HTTP-level tests for the /api/v1/auth routes.
"""

import uuid
from datetime import timedelta

from app.core.deps import get_token_service
from app.services.notification_service import NotificationPurpose
from tests.conftest import VALID_PASSWORD

AUTH = "/api/v1/auth"


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def _register(client, email="ana@x.com", password=VALID_PASSWORD, **extra) -> dict:
    body = {"firstName": "Ana", "lastName": "Lee", "email": email, "password": password}
    body.update(extra)
    response = await client.post(f"{AUTH}/register", json=body)
    assert response.status_code == 201, response.text
    # Tests pick the credential explicitly; the cookie would otherwise take precedence
    client.cookies.clear()
    return response.json()


class TestRegisterAndLogin:
    async def test_register_example(self, client):
        response = await client.post(
            f"{AUTH}/register",
            json={"firstName": "Ana", "lastName": "Lee", "email": "ana@x.com", "password": "Passw0rd1"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        assert body["user"]["email"] == "ana@x.com"
        assert body["user"]["fullName"] == "Ana Lee"
        assert body["token"]
        for secret in ("password", "passwordHash", "resetPasswordToken", "emailVerificationToken"):
            assert secret not in body["user"]

        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith("token=")
        assert "HttpOnly" in set_cookie
        assert "samesite=strict" in set_cookie.lower()
        assert "Max-Age=604800" in set_cookie

    async def test_login_example(self, client):
        await _register(client)

        wrong = await client.post(f"{AUTH}/login", json={"email": "ana@x.com", "password": "wrong"})
        assert wrong.status_code == 401
        assert wrong.json() == {"success": False, "message": "Invalid email or password"}

        unknown = await client.post(f"{AUTH}/login", json={"email": "who@x.com", "password": VALID_PASSWORD})
        assert unknown.status_code == 401
        assert unknown.json() == wrong.json()

        ok = await client.post(f"{AUTH}/login", json={"email": "ana@x.com", "password": VALID_PASSWORD})
        assert ok.status_code == 200
        assert ok.json()["message"] == "Login successful"
        assert ok.json()["token"]

    async def test_duplicate_email(self, client):
        await _register(client, email="ana@x.com")
        response = await client.post(
            f"{AUTH}/register",
            json={"firstName": "Ana", "lastName": "Lee", "email": "ANA@X.com", "password": VALID_PASSWORD},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "User with this email already exists"

    async def test_register_validation_errors(self, client):
        response = await client.post(
            f"{AUTH}/register",
            json={"firstName": "Ana", "email": "ana@x.com", "password": "weak"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        fields = {error["field"] for error in body["errors"]}
        assert {"lastName", "password"} <= fields

    async def test_register_rejects_invalid_enum(self, client):
        response = await client.post(
            f"{AUTH}/register",
            json={
                "firstName": "Ana",
                "lastName": "Lee",
                "email": "ana@x.com",
                "password": VALID_PASSWORD,
                "employmentType": "Gig",
            },
        )
        assert response.status_code == 400


class TestRequestGate:
    async def test_missing_token(self, client):
        response = await client.get(f"{AUTH}/me")
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "No token provided"}

    async def test_bearer_header(self, client):
        registered = await _register(client)
        response = await client.get(f"{AUTH}/validate", headers=_bearer(registered["token"]))
        assert response.status_code == 200
        assert response.json()["user"] == {"id": registered["user"]["id"], "email": "ana@x.com"}

    async def test_cookie_takes_precedence_over_header(self, client):
        ana = await _register(client, email="ana@x.com")
        bob = await _register(client, email="bob@x.com")

        headers = {**_bearer(bob["token"]), "Cookie": f"token={ana['token']}"}
        response = await client.get(f"{AUTH}/validate", headers=headers)
        assert response.json()["user"]["email"] == "ana@x.com"

    async def test_expired_and_malformed_look_the_same(self, client):
        registered = await _register(client)
        expired = get_token_service().issue_auth_token(
            registered["user"]["id"], "ana@x.com", expires_delta=timedelta(minutes=-5)
        )

        expired_response = await client.get(f"{AUTH}/validate", headers=_bearer(expired))
        malformed_response = await client.get(f"{AUTH}/validate", headers=_bearer("garbage"))

        assert expired_response.status_code == malformed_response.status_code == 401
        assert expired_response.json() == malformed_response.json()


class TestProfileRoutes:
    async def test_me(self, client):
        registered = await _register(client)
        response = await client.get(f"{AUTH}/me", headers=_bearer(registered["token"]))
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "ana@x.com"

    async def test_me_for_missing_user(self, client):
        token = get_token_service().issue_auth_token(uuid.uuid4(), "gone@x.com")
        response = await client.get(f"{AUTH}/me", headers=_bearer(token))
        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    async def test_update_profile_ignores_protected_fields(self, client):
        registered = await _register(client)
        response = await client.put(
            f"{AUTH}/profile",
            headers=_bearer(registered["token"]),
            json={
                "currentTitle": "  Data Analyst ",
                "targetSalary": 90000,
                "jobPreferences": {"workType": "Hybrid"},
                "email": "other@x.com",
                "isEmailVerified": True,
                "isActive": False,
            },
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["currentTitle"] == "Data Analyst"
        assert user["targetSalary"] == 90000
        assert user["jobPreferences"] == {"workType": "Hybrid"}
        assert user["email"] == "ana@x.com"
        assert user["isEmailVerified"] is False
        assert user["isActive"] is True

    async def test_update_profile_validation(self, client):
        registered = await _register(client)
        response = await client.put(
            f"{AUTH}/profile",
            headers=_bearer(registered["token"]),
            json={"targetSalary": -10},
        )
        assert response.status_code == 400


class TestPasswordRoutes:
    async def test_change_password(self, client):
        registered = await _register(client)
        headers = _bearer(registered["token"])

        mismatch = await client.put(
            f"{AUTH}/change-password",
            headers=headers,
            json={"currentPassword": VALID_PASSWORD, "newPassword": "NewPassw0rd", "confirmPassword": "Other1234"},
        )
        assert mismatch.status_code == 400

        wrong_current = await client.put(
            f"{AUTH}/change-password",
            headers=headers,
            json={"currentPassword": "Wrongpass1", "newPassword": "NewPassw0rd", "confirmPassword": "NewPassw0rd"},
        )
        assert wrong_current.status_code == 400
        assert wrong_current.json()["message"] == "Current password is incorrect"

        ok = await client.put(
            f"{AUTH}/change-password",
            headers=headers,
            json={"currentPassword": VALID_PASSWORD, "newPassword": "NewPassw0rd", "confirmPassword": "NewPassw0rd"},
        )
        assert ok.status_code == 200

        old = await client.post(f"{AUTH}/login", json={"email": "ana@x.com", "password": VALID_PASSWORD})
        new = await client.post(f"{AUTH}/login", json={"email": "ana@x.com", "password": "NewPassw0rd"})
        assert old.status_code == 401
        assert new.status_code == 200

    async def test_reset_request_for_unknown_email(self, client, notifier):
        response = await client.post(f"{AUTH}/request-password-reset", json={"email": "ghost@x.com"})
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert notifier.sent == []

    async def test_reset_flow(self, client, notifier):
        await _register(client)

        known = await client.post(f"{AUTH}/request-password-reset", json={"email": "ana@x.com"})
        unknown = await client.post(f"{AUTH}/request-password-reset", json={"email": "ghost@x.com"})
        assert known.json() == unknown.json()

        token = notifier.last_token(NotificationPurpose.PASSWORD_RESET)
        body = {"resetPasswordToken": token, "newPassword": "NewPassw0rd", "confirmPassword": "NewPassw0rd"}

        first = await client.post(f"{AUTH}/reset-password", json=body)
        assert first.status_code == 200

        second = await client.post(f"{AUTH}/reset-password", json=body)
        assert second.status_code == 400
        assert second.json()["message"] == "Invalid or expired reset token"

        login = await client.post(f"{AUTH}/login", json={"email": "ana@x.com", "password": "NewPassw0rd"})
        assert login.status_code == 200


class TestVerificationRoutes:
    async def test_verify_email(self, client, notifier):
        registered = await _register(client)
        headers = _bearer(registered["token"])

        sent = await client.post(f"{AUTH}/send-verification-email", headers=headers)
        assert sent.status_code == 200

        token = notifier.last_token(NotificationPurpose.EMAIL_VERIFICATION)
        verified = await client.post(f"{AUTH}/verify-email", json={"token": token})
        assert verified.status_code == 200

        again = await client.post(f"{AUTH}/send-verification-email", headers=headers)
        assert again.status_code == 400
        assert again.json()["message"] == "Email is already verified"

        me = await client.get(f"{AUTH}/me", headers=headers)
        assert me.json()["user"]["isEmailVerified"] is True

    async def test_unknown_verification_token(self, client):
        response = await client.post(f"{AUTH}/verify-email", json={"token": "deadbeef"})
        assert response.status_code == 400


class TestSessionRoutes:
    async def test_refresh(self, client):
        registered = await _register(client)
        response = await client.post(f"{AUTH}/refresh", headers=_bearer(registered["token"]))
        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == registered["user"]["id"]
        identity = get_token_service().verify_auth_token(body["token"])
        assert identity.email == "ana@x.com"

    async def test_refresh_for_missing_user(self, client):
        token = get_token_service().issue_auth_token(uuid.uuid4(), "gone@x.com")
        response = await client.post(f"{AUTH}/refresh", headers=_bearer(token))
        assert response.status_code == 401

    async def test_logout_clears_cookie(self, client):
        await client.post(
            f"{AUTH}/register",
            json={"firstName": "Ana", "lastName": "Lee", "email": "ana@x.com", "password": VALID_PASSWORD},
        )
        response = await client.post(f"{AUTH}/logout")
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Logged out successfully"}
        assert 'token=""' in response.headers["set-cookie"] or "token=;" in response.headers["set-cookie"]


class TestAppEnvelope:
    async def test_unknown_route(self, client):
        response = await client.get("/api/v1/nope")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route /api/v1/nope not found"}

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_api_health(self, client):
        response = await client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["environment"] == "test"
        assert body["message"].endswith("is running")
        assert body["timestamp"]


LONG_PASSWORD = "Passw0rd" + "a" * 80


class TestPasswordLengthLimit:
    async def test_register_rejects_password_over_72_bytes(self, client):
        response = await client.post(
            f"{AUTH}/register",
            json={"firstName": "Ana", "lastName": "Lee", "email": "ana@x.com", "password": LONG_PASSWORD},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert any(error["field"] == "password" for error in body["errors"])

    async def test_change_password_rejects_password_over_72_bytes(self, client):
        registered = await _register(client)
        response = await client.put(
            f"{AUTH}/change-password",
            headers=_bearer(registered["token"]),
            json={"currentPassword": VALID_PASSWORD, "newPassword": LONG_PASSWORD, "confirmPassword": LONG_PASSWORD},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"

    async def test_reset_password_rejects_password_over_72_bytes(self, client, notifier):
        await _register(client)
        await client.post(f"{AUTH}/request-password-reset", json={"email": "ana@x.com"})
        token = notifier.last_token(NotificationPurpose.PASSWORD_RESET)

        response = await client.post(
            f"{AUTH}/reset-password",
            json={"resetPasswordToken": token, "newPassword": LONG_PASSWORD, "confirmPassword": LONG_PASSWORD},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"

        # The token was not consumed by the rejected request
        ok = await client.post(
            f"{AUTH}/reset-password",
            json={"resetPasswordToken": token, "newPassword": "NewPassw0rd", "confirmPassword": "NewPassw0rd"},
        )
        assert ok.status_code == 200

    async def test_multibyte_password_is_measured_in_bytes(self, client):
        # 8 ASCII characters plus 25 three-byte characters: 33 characters, 83 bytes
        password = "Passw0rd" + "€" * 25
        response = await client.post(
            f"{AUTH}/register",
            json={"firstName": "Ana", "lastName": "Lee", "email": "ana@x.com", "password": password},
        )
        assert response.status_code == 400
