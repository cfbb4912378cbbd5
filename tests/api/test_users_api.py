"""
HTTP tests for /api/users over an in-memory database.
"""

import pytest

from academy_cms.modules.accounts import Role

USERS = "/api/users"


def _register(client, username="alice", email="a@x.com", password="pw1-secret"):
    return client.post(USERS, json={"username": username, "email": email, "password": password})


def _login(client, email="a@x.com", password="pw1-secret"):
    return client.post(f"{USERS}/login", json={"email": email, "password": password})


def _bearer(response) -> dict[str, str]:
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


# ══════════════════════════════════════════════════════════════════════════════
# REGISTRATION AND LOGIN
# ══════════════════════════════════════════════════════════════════════════════


class TestRegisterAndLogin:
    def test_register_returns_token(self, client):
        response = _register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["username"] == "alice"
        assert body["role"] == "User"
        assert body["token_type"] == "bearer"
        assert "password" not in body
        assert client.get(f"{USERS}/me", headers=_bearer(response)).json()["email"] == "a@x.com"

    def test_register_conflict(self, client):
        _register(client)

        response = _register(client, username="alice2")

        assert response.status_code == 400
        assert response.json()["detail"] == "User already exists"

    def test_register_validates_payload(self, client):
        assert _register(client, password="short").status_code == 422
        assert _register(client, email="not-an-email").status_code == 422
        assert _register(client, password="x" * 73).status_code == 422

    def test_login_and_wrong_password(self, client):
        _register(client)

        ok = _login(client)
        wrong = _login(client, password="pw9-secret")
        unknown = _login(client, email="nobody@x.com")

        assert ok.status_code == 200
        assert ok.json()["role"] == "User"
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json() == {"detail": "Invalid email or password"}


# ══════════════════════════════════════════════════════════════════════════════
# PASSWORD RESET
# ══════════════════════════════════════════════════════════════════════════════


class TestPasswordReset:
    def test_forgot_then_reset_end_to_end(self, client, mailer):
        _register(client)
        assert _login(client).status_code == 200

        forgot = client.post(f"{USERS}/forgot-password", json={"email": "a@x.com"})
        assert forgot.status_code == 200
        token = mailer.last_token()

        reset = client.patch(
            f"{USERS}/reset-password/{token}",
            json={"password": "pw2-secret", "confirmPassword": "pw2-secret"},
        )

        assert reset.status_code == 200
        assert reset.json()["message"] == "Password reset successfully. Please log in."
        assert _login(client).status_code == 401
        assert _login(client, password="pw2-secret").status_code == 200

    def test_reset_link_is_single_use(self, client, mailer):
        _register(client)
        client.post(f"{USERS}/forgot-password", json={"email": "a@x.com"})
        token = mailer.last_token()
        payload = {"password": "pw2-secret", "confirmPassword": "pw2-secret"}

        assert client.patch(f"{USERS}/reset-password/{token}", json=payload).status_code == 200
        second = client.patch(f"{USERS}/reset-password/{token}", json=payload)

        assert second.status_code == 400
        assert second.json()["detail"] == "Token is invalid or has expired."

    def test_forgot_password_does_not_reveal_accounts(self, client, mailer):
        _register(client)

        unknown = client.post(f"{USERS}/forgot-password", json={"email": "nonexistent@x.com"})
        known = client.post(f"{USERS}/forgot-password", json={"email": "a@x.com"})

        assert unknown.status_code == known.status_code == 200
        assert unknown.content == known.content
        assert [address for address, _, _ in mailer.sent] == ["a@x.com"]

    def test_mismatched_confirmation(self, client, mailer):
        _register(client)
        client.post(f"{USERS}/forgot-password", json={"email": "a@x.com"})

        response = client.patch(
            f"{USERS}/reset-password/{mailer.last_token()}",
            json={"password": "pw2-secret", "confirmPassword": "pw2-typo"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Passwords do not match."
        assert _login(client).status_code == 200

    def test_unknown_token(self, client):
        response = client.patch(
            f"{USERS}/reset-password/{'0' * 64}",
            json={"password": "pw2-secret", "confirmPassword": "pw2-secret"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Token is invalid or has expired."

    def test_delivery_failure(self, client, mailer, stored_account):
        _register(client)
        mailer.fail = True

        response = client.post(f"{USERS}/forgot-password", json={"email": "a@x.com"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Error sending reset email. Please try again."
        stored = stored_account("a@x.com")
        assert stored.reset_token_hash is None
        assert stored.reset_token_expires_at is None

    def test_redeemable_nine_minutes_after_request(self, client, mailer, clock):
        _register(client)
        client.post(f"{USERS}/forgot-password", json={"email": "a@x.com"})
        clock.advance(minutes=9)

        response = client.patch(
            f"{USERS}/reset-password/{mailer.last_token()}",
            json={"password": "pw2-secret", "confirmPassword": "pw2-secret"},
        )

        assert response.status_code == 200
        assert _login(client, password="pw2-secret").status_code == 200

    def test_expired_token_is_rejected_and_cleared(self, client, mailer, clock, stored_account):
        _register(client)
        client.post(f"{USERS}/forgot-password", json={"email": "a@x.com"})
        assert stored_account("a@x.com").reset_token_hash is not None
        clock.advance(minutes=11)

        response = client.patch(
            f"{USERS}/reset-password/{mailer.last_token()}",
            json={"password": "pw2-secret", "confirmPassword": "pw2-secret"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Token is invalid or has expired."
        stored = stored_account("a@x.com")
        assert stored.reset_token_hash is None
        assert stored.reset_token_expires_at is None
        assert _login(client).status_code == 200

    def test_mixed_case_address_works_as_registered(self, client, mailer):
        registered = _register(client, email="Alice@Example.COM")
        assert registered.status_code == 201

        assert _login(client, email="Alice@Example.COM").status_code == 200
        assert _login(client, email="Alice@example.com").status_code == 200
        client.post(f"{USERS}/forgot-password", json={"email": "Alice@Example.COM"})
        assert [address for address, _, _ in mailer.sent] == [registered.json()["email"]]

    def test_malformed_address_gets_generic_replies(self, client, mailer):
        _register(client)

        login = _login(client, email="not an email")
        forgot = client.post(f"{USERS}/forgot-password", json={"email": "not an email"})

        assert login.status_code == 401
        assert forgot.status_code == 200
        assert forgot.json()["message"] == "If a user with that email exists, a reset link has been sent."
        assert mailer.sent == []


# ══════════════════════════════════════════════════════════════════════════════
# SELF SERVICE
# ══════════════════════════════════════════════════════════════════════════════


class TestSelfService:
    def test_me_requires_token(self, client):
        response = client.get(f"{USERS}/me")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_me_with_garbage_token(self, client):
        response = client.get(f"{USERS}/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_me_for_deleted_account(self, client, auth_header):
        response = client.get(f"{USERS}/me", headers=auth_header("gone", Role.USER))

        assert response.status_code == 404

    def test_change_own_password(self, client):
        headers = _bearer(_register(client))

        wrong = client.put(
            f"{USERS}/me/password",
            json={"current_password": "nope", "new_password": "pw2-secret"},
            headers=headers,
        )
        ok = client.put(
            f"{USERS}/me/password",
            json={"current_password": "pw1-secret", "new_password": "pw2-secret"},
            headers=headers,
        )

        assert wrong.status_code == 400
        assert wrong.json()["detail"] == "Current password is incorrect"
        assert ok.status_code == 200
        assert _login(client, password="pw2-secret").status_code == 200


# ══════════════════════════════════════════════════════════════════════════════
# ADMINISTRATION
# ══════════════════════════════════════════════════════════════════════════════


class TestAdministration:
    def test_list_requires_token(self, client):
        assert client.get(USERS).status_code == 401

    @pytest.mark.parametrize(
        "role", [Role.USER, Role.ADMISSIONS_ADMIN, Role.CONTENT_ADMIN, Role.AUDIENCE_ADMIN]
    )
    def test_list_forbidden_below_super_admin(self, client, auth_header, role):
        response = client.get(USERS, headers=auth_header("acc-x", role))

        assert response.status_code == 403
        assert response.json()["detail"] == "Forbidden"

    def test_user_token_cannot_use_admin_routes(self, client):
        headers = _bearer(_register(client))
        account_id = _login(client).json()["account_id"]

        assert client.put(f"{USERS}/{account_id}/role", json={"role": "SuperAdmin"}, headers=headers).status_code == 403
        assert client.delete(f"{USERS}/{account_id}", headers=headers).status_code == 403

    def test_list_accounts(self, client, super_admin_header):
        _register(client)
        _register(client, username="bob", email="b@x.com")

        response = client.get(USERS, headers=super_admin_header)

        assert response.status_code == 200
        assert sorted(item["username"] for item in response.json()) == ["alice", "bob"]
        assert all("password_hash" not in item for item in response.json())

    def test_change_role(self, client, super_admin_header):
        account_id = _register(client).json()["account_id"]

        response = client.put(f"{USERS}/{account_id}/role", json={"role": "ContentAdmin"}, headers=super_admin_header)

        assert response.status_code == 200
        assert response.json()["role"] == "ContentAdmin"
        assert _login(client).json()["role"] == "ContentAdmin"

    def test_invalid_role_is_rejected(self, client, super_admin_header):
        account_id = _register(client).json()["account_id"]

        response = client.put(f"{USERS}/{account_id}/role", json={"role": "NotARole"}, headers=super_admin_header)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid role"
        assert _login(client).json()["role"] == "User"

    def test_change_role_of_unknown_account(self, client, super_admin_header):
        response = client.put(f"{USERS}/missing/role", json={"role": "User"}, headers=super_admin_header)

        assert response.status_code == 404

    def test_delete_account(self, client, super_admin_header):
        account_id = _register(client).json()["account_id"]

        response = client.delete(f"{USERS}/{account_id}", headers=super_admin_header)

        assert response.status_code == 200
        assert response.json() == {"id": account_id, "message": "User deleted successfully"}
        assert _login(client).status_code == 401
        assert client.delete(f"{USERS}/{account_id}", headers=super_admin_header).status_code == 404

    def test_super_admin_cannot_be_deleted(self, client, super_admin_header):
        account_id = _register(client).json()["account_id"]
        client.put(f"{USERS}/{account_id}/role", json={"role": "SuperAdmin"}, headers=super_admin_header)

        response = client.delete(f"{USERS}/{account_id}", headers=super_admin_header)

        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot delete a SuperAdmin"
        listed = client.get(USERS, headers=super_admin_header).json()
        assert [item["role"] for item in listed if item["id"] == account_id] == ["SuperAdmin"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
