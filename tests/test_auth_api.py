"""Account API tests: signup, login, password reset, account deletion."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest
from sqlmodel import select

from conftest import auth_headers, signup
from iharu.config import settings
from iharu.models.reset_token import PasswordResetToken
from iharu.utils import mailer


@pytest.fixture
def sent_codes(monkeypatch):
    """Capture reset codes instead of mailing them."""
    codes = {}

    def fake_send(email, name, code):
        codes[email] = code
        return True

    monkeypatch.setattr("iharu.services.auth_service.send_reset_code", fake_send)
    return codes


class TestSignupLogin:
    def test_parent_signup_creates_family(self, client, parent):
        assert parent["user"]["role"] == "parent"
        assert parent["user"]["family_id"].startswith("fam_")

        r = client.get("/api/v1/family", headers=parent["headers"])
        assert r.status_code == 200
        family = r.json()["family"]
        assert family["name"] == "엄마의 가족"
        assert family["parent_invite_code"].startswith("PRNT")
        assert len(family["parent_invite_code"]) == 8

    def test_child_signup_has_no_family(self, client):
        kid = signup(client, "kid@example.com", "하루", "child")
        assert kid["user"]["family_id"] is None
        r = client.get("/api/v1/schedules/day", headers=kid["headers"])
        assert r.status_code == 400

    def test_duplicate_email(self, client, parent):
        r = client.post(
            "/api/v1/auth/signup",
            json={"email": "MOM@example.com", "password": "secret123", "name": "x", "role": "parent"},
        )
        assert r.status_code == 400

    def test_short_password(self, client):
        r = client.post(
            "/api/v1/auth/signup",
            json={"email": "a@example.com", "password": "123", "name": "a", "role": "parent"},
        )
        assert r.status_code == 400

    @pytest.mark.parametrize("body", [
        {"email": "a@example.com", "password": "secret123", "name": "a", "role": "admin"},
        {"email": "not-an-email", "password": "secret123", "name": "a", "role": "parent"},
        {"email": "a@example.com", "password": "secret123", "name": "", "role": "parent"},
        {"email": "a@example.com", "password": "secret123", "role": "parent"},
    ])
    def test_invalid_signup_body(self, client, body):
        assert client.post("/api/v1/auth/signup", json=body).status_code == 422

    def test_login_normalizes_email(self, client, parent):
        r = client.post("/api/v1/auth/login", json={"email": " Mom@Example.COM", "password": "secret123"})
        assert r.status_code == 200
        assert r.json()["user"]["id"] == parent["user"]["id"]

    def test_login_failures_share_one_message(self, client, parent):
        wrong = client.post("/api/v1/auth/login", json={"email": "mom@example.com", "password": "nope123"})
        unknown = client.post("/api/v1/auth/login", json={"email": "who@example.com", "password": "nope123"})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["detail"] == unknown.json()["detail"]

    def test_me(self, client, child):
        r = client.get("/api/v1/auth/me", headers=child["headers"])
        assert r.status_code == 200
        assert r.json()["child_profile_id"] == child["profile_id"]

    def test_bad_token(self, client):
        r = client.get("/api/v1/auth/me", headers=auth_headers("garbage"))
        assert r.status_code == 401


class TestPasswordReset:
    def test_unknown_email_gets_same_answer(self, client, parent, sent_codes):
        known = client.post("/api/v1/auth/forgot-password", json={"email": "mom@example.com"})
        unknown = client.post("/api/v1/auth/forgot-password", json={"email": "who@example.com"})
        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert list(sent_codes) == ["mom@example.com"]

    def test_reset_flow(self, client, parent, sent_codes):
        client.post("/api/v1/auth/forgot-password", json={"email": "mom@example.com"})
        code = sent_codes["mom@example.com"]
        assert len(code) == 6 and code.isdigit()

        body = {"email": "mom@example.com", "token": code, "new_password": "newpass1"}
        assert client.post("/api/v1/auth/reset-password", json=body).status_code == 200

        r = client.post("/api/v1/auth/login", json={"email": "mom@example.com", "password": "newpass1"})
        assert r.status_code == 200

        # Codes are single use
        assert client.post("/api/v1/auth/reset-password", json=body).status_code == 400

    def test_wrong_code(self, client, parent, sent_codes):
        client.post("/api/v1/auth/forgot-password", json={"email": "mom@example.com"})
        wrong = "000000" if sent_codes["mom@example.com"] != "000000" else "111111"
        body = {"email": "mom@example.com", "token": wrong, "new_password": "newpass1"}
        assert client.post("/api/v1/auth/reset-password", json=body).status_code == 400

    def test_new_request_replaces_old_code(self, client, parent, sent_codes, session):
        client.post("/api/v1/auth/forgot-password", json={"email": "mom@example.com"})
        client.post("/api/v1/auth/forgot-password", json={"email": "mom@example.com"})
        tokens = session.exec(select(PasswordResetToken)).all()
        assert len(tokens) == 1
        assert tokens[0].token == sent_codes["mom@example.com"]

    def test_expired_code(self, client, parent, sent_codes, session):
        client.post("/api/v1/auth/forgot-password", json={"email": "mom@example.com"})
        token = session.exec(select(PasswordResetToken)).one()
        token.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        session.add(token)
        session.commit()

        body = {"email": "mom@example.com", "token": token.token, "new_password": "newpass1"}
        r = client.post("/api/v1/auth/reset-password", json=body)
        assert r.status_code == 400


class TestMailer:
    def test_without_api_key_only_logs(self, monkeypatch):
        monkeypatch.setattr(settings, "resend_api_key", "")
        assert mailer.send_reset_code("a@example.com", "a", "123456") is False

    def test_name_is_escaped_in_html(self):
        body = mailer._reset_code_html("<b>하루</b>", "123456")
        assert "<b>하루</b>" not in body
        assert "&lt;b&gt;하루&lt;/b&gt;" in body

    def test_posts_to_mail_api(self, monkeypatch):
        calls = []

        def fake_post(url, **kwargs):
            calls.append((url, kwargs))
            return httpx.Response(200, json={"id": "mail_1"})

        monkeypatch.setattr(settings, "resend_api_key", "re_test")
        monkeypatch.setattr(mailer.httpx, "post", fake_post)

        assert mailer.send_reset_code("a@example.com", "하루", "123456") is True
        url, kwargs = calls[0]
        assert url == mailer.RESEND_URL
        assert kwargs["json"]["to"] == "a@example.com"
        assert "123456" in kwargs["json"]["html"]

    def test_transport_error_is_reported(self, monkeypatch):
        def fake_post(url, **kwargs):
            raise httpx.ConnectError("down")

        monkeypatch.setattr(settings, "resend_api_key", "re_test")
        monkeypatch.setattr(mailer.httpx, "post", fake_post)
        assert mailer.send_reset_code("a@example.com", "a", "123456") is False


class TestDeleteAccount:
    def test_parent_deletion_removes_created_records(self, client, parent, child):
        client.post(
            "/api/v1/schedules",
            json={"title": "학원", "start_date": "2024-01-01"},
            headers=parent["headers"],
        )
        client.post("/api/v1/messages", json={"content": "안녕"}, headers=parent["headers"])

        r = client.delete("/api/v1/auth/me", headers=parent["headers"])
        assert r.status_code == 200

        r = client.post("/api/v1/auth/login", json={"email": "mom@example.com", "password": "secret123"})
        assert r.status_code == 401

        assert client.get("/api/v1/schedules", headers=child["headers"]).json()["schedules"] == []
        assert client.get("/api/v1/messages", headers=child["headers"]).json()["messages"] == []

    def test_child_deletion_unlinks_profile(self, client, parent, child):
        assert client.delete("/api/v1/auth/me", headers=child["headers"]).status_code == 200

        r = client.get(f"/api/v1/children/{child['profile_id']}", headers=parent["headers"])
        assert r.status_code == 200
        assert r.json()["is_linked"] is False
