from datetime import timedelta

from examprep.core.dependencies import get_mailer
from examprep.core.limiter import AUTH_LIMIT, limiter
from examprep.db.base import utcnow
from examprep.models.exam_result import ExamResult
from examprep.models.subscription import ExamMode
from examprep.models.user import User
from examprep.services.token_service import TempTokenPurpose

PASSWORD = "Passw0rdA"
API = "/api/v1"


def _register(client, email="new@example.com"):
    return client.post(f"{API}/auth/register", json={
        "email": email, "password": PASSWORD, "confirm_password": PASSWORD,
    })


def _onboard(client, mailer, email="new@example.com"):
    """Register, verify and complete the profile; returns the complete-profile payload"""
    _register(client, email)
    verified = client.post(f"{API}/auth/verify-otp", json={"email": email, "otp": mailer.last_code(email)})
    temp_token = verified.json()["data"]["temp_token"]
    completed = client.post(
        f"{API}/auth/complete-profile",
        json={"first_name": "Ada", "last_name": "Obi", "phone_number": "08031234567"},
        headers={"Authorization": f"Bearer {temp_token}"},
    )
    return completed.json()["data"]


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


class TestHealth:

    def test_root_and_health(self, client):
        assert client.get("/").json()["success"] is True
        assert client.get("/health").json()["data"]["status"] == "ok"


class TestAuthFlow:
    """Registration through session management over HTTP"""

    def test_register_returns_201(self, client):
        response = _register(client, "Mixed@Example.com")
        assert response.status_code == 201
        body = response.json()
        assert body["code"] == 2011
        assert body["data"] == {"email": "mixed@example.com"}

    def test_register_duplicate_is_409(self, client, make_user):
        make_user(email="new@example.com")
        response = _register(client)
        assert response.status_code == 409
        assert response.json()["code"] == 4091

    def test_weak_password_is_422(self, client):
        response = client.post(f"{API}/auth/register", json={
            "email": "new@example.com", "password": "password", "confirm_password": "password",
        })
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["errors"]["fields"]

    def test_full_onboarding(self, client, mailer):
        data = _onboard(client, mailer)

        assert data["token_type"] == "bearer"
        assert data["user"]["is_profile_complete"] is True
        me = client.get(f"{API}/auth/me", headers=_bearer(data["access_token"]))
        assert me.status_code == 200
        assert me.json()["data"]["email"] == "new@example.com"

    def test_wrong_otp_reports_attempts(self, client, mailer):
        _register(client)
        code = mailer.last_code("new@example.com")
        wrong = "999999" if code != "999999" else "100000"

        response = client.post(f"{API}/auth/verify-otp", json={"email": "new@example.com", "otp": wrong})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == 4002
        assert body["errors"] == {"reason": "INVALID_CODE", "attempts_remaining": 4}

    def test_resend_cooldown_is_429(self, client):
        _register(client)
        response = client.post(f"{API}/auth/resend-otp", json={"email": "new@example.com"})
        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) >= 1
        assert response.json()["errors"]["wait_seconds"] >= 1

    def test_complete_profile_rejects_access_token(self, client, make_user, auth_headers):
        user = make_user(profile_complete=False)
        response = client.post(
            f"{API}/auth/complete-profile",
            json={"first_name": "Ada", "last_name": "Obi", "phone_number": "08031234567"},
            headers=auth_headers(user),
        )
        assert response.status_code == 401

    def test_login_with_incomplete_profile(self, client, make_user):
        make_user(profile_complete=False)
        response = client.post(f"{API}/auth/login", json={"email": "student@example.com", "password": PASSWORD})
        body = response.json()
        assert response.status_code == 200
        assert body["code"] == 2007
        assert body["data"]["requires_profile_completion"] is True
        assert "access_token" not in body["data"]

    def test_login_refresh_logout(self, client, make_user):
        make_user()
        login = client.post(f"{API}/auth/login", json={"email": "student@example.com", "password": PASSWORD})
        refresh_token = login.json()["data"]["refresh_token"]

        rotated = client.post(f"{API}/auth/refresh-token", json={"refresh_token": refresh_token})
        assert rotated.status_code == 200
        replay = client.post(f"{API}/auth/refresh-token", json={"refresh_token": refresh_token})
        assert replay.status_code == 401
        assert replay.json()["code"] == 4012

        new_refresh = rotated.json()["data"]["refresh_token"]
        assert client.post(f"{API}/auth/logout", json={"refresh_token": new_refresh}).status_code == 200
        assert client.post(f"{API}/auth/logout", json={"refresh_token": new_refresh}).status_code == 200

    def test_bad_credentials(self, client, make_user):
        make_user()
        response = client.post(f"{API}/auth/login", json={"email": "student@example.com", "password": "Nope12345"})
        assert response.status_code == 401
        assert response.json()["code"] == 4011

    def test_forgot_password_unknown_email_is_200(self, client, mailer):
        response = client.post(f"{API}/auth/forgot-password", json={"email": "ghost@example.com"})
        assert response.status_code == 200
        assert mailer.sent == []

    def test_password_reset_flow(self, client, make_user, mailer):
        make_user()
        client.post(f"{API}/auth/forgot-password", json={"email": "student@example.com"})
        code = mailer.last_code("student@example.com")

        check = client.post(f"{API}/auth/verify-reset-otp", json={"email": "student@example.com", "otp": code})
        assert check.status_code == 200
        reset = client.post(f"{API}/auth/reset-password", json={
            "email": "student@example.com", "otp": code,
            "new_password": "Brandnew123", "confirm_password": "Brandnew123",
        })
        assert reset.status_code == 200
        login = client.post(f"{API}/auth/login", json={"email": "student@example.com", "password": "Brandnew123"})
        assert login.status_code == 200


class TestAccessControl:
    """Bearer handling on protected routes"""

    def test_missing_token(self, client):
        response = client.get(f"{API}/auth/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_disabled_user_is_403(self, client, make_user, auth_headers):
        user = make_user(disabled=True)
        response = client.get(f"{API}/auth/me", headers=auth_headers(user))
        assert response.status_code == 403
        assert response.json()["code"] == 4031

    def test_incomplete_profile_blocked_from_subscription(self, client, make_user, auth_headers):
        user = make_user(profile_complete=False)
        response = client.get(f"{API}/subscription/current", headers=auth_headers(user))
        assert response.status_code == 403
        assert response.json()["code"] == 4033


class TestSubscriptionRoutes:
    """Plans, payments and trial gating"""

    def test_plans_are_public(self, client):
        plans = client.get(f"{API}/subscription/plans").json()["data"]
        assert [p["plan_type"] for p in plans] == ["FREE", "STARTER", "STANDARD", "ANNUAL"]

    def test_payment_flow(self, client, mailer):
        headers = _bearer(_onboard(client, mailer)["access_token"])

        current = client.get(f"{API}/subscription/current", headers=headers).json()["data"]
        assert current["current_plan"]["plan_type"] == "FREE"

        init = client.post(f"{API}/subscription/initialize-payment", headers=headers,
                           json={"plan_type": "STANDARD", "payment_method": "CARD"})
        reference = init.json()["data"]["payment_reference"]
        verify = client.post(f"{API}/subscription/verify-payment", headers=headers,
                             json={"payment_reference": reference})
        assert verify.status_code == 200
        assert verify.json()["data"]["subscription"]["plan_type"] == "STANDARD"

        again = client.post(f"{API}/subscription/verify-payment", headers=headers,
                            json={"payment_reference": reference})
        assert again.status_code == 400
        assert again.json()["code"] == 4003

        history = client.get(f"{API}/subscription/payments", headers=headers).json()
        assert history["pagination"]["total"] == 1
        assert history["data"][0]["status"] == "SUCCESS"

    def test_free_plan_payment_is_422(self, client, make_user, auth_headers):
        user = make_user()
        response = client.post(f"{API}/subscription/initialize-payment", headers=auth_headers(user),
                               json={"plan_type": "FREE", "payment_method": "CARD"})
        assert response.status_code == 422

    def test_trial_gating(self, client, mailer):
        headers = _bearer(_onboard(client, mailer)["access_token"])
        body = {"exam_mode": "JAMB_AI"}

        assert client.post(f"{API}/subscription/check-access", headers=headers, json=body).json()["data"]["can_access"]
        client.post(f"{API}/subscription/use-trial", headers=headers, json=body)
        access = client.post(f"{API}/subscription/check-access", headers=headers, json=body).json()["data"]
        assert access["can_access"] is False
        assert access["reason"]


class TestSettingsRoutes:
    """Preferences, password, tickets and account lifecycle"""

    def test_preferences(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        assert client.get(f"{API}/settings/preferences", headers=headers).json()["data"] == {
            "font_size": 2, "theme": "auto",
        }
        updated = client.put(f"{API}/settings/preferences", headers=headers, json={"theme": "dark"})
        assert updated.json()["data"]["theme"] == "dark"
        assert client.put(f"{API}/settings/preferences", headers=headers, json={}).status_code == 422

    def test_change_password_with_history_violation(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        first = client.post(f"{API}/settings/change-password", headers=headers, json={
            "old_password": PASSWORD, "new_password": "Second123", "confirm_password": "Second123",
        })
        assert first.status_code == 200

        back = client.post(f"{API}/settings/change-password", headers=headers, json={
            "old_password": "Second123", "new_password": PASSWORD, "confirm_password": PASSWORD,
        })
        assert back.status_code == 400
        assert back.json()["code"] == 4001

    def test_support_ticket(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        created = client.post(f"{API}/settings/support-ticket", headers=headers, json={
            "issue_type": "TECHNICAL", "description": "Questions do not load on my phone",
        })
        assert created.status_code == 201
        tickets = client.get(f"{API}/settings/support-tickets", headers=headers).json()["data"]
        assert tickets[0]["ticket_number"] == created.json()["data"]["ticket_number"]

    def test_disable_account(self, client, make_user, auth_headers, mailer):
        user = make_user()
        headers = auth_headers(user)
        client.post(f"{API}/settings/disable-account/initiate", headers=headers, json={"reason": "TEMPORARY_BREAK"})

        response = client.post(f"{API}/settings/disable-account/verify", headers=headers,
                               json={"otp": mailer.last_code(user.email)})
        assert response.status_code == 200
        assert client.get(f"{API}/auth/me", headers=headers).status_code == 403
        login = client.post(f"{API}/auth/login", json={"email": "student@example.com", "password": PASSWORD})
        assert login.status_code == 403

    def test_unknown_reason_is_422(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        response = client.post(f"{API}/settings/delete-account/initiate", headers=headers, json={"reason": "BORED"})
        assert response.status_code == 422

    def test_delete_account(self, client, make_user, auth_headers, mailer):
        user = make_user()
        headers = auth_headers(user)
        client.post(f"{API}/settings/delete-account/initiate", headers=headers, json={"reason": "OTHER"})

        response = client.post(f"{API}/settings/delete-account/verify", headers=headers,
                               json={"otp": mailer.last_code("student@example.com")})
        assert response.status_code == 200
        assert client.get(f"{API}/auth/me", headers=headers).status_code == 401


class TestExamRoutes:
    """History and analytics over stored results"""

    def test_history_detail_and_dashboard(self, client, db, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(user)
        now = utcnow()
        exam = ExamResult(
            user_id=user.id, mode=ExamMode.PURE_JAMB, score=300, total_obtainable=400, is_passed=True,
            subjects=[{"subject": "English", "score": 80}], answers=[],
            start_time=now - timedelta(hours=2), end_time=now, duration_seconds=7200,
        )
        db.add(exam)
        db.commit()
        exam_id = exam.id

        history = client.get(f"{API}/exams/history", headers=headers).json()["data"]
        assert history["total"] == 1
        assert history["exams"][0]["id"] == exam_id

        detail = client.get(f"{API}/exams/history/{exam_id}", headers=headers).json()["data"]
        assert detail["feedback"].startswith("Good job")

        retake = client.get(f"{API}/exams/retake/{exam_id}", headers=headers).json()["data"]
        assert retake == {"mode": "PURE_JAMB", "subjects": ["English"]}

        assert client.get(f"{API}/exams/history/{exam_id + 1}", headers=headers).status_code == 404

        dashboard = client.get(f"{API}/analytics/dashboard", headers=headers).json()["data"]
        assert dashboard == {
            "total_exams_written": 1, "exams_passed": 1, "exams_failed": 0, "performance_average": 75,
        }


class TestEmailDeliveryFailure:
    """Routes still succeed when the mail transport raises"""

    def test_register_and_complete_profile(self, client, db, token_service, make_user, failing_mailer):
        client.app.dependency_overrides[get_mailer] = lambda: failing_mailer

        response = _register(client)
        assert response.status_code == 201
        assert db.query(User).filter(User.email == "new@example.com").count() == 1

        user = make_user(email="pending@example.com", profile_complete=False)
        temp_token = token_service.create_temp_token(user, TempTokenPurpose.PROFILE_COMPLETION)
        completed = client.post(
            f"{API}/auth/complete-profile",
            json={"first_name": "Ada", "last_name": "Obi", "phone_number": "08031234567"},
            headers=_bearer(temp_token),
        )
        assert completed.status_code == 200
        data = completed.json()["data"]
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["user"]["is_profile_complete"] is True
        assert failing_mailer.attempts == 2


class TestRateLimit:
    """Request-count limiter in front of auth routes"""

    def test_login_is_limited_per_client(self, client):
        allowed = int(AUTH_LIMIT.split("/")[0])
        limiter.enabled = True
        limiter.reset()
        try:
            statuses = []
            for _ in range(allowed + 1):
                response = client.post(
                    f"{API}/auth/login", json={"email": "nobody@example.com", "password": PASSWORD}
                )
                statuses.append(response.status_code)

            assert statuses[:allowed] == [401] * allowed
            assert statuses[allowed] == 429
            body = response.json()
            assert body["success"] is False
            assert body["code"] == 429
        finally:
            limiter.reset()
            limiter.enabled = False
