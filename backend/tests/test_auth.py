"""
Tests for registration, login and the health profile.
"""

from conftest import TEST_PASSWORD
from shared.security.auth import verify_jwt


REGISTRATION = {
    "name": "Robin Diner",
    "email": "Robin@Example.com",
    "password": "hunter22",
    "healthProfile": {"allergies": ["Peanuts", " "], "dietaryPlan": "Vegan", "healthGoals": ["Low Sodium"]},
}


class TestRegister:
    def test_register_returns_user_and_token(self, client, db_session):
        response = client.post("/api/auth/register", json=REGISTRATION)
        assert response.status_code == 201
        body = response.json()
        user = body["user"]
        assert user["email"] == "robin@example.com"
        assert user["role"] == "customer"
        assert "password" not in user
        assert user["healthProfile"] == {
            "allergies": ["Peanuts"],
            "dietaryPlan": "Vegan",
            "healthGoals": ["Low Sodium"],
            "isCreated": True,
        }
        claims = verify_jwt(body["token"])
        assert claims["sub"] == str(user["id"])
        assert claims["role"] == "customer"

    def test_register_without_profile(self, client):
        body = {k: v for k, v in REGISTRATION.items() if k != "healthProfile"}
        user = client.post("/api/auth/register", json=body).json()["user"]
        assert user["healthProfile"]["isCreated"] is False

    def test_duplicate_email_is_conflict(self, client):
        client.post("/api/auth/register", json=REGISTRATION)
        again = {**REGISTRATION, "email": "robin@example.com"}
        assert client.post("/api/auth/register", json=again).status_code == 409

    def test_short_password_rejected(self, client):
        assert client.post("/api/auth/register", json={**REGISTRATION, "password": "abc"}).status_code == 422

    def test_bad_email_rejected(self, client):
        assert client.post("/api/auth/register", json={**REGISTRATION, "email": "nope"}).status_code == 422

    def test_unknown_dietary_plan_rejected(self, client):
        body = {**REGISTRATION, "healthProfile": {"dietaryPlan": "Carnivore"}}
        assert client.post("/api/auth/register", json=body).status_code == 422


class TestLogin:
    def test_login(self, client, customer):
        response = client.post("/api/auth/login", json={"email": "CASEY@test.com", "password": TEST_PASSWORD})
        assert response.status_code == 200
        assert response.json()["user"]["id"] == customer.id

    def test_wrong_password(self, client, customer):
        response = client.post("/api/auth/login", json={"email": customer.email, "password": "wrong-one"})
        assert response.status_code == 401

    def test_unknown_email(self, client):
        response = client.post("/api/auth/login", json={"email": "ghost@test.com", "password": TEST_PASSWORD})
        assert response.status_code == 401

    def test_inactive_account(self, client, customer, db_session):
        customer.is_active = False
        db_session.commit()
        response = client.post("/api/auth/login", json={"email": customer.email, "password": TEST_PASSWORD})
        assert response.status_code == 401

    def test_staff_console_login(self, client, kitchen_user):
        response = client.post(
            "/api/auth/admin/login", json={"email": kitchen_user.email, "password": TEST_PASSWORD}
        )
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "kitchen_staff"

    def test_customer_refused_at_staff_console(self, client, customer):
        response = client.post("/api/auth/admin/login", json={"email": customer.email, "password": TEST_PASSWORD})
        assert response.status_code == 403


class TestMe:
    def test_me(self, client, customer, customer_headers):
        user = client.get("/api/auth/me", headers=customer_headers).json()["user"]
        assert user["name"] == "Casey Customer"
        assert user["healthProfile"]["allergies"] == ["Gluten"]

    def test_me_requires_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_malformed_header(self, client):
        assert client.get("/api/auth/me", headers={"Authorization": "Token abc"}).status_code == 401


class TestHealthProfile:
    def test_replace_profile(self, client, customer_headers):
        body = {"allergies": ["Shellfish"], "dietaryPlan": "Keto", "healthGoals": []}
        response = client.put("/api/health-profile", json=body, headers=customer_headers)
        assert response.status_code == 200
        profile = response.json()["user"]["healthProfile"]
        assert profile["allergies"] == ["Shellfish"]
        assert profile["dietaryPlan"] == "Keto"
        assert profile["healthGoals"] == []

    def test_staff_have_no_health_profile(self, client, kitchen_headers):
        response = client.put("/api/health-profile", json={"allergies": []}, headers=kitchen_headers)
        assert response.status_code == 403

    def test_anonymous_rejected(self, client):
        assert client.put("/api/health-profile", json={"allergies": []}).status_code == 401
