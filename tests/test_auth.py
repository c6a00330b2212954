import pytest
from sqlalchemy import func, select

from clinic.core.database import get_engine
from clinic.models.doctor import DoctorProfile
from clinic.models.patient import PatientProfile
from clinic.models.user import User, UserRoleAssignment
from tests.helpers import (
    API, auth_headers, doctor_payload, patient_payload,
    signup_doctor, signup_patient, user_id_of
)

patient_login = {
    "hn": 1001,
    "citizen_id": "1100000000001",
    "password": "PatientPass123"
}

doctor_login = {
    "mln": "MD-001",
    "citizen_id": "3300000000001",
    "password": "DoctorPass123"
}


def row_counts():
    """Rows per account table, read straight from the test database."""
    with get_engine().connect() as conn:
        return {
            model.__tablename__: conn.execute(select(func.count()).select_from(model)).scalar_one()
            for model in (User, UserRoleAssignment, PatientProfile, DoctorProfile)
        }


class TestAuthentication:

    def test_register_patient(self, client):
        """Patient signup returns a usable bearer token."""
        response = client.post(f"{API}/users/patients", json=patient_payload())
        assert response.status_code == 201

        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 24 * 60 * 60
        assert "access_token" in data

    def test_register_patient_duplicate(self, client):
        signup_patient(client)
        before = row_counts()

        response = client.post(f"{API}/users/patients", json=patient_payload())
        assert response.status_code == 409
        assert row_counts() == before

    def test_register_patient_duplicate_hn_leaves_no_user_row(self, client):
        signup_patient(client)
        before = row_counts()

        response = client.post(
            f"{API}/users/patients",
            json=patient_payload(citizen_id="1100000000099", email="fresh@example.com")
        )
        assert response.status_code == 409
        assert row_counts() == before

    def test_register_patient_invalid_email(self, client):
        response = client.post(f"{API}/users/patients", json=patient_payload(email="not-an-email"))
        assert response.status_code == 422

    def test_register_doctor(self, client):
        response = client.post(f"{API}/users/doctors", json=doctor_payload())
        assert response.status_code == 201
        assert "access_token" in response.json()

    def test_register_doctor_duplicate_license(self, client):
        """A taken license number rolls back the whole signup, user row included."""
        signup_doctor(client)
        before = row_counts()

        response = client.post(
            f"{API}/users/doctors",
            json=doctor_payload(citizen_id="3300000000002", email="other@example.com")
        )
        assert response.status_code == 409
        assert row_counts() == before
        assert before["users"] == 1
        assert before["user_roles"] == 1

    def test_login_patient(self, client):
        signup_patient(client)

        response = client.post(f"{API}/users/login/patients", json=patient_login)
        assert response.status_code == 200
        assert "access_token" in response.json()

    def test_login_patient_wrong_password(self, client):
        signup_patient(client)

        response = client.post(
            f"{API}/users/login/patients",
            json={**patient_login, "password": "WrongPassword"}
        )
        assert response.status_code == 401

    def test_login_unknown_patient(self, client):
        response = client.post(f"{API}/users/login/patients", json=patient_login)
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_login_doctor(self, client):
        signup_doctor(client)

        response = client.post(f"{API}/users/login/doctors", json=doctor_login)
        assert response.status_code == 200

    def test_patient_cannot_use_doctor_login(self, client):
        signup_patient(client)

        response = client.post(
            f"{API}/users/login/doctors",
            json={"mln": "1001", "citizen_id": "1100000000001", "password": "PatientPass123"}
        )
        assert response.status_code == 401

    def test_get_current_user(self, client):
        token = signup_patient(client)

        response = client.get(f"{API}/users/me", headers=auth_headers(token))
        assert response.status_code == 200

        data = response.json()
        assert data["email"] == "patient1001@example.com"
        assert data["roles"] == ["PATIENT"]

    def test_doctor_roles(self, client):
        token = signup_doctor(client)

        response = client.get(f"{API}/users/me", headers=auth_headers(token))
        assert response.json()["roles"] == ["DOCTOR"]

    def test_get_current_user_invalid_token(self, client):
        response = client.get(f"{API}/users/me", headers=auth_headers("invalid_token"))
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_get_current_user_missing_header(self, client):
        response = client.get(f"{API}/users/me")
        assert response.status_code == 401

    def test_refresh_token(self, client):
        token = signup_patient(client)

        response = client.post(f"{API}/users/refresh", headers=auth_headers(token))
        assert response.status_code == 200

        fresh = response.json()["access_token"]
        assert user_id_of(client, fresh) == user_id_of(client, token)

    def test_refresh_requires_token(self, client):
        response = client.post(f"{API}/users/refresh")
        assert response.status_code == 401


class TestRateLimiting:

    def test_login_blocked_when_limit_reached(self, client, redis_stub):
        redis_stub.data["rate_limit:testclient"] = "50"

        response = client.post(f"{API}/users/login/patients", json=patient_login)
        assert response.status_code == 429

    def test_requests_are_counted(self, client, redis_stub):
        client.post(f"{API}/users/login/patients", json=patient_login)
        client.post(f"{API}/users/login/patients", json=patient_login)
        assert redis_stub.data["rate_limit:testclient"] == "2"


if __name__ == "__main__":
    pytest.main([__file__])
