from datetime import date, timedelta

API = "/api/v1"


def next_weekday(weekday: int, start: date = None) -> date:
    """Next date strictly after start whose Python weekday() equals weekday."""
    start = start or date.today()
    days = (weekday - start.weekday()) % 7 or 7
    return start + timedelta(days=days)


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def patient_payload(hn: int = 1001, citizen_id: str = "1100000000001", **overrides) -> dict:
    payload = {
        "hn": hn,
        "citizen_id": citizen_id,
        "first_name": "Pat",
        "last_name": "Ient",
        "email": f"patient{hn}@example.com",
        "phone": "0800000000",
        "password": "PatientPass123",
    }
    payload.update(overrides)
    return payload


def doctor_payload(mln: str = "MD-001", citizen_id: str = "3300000000001", **overrides) -> dict:
    payload = {
        "mln": mln,
        "citizen_id": citizen_id,
        "first_name": "Doc",
        "last_name": "Tor",
        "email": f"{mln.lower()}@example.com",
        "phone": "0811111111",
        "password": "DoctorPass123",
        "department": "Cardiology",
        "position": "Consultant",
    }
    payload.update(overrides)
    return payload


def signup_patient(client, **kwargs) -> str:
    response = client.post(f"{API}/users/patients", json=patient_payload(**kwargs))
    assert response.status_code == 201, response.text
    return response.json()["access_token"]


def signup_doctor(client, **kwargs) -> str:
    response = client.post(f"{API}/users/doctors", json=doctor_payload(**kwargs))
    assert response.status_code == 201, response.text
    return response.json()["access_token"]


def user_id_of(client, token: str) -> str:
    response = client.get(f"{API}/users/me", headers=auth_headers(token))
    assert response.status_code == 200, response.text
    return response.json()["user_id"]
