import pytest

from tests.helpers import (
    API, auth_headers, next_weekday, signup_doctor, signup_patient, user_id_of
)


@pytest.fixture
def visit(client):
    """A doctor with a Monday slot and a patient booked on it."""
    doctor_token = signup_doctor(client)
    client.post(
        f"{API}/appointments/timeslots",
        json={"day_of_weeks": 1, "place_name": "Room 101", "start_time": "09:00", "end_time": "12:00"},
        headers=auth_headers(doctor_token)
    )
    patient_token = signup_patient(client)
    doctor_id = user_id_of(client, doctor_token)

    response = client.post(
        f"{API}/appointments",
        json={
            "doctor_id": doctor_id,
            "date": next_weekday(0).isoformat(),
            "start_time": "09:00",
            "end_time": "12:00"
        },
        headers=auth_headers(patient_token)
    )
    assert response.status_code == 201, response.text

    return {
        "doctor_token": doctor_token,
        "patient_token": patient_token,
        "patient_id": user_id_of(client, patient_token),
        "appointment_id": response.json()["appointment_id"]
    }


def record(client, visit, symptom="Persistent cough", token=None):
    return client.post(
        f"{API}/diagnoses/{visit['patient_id']}",
        json={"appointment_id": visit["appointment_id"], "symptom": symptom},
        headers=auth_headers(token or visit["doctor_token"])
    )


class TestDiagnoses:

    def test_record_and_read_history(self, client, visit):
        response = record(client, visit)
        assert response.status_code == 201
        assert response.json()["symptom"] == "Persistent cough"

        response = client.get(
            f"{API}/diagnoses/{visit['patient_id']}",
            headers=auth_headers(visit["doctor_token"])
        )
        assert response.status_code == 200
        assert [row["symptom"] for row in response.json()] == ["Persistent cough"]

    def test_empty_history(self, client, visit):
        response = client.get(
            f"{API}/diagnoses/{visit['patient_id']}",
            headers=auth_headers(visit["doctor_token"])
        )
        assert response.status_code == 404

    def test_patient_cannot_record(self, client, visit):
        response = record(client, visit, token=visit["patient_token"])
        assert response.status_code == 403

    def test_other_doctor_cannot_record(self, client, visit):
        other = signup_doctor(client, mln="MD-002", citizen_id="3300000000002")

        response = record(client, visit, token=other)
        assert response.status_code == 404

    def test_update_by_author(self, client, visit):
        diagnosis_id = record(client, visit).json()["diagnosis_id"]

        response = client.patch(
            f"{API}/diagnosis/{diagnosis_id}",
            json={"symptom": "Bronchitis"},
            headers=auth_headers(visit["doctor_token"])
        )
        assert response.status_code == 204

        history = client.get(
            f"{API}/diagnoses/{visit['patient_id']}",
            headers=auth_headers(visit["doctor_token"])
        ).json()
        assert history[0]["symptom"] == "Bronchitis"

    def test_update_by_other_doctor(self, client, visit):
        diagnosis_id = record(client, visit).json()["diagnosis_id"]
        other = signup_doctor(client, mln="MD-002", citizen_id="3300000000002")

        response = client.patch(
            f"{API}/diagnosis/{diagnosis_id}",
            json={"symptom": "Bronchitis"},
            headers=auth_headers(other)
        )
        assert response.status_code == 404
