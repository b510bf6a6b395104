import pytest

from clinic_appointments.core.config import settings
from .conftest import auth_headers, count_appointments

BASE = "/api/v1/appointments"


def booking(practitioner, patient_row, **overrides):
    payload = {
        "motif": "Consultation",
        "date": "2024-03-01",
        "patient": patient_row.id,
        "medecin": practitioner.id,
        "heureDebut": "09:00",
        "heureFin": "09:30",
    }
    payload.update(overrides)
    return payload


class TestCreateAppointment:

    def test_create_appointment(self, client, secretary, doctor, patient):
        """Test booking an appointment with every field."""
        response = client.post(BASE, json=booking(doctor, patient), headers=auth_headers(secretary))
        assert response.status_code == 201

        data = response.json()
        assert data["isEnabled"] is True
        assert data["motif"] == "Consultation"
        assert data["date"] == "2024/03/01"
        assert data["heureDebut"] == "09:00"
        assert data["heureFin"] == "09:30"
        assert data["patient"]["id"] == patient.id
        assert data["medecin"]["id"] == doctor.id

    def test_create_accepts_resource_paths(self, client, secretary, doctor, patient):
        payload = booking(
            doctor, patient,
            patient=f"/api/patients/{patient.id}",
            medecin=f"/api/users/{doctor.id}",
        )
        response = client.post(BASE, json=payload, headers=auth_headers(secretary))
        assert response.status_code == 201
        assert response.json()["medecin"]["id"] == doctor.id

    @pytest.mark.parametrize("field", ["motif", "date", "patient", "medecin", "heureDebut", "heureFin"])
    def test_create_missing_field(self, client, secretary, doctor, patient, field):
        payload = booking(doctor, patient)
        del payload[field]

        response = client.post(BASE, json=payload, headers=auth_headers(secretary))
        assert response.status_code == 400
        assert response.json() == {"status": 400, "message": "All required fields must be filled in"}
        assert count_appointments() == 0

    def test_missing_field_reported_over_invalid_fields(self, client, secretary, doctor, patient):
        payload = booking(doctor, patient, date=["not", "a", "date"])
        del payload["motif"]

        response = client.post(BASE, json=payload, headers=auth_headers(secretary))
        assert response.status_code == 400
        assert response.json()["message"] == "All required fields must be filled in"

    @pytest.mark.parametrize("field", ["motif", "date", "patient", "medecin", "heureDebut", "heureFin"])
    def test_create_null_field(self, client, secretary, doctor, patient, field):
        response = client.post(BASE, json=booking(doctor, patient, **{field: None}), headers=auth_headers(secretary))
        assert response.status_code == 400
        assert response.json() == {"status": 400, "message": "All required fields must be filled in"}
        assert count_appointments() == 0

    def test_create_for_another_patient(self, client, secretary, doctor, patient, make_patient):
        other = make_patient("Omar", "Ba")
        response = client.post(BASE, json=booking(doctor, patient, patient=other.id), headers=auth_headers(secretary))
        assert response.status_code == 201
        assert response.json()["patient"]["id"] == other.id

    @pytest.mark.parametrize("overrides", [
        {"motif": "   "},
        {"date": "01 March 2024"},
        {"date": "2024-02-30"},
        {"heureDebut": "9h"},
        {"heureFin": "08:30"},
        {"patient": "patient-one"},
        {"medecin": "12abc"},
        {"patient": 9999},
    ])
    def test_create_invalid_data(self, client, secretary, doctor, patient, overrides):
        response = client.post(BASE, json=booking(doctor, patient, **overrides), headers=auth_headers(secretary))
        assert response.status_code == 400
        assert response.json() == {"status": 400, "message": "Invalid data"}
        assert count_appointments() == 0

    def test_create_malformed_body(self, client, secretary):
        headers = dict(auth_headers(secretary), **{"Content-Type": "application/json"})
        response = client.post(BASE, content="{not json", headers=headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Malformed request body"

    def test_create_does_not_check_slot(self, client, secretary, doctor, patient):
        """Creation may double-book; the clash is caught on update or reactivation."""
        headers = auth_headers(secretary)
        assert client.post(BASE, json=booking(doctor, patient), headers=headers).status_code == 201
        assert client.post(BASE, json=booking(doctor, patient), headers=headers).status_code == 201
        assert count_appointments() == 2

    def test_create_checks_slot_when_configured(self, client, secretary, doctor, patient, monkeypatch):
        monkeypatch.setattr(settings, "CHECK_CONFLICT_ON_CREATE", True)
        headers = auth_headers(secretary)

        assert client.post(BASE, json=booking(doctor, patient), headers=headers).status_code == 201
        response = client.post(BASE, json=booking(doctor, patient, date="2024/03/01"), headers=headers)
        assert response.status_code == 409
        assert response.json() == {"status": 409, "message": "Appointment slot already booked"}
        assert count_appointments() == 1

    def test_create_requires_authentication(self, client, doctor, patient):
        response = client.post(BASE, json=booking(doctor, patient))
        assert response.status_code in (401, 403)
        assert count_appointments() == 0


class TestReadAppointments:

    def test_list_appointments(self, client, secretary, doctor, other_doctor, patient):
        headers = auth_headers(secretary)
        client.post(BASE, json=booking(doctor, patient, date="2024-03-02"), headers=headers)
        client.post(BASE, json=booking(other_doctor, patient, date="2024-03-01"), headers=headers)

        response = client.get(BASE, headers=headers)
        assert response.status_code == 200
        assert [a["date"] for a in response.json()] == ["2024/03/01", "2024/03/02"]

    def test_list_mine(self, client, secretary, doctor, other_doctor, patient):
        headers = auth_headers(secretary)
        client.post(BASE, json=booking(doctor, patient), headers=headers)
        client.post(BASE, json=booking(other_doctor, patient), headers=headers)

        response = client.get(f"{BASE}/mine", headers=auth_headers(doctor))
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["medecin"]["id"] == doctor.id

        assert client.get(f"{BASE}/mine", headers=headers).json() == []

    def test_get_appointment(self, client, secretary, doctor, patient):
        headers = auth_headers(secretary)
        created = client.post(BASE, json=booking(doctor, patient), headers=headers).json()

        response = client.get(f"{BASE}/{created['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json() == created

    def test_get_missing_appointment(self, client, secretary):
        response = client.get(f"{BASE}/42", headers=auth_headers(secretary))
        assert response.status_code == 404
        assert response.json() == {"status": 404, "message": "This appointment does not exist"}


class TestUpdateAppointment:

    def test_update_appointment(self, client, secretary, doctor, other_doctor, patient):
        headers = auth_headers(secretary)
        created = client.post(BASE, json=booking(doctor, patient), headers=headers).json()

        payload = booking(other_doctor, patient, motif="Follow-up", date="2024-03-05", heureDebut="10:00", heureFin="10:20")
        response = client.put(f"{BASE}/{created['id']}", json=payload, headers=headers)
        assert response.status_code == 201

        data = response.json()
        assert data["motif"] == "Follow-up"
        assert data["date"] == "2024/03/05"
        assert data["heureDebut"] == "10:00"
        assert data["medecin"]["id"] == other_doctor.id
        assert data["isEnabled"] is True

    def test_update_keeping_own_slot(self, client, secretary, doctor, patient):
        headers = auth_headers(secretary)
        created = client.post(BASE, json=booking(doctor, patient), headers=headers).json()

        response = client.put(f"{BASE}/{created['id']}", json=booking(doctor, patient, motif="Check-up"), headers=headers)
        assert response.status_code == 201
        assert response.json()["motif"] == "Check-up"

    def test_update_missing_appointment(self, client, secretary, doctor, patient):
        response = client.put(f"{BASE}/99", json=booking(doctor, patient), headers=auth_headers(secretary))
        assert response.status_code == 404

    def test_update_missing_field(self, client, secretary, doctor, patient):
        headers = auth_headers(secretary)
        created = client.post(BASE, json=booking(doctor, patient), headers=headers).json()
        payload = booking(doctor, patient)
        del payload["heureFin"]

        response = client.put(f"{BASE}/{created['id']}", json=payload, headers=headers)
        assert response.status_code == 400
        assert response.json()["message"] == "All required fields must be filled in"

    def test_update_null_field(self, client, secretary, doctor, patient):
        headers = auth_headers(secretary)
        created = client.post(BASE, json=booking(doctor, patient), headers=headers).json()

        response = client.put(f"{BASE}/{created['id']}", json=booking(doctor, patient, motif=None), headers=headers)
        assert response.status_code == 400
        assert response.json()["message"] == "All required fields must be filled in"
        assert client.get(f"{BASE}/{created['id']}", headers=headers).json()["motif"] == "Consultation"

    def test_update_onto_enabled_slot(self, client, secretary, doctor, patient):
        headers = auth_headers(secretary)
        client.post(BASE, json=booking(doctor, patient), headers=headers)
        other = client.post(BASE, json=booking(doctor, patient, heureDebut="11:00", heureFin="11:30"), headers=headers).json()

        # Same day written with slashes still collides
        response = client.put(
            f"{BASE}/{other['id']}",
            json=booking(doctor, patient, date="2024/03/01", motif="Moved"),
            headers=headers
        )
        assert response.status_code == 409
        assert response.json() == {"status": 409, "message": "Appointment slot already booked"}

        unchanged = client.get(f"{BASE}/{other['id']}", headers=headers).json()
        assert unchanged["heureDebut"] == "11:00"
        assert unchanged["motif"] == "Consultation"

    def test_update_onto_cancelled_slot(self, client, secretary, doctor, patient):
        headers = auth_headers(secretary)
        first = client.post(BASE, json=booking(doctor, patient), headers=headers).json()
        client.put(f"{BASE}/{first['id']}/status", headers=headers)
        other = client.post(BASE, json=booking(doctor, patient, heureDebut="11:00", heureFin="11:30"), headers=headers).json()

        response = client.put(f"{BASE}/{other['id']}", json=booking(doctor, patient), headers=headers)
        assert response.status_code == 201
        assert response.json()["heureDebut"] == "09:00"


class TestToggleStatus:

    def test_cancel_appointment(self, client, secretary, doctor, patient):
        headers = auth_headers(secretary)
        created = client.post(BASE, json=booking(doctor, patient), headers=headers).json()

        response = client.put(f"{BASE}/{created['id']}/status", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"status": 200, "message": "Appointment cancelled"}
        assert client.get(f"{BASE}/{created['id']}", headers=headers).json()["isEnabled"] is False

    def test_cancel_ignores_slot_clash(self, client, secretary, doctor, patient):
        headers = auth_headers(secretary)
        first = client.post(BASE, json=booking(doctor, patient), headers=headers).json()
        client.post(BASE, json=booking(doctor, patient), headers=headers)

        response = client.put(f"{BASE}/{first['id']}/status", headers=headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Appointment cancelled"

    def test_reactivate_appointment(self, client, secretary, doctor, patient):
        headers = auth_headers(secretary)
        created = client.post(BASE, json=booking(doctor, patient), headers=headers).json()
        client.put(f"{BASE}/{created['id']}/status", headers=headers)

        response = client.put(f"{BASE}/{created['id']}/status", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"status": 200, "message": "Appointment reactivated"}
        assert client.get(f"{BASE}/{created['id']}", headers=headers).json()["isEnabled"] is True

    def test_reactivate_onto_booked_slot(self, client, secretary, doctor, patient):
        headers = auth_headers(secretary)
        created = client.post(BASE, json=booking(doctor, patient), headers=headers).json()
        client.put(f"{BASE}/{created['id']}/status", headers=headers)
        client.post(BASE, json=booking(doctor, patient), headers=headers)

        response = client.put(f"{BASE}/{created['id']}/status", headers=headers)
        assert response.status_code == 409
        assert client.get(f"{BASE}/{created['id']}", headers=headers).json()["isEnabled"] is False

    def test_reactivate_next_to_other_practitioner(self, client, secretary, doctor, other_doctor, patient):
        headers = auth_headers(secretary)
        created = client.post(BASE, json=booking(doctor, patient), headers=headers).json()
        client.put(f"{BASE}/{created['id']}/status", headers=headers)
        client.post(BASE, json=booking(other_doctor, patient), headers=headers)

        response = client.put(f"{BASE}/{created['id']}/status", headers=headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Appointment reactivated"

    def test_toggle_missing_appointment(self, client, secretary):
        response = client.put(f"{BASE}/7/status", headers=auth_headers(secretary))
        assert response.status_code == 404
        assert response.json()["status"] == 404


class TestDeleteAppointment:

    def test_delete_appointment(self, client, secretary, doctor, patient):
        headers = auth_headers(secretary)
        created = client.post(BASE, json=booking(doctor, patient), headers=headers).json()

        response = client.delete(f"{BASE}/{created['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"status": 200, "message": "Appointment deleted"}

        assert client.get(f"{BASE}/{created['id']}", headers=headers).status_code == 404
        assert count_appointments() == 0

    def test_delete_missing_appointment(self, client, secretary, doctor, patient):
        headers = auth_headers(secretary)
        client.post(BASE, json=booking(doctor, patient), headers=headers)

        response = client.delete(f"{BASE}/1234", headers=headers)
        assert response.status_code == 404
        assert response.json() == {"status": 404, "message": "This appointment does not exist"}
        assert count_appointments() == 1


def test_booking_walkthrough(client, secretary, doctor, patient):
    """A is booked, B double-books through create, then every move into A's slot is refused."""
    headers = auth_headers(secretary)

    a = client.post(BASE, json=booking(doctor, patient), headers=headers)
    assert a.status_code == 201
    assert a.json()["isEnabled"] is True

    b = client.post(BASE, json=booking(doctor, patient, motif="Second opinion"), headers=headers)
    assert b.status_code == 201
    b_id = b.json()["id"]

    # B cannot be rescheduled onto its own slot while A holds it
    response = client.put(f"{BASE}/{b_id}", json=booking(doctor, patient, motif="Second opinion"), headers=headers)
    assert response.status_code == 409

    # Cancel B, then reactivating it collides with A
    assert client.put(f"{BASE}/{b_id}/status", headers=headers).json()["message"] == "Appointment cancelled"
    assert client.put(f"{BASE}/{b_id}/status", headers=headers).status_code == 409
    assert client.get(f"{BASE}/{b_id}", headers=headers).json()["isEnabled"] is False
