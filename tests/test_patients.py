from .conftest import API, at, book, test_patient_data

class TestPatients:

    def test_create_patient(self, client, reception):
        response = client.post(f"{API}/patients", json=test_patient_data, headers=reception["headers"])
        assert response.status_code == 201

        data = response.json()
        assert data["recordNumber"] == "PAT-001"
        assert data["firstName"] == "Somchai"
        assert data["dateOfBirth"] == "1985-04-12"
        assert data["allergies"] == "penicillin"
        assert data["medicalHistory"] is None

    def test_record_numbers_are_sequential(self, client, admin):
        numbers = [
            client.post(f"{API}/patients", json=test_patient_data, headers=admin["headers"]).json()["recordNumber"]
            for _ in range(3)
        ]
        assert numbers == ["PAT-001", "PAT-002", "PAT-003"]

    def test_clinician_cannot_create(self, client, clinician):
        response = client.post(f"{API}/patients", json=test_patient_data, headers=clinician["headers"])
        assert response.status_code == 403

    def test_create_missing_required_field(self, client, reception):
        data = {k: v for k, v in test_patient_data.items() if k != "gender"}

        response = client.post(f"{API}/patients", json=data, headers=reception["headers"])
        assert response.status_code == 400
        assert response.json() == {"error": "gender is required"}

    def test_create_with_blank_names_rejected(self, client, reception):
        data = {**test_patient_data, "firstName": "", "lastName": "", "gender": ""}

        response = client.post(f"{API}/patients", json=data, headers=reception["headers"])
        assert response.status_code == 400
        assert response.json() == {"error": "firstName: cannot be empty"}

        response = client.post(f"{API}/patients", json=test_patient_data, headers=reception["headers"])
        assert response.json()["recordNumber"] == "PAT-001"

    def test_list_patients(self, client, reception, clinician, patient):
        response = client.get(f"{API}/patients", headers=clinician["headers"])
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [patient["id"]]

    def test_get_patient_with_appointments(self, client, reception, clinician, patient):
        book(client, reception["headers"], clinician["id"], patient["id"], at("09:00"), at("09:30"))
        book(client, reception["headers"], clinician["id"], patient["id"], at("15:00"), at("15:30"))

        response = client.get(f"{API}/patients/{patient['id']}", headers=clinician["headers"])
        assert response.status_code == 200
        appointments = response.json()["appointments"]
        assert [a["startTime"] for a in appointments] == [at("15:00"), at("09:00")]
        assert appointments[0]["clinician"]["username"] == "dr_lee"

    def test_get_missing_patient(self, client, reception):
        response = client.get(f"{API}/patients/999", headers=reception["headers"])
        assert response.status_code == 404
        assert response.json() == {"error": "Patient not found"}

    def test_get_patient_id_out_of_range(self, client, reception):
        response = client.get(f"{API}/patients/99999999999999999999", headers=reception["headers"])
        assert response.status_code == 404
        assert response.json() == {"error": "Patient not found"}

    def test_update_patient(self, client, reception, patient):
        response = client.put(f"{API}/patients/{patient['id']}", json={
            "phoneNumber": "0899999999",
            "currentMedications": "metformin",
            "recordNumber": "PAT-777",
        }, headers=reception["headers"])
        assert response.status_code == 200

        data = response.json()
        assert data["phoneNumber"] == "0899999999"
        assert data["currentMedications"] == "metformin"
        assert data["firstName"] == "Somchai"
        assert data["recordNumber"] == patient["recordNumber"]

    def test_update_cannot_clear_required_field(self, client, reception, patient):
        response = client.put(f"{API}/patients/{patient['id']}", json={"lastName": None}, headers=reception["headers"])
        assert response.status_code == 400
        assert response.json() == {"error": "lastName cannot be empty"}

    def test_update_with_blank_name_rejected(self, client, reception, patient):
        response = client.put(f"{API}/patients/{patient['id']}", json={"firstName": "  "}, headers=reception["headers"])
        assert response.status_code == 400
        assert response.json() == {"error": "firstName: cannot be empty"}

        response = client.get(f"{API}/patients/{patient['id']}", headers=reception["headers"])
        assert response.json()["firstName"] == "Somchai"

    def test_update_missing_patient(self, client, reception):
        response = client.put(f"{API}/patients/999", json={"gender": "female"}, headers=reception["headers"])
        assert response.status_code == 404

    def test_clinician_cannot_update(self, client, clinician, patient):
        response = client.put(f"{API}/patients/{patient['id']}", json={"gender": "female"}, headers=clinician["headers"])
        assert response.status_code == 403

class TestDeletePatient:

    def test_admin_deletes_patient(self, client, admin, patient):
        response = client.delete(f"{API}/patients/{patient['id']}", headers=admin["headers"])
        assert response.status_code == 200

        response = client.get(f"{API}/patients/{patient['id']}", headers=admin["headers"])
        assert response.status_code == 404

    def test_reception_cannot_delete(self, client, reception, patient):
        response = client.delete(f"{API}/patients/{patient['id']}", headers=reception["headers"])
        assert response.status_code == 403

    def test_patient_with_appointments_is_kept(self, client, admin, reception, clinician, patient):
        book(client, reception["headers"], clinician["id"], patient["id"], at("10:00"), at("10:30"))

        response = client.delete(f"{API}/patients/{patient['id']}", headers=admin["headers"])
        assert response.status_code == 409
        assert response.json() == {"error": "Cannot delete patient with existing appointments"}

        response = client.get(f"{API}/patients/{patient['id']}", headers=admin["headers"])
        assert len(response.json()["appointments"]) == 1

    def test_delete_missing_patient(self, client, admin):
        response = client.delete(f"{API}/patients/999", headers=admin["headers"])
        assert response.status_code == 404
