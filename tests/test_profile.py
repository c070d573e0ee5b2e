from clinic_api.core.security import UserRole, get_token_service


class TestProfile:

    def test_get_own_profile(self, client, client_user):
        user, headers = client_user
        response = client.get(f"/api/user/{user['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json() == user

    def test_path_id_is_ignored(self, client, client_user, staff_user):
        _, headers = client_user
        staff, _ = staff_user

        response = client.get(f"/api/user/{staff['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json()["email"] == "alice@clinic.com"

    def test_update_full_name(self, client, client_user):
        user, headers = client_user
        response = client.put(f"/api/user/{user['id']}", json={"fullName": "Alice Cooper"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["fullName"] == "Alice Cooper"
        assert response.json()["email"] == user["email"]

        assert client.get(f"/api/user/{user['id']}", headers=headers).json()["fullName"] == "Alice Cooper"

    def test_update_requires_a_field(self, client, staff_user):
        user, headers = staff_user
        for body in ({}, {"fullName": ""}, {"fullName": "   "}):
            response = client.put(f"/api/user/{user['id']}", json=body, headers=headers)
            assert response.status_code == 400
            assert response.json() == {"error": "validation_error", "message": "No update fields provided"}

    def test_email_is_not_updatable(self, client, client_user):
        user, headers = client_user
        response = client.put(f"/api/user/{user['id']}", json={"email": "new@clinic.com"}, headers=headers)
        assert response.status_code == 400
        assert client.get(f"/api/user/{user['id']}", headers=headers).json()["email"] == user["email"]

    def test_unknown_session_user(self, client):
        token = get_token_service().issue("0" * 32, UserRole.CLIENT)
        headers = {"Authorization": f"Bearer {token}"}

        assert client.get("/api/user/whatever", headers=headers).status_code == 404
        response = client.put("/api/user/whatever", json={"fullName": "Ghost"}, headers=headers)
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_booking_for_unknown_session_user(self, client):
        token = get_token_service().issue("0" * 32, UserRole.CLIENT)
        response = client.post(
            "/api/appointments",
            json={"startTime": "2024-07-01T08:00:00Z", "endTime": "2024-07-01T08:30:00Z", "service": "X"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 404
