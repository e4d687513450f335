"""
Tests for client API endpoints.

These test the HTTP layer: status codes, response format and
the {error, details} error body.
"""


class TestCreateClient:

    def test_create_client_returns_201(self, client):
        response = client.post("/clients", json={"name": "Acme"})
        assert response.status_code == 201

    def test_create_client_returns_data(self, client):
        data = client.post("/clients", json={"name": "Acme"}).json()
        assert data["name"] == "Acme"
        assert isinstance(data["id"], int)

    def test_missing_name_returns_400(self, client):
        response = client.post("/clients", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Name is required."}

    def test_blank_name_returns_400(self, client):
        response = client.post("/clients", json={"name": "  "})
        assert response.status_code == 400


class TestListClients:

    def test_empty_list(self, client):
        response = client.get("/clients")
        assert response.status_code == 200
        assert response.json() == []

    def test_lists_created_clients(self, client):
        client.post("/clients", json={"name": "Acme"})
        client.post("/clients", json={"name": "Globex"})

        data = client.get("/clients").json()
        assert [c["name"] for c in data] == ["Acme", "Globex"]
        assert set(data[0]) == {"id", "name"}
