def test_register_login_and_me(client):
    response = client.post(
        "/api/users/register",
        json={"email": "Asha@Example.com", "name": "Asha", "password": "diwali2024", "city": "Jaipur"},
    )
    assert response.status_code == 201
    assert response.json()["role"] == "user"
    assert response.json()["email"] == "asha@example.com"

    login = client.post("/api/users/login", json={"email": "asha@example.com", "password": "diwali2024"})
    assert login.status_code == 200
    token = login.json()["accessToken"]
    assert login.json()["tokenType"] == "bearer"

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["city"] == "Jaipur"


def test_register_duplicate_email(client, buyer):
    response = client.post(
        "/api/users/register",
        json={"email": buyer.email, "name": "Copy", "password": "secret123"},
    )
    assert response.status_code == 400


def test_login_with_wrong_password(client):
    client.post("/api/users/register", json={"email": "ravi@example.com", "name": "Ravi", "password": "right-one"})

    response = client.post("/api/users/login", json={"email": "ravi@example.com", "password": "wrong-one"})

    assert response.status_code == 401


def test_invalid_token_is_rejected(client):
    response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_health_reports_database_and_upi(client, upi_settings):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "healthy"
    assert body["upi_configured"] is True
