"""
Integration tests for client and driver registration.
"""

import pytest

CLIENT = {
    "name": "Maria Souza",
    "email": "maria@client.com",
    "password": "123",
    "cpf": "11122233344",
    "phoneNumber": "66988887777",
    "city": "Colider-MT"
}

DRIVER = {
    "name": "João Pereira",
    "age": 34,
    "maritalStatus": "married",
    "email": "joao@driver.com",
    "password": "123",
    "cpf": "55566677788",
    "phoneNumber": "66999998888",
    "city": "Colider-MT",
    "profilePhotoUrl": "https://cdn.mototaxi.com/joao.jpg",
    "cnhPhotoUrl": "https://cdn.mototaxi.com/joao-cnh.jpg",
    "motoDocUrl": "https://cdn.mototaxi.com/joao-doc.jpg"
}


@pytest.mark.asyncio
async def test_register_client(client):
    response = await client.post("/register/client", json=CLIENT)
    assert response.status_code == 201

    data = response.json()
    assert data["message"] == "Registration successful!"
    assert data["user"]["id"].startswith("client-")
    assert data["user"]["email"] == CLIENT["email"]
    assert "password" not in data["user"]


@pytest.mark.asyncio
async def test_registered_client_can_request_ride(client):
    client_id = (await client.post("/register/client", json=CLIENT)).json()["user"]["id"]

    response = await client.post("/client/request-service", json={
        "clientId": client_id, "origin": "A", "destination": "B"
    })
    assert response.status_code == 201
    assert response.json()["ride"]["clientName"] == CLIENT["name"]
    assert response.json()["ride"]["clientPhoneNumber"] == CLIENT["phoneNumber"]


@pytest.mark.asyncio
async def test_register_driver_starts_pending(client):
    response = await client.post("/register/driver", json=DRIVER)
    assert response.status_code == 201

    user = response.json()["user"]
    assert user["id"].startswith("driver-")
    assert user["approvalStatus"] == "pending"
    assert user["motoDocUrl"] == DRIVER["motoDocUrl"]


@pytest.mark.asyncio
@pytest.mark.parametrize("field, message", [
    ("cpf", "This CPF is already registered"),
    ("email", "This email is already in use"),
])
async def test_duplicate_client_registration(client, field, message):
    await client.post("/register/client", json=CLIENT)

    duplicate = {**CLIENT, "email": "other@client.com", "cpf": "99988877766", field: CLIENT[field]}
    response = await client.post("/register/client", json=duplicate)

    assert response.status_code == 409
    assert response.json()["message"] == message


@pytest.mark.asyncio
async def test_duplicate_driver_cpf(client):
    await client.post("/register/driver", json=DRIVER)

    response = await client.post("/register/driver", json={**DRIVER, "email": "other@driver.com"})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_driver_missing_documents(client):
    incomplete = {k: v for k, v in DRIVER.items() if k != "cnhPhotoUrl"}

    response = await client.post("/register/driver", json=incomplete)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_client_invalid_email(client):
    response = await client.post("/register/client", json={**CLIENT, "email": "not-an-email"})
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"
