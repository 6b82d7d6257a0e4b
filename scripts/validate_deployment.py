"""
Post-Deploy Smoke Test Script.

Runs the full dispatch flow against a running server:
1. Health Check
2. Admin login
3. Client + driver registration, driver approval
4. Ride request -> listing -> accept -> status
5. Second accept on the same ride must be rejected with 409

Usage:
    BASE_URL=http://127.0.0.1:8000 ADMIN_EMAIL=... ADMIN_PASSWORD=... python scripts/validate_deployment.py
"""

import os
import sys
import uuid

import httpx

BASE_URL = os.environ.get("BASE_URL", "http://127.0.0.1:8000")
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@exemplo.com")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "admin123")


def print_step(step, msg):
    print(f"[{step}] {msg}")


def fail(msg):
    print(f"❌ FAILURE: {msg}")
    sys.exit(1)


def success(msg):
    print(f"✅ {msg}")


def expect(response: httpx.Response, status_code: int, what: str) -> dict:
    if response.status_code != status_code:
        fail(f"{what}: expected {status_code}, got {response.status_code} {response.text}")
    return response.json()


def main():
    print("Starting deployment validation against", BASE_URL)
    suffix = uuid.uuid4().hex[:8]
    digits = str(uuid.uuid4().int)[:11]

    with httpx.Client(base_url=BASE_URL, timeout=10.0) as client:
        # 1. Health Check
        print_step("PRE-DEPLOY", "Checking /health...")
        try:
            health = expect(client.get("/health"), 200, "health")
        except httpx.ConnectError as exc:
            fail(f"Server unreachable: {exc}")
        success(f"Health: {health}")

        # 2. Admin login
        print_step("AUTH", "Logging in as admin...")
        admin = expect(
            client.post("/auth/login", json={"login": ADMIN_EMAIL, "password": ADMIN_PASSWORD}),
            200, "admin login"
        )
        admin_headers = {"Authorization": f"Bearer {admin['accessToken']}"}
        success("Admin token issued")

        # 3. Directory setup
        print_step("SETUP", "Registering client and driver...")
        client_user = expect(client.post("/register/client", json={
            "name": f"Smoke Client {suffix}",
            "email": f"client-{suffix}@smoke.com",
            "password": "smoke123",
            "cpf": digits,
            "phoneNumber": "66999990000",
            "city": "Colider-MT",
        }), 201, "client registration")["user"]

        driver_user = expect(client.post("/register/driver", json={
            "name": f"Smoke Driver {suffix}",
            "email": f"driver-{suffix}@smoke.com",
            "password": "smoke123",
            "cpf": digits[::-1],
            "phoneNumber": "66999991111",
            "city": "Colider-MT",
            "profilePhotoUrl": "https://example.com/profile.jpg",
            "cnhPhotoUrl": "https://example.com/cnh.jpg",
            "motoDocUrl": "https://example.com/doc.jpg",
        }), 201, "driver registration")["user"]

        expect(
            client.post(f"/admin/drivers/{driver_user['id']}/approve", headers=admin_headers),
            200, "driver approval"
        )
        success(f"Client {client_user['id']} and approved driver {driver_user['id']} ready")

        # 4. Ride flow
        print_step("SMOKE", "Running request -> accept flow...")
        ride = expect(client.post("/client/request-service", json={
            "clientId": client_user["id"],
            "origin": "Smoke Origin",
            "destination": "Smoke Destination",
        }), 201, "ride request")["ride"]

        available = expect(client.get("/driver/rides"), 200, "available rides")
        if ride["id"] not in [r["id"] for r in available]:
            fail("New ride missing from available rides")

        accepted = expect(
            client.post(f"/driver/rides/{ride['id']}/accept", json={"driverId": driver_user["id"]}),
            200, "accept"
        )
        if accepted["status"] != "ACCEPTED" or accepted["driverId"] != driver_user["id"]:
            fail(f"Unexpected accepted ride: {accepted}")

        status_view = expect(client.get(f"/ride/{ride['id']}/status"), 200, "ride status")
        if status_view["driverName"] != driver_user["name"]:
            fail(f"Driver info missing from status: {status_view}")
        success(f"Ride {ride['id']} accepted by {status_view['driverName']}")

        # 5. Conflict
        print_step("SMOKE", "Checking second accept is rejected...")
        expect(
            client.post(f"/driver/rides/{ride['id']}/accept", json={"driverId": driver_user["id"]}),
            409, "second accept"
        )
        success("Second accept rejected with 409")

    success("Deployment Validation Passed!")


if __name__ == "__main__":
    main()
