from config import RATE_LIMIT_AUTH, RATE_LIMIT_DEFAULT
from core.rate_limit import AUTH_RATE_LIMIT_MESSAGE, GENERAL_RATE_LIMIT_MESSAGE

PREFIX = "/api/v1"


def allowed(limit: str) -> int:
    return int(limit.split()[0])


def test_auth_routes_share_a_stricter_limit(client, student):
    credentials = {"email": student.email, "password": "wrong-password"}
    for _ in range(allowed(RATE_LIMIT_AUTH) - 1):
        assert client.post(f"{PREFIX}/auth/login", json=credentials).status_code == 401
    # The last allowed request goes to another auth route
    forgot = client.post(f"{PREFIX}/auth/forgot-password", json={"email": student.email})
    assert forgot.status_code == 200

    response = client.post(f"{PREFIX}/auth/login", json=credentials)
    assert response.status_code == 429
    assert response.json() == {"detail": AUTH_RATE_LIMIT_MESSAGE}


def test_auth_limit_does_not_block_other_routes(client, student):
    credentials = {"email": student.email, "password": "wrong-password"}
    for _ in range(allowed(RATE_LIMIT_AUTH)):
        client.post(f"{PREFIX}/auth/login", json=credentials)
    assert client.post(f"{PREFIX}/auth/login", json=credentials).status_code == 429
    assert client.get("/health").status_code == 200


def test_general_limit(client):
    for _ in range(allowed(RATE_LIMIT_DEFAULT)):
        assert client.get("/health").status_code == 200

    response = client.get("/health")
    assert response.status_code == 429
    assert response.json() == {"detail": GENERAL_RATE_LIMIT_MESSAGE}
