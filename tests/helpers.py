"""Request helpers shared by the API tests"""
API = "/api/v1/auth"
DEFAULT_EMAIL = "ann@edulearn.io"
DEFAULT_PASSWORD = "abc123"


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, email=DEFAULT_EMAIL, password=DEFAULT_PASSWORD, full_name="Ann A", **extra):
    payload = {"email": email, "password": password, "fullName": full_name, **extra}
    return client.post(f"{API}/register", json=payload)


def login(client, email=DEFAULT_EMAIL, password=DEFAULT_PASSWORD):
    return client.post(f"{API}/login", json={"email": email, "password": password})
