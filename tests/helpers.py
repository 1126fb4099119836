PASSWORD = "password123"


def login(client, email: str, password: str = PASSWORD) -> str:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def pdf(name: str = "answer.pdf", body: bytes = b"%PDF-1.4 test"):
    return ("files", (name, body, "application/pdf"))
