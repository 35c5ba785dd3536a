PASSWORD = "correct-horse"


def signup(client, email, name="Tester", password=PASSWORD):
    resp = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["token"]


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
