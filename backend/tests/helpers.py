"""테스트에서 공유하는 인증 헬퍼입니다."""


def get_token(client, email: str) -> str:
    resp = client.post("/api/admin/auth/login", json={"email": email})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]["access_token"]


def auth_headers(client, email: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email)}"}


ADMIN = "admin@portfolio.dev"
EDITOR = "editor@portfolio.dev"
VIEWER = "viewer@portfolio.dev"
