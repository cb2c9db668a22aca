"""Shared helpers for API tests."""

import uuid


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register_and_login(client, name: str, password: str = "secret1") -> dict:
    """Create a user via the API and log in.

    Returns {"user", "token", "headers", "email", "password"}.
    """
    email = f"{name.lower()}-{uuid.uuid4().hex[:8]}@example.com"
    r = await client.post(
        "/api/v1/users",
        json={"name": name, "email": email, "password": password},
    )
    assert r.status_code == 201, r.text

    r = await client.post(
        "/api/v1/users/login",
        json={"email": email, "password": password},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    return {
        "user": body["user"],
        "token": body["token"],
        "headers": bearer(body["token"]),
        "email": email,
        "password": password,
    }
