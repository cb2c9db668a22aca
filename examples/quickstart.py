#!/usr/bin/env python3
"""
Taskhub Quickstart — Full lifecycle in one script.

Registers two users → logs in → creates and updates a task → shows that
the other user can't read it → shares a place → deletes the account.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: taskhub serve
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8000/api/v1"


def register_and_login(client: httpx.Client, name: str) -> dict:
    """Create a user with a unique email and return {user, token, headers}."""
    email = f"{name.lower()}-{uuid.uuid4().hex[:6]}@example.com"
    password = "demo-password"

    resp = client.post("/users", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, f"Registration failed: {resp.text}"

    resp = client.post("/users/login", json={"email": email, "password": password})
    assert resp.status_code == 200, f"Login failed: {resp.text}"
    body = resp.json()
    return {
        "user": body["user"],
        "token": body["token"],
        "headers": {"Authorization": f"Bearer {body['token']}"},
    }


def main():
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  taskhub serve --reload")
        sys.exit(1)
    health = resp.json()
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")

    # ── Users ─────────────────────────────────────────────────────
    print("\n1. Registering users...")
    ann = register_and_login(client, "Ann")
    bob = register_and_login(client, "Bob")
    print(f"   Ann: {ann['user']['email']} ({ann['user']['id'][:8]}...)")
    print(f"   Bob: {bob['user']['email']} ({bob['user']['id'][:8]}...)")

    # ── Task ──────────────────────────────────────────────────────
    print("\n2. Ann creates a task...")
    resp = client.post(
        "/tasks",
        json={"title": "Write the quarterly report", "description": "Due Friday"},
        headers=ann["headers"],
    )
    assert resp.status_code == 201, f"Failed: {resp.text}"
    task = resp.json()
    print(f"   Task: {task['title']} [{task['status']}]")

    for status in ("IN_PROGRESS", "DONE"):
        resp = client.patch(f"/tasks/{task['id']}", json={"status": status}, headers=ann["headers"])
        assert resp.status_code == 200, f"Failed: {resp.text}"
        print(f"   → {resp.json()['status']}")

    print("\n3. Bob tries to read Ann's task...")
    resp = client.get(f"/tasks/{task['id']}", headers=bob["headers"])
    print(f"   {resp.status_code} {resp.json()['message']}")

    # ── Place ─────────────────────────────────────────────────────
    print("\n4. Ann shares a place...")
    resp = client.post(
        "/places",
        json={"name": "Corner Cafe", "address": "12 Market St"},
        headers=ann["headers"],
    )
    assert resp.status_code == 201, f"Failed: {resp.text}"
    place = resp.json()

    resp = client.get(f"/places/{place['id']}")
    print(f"   Anyone can see it: {resp.json()['name']} ({resp.json()['address']})")

    # ── Account removal ───────────────────────────────────────────
    print("\n5. Ann deletes the account...")
    resp = client.delete(f"/users/{ann['user']['id']}", headers=ann["headers"])
    print(f"   {resp.json()['message']}")

    resp = client.get("/users/me", headers=ann["headers"])
    print(f"   Old token on /users/me → {resp.status_code} {resp.json()['message']}")

    print("\nDone.")


if __name__ == "__main__":
    main()
