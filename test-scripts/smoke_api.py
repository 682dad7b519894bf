"""
Smoke test for a running deployment.

Registers a throwaway student and supervisor, submits a project, approves it
and checks that it shows up in the public gallery. Usage:

    python test-scripts/smoke_api.py [base_url]
"""
import json
import sys
import time
from typing import Any, Dict, Optional

import requests

BASE_URL = "http://localhost:5000"  # Adjust this to your server URL


def call(method: str, path: str, token: Optional[str] = None, **kwargs) -> Dict[str, Any]:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    response = requests.request(method, f"{BASE_URL}{path}", headers=headers, timeout=30, **kwargs)
    try:
        body = response.json()
    except json.JSONDecodeError:
        body = {"raw": response.text}
    status = "✅" if response.ok else "❌"
    print(f"{status} {method} {path} -> {response.status_code}")
    if not response.ok:
        print(json.dumps(body, indent=2))
        raise SystemExit(1)
    return body


def register(role: str, suffix: str) -> str:
    body = call("POST", "/api/auth/register", json={
        "name": f"Smoke {role}",
        "email": f"smoke-{role}-{suffix}@example.org",
        "password": "smoke-pass-123",
        "role": role,
        "faculty": "Engineering",
    })
    return body["token"]


def main() -> None:
    suffix = str(int(time.time()))
    health = call("GET", "/health")
    print(f"📊 Backend: {health.get('backend')} ({health.get('environment')})")

    student = register("student", suffix)
    supervisor = register("supervisor", suffix)

    project = call("POST", "/api/projects", token=student, json={
        "title": f"Smoke project {suffix}",
        "description": "Created by the deployment smoke test.",
        "category": "Other",
        "faculty": "Engineering",
        "year": time.gmtime().tm_year,
        "technologies": "Python, FastAPI",
    })["data"]

    call("PUT", f"/api/projects/{project['id']}/approve", token=supervisor,
         json={"status": "approved", "comment": "Smoke test approval"})
    liked = call("POST", f"/api/projects/{project['id']}/like", token=student)
    print(f"📊 Liked: {liked['liked']} (count {liked['likeCount']})")

    gallery = call("GET", "/api/projects", params={"search": suffix})
    assert any(item["id"] == project["id"] for item in gallery["data"]), "approved project missing from gallery"

    call("DELETE", f"/api/projects/{project['id']}", token=student)
    print("\n✅ Smoke test passed")


if __name__ == "__main__":
    if len(sys.argv) > 1:
        BASE_URL = sys.argv[1].rstrip("/")
    main()
