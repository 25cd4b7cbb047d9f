"""Call the running server's health endpoint and print the result.

Usage:
    python -m scripts.check_health [BASE_URL]   # default http://localhost:8000
"""

from __future__ import annotations

import json
import sys

import httpx

DEFAULT_BASE_URL = "http://localhost:8000"
TIMEOUT = 10.0


def fetch_health(client: httpx.Client, base_url: str) -> dict:
    response = client.get(f"{base_url.rstrip('/')}/api/health")
    body = response.json()
    body["http_status"] = response.status_code
    return body


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    base_url = args[0] if args else DEFAULT_BASE_URL
    try:
        with httpx.Client(timeout=TIMEOUT) as client:
            result = fetch_health(client, base_url)
    except httpx.HTTPError as exc:
        print(f"Health check failed: {exc}")
        return 1
    print("Health check result:")
    print(json.dumps(result, indent=2))
    return 0 if result.get("status") == "ok" else 1


if __name__ == "__main__":
    sys.exit(main())
