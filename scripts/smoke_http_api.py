"""
Manual smoke runner for ROS Django adapter endpoints.

Expects a running server with at least one active record of the chosen
type (default HospitalData/H1).

Usage:
    python scripts/smoke_http_api.py
    python scripts/smoke_http_api.py --base-url http://127.0.0.1:8000 --record-id H3
"""

from __future__ import annotations

import argparse
import json
from urllib import error, request


def _call(
    *,
    method: str,
    url: str,
    body: dict | None = None,
) -> tuple[int, dict]:
    encoded = None
    headers = {}
    if body is not None:
        encoded = json.dumps(body).encode("utf-8")
        headers["Content-Type"] = "application/json"

    req = request.Request(url=url, method=method, headers=headers, data=encoded)
    try:
        with request.urlopen(req) as response:
            status = response.status
            payload = json.loads(response.read().decode("utf-8"))
            return status, payload
    except error.HTTPError as exc:
        payload = json.loads(exc.read().decode("utf-8"))
        return exc.code, payload


def _print_case(label: str, status: int, payload: dict) -> None:
    print(f"\n[{label}] status={status}")
    print(json.dumps(payload, indent=2, sort_keys=True))


def run(base_url: str, type_name: str, record_id: str) -> None:
    api = base_url.rstrip("/") + "/v1"
    record = f"{api}/records/{type_name}/{record_id}"
    archived = f"{api}/archived/{type_name}/{record_id}"

    status, payload = _call(method="GET", url=f"{api}/reminders/{type_name}")
    _print_case("reminders", status, payload)

    status, payload = _call(
        method="GET", url=f"{api}/reminders/{type_name}?include_upcoming=true",
    )
    _print_case("reminders-with-upcoming", status, payload)

    status, payload = _call(
        method="POST",
        url=f"{record}/payments",
        body={"fields": {"commission": "0", "paymentMode": "Cash"}},
    )
    _print_case("add-payment", status, payload)
    sub_id = payload.get("data", {}).get("id") if payload.get("ok") else None

    if sub_id:
        status, payload = _call(method="POST", url=f"{record}/payments/{sub_id}/submit")
        _print_case("submit-payment", status, payload)

        status, payload = _call(
            method="POST",
            url=f"{record}/payments/{sub_id}/edit",
            body={"field": "commission", "value": "999"},
        )
        _print_case("locked-edit-ignored", status, payload)

        status, payload = _call(
            method="POST",
            url=f"{record}/payments/{sub_id}/comment",
            body={"text": "smoke check"},
        )
        _print_case("comment-payment", status, payload)

    status, payload = _call(
        method="POST", url=f"{record}/archive", body={"reason": "smoke archive"},
    )
    _print_case("archive", status, payload)

    status, payload = _call(method="POST", url=f"{archived}/restore", body={})
    _print_case("restore-missing-reason", status, payload)

    status, payload = _call(
        method="POST", url=f"{archived}/restore", body={"reason": "smoke restore"},
    )
    _print_case("restore", status, payload)

    status, payload = _call(method="POST", url=f"{api}/records/{type_name}/NOPE1/archive")
    _print_case("archive-missing-record", status, payload)


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--base-url",
        default="http://127.0.0.1:8000",
        help="Server base URL.",
    )
    parser.add_argument("--type", dest="type_name", default="HospitalData")
    parser.add_argument("--record-id", default="H1")
    args = parser.parse_args()
    run(args.base_url, args.type_name, args.record_id)


if __name__ == "__main__":
    main()
