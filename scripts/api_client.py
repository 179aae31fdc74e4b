"""Lightweight REST client for the SlateSavvy API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def _upload(client: httpx.Client, path: str, field: str, file: Path, data: dict | None = None) -> dict:
    resp = client.post(path, files={field: (file.name, file.read_bytes(), "application/octet-stream")}, data=data)
    if resp.status_code >= 400:
        raise SystemExit(f"{path} failed ({resp.status_code}): {resp.json().get('detail')}")
    return resp.json()


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the SlateSavvy REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--pack", type=Path, help="Pipeline reference pack JSON")
    parser.add_argument("--beliefs", type=Path, help="Projections CSV to use as the belief profile")
    parser.add_argument("--clear-beliefs", action="store_true", help="Drop the active belief profile")
    parser.add_argument("--lineups", type=Path, help="Optimizer export or user lineup CSV")
    parser.add_argument("--set-name", default="uploaded", help="Set label for uploaded lineups")
    parser.add_argument("--contest", type=Path, help="Contest parameters JSON to PUT")
    parser.add_argument("--report", action="store_true", help="Print the portfolio report")
    parser.add_argument("--export-path", type=Path, help="Destination path for the DK upload CSV")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url) as client:
        if args.pack:
            payload = _upload(client, "/pack", "pack", args.pack, {"location": str(args.pack)})
            print(f"Pack v{payload['version']}: {payload['players']} players, {payload['lineups']} lineups")
        if args.contest:
            resp = client.put("/contest", json=json.loads(args.contest.read_text(encoding="utf-8")))
            resp.raise_for_status()
            print("Contest:", json.dumps(resp.json()["derived"], indent=2))
        if args.clear_beliefs:
            client.delete("/beliefs").raise_for_status()
        if args.beliefs:
            payload = _upload(client, "/beliefs", "projections", args.beliefs)
            print(f"Belief profile {payload['name']}: {payload['players']} players")
        if args.lineups:
            payload = _upload(client, "/lineups", "lineups", args.lineups, {"set_name": args.set_name})
            print(f"Uploaded {payload['lineup_count']} lineups as {payload['format']}")
            for warning in payload["warnings"]:
                print(f"Warning: {warning}")
        if args.report:
            resp = client.get("/report")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
        if args.export_path:
            resp = client.get("/lineups/export", params={"skip_incomplete": True})
            if resp.status_code == 400:
                raise SystemExit(resp.json().get("detail"))
            resp.raise_for_status()
            args.export_path.write_text(resp.text)
            print(f"CSV export saved to {args.export_path}")


if __name__ == "__main__":
    main()
