#!/usr/bin/env python3
import argparse
import json
import os
import sys
from typing import Any, Dict

import requests

WORKER = os.getenv("WORKER_URL", "http://localhost:3001")


def jprint(label: str, obj: Any):
    print(f"{label}: {json.dumps(obj, ensure_ascii=False)}")


def post_image(path: str, mime: str, field: str = "image") -> requests.Response:
    with open(path, "rb") as f:
        files = {field: (os.path.basename(path), f, mime)}
        return requests.post(f"{WORKER}/api/analyze", files=files, timeout=120)


def check_ok(body: Dict[str, Any]):
    if not isinstance(body.get("description"), str):
        raise AssertionError(f"description missing: {body}")
    if not isinstance(body.get("tags"), list):
        raise AssertionError(f"tags missing: {body}")
    if body.get("confidence") != 95:
        raise AssertionError(f"unexpected confidence: {body.get('confidence')}")


def run() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("image", help="image file to analyze")
    ap.add_argument("--mime", default="image/png")
    ap.add_argument(
        "--negative",
        action="store_true",
        help="also check the 400 paths (missing field, non-image)",
    )
    args = ap.parse_args()

    if not os.path.exists(args.image):
        raise FileNotFoundError(f"missing sample file: {args.image}")

    print(f"[cfg] WORKER={WORKER}")
    jprint("status", requests.get(f"{WORKER}/status", timeout=10).json())

    r = post_image(args.image, args.mime)
    jprint(f"analyze [{r.status_code}]", r.json())
    if r.status_code != 200:
        return 1
    check_ok(r.json())

    if args.negative:
        r = post_image(args.image, args.mime, field="file")
        jprint(f"missing field [{r.status_code}]", r.json())
        assert r.status_code == 400, r.text
        r = post_image(args.image, "text/plain")
        jprint(f"non-image [{r.status_code}]", r.json())
        assert r.status_code == 400, r.text

    print("[smoke] OK")
    return 0


if __name__ == "__main__":
    sys.exit(run())
