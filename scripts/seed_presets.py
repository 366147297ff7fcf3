#!/usr/bin/env python3
"""Seed the preset code store from a JSON file.

Usage:
    python scripts/seed_presets.py presets.json [BASE_URL]

The file holds a list of {"query": ..., "code": ...} objects. Presets whose
query already exists are skipped.
"""

import json
import sys
import urllib.error
import urllib.request

if len(sys.argv) < 2:
    print("Usage: python scripts/seed_presets.py presets.json [BASE_URL]")
    sys.exit(1)

PRESETS_FILE = sys.argv[1]
BASE_URL = sys.argv[2] if len(sys.argv) > 2 else "http://localhost:8000"


def post_preset(query: str, code: str) -> tuple[int, dict]:
    payload = json.dumps({"query": query, "code": code}).encode()
    req = urllib.request.Request(
        f"{BASE_URL}/",
        data=payload,
        headers={"Content-Type": "application/json"},
    )
    try:
        with urllib.request.urlopen(req) as resp:
            return resp.status, json.loads(resp.read())
    except urllib.error.HTTPError as e:
        return e.code, json.loads(e.read() or b"{}")


with open(PRESETS_FILE, encoding="utf-8") as f:
    presets = json.load(f)

created = skipped = 0
for preset in presets:
    status, body = post_preset(preset["query"], preset["code"])
    if status == 200:
        created += 1
        print(f"  + {preset['query']} (id {body['data']['id']})")
    elif status == 400:
        skipped += 1
        print(f"  = {preset['query']}: {body.get('error', 'rejected')}")
    else:
        print(f"Unexpected response {status}: {body}")
        sys.exit(1)

print(f"Done: {created} created, {skipped} skipped.")
