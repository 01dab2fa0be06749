#!/usr/bin/env python3
"""
Fake tcgcsv.com server for local development and testing.

Serves the three catalog endpoints the bot reads, for category 3 only:
- GET /tcgplayer/3/groups
- GET /tcgplayer/3/{group_id}/products
- GET /tcgplayer/3/{group_id}/prices

Groups listed in FAILING_GROUPS answer 500 so partial-failure handling can
be exercised by hand.

Run with: python scripts/fake_tcgcsv.py --port 9010
Then set in bot.yaml: catalog.base_url: "http://127.0.0.1:9010"
"""

import argparse
import json
from datetime import UTC, datetime, timedelta
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import urlparse

CATEGORY_PREFIX = "/tcgplayer/3"


def _days_ago(days: int) -> str:
    moment = datetime.now(UTC) - timedelta(days=days)
    return moment.strftime("%Y-%m-%dT00:00:00")


# Fake groups; publish dates are relative so the recency window always applies
FAKE_GROUPS = [
    {"groupId": 604, "name": "Base Set", "abbreviation": "BS", "publishedOn": "1999-01-09T00:00:00"},
    {"groupId": 23651, "name": "SV08: Surging Sparks", "abbreviation": "SSP", "publishedOn": _days_ago(200)},
    {"groupId": 23821, "name": "SV: Prismatic Evolutions", "abbreviation": "PRE", "publishedOn": _days_ago(120)},
    {"groupId": 24000, "name": "SV10: Destined Rivals", "abbreviation": "DRI", "publishedOn": _days_ago(30)},
]

FAKE_PRODUCTS = {
    604: [
        {"productId": 42348, "name": "Base Set Booster Box", "cleanName": "Base Set Booster Box"},
    ],
    23651: [
        {
            "productId": 565606,
            "name": "Surging Sparks Booster Box",
            "cleanName": "Surging Sparks Booster Box",
            "imageUrl": "https://tcgplayer-cdn.tcgplayer.com/product/565606_200w.jpg",
            "url": "https://www.tcgplayer.com/product/565606/pokemon-sv08-surging-sparks-surging-sparks-booster-box",
        },
        {
            "productId": 565630,
            "name": "Surging Sparks Elite Trainer Box",
            "cleanName": "Surging Sparks Elite Trainer Box",
        },
    ],
    23821: [
        {
            "productId": 593355,
            "name": "Prismatic Evolutions Elite Trainer Box",
            "cleanName": "Prismatic Evolutions Elite Trainer Box",
        },
        {
            "productId": 593466,
            "name": "Prismatic Evolutions Super Premium Collection",
            "cleanName": "Prismatic Evolutions Super Premium Collection",
        },
    ],
}

FAKE_PRICES = {
    604: [{"productId": 42348, "subTypeName": "Unlimited", "marketPrice": 18500.0}],
    23651: [
        {"productId": 565606, "subTypeName": "Normal", "marketPrice": 245.5, "lowPrice": 229.99},
        {"productId": 565630, "subTypeName": "Normal", "marketPrice": 58.0},
    ],
    23821: [
        {"productId": 593355, "subTypeName": "Normal", "marketPrice": 99.0, "lowPrice": 92.0},
        {"productId": 593466, "subTypeName": "Normal", "marketPrice": 189.95},
    ],
}

FAILING_GROUPS = {24000}


class FakeTcgCsvHandler(BaseHTTPRequestHandler):
    """HTTP handler implementing fake tcgcsv endpoints."""

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        """Override to add prefix."""
        print(f"[FakeTcgCsv] {args[0]}")

    def send_json(self, data, status: int = 200) -> None:
        """Send a JSON response."""
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(json.dumps(data).encode())

    def send_results(self, results: list) -> None:
        """Send a list in tcgcsv's wrapped response shape."""
        self.send_json(
            {
                "totalItems": len(results),
                "success": True,
                "errors": [],
                "results": results,
            }
        )

    def do_GET(self) -> None:
        """Handle GET requests."""
        path = urlparse(self.path).path.rstrip("/")

        if not path.startswith(CATEGORY_PREFIX):
            self.send_json({"success": False, "errors": [f"Unknown endpoint: {path}"]}, status=404)
            return

        parts = path[len(CATEGORY_PREFIX) :].strip("/").split("/")

        if parts == ["groups"]:
            self.send_results(FAKE_GROUPS)
            return

        if len(parts) == 2 and parts[1] in ("products", "prices"):
            try:
                group_id = int(parts[0])
            except ValueError:
                self.send_json({"success": False, "errors": ["Invalid group id"]}, status=400)
                return
            self.handle_group(group_id, parts[1])
            return

        self.send_json({"success": False, "errors": [f"Unknown endpoint: {path}"]}, status=404)

    def handle_group(self, group_id: int, resource: str) -> None:
        if group_id in FAILING_GROUPS:
            self.send_json({"success": False, "errors": ["Internal error"]}, status=500)
            return

        if resource == "products":
            products = [
                {**product, "categoryId": 3, "groupId": group_id}
                for product in FAKE_PRODUCTS.get(group_id, [])
            ]
            self.send_results(products)
        else:
            # Prices come back as a bare array, which the client also accepts
            self.send_json(FAKE_PRICES.get(group_id, []))


def make_server(host: str = "127.0.0.1", port: int = 9010) -> HTTPServer:
    return HTTPServer((host, port), FakeTcgCsvHandler)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run fake tcgcsv.com server")
    parser.add_argument(
        "--port",
        type=int,
        default=9010,
        help="Port to listen on (default: 9010)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    args = parser.parse_args()

    server = make_server(args.host, args.port)
    print(f"Fake tcgcsv running at http://{args.host}:{args.port}")
    print("Groups:")
    for group in FAKE_GROUPS:
        status = "failing" if group["groupId"] in FAILING_GROUPS else "ok"
        print(f"  {group['groupId']}: {group['name']} ({status})")
    print()

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down...")
        server.shutdown()


if __name__ == "__main__":
    main()
