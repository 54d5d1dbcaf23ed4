"""Smoke test for a running /api/diagnostic endpoint.

Usage: VW_TOKEN=your_token gtm-diagnostic-smoke
Set DIAGNOSTIC_URL to target a deployed server.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys

import httpx

from .core.diagnostic import RESPONSE_FIELDS
from .handler import TOKEN_ENV, TOKEN_HEADER

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:8000/api/diagnostic"

SMOKE_PAYLOAD = {
    "client_name": "Smoke Test Client",
    "client_email": "smoke@example.com",
    "tier": "exec",
    "answers": {
        "Why do you most often win deals?": "Clear differentiation",
        "Why do you most often lose deals?": "Price",
        "Do customers describe your company consistently?": "Often unclear",
        "Can you quantify ROI for most customers?": "Yes — documented & repeatable",
        "Sales conversations primarily lead with:": "Financial ROI",
        "How often are discounts required to close deals?": "Sometimes (10–40%)",
        "Do customers clearly understand your pricing tiers?": "Often confused",
        "What is your gross margin (%)?": "75%+",
        "Do you know CAC by channel?": "No",
        "How would you rate your growth status?": "Plateauing",
        "Marketing is measured primarily by:": "Revenue",
        "Is attribution trusted internally?": "No",
        "Are revenue forecasts accurate within 10%?": "No",
    },
}


class SmokeTestFailure(Exception):
    pass


def check_response(status_code: int, text: str) -> dict:
    """Validate a diagnostic response. Returns the parsed report on success."""
    if status_code != 200:
        raise SmokeTestFailure(f"Expected HTTP 200 but got {status_code}. Body: {text}")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SmokeTestFailure(f"Response is not valid JSON: {exc}") from exc

    for field in RESPONSE_FIELDS:
        if field not in data:
            raise SmokeTestFailure(f'Response is missing required field: "{field}"')

    try:
        report = json.loads(data["report_json"])
    except (TypeError, json.JSONDecodeError) as exc:
        raise SmokeTestFailure(f"report_json is not valid JSON: {exc}") from exc

    if not report.get("schema_version"):
        raise SmokeTestFailure("parsed report is missing schema_version")

    return {"overall_score": data["overall_score"], "band": data["band"], "schema_version": report["schema_version"]}


async def run_smoke_test(url: str, token: str) -> dict:
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(30.0, connect=10.0)) as client:
            response = await client.post(url, json=SMOKE_PAYLOAD, headers={TOKEN_HEADER: token})
    except httpx.HTTPError as exc:
        raise SmokeTestFailure(f"Could not reach {url}: {exc}") from exc
    return check_response(response.status_code, response.text)


def main() -> int:
    """Entry point for the smoke test command."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    token = os.environ.get(TOKEN_ENV)
    if not token:
        logger.error("FAIL: %s environment variable is not set.", TOKEN_ENV)
        return 1

    url = os.environ.get("DIAGNOSTIC_URL", DEFAULT_URL)
    try:
        summary = asyncio.run(run_smoke_test(url, token))
    except SmokeTestFailure as exc:
        logger.error("FAIL: %s", exc)
        return 1

    logger.info("PASS: All smoke test assertions passed.")
    logger.info(
        "  score=%s, band=%s, schema_version=%s",
        summary["overall_score"], summary["band"], summary["schema_version"],
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
