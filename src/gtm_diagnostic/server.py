"""GTM Diagnostic Server.

FastMCP server exposing the diagnostic as MCP tools and as the
POST /api/diagnostic HTTP route used by the intake automation.
Run: gtm-diagnostic
"""

from __future__ import annotations

import json
import logging
import os
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .core.config import get_rule_config
from .core.diagnostic import run_diagnostic
from .handler import handle_request

logger = logging.getLogger(__name__)

DIAGNOSTIC_ROUTE = "/api/diagnostic"

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)

mcp = FastMCP(
    "GTM Diagnostic",
    instructions="Score a Brand-to-GTM OS questionnaire into pillar scores, an alignment band, email copy and a versioned report.",
)


# ─── HTTP route ──────────────────────────────────────────────────────────────


@mcp.custom_route(DIAGNOSTIC_ROUTE, methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"])
async def diagnostic_endpoint(request: Request) -> Response:
    """Score a questionnaire submitted by the intake automation."""
    body = None
    if request.method == "POST":
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = None
    status, payload = handle_request(request.method, request.headers, body)
    return JSONResponse(payload, status_code=status)


# ─── Tool 1: Score Diagnostic ────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def gtm_score_diagnostic(
    answers: dict[str, str],
    tier: str = "exec",
    client_name: str = "",
    client_email: str = "",
) -> dict:
    """Score questionnaire answers and build the client report.

    Args:
        answers: Question text -> answer text.
        tier: 'exec' for the executive summary, 'audit' (or 'full') for the strategic audit.
        client_name: Name used in the email greeting.
        client_email: Recipient email, echoed back in the response.
    """
    if not answers:
        raise ValueError("answers must not be empty")
    return run_diagnostic(answers, tier=tier, client_name=client_name, client_email=client_email)


# ─── Tool 2: Rule Configuration ──────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def gtm_rule_config(pillar: Optional[str] = None) -> dict:
    """Show the active scoring rules and alignment bands.

    Args:
        pillar: Optional pillar key to show only that pillar's rules.
    """
    config = get_rule_config().model_dump(mode="json")
    if pillar:
        rules = config["score_rules"].get(pillar)
        if rules is None:
            raise ValueError(f"Unknown pillar: {pillar}. Use one of {', '.join(config['score_rules'])}")
        config["score_rules"] = {pillar: rules}
    return config


def main():
    """Entry point for the CLI command."""
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    config = get_rule_config()
    logger.info("Rule configuration %s loaded", config.version)
    mcp.run(transport=os.environ.get("MCP_TRANSPORT", "streamable-http"))


if __name__ == "__main__":
    main()
