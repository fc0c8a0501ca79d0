"""
Attention engine MCP Server

Exposes the attention feed and its mutations via Model Context Protocol (MCP).
The caller is fixed per server process (ATTENTION_MCP_USER_ID).
"""

import logging
import os
from typing import Optional

from fastmcp import FastMCP

from attention_engine.config import load_settings, project_root
from attention_engine.engine.errors import UnauthorizedError
from attention_engine.service import AttentionService, build_default_service

logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="attention-engine",
    instructions="""
    You are the attention engine, a ranked view of what needs the user's attention.

    The feed has four sections: decision_required, action_required,
    informational and alignment. Each item carries an attention_id, a score
    and a score_breakdown explaining the score.

    Use acknowledge, mark_read, snooze or dismiss with an item's attention_id
    once the user has dealt with it.
    """
)

_service: Optional[AttentionService] = None


def get_service() -> AttentionService:
    global _service
    if _service is None:
        from attention_engine.db.database import init_db
        init_db()
        _service = build_default_service(load_settings())
    return _service


def _current_user() -> str:
    user_id = os.getenv("ATTENTION_MCP_USER_ID")
    if not user_id:
        raise UnauthorizedError("ATTENTION_MCP_USER_ID is not set")
    return user_id


# =============================================================================
# Feed
# =============================================================================

@mcp.tool
async def get_attention_feed(window_hours: int = 24) -> dict:
    """
    Get the ranked attention feed.

    Args:
        window_hours: Lookback window in hours (1 to 720)

    Returns:
        sections, counts, generated_at, window_start, window_hours and
        degraded_sources (collectors that failed this time)
    """
    feed = await get_service().get_feed(_current_user(), window_hours)
    return feed.model_dump(mode="json")


# =============================================================================
# Mutations
# =============================================================================

@mcp.tool
async def acknowledge(attention_id: str) -> dict:
    """Mark an item as acknowledged."""
    await get_service().acknowledge(_current_user(), attention_id)
    return {"success": True}


@mcp.tool
async def mark_read(attention_id: str) -> dict:
    """Mark an item as read. Does not undo an acknowledgement."""
    await get_service().mark_read(_current_user(), attention_id)
    return {"success": True}


@mcp.tool
async def snooze(attention_id: str, snoozed_until: Optional[str] = None, hours: Optional[float] = None) -> dict:
    """
    Hide an item until a time or for a number of hours.

    Args:
        attention_id: Item to snooze
        snoozed_until: ISO-8601 timestamp in the future
        hours: Hours from now (used when snoozed_until is not given)
    """
    if snoozed_until is None and hours is not None:
        await get_service().snooze_for(_current_user(), attention_id, hours)
    else:
        await get_service().snooze(_current_user(), attention_id, snoozed_until)
    return {"success": True}


@mcp.tool
async def dismiss(attention_id: str, reason: Optional[str] = None, note: Optional[str] = None) -> dict:
    """
    Dismiss an item permanently.

    Args:
        attention_id: Item to dismiss
        reason: duplicate, incorrect_signal, not_my_responsibility or no_longer_relevant
        note: Free text, only with a reason
    """
    if reason is not None or note is not None:
        await get_service().dismiss_with_reason(_current_user(), attention_id, reason, note)
    else:
        await get_service().dismiss(_current_user(), attention_id)
    return {"success": True}


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Run attention engine MCP server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport type: stdio (local) or http (network)"
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (for HTTP transport, default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8001,
        help="Port to bind to (for HTTP transport, default: 8001)"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.transport == "http":
        os.chdir(project_root)
        logger.info(f"Starting attention engine MCP server on {args.host}:{args.port}")
        mcp.run(transport="http", host=args.host, port=args.port)
    else:
        # STDIO transport (for local MCP clients)
        mcp.run()
