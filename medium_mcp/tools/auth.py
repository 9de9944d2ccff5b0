"""Login session tools: open a login window, save it, clear it, report it."""

from __future__ import annotations

import json

from medium_mcp import session_store
from medium_mcp.browser_manager import BrowserManager
from medium_mcp.utils.errors import tool_error


async def login(arguments: dict) -> str:
    try:
        manager = await BrowserManager.get_instance()
        return await manager.open_interactive_login()
    except Exception as e:
        raise tool_error("login", e) from e


async def save_login(arguments: dict) -> str:
    try:
        manager = await BrowserManager.get_instance()
        return await manager.persist_login_state()
    except Exception as e:
        raise tool_error("save_login", e) from e


async def logout(arguments: dict) -> str:
    try:
        manager = await BrowserManager.get_instance()
        return await manager.clear_login_state()
    except Exception as e:
        raise tool_error("logout", e) from e


async def login_status(arguments: dict) -> str:
    manager = await BrowserManager.get_instance()
    logged_in = manager.is_logged_in()
    return json.dumps({
        "loggedIn": logged_in,
        "storagePath": str(session_store.path()),
        "message": (
            "You are logged in. Member-only content should be accessible."
            if logged_in else
            "You are not logged in. Use 'login' to access member-only content."
        ),
    }, indent=2)
