"""Tools for managing the custom domain allowlist."""

from __future__ import annotations

import json
import logging

from medium_mcp.config import (
    DEFAULT_MEDIUM_DOMAINS,
    env_domains,
    get_valid_domains,
    invalidate_domain_cache,
    load_settings,
    save_settings,
    settings_path,
)
from medium_mcp.schemas import DomainInput
from medium_mcp.utils.errors import tool_error

logger = logging.getLogger(__name__)


async def add_domain(arguments: dict) -> str:
    """Add a custom Medium partner domain and persist it."""
    try:
        domain = DomainInput(**arguments).domain
        if "." not in domain:
            raise ValueError("Invalid domain format. Domain must include a dot.")

        if domain in DEFAULT_MEDIUM_DOMAINS:
            return json.dumps({
                "message": f"Domain '{domain}' is already a default domain.",
                "domain": domain,
            }, indent=2)

        settings = load_settings()
        if domain in settings.additional_domains:
            return json.dumps({
                "message": f"Domain '{domain}' already exists in custom domains.",
                "domain": domain,
            }, indent=2)

        settings.additional_domains.append(domain)
        save_settings(settings)
        invalidate_domain_cache()
        logger.info("Domain added: %s", domain)

        return json.dumps({
            "message": f"Domain added: {domain}",
            "domain": domain,
            "allDomains": get_valid_domains(),
        }, indent=2)

    except Exception as e:
        raise tool_error("add_domain", e) from e


async def remove_domain(arguments: dict) -> str:
    """Remove a custom domain. Default domains cannot be removed."""
    try:
        domain = DomainInput(**arguments).domain

        if domain in DEFAULT_MEDIUM_DOMAINS:
            raise ValueError(f"Cannot remove '{domain}' - it is a default domain.")

        settings = load_settings()
        if domain not in settings.additional_domains:
            raise ValueError(f"Domain '{domain}' not found in custom domains.")

        settings.additional_domains.remove(domain)
        save_settings(settings)
        invalidate_domain_cache()
        logger.info("Domain removed: %s", domain)

        return json.dumps({
            "message": f"Domain removed: {domain}",
            "domain": domain,
            "allDomains": get_valid_domains(),
        }, indent=2)

    except Exception as e:
        raise tool_error("remove_domain", e) from e


async def list_domains(arguments: dict) -> str:
    """Show default, custom, environment and merged domains."""
    try:
        return json.dumps({
            "defaultDomains": list(DEFAULT_MEDIUM_DOMAINS),
            "customDomains": load_settings().additional_domains,
            "envDomains": env_domains(),
            "allDomains": get_valid_domains(),
            "configPath": str(settings_path()),
        }, indent=2)

    except Exception as e:
        raise tool_error("list_domains", e) from e
