# app/db/client.py
"""
Supabase client accessor / diagnostics.

Keep this file strictly focused on returning the already-initialized global
Supabase client (created in app.config.supabase). Fail fast and provide
diagnostic helpers so API endpoints can include useful, non-sensitive info
about the client's state when returning status to callers.

Usage:
    from app.db.client import get_supabase_client, get_client_diagnostics

    client = get_supabase_client()
    # or
    diag = get_client_diagnostics()
"""
import logging
from typing import Any, Dict

from app.config import supabase as supabase_config

logger = logging.getLogger(__name__)


class SupabaseClientNotInitialized(RuntimeError):
    """Raised when the supabase client is not available at runtime."""


def get_supabase_client() -> Any:
    """
    Return the initialized Supabase client.

    Raises:
        SupabaseClientNotInitialized: if the supabase client is not available.
    """
    client = getattr(supabase_config.supabase_client, "client", None)

    if client is None:
        msg = (
            "Supabase client is not initialized. Check that SUPABASE_URL and "
            "SUPABASE_SERVICE_ROLE_KEY are set and valid, and look for errors "
            "logged by app.config.supabase at import time."
        )
        logger.error(msg)
        raise SupabaseClientNotInitialized(msg)

    if not hasattr(client, "table"):
        logger.warning(
            "Supabase client exists but has no `table` attribute; "
            "this may indicate a custom wrapper or a different client library."
        )

    return client


def is_initialized() -> bool:
    """Cheap check for whether the supabase client appears initialized."""
    try:
        get_supabase_client()
    except SupabaseClientNotInitialized:
        return False
    return True


def get_client_diagnostics() -> Dict[str, Any]:
    """
    Return a small, non-sensitive diagnostics dict about the supabase client.

    This is intended to be safe to include in API health responses or logs.
    DO NOT include secrets, tokens, or connection strings; only structural info.

    Example return:
    {
        "initialized": True,
        "has_table": True,
        "configured": True,
        "host": "abc.supabase.co",
    }
    """
    wrapper = supabase_config.supabase_client
    client = getattr(wrapper, "client", None)
    diag: Dict[str, Any] = {
        "initialized": client is not None,
        "has_table": client is not None and hasattr(client, "table"),
    }
    diagnostics_fn = getattr(wrapper, "diagnostics", None)
    if callable(diagnostics_fn):
        diag.update(diagnostics_fn())
    return diag
