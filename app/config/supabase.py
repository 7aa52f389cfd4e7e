# app/config/supabase.py
"""
The process-wide supabase-py client used by every store.

The client is created once, synchronously, from Settings. A missing or
malformed configuration leaves `.client` as None; stores then fail with
SupabaseClientNotInitialized on their first call instead of at import.

health_check() probes the tables the recipe stores cannot work without.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from supabase import Client, create_client  # supabase-py

from app.config.settings import Settings, settings

logger = logging.getLogger(__name__)

# https + project ref + .supabase.co
_SUPABASE_URL_RE = re.compile(r"^https://[A-Za-z0-9\-]+\.supabase\.co/?$")

REQUIRED_TABLES: Tuple[str, ...] = (
    "recipes",
    "recipe_ingredients",
    "preparation_steps",
    "ingredients",
)


class SupabaseClient:
    """Holds the supabase `Client` (or None) plus non-secret diagnostics."""

    def __init__(self, config: Optional[Settings] = None) -> None:
        self._settings = config or settings
        self._client: Optional[Client] = None
        self._init_error: Optional[str] = None
        self._missing_tables: List[str] = []
        self._connect()

    def _connect(self) -> None:
        url = (self._settings.supabase_url or "").strip()
        key = self._settings.supabase_service_role_key or ""

        if not url or not key:
            self._init_error = "credentials missing"
            logger.debug("Supabase not configured: url=%r key_present=%s", url, bool(key))
            return
        if not _SUPABASE_URL_RE.match(url):
            self._init_error = "invalid url"
            logger.error("Supabase URL %r is not https://<project>.supabase.co", url)
            return

        try:
            self._client = create_client(url, key)
        except Exception as exc:
            self._init_error = f"create_client failed: {exc}"
            logger.exception("Failed to create Supabase client for %s", urlparse(url).netloc)
            return
        logger.info("Supabase client ready for host=%s", urlparse(url).netloc)

    @property
    def client(self) -> Optional[Client]:
        return self._client

    def diagnostics(self) -> Dict[str, Any]:
        """Configuration state safe to return from /health (no key material)."""
        url = self._settings.supabase_url
        return {
            "configured": bool(url and self._settings.supabase_service_role_key),
            "client_present": self._client is not None,
            "host": (urlparse(url).netloc or "parse-error") if url else None,
            "init_error": self._init_error,
            "missing_tables": list(self._missing_tables),
        }

    def missing_tables(self) -> List[str]:
        """Required tables a one-row select fails on. Runs synchronously."""
        missing = []
        for name in REQUIRED_TABLES:
            try:
                self._client.table(name).select("id").limit(1).execute()
            except Exception as exc:
                logger.warning("Supabase table %s is not readable: %s", name, exc)
                missing.append(name)
        return missing

    def health_check(self) -> bool:
        """
        True when a client exists and every required table answers a select.

        Blocking; the app calls it from a threadpool executor.
        """
        if self._client is None:
            logger.debug("Supabase health_check: no client (%s)", self._init_error)
            return False
        self._missing_tables = self.missing_tables()
        return not self._missing_tables


supabase_client = SupabaseClient()
