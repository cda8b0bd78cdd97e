from __future__ import annotations

import logging
import os
from typing import Optional

import httpx

from proposal_verifier.backend import constants
from proposal_verifier.backend.engine.errors import NetworkUnavailable


logger = logging.getLogger(__name__)

USER_AGENT = f"proposal-verifier/{constants.APP_VERSION}"


def env_str(name: str, default: str = "") -> str:
	return os.getenv(name, "").strip() or default


def timeout_seconds() -> Optional[float]:
	raw = env_str("VERIFIER_HTTP_TIMEOUT_S")
	if not raw:
		return None
	try:
		value = float(raw)
	except ValueError:
		logger.warning("Ignoring non-numeric VERIFIER_HTTP_TIMEOUT_S=%r", raw)
		return None
	return value if value > 0 else None


def client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
	return httpx.AsyncClient(
		timeout=timeout_seconds(),
		transport=transport,
		follow_redirects=True,
		headers={"User-Agent": USER_AGENT},
	)


def network_error(what: str, exc: Exception) -> NetworkUnavailable:
	logger.warning("%s failed: %s", what, exc)
	return NetworkUnavailable(f"{what} failed: {exc.__class__.__name__}")
