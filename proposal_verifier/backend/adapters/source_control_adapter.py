from __future__ import annotations

import logging
from typing import Optional

import httpx

from proposal_verifier.backend import constants
from proposal_verifier.backend.adapters.http_adapter import env_str, network_error
from proposal_verifier.backend.engine.commit_verifier import LookupOutcome


logger = logging.getLogger(__name__)

_GITHUB_API_HEADERS = {
	"Accept": "application/vnd.github.v3+json",
	"X-GitHub-Api-Version": "2022-11-28",
}


class SourceControlClient:
	def __init__(
		self,
		client: httpx.AsyncClient,
		web_url: Optional[str] = None,
		api_url: Optional[str] = None,
	):
		self._client = client
		self._web_url = (web_url or env_str("VERIFIER_GITHUB_WEB_URL", constants.DEFAULT_GITHUB_WEB_URL)).rstrip("/")
		self._api_url = (api_url or env_str("VERIFIER_GITHUB_API_URL", constants.DEFAULT_GITHUB_API_URL)).rstrip("/")

	async def primary_lookup(self, repository: str, commit: str) -> LookupOutcome:
		target = f"{self._web_url}/{repository}/commit/{commit}"
		try:
			response = await self._client.head(target)
		except httpx.HTTPError as exc:
			raise network_error("Primary commit lookup", exc) from exc
		if response.status_code == 200:
			return LookupOutcome(True, f"Commit page found ({target})")
		return LookupOutcome(False, f"Commit not found on {repository} (HTTP {response.status_code})")

	async def fallback_lookup(self, repository: str, commit: str) -> LookupOutcome:
		target = f"{self._api_url}/repos/{repository}/commits/{commit}"
		try:
			response = await self._client.get(target, headers=_GITHUB_API_HEADERS)
		except httpx.HTTPError as exc:
			raise network_error("Fallback commit lookup", exc) from exc
		if response.status_code != 200:
			return LookupOutcome(False, f"Commit not found on {repository} (HTTP {response.status_code})")
		try:
			body = response.json()
		except ValueError:
			return LookupOutcome(False, "Fallback commit lookup returned non-JSON content")
		sha = body.get("sha") if isinstance(body, dict) else None
		if sha:
			return LookupOutcome(True, f"Commit {sha} found via API")
		return LookupOutcome(False, "Fallback commit lookup response had no commit identifier")
