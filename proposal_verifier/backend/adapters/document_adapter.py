from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional
from urllib.parse import urlparse

import httpx

from proposal_verifier.backend import constants
from proposal_verifier.backend.adapters.http_adapter import env_str, network_error
from proposal_verifier.backend.engine.errors import AccessRestricted, NetworkUnavailable


logger = logging.getLogger(__name__)

RESTRICTED_REMEDIATION = (
	"This host does not allow direct fetches. Download the file in your browser, "
	"then verify it with the upload option, or configure VERIFIER_FETCH_RELAY_URL."
)


@dataclass(frozen=True)
class FetchedDocument:
	url: str
	body: bytes
	content_type: str
	via: str


def relay_url() -> Optional[str]:
	return env_str("VERIFIER_FETCH_RELAY_URL") or None


class DocumentFetcher:
	"""Relay fetch first; direct fetch only for hosts on the allow-list."""

	def __init__(
		self,
		client: httpx.AsyncClient,
		relay: Optional[str] = None,
		allowed_hosts: FrozenSet[str] = constants.DIRECT_FETCH_ALLOWED_HOSTS,
	):
		self._client = client
		self._relay = relay if relay is not None else relay_url()
		self._allowed_hosts = allowed_hosts

	async def fetch(self, url: str) -> FetchedDocument:
		parsed = urlparse(url or "")
		if parsed.scheme not in {"http", "https"} or not parsed.hostname:
			raise AccessRestricted("Only absolute http(s) URLs can be fetched.", RESTRICTED_REMEDIATION)

		primary_error: Optional[NetworkUnavailable] = None
		if self._relay:
			try:
				return await self._get(self._relay, "relay", params={"url": url}, source_url=url)
			except NetworkUnavailable as exc:
				primary_error = exc
				logger.warning("Relay fetch of %s failed, considering direct fetch", url)

		if parsed.hostname not in self._allowed_hosts:
			message = primary_error.message if primary_error else f"{parsed.hostname} is not reachable directly."
			raise AccessRestricted(message, RESTRICTED_REMEDIATION)
		return await self._get(url, "direct", source_url=url)

	async def _get(self, target: str, via: str, source_url: str, params: Optional[dict] = None) -> FetchedDocument:
		try:
			response = await self._client.get(target, params=params)
		except httpx.HTTPError as exc:
			raise network_error(f"Document fetch ({via})", exc) from exc
		if response.status_code != 200:
			raise NetworkUnavailable(f"Document fetch ({via}) returned HTTP {response.status_code}.")
		return FetchedDocument(
			url=source_url,
			body=response.content,
			content_type=response.headers.get("content-type", ""),
			via=via,
		)
