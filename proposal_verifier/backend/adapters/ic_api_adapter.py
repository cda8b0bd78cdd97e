from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from proposal_verifier.backend import constants
from proposal_verifier.backend.adapters.http_adapter import env_str, network_error
from proposal_verifier.backend.engine import hex_codec
from proposal_verifier.backend.engine.errors import NetworkUnavailable
from proposal_verifier.backend.engine.scanner import extract_payload_rendering


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProposalRecord:
	proposal_id: int
	summary: str
	raw_text: str
	title: Optional[str] = None
	url: Optional[str] = None
	topic: Optional[str] = None
	action: Optional[str] = None
	wasm_module_hash: Optional[str] = None
	arg_hash: Optional[str] = None
	release_package_sha256_hex: Optional[str] = None
	payload_rendering: Optional[str] = None


def base_url() -> str:
	return env_str("VERIFIER_IC_API_URL", constants.DEFAULT_IC_API_URL).rstrip("/")


def unwrap_opt(value: Any) -> Any:
	"""Collapse the `[] | [T]` optional convention into `None | T`."""
	if isinstance(value, list):
		if not value:
			return None
		if len(value) == 1 and not isinstance(value[0], int):
			return value[0]
	return value


def _text(value: Any) -> Optional[str]:
	value = unwrap_opt(value)
	if isinstance(value, str) and value.strip():
		return value.strip()
	return None


def _digest_field(payload: Dict[str, Any], key: str) -> Optional[str]:
	value = unwrap_opt(payload.get(key))
	if isinstance(value, list) and value and all(isinstance(v, int) and 0 <= v <= 255 for v in value):
		value = hex_codec.encode(bytes(value))
	if isinstance(value, str) and hex_codec.is_digest_hex(value):
		return hex_codec.canonical(value)
	return None


def parse_proposal(proposal_id: int, raw_text: str) -> ProposalRecord:
	try:
		document = json.loads(raw_text)
	except ValueError as exc:
		raise NetworkUnavailable(f"Proposal {proposal_id} response was not JSON.") from exc
	if not isinstance(document, dict):
		raise NetworkUnavailable(f"Proposal {proposal_id} response had an unexpected shape.")
	payload = unwrap_opt(document.get("payload"))
	payload = payload if isinstance(payload, dict) else {}
	return ProposalRecord(
		proposal_id=proposal_id,
		summary=_text(document.get("summary")) or "",
		raw_text=raw_text,
		title=_text(document.get("title")),
		url=_text(document.get("url")),
		topic=_text(document.get("topic")),
		action=_text(document.get("action")),
		wasm_module_hash=_digest_field(payload, "wasm_module_hash"),
		arg_hash=_digest_field(payload, "arg_hash"),
		release_package_sha256_hex=_digest_field(payload, "release_package_sha256_hex"),
		payload_rendering=extract_payload_rendering(document),
	)


class IcApiClient:
	def __init__(self, client: httpx.AsyncClient, url: Optional[str] = None):
		self._client = client
		self._base_url = (url or base_url()).rstrip("/")

	async def fetch_proposal(self, proposal_id: int) -> ProposalRecord:
		target = f"{self._base_url}/proposals/{proposal_id}"
		try:
			response = await self._client.get(target)
		except httpx.HTTPError as exc:
			raise network_error(f"Proposal {proposal_id} fetch", exc) from exc
		if response.status_code != 200:
			raise NetworkUnavailable(f"Proposal {proposal_id} fetch returned HTTP {response.status_code}.")
		record = parse_proposal(proposal_id, response.text)
		logger.info("Fetched proposal %s (topic=%s)", proposal_id, record.topic)
		return record

	async def fetch_payload_rendering(self, proposal_id: int) -> Optional[str]:
		candidates = (
			f"{self._base_url}/proposals/{proposal_id}/payload",
			f"{self._base_url}/proposals/{proposal_id}?include=payload_text_rendering",
		)
		for target in candidates:
			try:
				response = await self._client.get(target)
			except httpx.HTTPError as exc:
				logger.warning("Payload endpoint %s failed: %s", target, exc)
				continue
			if response.status_code != 200:
				continue
			text = response.text
			try:
				rendering = extract_payload_rendering(json.loads(text))
			except ValueError:
				rendering = text.strip() or None
			if rendering:
				return rendering
		return None
