from __future__ import annotations

import logging
from typing import Dict, Optional

from proposal_verifier.backend import constants
from proposal_verifier.backend.adapters import http_adapter
from proposal_verifier.backend.adapters.document_adapter import DocumentFetcher
from proposal_verifier.backend.engine import digest, hex_codec
from proposal_verifier.backend.engine.errors import AccessRestricted, VerifierError
from proposal_verifier.backend.engine.types import DocEvidence
from proposal_verifier.backend.services import session_store
from proposal_verifier.backend.services.session_store import VerificationSession


logger = logging.getLogger(__name__)

NOT_VERIFIABLE = "No 64-hex expected digest for this document; it cannot be verified."


def build_preview(data: bytes, content_type: str, filename: Optional[str] = None) -> str:
	kind = content_type or "binary"
	if kind.startswith("text/"):
		return data.decode("utf-8", errors="replace")[: constants.PREVIEW_CHARS] + "…"
	preview = f"{kind} ({len(data)} bytes)"
	if filename:
		preview += f" - Local file: {filename}"
	return preview


def apply_bytes(
	doc: DocEvidence,
	data: bytes,
	content_type: str,
	source: str,
	filename: Optional[str] = None,
) -> DocEvidence:
	"""Hash `data` into `doc` in place; no expected digest leaves the match unknown."""
	doc.source = source
	doc.error = None
	doc.computed_digest = digest.digest(data)
	doc.preview = build_preview(data, content_type, filename)
	if not doc.verifiable:
		doc.match = "unknown"
		doc.error = NOT_VERIFIABLE
		return doc
	doc.match = "match" if digest.matches(doc.computed_digest, doc.expected_hash) else "mismatch"
	return doc


def _fail(doc: DocEvidence, exc: VerifierError) -> None:
	# Earlier results on the entry stay as they were; only the error is reported.
	doc.error = exc.message
	if isinstance(exc, AccessRestricted) and exc.remediation:
		doc.error = f"{exc.message} {exc.remediation}"


def document_at(session: VerificationSession, index: int) -> DocEvidence:
	if index < 0 or index >= len(session.documents):
		raise LookupError("Document not found.")
	return session.documents[index]


def verify_upload(
	session: VerificationSession,
	index: int,
	data: bytes,
	filename: str,
	content_type: str,
) -> Dict[str, object]:
	doc = document_at(session, index)
	action = session_store.document_action(index)
	if not session.try_begin(action):
		return {"ignored": True, "action": action}
	try:
		apply_bytes(doc, data, content_type, "upload", filename=filename)
		session.recompute()
		logger.info("Document %s verified from upload: %s", doc.name, doc.match)
		return {"ignored": False, "action": action}
	finally:
		session.finish(action)


async def verify_from_url(session: VerificationSession, index: int, url: str) -> Dict[str, object]:
	doc = document_at(session, index)
	action = session_store.document_action(index)
	if not session.try_begin(action):
		return {"ignored": True, "action": action}
	generation = session.generation
	try:
		try:
			async with http_adapter.client() as client:
				fetched = await DocumentFetcher(client).fetch(url)
		except VerifierError as exc:
			if generation == session.generation:
				_fail(doc, exc)
				session.recompute()
			return {"ignored": False, "action": action}
		if generation != session.generation:
			return {"ignored": True, "action": action, "superseded": True}
		apply_bytes(doc, fetched.body, fetched.content_type, f"url:{fetched.via}")
		session.recompute()
		return {"ignored": False, "action": action}
	finally:
		session.finish(action)


async def check_url(session: VerificationSession, url: str, expected: Optional[str] = None) -> DocEvidence:
	"""Standalone URL hash check; reported on its own and not part of the document flag."""
	fallback_expected = session.evidence.expected_digest if session.evidence else None
	target = expected.strip() if expected and expected.strip() else fallback_expected
	result = DocEvidence(name=url, expected_hash=hex_codec.canonical(target) or None)
	if not session.try_begin(session_store.CHECK_URL):
		return session.url_check or result
	try:
		try:
			async with http_adapter.client() as client:
				fetched = await DocumentFetcher(client).fetch(url)
		except VerifierError as exc:
			_fail(result, exc)
		else:
			apply_bytes(result, fetched.body, fetched.content_type, f"url:{fetched.via}")
		session.url_check = result
		session.recompute()
		return result
	finally:
		session.finish(session_store.CHECK_URL)
