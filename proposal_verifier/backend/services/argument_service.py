from __future__ import annotations

import logging
from typing import Dict, Optional

from proposal_verifier.backend.engine import argument
from proposal_verifier.backend.engine.types import ArgumentEvidence
from proposal_verifier.backend.services import session_store
from proposal_verifier.backend.services.session_store import VerificationSession


logger = logging.getLogger(__name__)


def _expected(session: VerificationSession, override: Optional[str]) -> Optional[str]:
	if override and override.strip():
		return override.strip()
	if session.evidence is not None:
		return session.evidence.argument_digest
	return None


def set_input(session: VerificationSession, kind: str, raw: str) -> ArgumentEvidence:
	if kind not in argument.INPUT_KINDS:
		raise ValueError(f"Unknown argument input kind '{kind}'.")
	session.argument = ArgumentEvidence(
		input_kind=kind,
		raw_input=raw,
		expected_digest=_expected(session, None),
		hint=argument.input_hint(kind, raw),
	)
	if kind == "candid":
		session.argument.error = argument.CANDID_NEEDS_ENCODING
	session.recompute()
	return session.argument


def quick_fill(session: VerificationSession, which: str) -> ArgumentEvidence:
	encoded = {"unit": argument.ENCODED_UNIT_HEX, "null": argument.ENCODED_NULL_HEX}.get(which)
	if encoded is None:
		raise ValueError("Quick fill must be 'unit' or 'null'.")
	evidence = set_input(session, "hex", encoded)
	evidence.hint = f"Candid encoding of `{'()' if which == 'unit' else '(null)'}`. These are the argument bytes in hex."
	return evidence


def verify(
	session: VerificationSession,
	kind: Optional[str] = None,
	raw: Optional[str] = None,
	expected: Optional[str] = None,
) -> Dict[str, object]:
	if not session.try_begin(session_store.VERIFY_ARGUMENT):
		return {"ignored": True, "action": session_store.VERIFY_ARGUMENT}
	try:
		current = session.argument
		input_kind = kind or current.input_kind
		if input_kind not in argument.INPUT_KINDS:
			raise ValueError(f"Unknown argument input kind '{input_kind}'.")
		raw_input = raw if raw is not None else current.raw_input
		result = argument.verify_argument(input_kind, raw_input, _expected(session, expected))
		if result.hint is None:
			result.hint = argument.input_hint(input_kind, raw_input)
		session.argument = result
		session.recompute()
		logger.info("Argument verification kind=%s matched=%s", input_kind, result.matched)
		return {"ignored": False, "action": session_store.VERIFY_ARGUMENT}
	finally:
		session.finish(session_store.VERIFY_ARGUMENT)


def verify_dfx(
	session: VerificationSession,
	text: str,
	expected: Optional[str] = None,
	field: str = "arg_hash",
) -> ArgumentEvidence:
	session.dfx_argument = argument.verify_dfx_output(text, _expected(session, expected), field=field)
	session.recompute()
	return session.dfx_argument
