from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

from proposal_verifier.backend.engine import checklist, guidance
from proposal_verifier.backend.engine.types import ArgumentEvidence, DocEvidence
from proposal_verifier.backend.services.proposal_service import default_repository
from proposal_verifier.backend.services.session_store import VerificationSession


def confirm_rebuild(session: VerificationSession) -> None:
	session.recompute(rebuild_confirmed=True)


def confirm_manual_review(session: VerificationSession) -> None:
	session.manual_review_confirmed = True
	session.recompute()


def _doc_dict(doc: Optional[DocEvidence]) -> Optional[Dict[str, Any]]:
	if doc is None:
		return None
	data = asdict(doc)
	data["verifiable"] = doc.verifiable
	return data


def _argument_dict(evidence: Optional[ArgumentEvidence]) -> Optional[Dict[str, Any]]:
	return asdict(evidence) if evidence is not None else None


def build_guidance(session: VerificationSession) -> Dict[str, Any]:
	evidence = session.evidence
	if evidence is None:
		return {}
	candid_input = session.argument.raw_input if session.argument.input_kind == "candid" else ""
	return {
		"rebuild_script": guidance.rebuild_script(
			evidence.kind,
			evidence.repository or default_repository(),
			evidence.commit,
			evidence.artifact_path,
		),
		"release_commands": guidance.release_commands(evidence.release_urls, evidence.expected_digest),
		"didc_command": guidance.didc_encode_command(candid_input),
		"hash_verify_commands": guidance.hash_verify_commands(candid_input),
		"recommended_argument_command": evidence.argument_command,
	}


def serialize(session: VerificationSession) -> Dict[str, Any]:
	evidence = session.evidence
	kind = evidence.kind if evidence else "Unknown"
	return {
		"session_id": session.session_id,
		"updated_at": session.updated_at,
		"evidence": asdict(evidence) if evidence else None,
		"documents": [_doc_dict(doc) for doc in session.documents],
		"argument": _argument_dict(session.argument),
		"dfx_argument": _argument_dict(session.dfx_argument),
		"url_check": _doc_dict(session.url_check),
		"commit": {
			"status": session.commit_status,
			"result": asdict(session.commit_result) if session.commit_result else None,
			"history": list(session.commit_history),
		},
		"checklist": asdict(session.checklist),
		"type_checklist": checklist.type_checklist(kind, session.checklist, session.manual_review_confirmed),
		"manual_review_confirmed": session.manual_review_confirmed,
		"pending": sorted(session.pending),
	}
