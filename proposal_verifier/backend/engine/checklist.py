# proposal_verifier/backend/engine/checklist.py
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from .commit_verifier import SUCCESS_MARK
from .types import ArgumentEvidence, ChecklistState, DocEvidence, ProposalEvidence


MANUAL_REVIEW_KEY = "manual_review"

TYPE_CHECKLISTS: Dict[str, List[Tuple[str, str]]] = {
	"ProtocolCanisterManagement": [
		("Fetch Proposal", "fetched"),
		("Commit Check", "commit_verified"),
		("Expected WASM Hash Present", "expected_digest_known"),
		("Arg Hash Verified", "argument_digest_verified"),
		("WASM Rebuilt & Hash Matched", "manual_rebuild_confirmed"),
	],
	"IcOsVersionDeployment": [
		("Fetch Proposal", "fetched"),
		("Expected Release Hash Present", "expected_digest_known"),
		("Commit Check (if provided)", "commit_verified"),
		("Release Package Hash Verified", "document_digest_verified"),
	],
	"ParticipantManagement": [
		("Fetch Proposal", "fetched"),
		("All PDFs Hash-Matched", "document_digest_verified"),
		("Forum/Wiki Context Checked", MANUAL_REVIEW_KEY),
	],
	"Governance": [
		("Fetch Proposal", "fetched"),
		("Manual Policy Review", MANUAL_REVIEW_KEY),
	],
}


def _documents_verified(documents: Iterable[DocEvidence]) -> bool:
	verifiable = [doc for doc in documents if doc.verifiable]
	# No verifiable document means nothing was verified.
	return bool(verifiable) and all(doc.match == "match" for doc in verifiable)


def aggregate(
	evidence: Optional[ProposalEvidence],
	documents: Iterable[DocEvidence],
	argument: Optional[ArgumentEvidence],
	dfx_argument: Optional[ArgumentEvidence],
	commit_status: str,
	previous: Optional[ChecklistState] = None,
	rebuild_confirmed: bool = False,
) -> ChecklistState:
	sticky = bool(previous and previous.manual_rebuild_confirmed)
	return ChecklistState(
		fetched=evidence is not None,
		commit_verified=(commit_status or "").startswith(SUCCESS_MARK),
		argument_digest_verified=bool(argument and argument.matched) or bool(dfx_argument and dfx_argument.matched),
		document_digest_verified=_documents_verified(documents),
		expected_digest_known=bool(evidence and evidence.expected_digest),
		manual_rebuild_confirmed=sticky or rebuild_confirmed,
	)


def type_checklist(kind: str, state: ChecklistState, manual_review_confirmed: bool = False) -> List[Dict[str, object]]:
	items = []
	for label, key in TYPE_CHECKLISTS.get(kind, []):
		checked = manual_review_confirmed if key == MANUAL_REVIEW_KEY else bool(getattr(state, key))
		items.append({"label": label, "key": key, "checked": checked})
	return items
