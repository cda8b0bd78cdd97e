from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Dict, List, Optional, Set

from proposal_verifier.backend import constants
from proposal_verifier.backend.engine import checklist
from proposal_verifier.backend.engine.types import (
	ArgumentEvidence,
	ChecklistState,
	CommitCheckResult,
	DocEvidence,
	ProposalEvidence,
)


FETCH_PROPOSAL = "fetch_proposal"
VERIFY_ARGUMENT = "verify_argument"
CHECK_COMMIT = "check_commit"
CHECK_URL = "check_url"


def document_action(index: int) -> str:
	return f"verify_document:{index}"


@dataclass
class VerificationSession:
	session_id: str
	updated_at: str
	evidence: Optional[ProposalEvidence] = None
	documents: List[DocEvidence] = field(default_factory=list)
	argument: ArgumentEvidence = field(default_factory=ArgumentEvidence)
	dfx_argument: Optional[ArgumentEvidence] = None
	url_check: Optional[DocEvidence] = None
	commit_status: str = ""
	commit_result: Optional[CommitCheckResult] = None
	commit_history: List[str] = field(default_factory=list)
	checklist: ChecklistState = field(default_factory=ChecklistState)
	manual_review_confirmed: bool = False
	pending: Set[str] = field(default_factory=set)
	generation: int = 0

	def recompute(self, rebuild_confirmed: bool = False) -> ChecklistState:
		self.checklist = checklist.aggregate(
			self.evidence,
			self.documents,
			self.argument,
			self.dfx_argument,
			self.commit_status,
			previous=self.checklist,
			rebuild_confirmed=rebuild_confirmed,
		)
		self.updated_at = _now_iso()
		return self.checklist

	def try_begin(self, action: str) -> bool:
		"""Mark `action` in flight; False when the same action is already pending."""
		if action in self.pending:
			return False
		self.pending.add(action)
		return True

	def finish(self, action: str) -> None:
		self.pending.discard(action)


_STORE: Dict[str, VerificationSession] = {}
_LOCK = Lock()


def _now() -> datetime:
	return datetime.now(timezone.utc)


def _now_iso() -> str:
	return _now().isoformat().replace("+00:00", "Z")


def ttl_seconds() -> int:
	raw = os.getenv("VERIFIER_SESSION_TTL_S", "").strip()
	if not raw:
		return constants.DEFAULT_SESSION_TTL_SECONDS
	try:
		value = int(raw)
	except ValueError:
		return constants.DEFAULT_SESSION_TTL_SECONDS
	return value if value >= 60 else constants.DEFAULT_SESSION_TTL_SECONDS


def _evict_expired_locked() -> None:
	now = _now()
	ttl = timedelta(seconds=ttl_seconds())
	expired: List[str] = []
	for session_id, session in _STORE.items():
		if session.pending:
			continue
		try:
			updated = datetime.fromisoformat(session.updated_at.replace("Z", "+00:00"))
		except ValueError:
			expired.append(session_id)
			continue
		if now - updated > ttl:
			expired.append(session_id)
	for session_id in expired:
		_STORE.pop(session_id, None)


def ensure_session(session_id: str) -> VerificationSession:
	with _LOCK:
		_evict_expired_locked()
		session = _STORE.get(session_id)
		if session is None:
			session = VerificationSession(session_id=session_id, updated_at=_now_iso())
			_STORE[session_id] = session
		return session


def get_session(session_id: str) -> Optional[VerificationSession]:
	with _LOCK:
		_evict_expired_locked()
		return _STORE.get(session_id)


def reset() -> None:
	with _LOCK:
		_STORE.clear()
