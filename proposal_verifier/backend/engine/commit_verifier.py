# proposal_verifier/backend/engine/commit_verifier.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from .errors import VerifierError
from .types import CommitCheckResult


SUCCESS_MARK = "✅"
FAILURE_MARK = "❌"

UNCHECKED = "unchecked"
PRIMARY_PENDING = "primary-pending"
PRIMARY_FAILED = "primary-failed"
FALLBACK_PENDING = "fallback-pending"
RESOLVED = "resolved"

_TRANSITIONS = {
	UNCHECKED: {PRIMARY_PENDING},
	PRIMARY_PENDING: {PRIMARY_FAILED, RESOLVED},
	PRIMARY_FAILED: {FALLBACK_PENDING},
	FALLBACK_PENDING: {RESOLVED},
	RESOLVED: set(),
}


@dataclass(frozen=True)
class LookupOutcome:
	exists: bool
	detail: str


CommitLookup = Callable[[str, str], Awaitable[LookupOutcome]]


@dataclass
class CommitCheck:
	repository: str
	commit: str
	state: str = UNCHECKED
	history: List[str] = field(default_factory=lambda: [UNCHECKED])
	result: Optional[CommitCheckResult] = None

	def advance(self, state: str) -> None:
		if state not in _TRANSITIONS[self.state]:
			raise RuntimeError(f"Illegal commit check transition {self.state} -> {state}.")
		self.state = state
		self.history.append(state)


class CommitVerifier:
	"""Primary lookup, then exactly one fallback lookup when the primary fails or errors."""

	def __init__(self, primary: CommitLookup, fallback: CommitLookup):
		self._primary = primary
		self._fallback = fallback

	async def check(self, repository: str, commit: str) -> CommitCheck:
		run = CommitCheck(repository=repository, commit=commit)
		run.advance(PRIMARY_PENDING)
		primary_detail = await self._attempt(self._primary, repository, commit)
		if isinstance(primary_detail, LookupOutcome) and primary_detail.exists:
			run.advance(RESOLVED)
			run.result = CommitCheckResult(repository, commit, True, "primary", primary_detail.detail)
			return run

		run.advance(PRIMARY_FAILED)
		run.advance(FALLBACK_PENDING)
		fallback_detail = await self._attempt(self._fallback, repository, commit)
		run.advance(RESOLVED)
		if isinstance(fallback_detail, LookupOutcome) and fallback_detail.exists:
			run.result = CommitCheckResult(repository, commit, True, "fallback", fallback_detail.detail)
		else:
			run.result = CommitCheckResult(
				repository,
				commit,
				False,
				"fallback",
				_detail_text(primary_detail) or _detail_text(fallback_detail) or "Commit not found",
			)
		return run

	async def verify(self, repository: str, commit: str) -> CommitCheckResult:
		run = await self.check(repository, commit)
		if run.result is None:
			raise RuntimeError(f"Commit check for {repository}@{commit} ended without a result.")
		return run.result

	@staticmethod
	async def _attempt(lookup: CommitLookup, repository: str, commit: str):
		try:
			return await lookup(repository, commit)
		except VerifierError as exc:
			return exc


def _detail_text(outcome) -> str:
	if isinstance(outcome, LookupOutcome):
		return outcome.detail
	if isinstance(outcome, VerifierError):
		return outcome.message
	return ""


def format_commit_status(result: CommitCheckResult) -> str:
	if not result.exists:
		return f"{FAILURE_MARK} {result.detail}"
	status = f"{SUCCESS_MARK} Commit exists on {result.repository}@{result.commit[:12]}"
	if result.tier == "fallback":
		status += " (fallback lookup)"
	return status


def missing_commit_status() -> str:
	return f"{FAILURE_MARK} No commit found in summary"
