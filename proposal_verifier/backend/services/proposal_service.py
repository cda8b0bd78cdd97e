from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from proposal_verifier.backend import constants
from proposal_verifier.backend.adapters import http_adapter
from proposal_verifier.backend.adapters.ic_api_adapter import IcApiClient, ProposalRecord
from proposal_verifier.backend.adapters.source_control_adapter import SourceControlClient
from proposal_verifier.backend.engine import scanner
from proposal_verifier.backend.engine.commit_verifier import (
	FAILURE_MARK,
	CommitCheck,
	CommitVerifier,
	format_commit_status,
	missing_commit_status,
)
from proposal_verifier.backend.engine.types import ArgumentEvidence, DocEvidence, ProposalEvidence
from proposal_verifier.backend.services import session_store
from proposal_verifier.backend.services.session_store import VerificationSession


logger = logging.getLogger(__name__)

_REPOSITORY_RE = re.compile(r"^[\w.-]+/[\w.-]+$")
_COMMIT_RE = re.compile(r"^[0-9a-fA-F]{7,40}$")

CANDID_PREFILL_HINT = (
	"Detected Candid-like text in the payload. Encode it with didc, "
	"then verify the resulting hex bytes."
)


def default_repository() -> str:
	return http_adapter.env_str("VERIFIER_DEFAULT_REPOSITORY", constants.DEFAULT_REPOSITORY)


def build_evidence(record: ProposalRecord) -> ProposalEvidence:
	summary = record.summary
	rendering = record.payload_rendering or ""
	evidence = ProposalEvidence(
		proposal_id=record.proposal_id,
		summary=summary,
		kind=constants.TOPIC_KINDS.get(record.topic or "", "Unknown"),
		title=record.title,
		url=record.url,
		repository=scanner.find_repository(summary),
		commit=scanner.find_commit(summary) or scanner.find_commit(rendering),
		documents=scanner.find_documents(summary),
		artifact_path=scanner.find_artifact_path(summary),
		urls=scanner.find_urls("\n".join(filter(None, [record.url, summary]))),
		release_urls=scanner.find_release_urls(record.raw_text),
		payload_rendering=record.payload_rendering,
		argument_command=scanner.find_argument_command(summary),
	)
	evidence.fill_expected_digest(record.wasm_module_hash or record.release_package_sha256_hex, "dashboard")
	evidence.fill_expected_digest(scanner.find_digest_near_markers(summary), "summary-heuristic")
	evidence.fill_expected_digest(scanner.find_digest_near_markers(record.raw_text), "ic-api-heuristic")

	evidence.fill_argument_digest(record.arg_hash, "dashboard")
	arg_guess = scanner.find_digest_near_markers(record.raw_text, ["arg_hash"], fallback_any=False)
	if arg_guess and arg_guess.lower() != evidence.expected_digest:
		evidence.fill_argument_digest(arg_guess, "ic-api-heuristic")
	return evidence


def _initial_argument(evidence: ProposalEvidence) -> ArgumentEvidence:
	rendering = evidence.payload_rendering or ""
	if rendering and scanner.detect_structured_syntax(rendering):
		return ArgumentEvidence(
			input_kind="candid",
			raw_input=rendering,
			expected_digest=evidence.argument_digest,
			hint=CANDID_PREFILL_HINT,
		)
	return ArgumentEvidence(input_kind="text", expected_digest=evidence.argument_digest)


async def _run_commit_check(client, repository: str, commit: str) -> CommitCheck:
	source_control = SourceControlClient(client)
	verifier = CommitVerifier(source_control.primary_lookup, source_control.fallback_lookup)
	run = await verifier.check(repository, commit)
	if run.result and run.result.tier == "fallback":
		logger.warning("Commit %s on %s resolved by fallback lookup (exists=%s)", commit, repository, run.result.exists)
	return run


def _apply_commit_check(session: VerificationSession, run: Optional[CommitCheck]) -> None:
	if run is None or run.result is None:
		session.commit_result = None
		session.commit_history = []
		session.commit_status = missing_commit_status()
		return
	session.commit_result = run.result
	session.commit_history = list(run.history)
	session.commit_status = format_commit_status(run.result)


def _invalid_commit_reference(repository: str, commit: str) -> Optional[str]:
	if not _REPOSITORY_RE.match(repository):
		return f"{FAILURE_MARK} Invalid repository reference '{repository}'"
	if not _COMMIT_RE.match(commit):
		return f"{FAILURE_MARK} Invalid commit identifier '{commit}'"
	return None


async def fetch_proposal(session: VerificationSession, proposal_id: int) -> Dict[str, object]:
	"""Fetch, scan and commit-check a proposal, then replace the session's evidence.

	Upstream failures propagate as NetworkUnavailable before any session field
	is touched, so the previously loaded proposal stays intact.
	"""
	if not session.try_begin(session_store.FETCH_PROPOSAL):
		return {"ignored": True, "action": session_store.FETCH_PROPOSAL}
	try:
		async with http_adapter.client() as client:
			ic_api = IcApiClient(client)
			record = await ic_api.fetch_proposal(proposal_id)
			evidence = build_evidence(record)
			if not evidence.expected_digest or not evidence.payload_rendering:
				rendering = await ic_api.fetch_payload_rendering(proposal_id)
				if rendering:
					evidence.payload_rendering = evidence.payload_rendering or rendering
					evidence.fill_expected_digest(scanner.find_digest_near_markers(rendering), "payload-endpoint")

			repository = evidence.repository or default_repository()
			run = None
			invalid = None
			if evidence.commit:
				invalid = _invalid_commit_reference(repository, evidence.commit)
				if invalid is None:
					run = await _run_commit_check(client, repository, evidence.commit)

		session.generation += 1
		session.evidence = evidence
		session.documents = [DocEvidence(name=ref.name, expected_hash=ref.expected_hash) for ref in evidence.documents]
		session.argument = _initial_argument(evidence)
		session.dfx_argument = None
		session.url_check = None
		_apply_commit_check(session, run)
		if invalid:
			session.commit_status = invalid
		session.recompute()
		logger.info(
			"Loaded proposal %s kind=%s expected_digest_source=%s",
			proposal_id,
			evidence.kind,
			evidence.expected_digest_source,
		)
		return {"ignored": False, "action": session_store.FETCH_PROPOSAL}
	finally:
		session.finish(session_store.FETCH_PROPOSAL)


async def check_commit(
	session: VerificationSession,
	repository: Optional[str] = None,
	commit: Optional[str] = None,
) -> Dict[str, object]:
	if not session.try_begin(session_store.CHECK_COMMIT):
		return {"ignored": True, "action": session_store.CHECK_COMMIT}
	try:
		evidence = session.evidence
		repo = repository or (evidence.repository if evidence else None) or default_repository()
		target = commit or (evidence.commit if evidence else None)
		generation = session.generation
		if not target:
			_apply_commit_check(session, None)
		elif _invalid_commit_reference(repo, target):
			session.commit_result = None
			session.commit_history = []
			session.commit_status = _invalid_commit_reference(repo, target) or ""
		else:
			async with http_adapter.client() as client:
				run = await _run_commit_check(client, repo, target)
			if generation != session.generation:
				return {"ignored": True, "action": session_store.CHECK_COMMIT, "superseded": True}
			_apply_commit_check(session, run)
		session.recompute()
		return {"ignored": False, "action": session_store.CHECK_COMMIT}
	finally:
		session.finish(session_store.CHECK_COMMIT)
