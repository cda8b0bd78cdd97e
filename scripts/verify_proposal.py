#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
	sys.path.insert(0, str(REPO_ROOT))

from proposal_verifier.backend.engine.errors import VerifierError  # noqa: E402
from proposal_verifier.backend.services import proposal_service, session_service, session_store  # noqa: E402


def _summary_lines(snapshot: Dict[str, Any]) -> list:
	evidence = snapshot.get("evidence") or {}
	lines = [
		f"proposal: {evidence.get('proposal_id')} ({evidence.get('kind')})",
		f"title: {evidence.get('title') or '-'}",
		f"expected digest: {evidence.get('expected_digest') or '-'} [{evidence.get('expected_digest_source') or 'none'}]",
		f"argument digest: {evidence.get('argument_digest') or '-'}",
		f"commit: {snapshot['commit']['status']}",
	]
	for doc in snapshot.get("documents", []):
		lines.append(f"document: {doc['name']} expected={doc.get('expected_hash') or '-'}")
	for name, value in snapshot["checklist"].items():
		lines.append(f"[{'x' if value else ' '}] {name}")
	return lines


async def _run(proposal_id: int) -> Dict[str, Any]:
	session = session_store.ensure_session("cli")
	await proposal_service.fetch_proposal(session, proposal_id)
	snapshot = session_service.serialize(session)
	snapshot["guidance"] = session_service.build_guidance(session)
	return snapshot


def main() -> int:
	parser = argparse.ArgumentParser(description="Fetch a governance proposal and report its verification evidence.")
	parser.add_argument("proposal_id", type=int, help="Numeric proposal id.")
	parser.add_argument("--json", action="store_true", help="Print the full session snapshot as JSON.")
	args = parser.parse_args()

	if args.proposal_id <= 0:
		raise SystemExit("Proposal id must be a positive integer.")

	try:
		snapshot = asyncio.run(_run(args.proposal_id))
	except VerifierError as exc:
		print(f"error: {exc.code}: {exc.message}", file=sys.stderr)
		return 2

	if args.json:
		print(json.dumps(snapshot, indent=2, sort_keys=True))
	else:
		print("\n".join(_summary_lines(snapshot)))
	return 0


if __name__ == "__main__":
	raise SystemExit(main())
