from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from proposal_verifier.backend.engine import argument, blob_parser, digest, hex_codec, scanner


def _bytes_for(kind: str, value: str) -> bytes:
	if kind == "hex":
		return hex_codec.decode(value)
	if kind == "vec":
		return argument.parse_vec_literal(value)
	if kind == "blob":
		return blob_parser.parse_literal(value)
	return value.encode("utf-8")


def digest_input(kind: str, value: str, expected: Optional[str] = None) -> Dict[str, object]:
	"""Hash exactly the bytes the input denotes; an empty text hashes the empty byte sequence."""
	data = _bytes_for(kind, value)
	computed = digest.digest(data)
	return {
		"kind": kind,
		"byte_length": len(data),
		"digest": computed,
		"expected": expected,
		"matched": digest.matches(computed, expected),
	}


def scan_text(text: str, markers: Optional[Sequence[str]] = None) -> Dict[str, object]:
	documents: List[Dict[str, object]] = [
		{"name": doc.name, "expected_hash": doc.expected_hash} for doc in scanner.find_documents(text)
	]
	return {
		"urls": scanner.find_urls(text),
		"release_urls": scanner.find_release_urls(text),
		"digest": scanner.find_digest_near_markers(text, markers or scanner.DIGEST_MARKERS),
		"structured_syntax": scanner.detect_structured_syntax(text),
		"commit": scanner.find_commit(text),
		"repository": scanner.find_repository(text),
		"documents": documents,
		"artifact_path": scanner.find_artifact_path(text),
	}
