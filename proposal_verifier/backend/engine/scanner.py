# proposal_verifier/backend/engine/scanner.py
from __future__ import annotations

import json
import re
from typing import Any, Iterable, List, Optional, Sequence

from .types import DocRef


_URL_RE = re.compile(r"\bhttps?://[^\s]+", re.IGNORECASE)
_TRAILING_PUNCT = frozenset("]}.,;:'\"`")
_RELEASE_URL_RE = re.compile(
	r"https://download\.dfinity\.(?:systems|network)/ic/[0-9a-f]{40}/[^\"'\s]+",
	re.IGNORECASE,
)
_RELEASE_HOST_RE = re.compile(r"^https://download\.dfinity\.(?:systems|network)/", re.IGNORECASE)
_HEX64_RE = re.compile(r"(?<![0-9A-Fa-f])[0-9A-Fa-f]{64}(?![0-9A-Fa-f])")
_HEX40_RE = re.compile(r"(?<![0-9A-Fa-f])[0-9a-f]{40}(?![0-9A-Fa-f])")
_GITHUB_COMMIT_RE = re.compile(
	r"github\.com/([\w.-]+/[\w.-]+)/(?:commit|tree)/([0-9a-f]{40})\b",
	re.IGNORECASE,
)
_GITHUB_REPO_RE = re.compile(r"github\.com/([\w.-]+)/([\w.-]+)", re.IGNORECASE)
_STRUCTURED_RE = re.compile(
	r"(^|\W)(record\s*\{|variant\s*\{|opt\s|vec\s|principal\s|service\s|func\s|blob\s|text\s"
	r"|nat(8|16|32|64)?\b|int(8|16|32|64)?\b|\(\s*\))",
	re.IGNORECASE,
)
_DOC_NAME_RE = re.compile(
	r"([\w][\w\-.()]*\.(?:pdf|docx?|txt|json|png|jpe?g))\b",
	re.IGNORECASE,
)
_ARTIFACT_RE = re.compile(
	r"(?:\./)?[\w.-]+(?:/[\w.-]+)*\.(?:wasm\.gz|wasm|tar\.zst|tar\.gz)\b",
	re.IGNORECASE,
)
_FENCE_RE = re.compile(r"```[\s\S]*?```")
_DIDC_RE = re.compile(r"didc\s+encode", re.IGNORECASE)
_SHASUM_RE = re.compile(r"(sha256sum|shasum)", re.IGNORECASE)

DIGEST_MARKERS = (
	"wasm_module_hash",
	"release_package_sha256_hex",
	"expected_hash",
	"sha256",
	"hash",
)
COMMIT_MARKERS = ("git_commit_id", "commit")
DIGEST_WINDOW_BEFORE = 600
DIGEST_WINDOW_AFTER = 1200
_NON_REPO_OWNERS = frozenset(("orgs", "features", "topics", "settings", "marketplace"))
_PAYLOAD_KEYS = ("payload_text_rendering", "payloadTextRendering", "payload_rendering")


def _dedupe(items: Iterable[str]) -> List[str]:
	return list(dict.fromkeys(items))


def _sanitize_url(url: str) -> str:
	s = url
	while s:
		if s[-1] in _TRAILING_PUNCT:
			s = s[:-1]
		elif s.endswith(")") and s.count(")") > s.count("("):
			s = s[:-1]
		else:
			break
	return s


def find_urls(text: str) -> List[str]:
	sanitized = (_sanitize_url(raw) for raw in _URL_RE.findall(text or ""))
	return _dedupe(url for url in sanitized if url)


def find_release_urls(text: str) -> List[str]:
	direct = _RELEASE_URL_RE.findall(text or "")
	scanned = [url for url in find_urls(text) if _RELEASE_HOST_RE.match(url)]
	return _dedupe(_sanitize_url(url) for url in direct + scanned)


def _token_near(text: str, index: int, length: int, pattern: re.Pattern) -> Optional[str]:
	"""Token in the window around the marker at `index` with the fewest characters between them."""
	start = max(0, index - DIGEST_WINDOW_BEFORE)
	end = min(len(text), index + DIGEST_WINDOW_AFTER)
	best: Optional[str] = None
	best_gap = None
	for match in pattern.finditer(text, start, end):
		if match.start() >= index + length:
			gap = match.start() - (index + length)
		else:
			gap = max(0, index - match.end())
		# Ties go to the earlier token in the window.
		if best_gap is None or gap < best_gap:
			best = match.group(0)
			best_gap = gap
	return best


def find_digest_near_markers(
	text: str,
	markers: Sequence[str] = DIGEST_MARKERS,
	fallback_any: bool = True,
) -> Optional[str]:
	"""Return the 64-hex token closest to the highest-priority marker present.

	Markers are tried in the order given. Around a marker's first occurrence a
	window of 600 characters before and 1200 after is searched and the token
	with the smallest gap to the marker wins, the earlier one on a tie. When no
	marker yields a token, the first 64-hex token in the text is returned
	unless `fallback_any` is off.
	"""
	if not text:
		return None
	lowered = text.lower()
	for marker in markers:
		index = lowered.find(marker.lower())
		if index < 0:
			continue
		token = _token_near(text, index, len(marker), _HEX64_RE)
		if token:
			return token
	if not fallback_any:
		return None
	match = _HEX64_RE.search(text)
	return match.group(0) if match else None


def detect_structured_syntax(text: str) -> bool:
	return bool(text) and bool(_STRUCTURED_RE.search(text))


def find_commit(text: str) -> Optional[str]:
	if not text:
		return None
	url_match = _GITHUB_COMMIT_RE.search(text)
	if url_match:
		return url_match.group(2).lower()
	lowered = text.lower()
	for marker in COMMIT_MARKERS:
		index = lowered.find(marker)
		if index < 0:
			continue
		token = _token_near(text, index, len(marker), _HEX40_RE)
		if token:
			return token
	match = _HEX40_RE.search(text)
	return match.group(0) if match else None


def find_repository(text: str) -> Optional[str]:
	if not text:
		return None
	url_match = _GITHUB_COMMIT_RE.search(text)
	if url_match:
		return url_match.group(1)
	for owner, repo in _GITHUB_REPO_RE.findall(text):
		if owner.lower() in _NON_REPO_OWNERS:
			continue
		repo = repo[:-4] if repo.endswith(".git") else repo
		return f"{owner}/{repo.rstrip('.')}"
	return None


def find_documents(text: str) -> List[DocRef]:
	"""Collect `name.ext` document references, pairing each with a digest on the same or next line."""
	lines = (text or "").splitlines()
	docs: List[DocRef] = []
	seen = set()
	for idx, line in enumerate(lines):
		if _URL_RE.search(line) and not _HEX64_RE.search(line):
			continue
		for name_match in _DOC_NAME_RE.finditer(line):
			name = name_match.group(1)
			if name in seen:
				continue
			seen.add(name)
			digest_match = _HEX64_RE.search(line, name_match.end())
			if digest_match is None and idx + 1 < len(lines):
				digest_match = _HEX64_RE.search(lines[idx + 1])
			docs.append(DocRef(name=name, expected_hash=digest_match.group(0).lower() if digest_match else None))
	return docs


def find_artifact_path(text: str) -> Optional[str]:
	stripped = _URL_RE.sub(" ", text or "")
	match = _ARTIFACT_RE.search(stripped)
	return match.group(0) if match else None


def find_argument_command(summary: str) -> Optional[str]:
	lowered = (summary or "").lower()
	title_idx = lowered.find("argument verification")
	if title_idx < 0:
		return None
	after = summary[title_idx:]
	fence = _FENCE_RE.search(after)
	if fence:
		code = fence.group(0).replace("```", "").strip()
		if _DIDC_RE.search(code) and _SHASUM_RE.search(code):
			return code
	for line in after.split("\n"):
		if _DIDC_RE.search(line):
			return line.strip()
	return None


def extract_payload_rendering(source: Any) -> Optional[str]:
	"""Walk an upstream JSON document for its human-readable payload rendering."""
	root = source
	if isinstance(source, str):
		try:
			root = json.loads(source)
		except ValueError:
			return None
	if not isinstance(root, (dict, list)):
		return None

	seen = set()
	stack = [root]
	while stack:
		node = stack.pop()
		if not isinstance(node, (dict, list)) or id(node) in seen:
			continue
		seen.add(id(node))
		children = node.values() if isinstance(node, dict) else node
		if isinstance(node, dict):
			for key in _PAYLOAD_KEYS:
				value = node.get(key)
				if isinstance(value, str) and value.strip():
					return value.strip()
			payload = node.get("payload")
			if isinstance(payload, str) and payload.strip():
				return payload.strip()
			if isinstance(payload, (dict, list)) and payload:
				return json.dumps(payload, indent=2)
		stack.extend(child for child in children if isinstance(child, (dict, list)))
	return None
