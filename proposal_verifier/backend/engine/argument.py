# proposal_verifier/backend/engine/argument.py
from __future__ import annotations

import re
from typing import Optional

from . import blob_parser, digest, hex_codec
from .errors import InvalidEncoding, MalformedBlob, VerifierError
from .scanner import detect_structured_syntax
from .types import ArgumentEvidence


INPUT_KINDS = ("text", "hex", "vec", "blob", "candid", "auto")

# Candid encodings of the two most common install arguments.
ENCODED_UNIT_HEX = "4449444c0000"
ENCODED_NULL_HEX = "4449444c00017f"

_VEC_RE = re.compile(r"^vec\s*\{([\s\S]*)\}$", re.IGNORECASE)
_VEC_SPLIT_RE = re.compile(r"[,;]\s*|\s+")
_BLOB_PREFIX_RE = re.compile(r'^blob\s*"', re.IGNORECASE)
_OPT_BLOB_RE = re.compile(r'opt\s+blob\s*"((?:[^"\\]|\\.)*)"', re.IGNORECASE)
_OPT_VEC_RE = re.compile(r"opt\s+(vec\s*\{[^}]*\})", re.IGNORECASE)

CANDID_NEEDS_ENCODING = (
	"Candid text must be encoded to bytes first (e.g. with `didc encode`), "
	"then verified as hex bytes."
)
PASTED_DIGEST_ERROR = (
	"You pasted the on-chain hash itself (32 bytes). Paste the *argument bytes* "
	"(e.g. hex from `didc encode`), not the hash."
)
MISMATCH_ERROR = (
	"No match. Most common causes:\n"
	"- You hashed text instead of bytes.\n"
	"- You pasted hex-of-hex.\n"
	"- You pasted the hash itself instead of the arg bytes."
)


def parse_vec_literal(text: str) -> bytes:
	match = _VEC_RE.match(text.strip())
	if not match:
		raise InvalidEncoding("Not a vec literal; expected like: vec {1; 2; 0xFF}")
	out = bytearray()
	for part in _VEC_SPLIT_RE.split(match.group(1)):
		token = part.strip()
		if not token:
			continue
		try:
			value = int(token, 16) if token.lower().startswith("0x") else int(token, 10)
		except ValueError as exc:
			raise InvalidEncoding(f"Invalid byte: {token}") from exc
		if not 0 <= value <= 255:
			raise InvalidEncoding(f"Invalid byte: {token}")
		out.append(value)
	return bytes(out)


def _decode_hex_input(raw: str) -> tuple[bytes, Optional[str]]:
	inner = hex_codec.try_decode_double_hex(raw)
	if inner is not None:
		return inner, "Detected hex-of-hex. Auto-corrected to raw bytes."
	return hex_codec.decode(raw), None


def decode_argument(kind: str, raw: str) -> tuple[bytes, Optional[str]]:
	"""Turn user input of the given kind into argument bytes, plus an optional hint."""
	value = (raw or "").strip()
	if kind == "candid":
		raise InvalidEncoding(CANDID_NEEDS_ENCODING)
	if kind == "hex":
		if not value:
			raise InvalidEncoding("Paste hex bytes (from `didc encode` or the quick-fill encodings).")
		return _decode_hex_input(value)
	if kind == "vec":
		return parse_vec_literal(value), None
	if kind == "blob":
		return blob_parser.parse_literal(value), None
	if kind == "text":
		if not value:
			raise InvalidEncoding("Paste text to hash, or choose a more specific input kind.")
		return value.encode("utf-8"), None
	if kind == "auto":
		if hex_codec.looks_like_hex(value):
			return _decode_hex_input(value)
		if _VEC_RE.match(value):
			return parse_vec_literal(value), None
		if _BLOB_PREFIX_RE.match(value):
			return blob_parser.parse_literal(value), None
		if value:
			return value.encode("utf-8"), None
		raise InvalidEncoding("Provide arg bytes (hex), vec nat8, blob literal, or candid (encode first).")
	raise InvalidEncoding(f"Unknown argument input kind '{kind}'.")


def input_hint(kind: str, raw: str) -> Optional[str]:
	value = (raw or "").strip()
	if _BLOB_PREFIX_RE.match(value):
		return (
			"This looks like a Candid blob literal (likely the on-chain hash). "
			"You must hash the *argument bytes*, not the hash itself."
		)
	if kind != "candid" and detect_structured_syntax(value):
		return "Looks like Candid. Choose candid and encode with didc first."
	if _VEC_RE.match(value):
		return "Looks like a Candid vec nat8. Choose vec."
	if hex_codec.looks_like_hex(value):
		return (
			"Looks like hex. If this is the *hash* from the proposal, do not paste it here. "
			"Paste the *argument bytes* instead."
		)
	return None


def verify_argument(kind: str, raw: str, expected: Optional[str]) -> ArgumentEvidence:
	evidence = ArgumentEvidence(input_kind=kind, raw_input=raw or "", expected_digest=expected or None)
	if kind == "candid":
		evidence.error = CANDID_NEEDS_ENCODING
		return evidence
	if not hex_codec.is_digest_hex(expected):
		evidence.error = "No expected arg hash found. Paste the expected hash or refetch the proposal."
		return evidence
	try:
		data, hint = decode_argument(kind, raw)
		if len(data) == 32 and hex_codec.hex_equal(hex_codec.encode(data), expected):
			evidence.error = PASTED_DIGEST_ERROR
			return evidence
	except VerifierError as exc:
		evidence.error = exc.message
		return evidence
	evidence.hint = hint
	evidence.computed_digest = digest.digest(data)
	evidence.matched = digest.matches(evidence.computed_digest, expected)
	if not evidence.matched:
		evidence.error = MISMATCH_ERROR
	return evidence


def extract_opt_blob(text: str, field: Optional[str] = "arg_hash") -> bytes:
	"""Pull the bytes of an `opt blob "..."` (or `opt vec {...}`) value out of pasted dfx output."""
	source = text or ""
	if field:
		index = source.find(field)
		if index >= 0:
			source = source[index:]
	blob_match = _OPT_BLOB_RE.search(source)
	vec_match = _OPT_VEC_RE.search(source)
	if blob_match and (vec_match is None or blob_match.start() <= vec_match.start()):
		return blob_parser.parse(blob_match.group(1))
	if vec_match:
		return parse_vec_literal(vec_match.group(1))
	raise MalformedBlob('No `opt blob "..."` value found in the pasted output.')


def verify_dfx_output(text: str, expected: Optional[str], field: str = "arg_hash") -> ArgumentEvidence:
	evidence = ArgumentEvidence(input_kind="dfx-blob", raw_input=text or "", expected_digest=expected or None)
	try:
		onchain = extract_opt_blob(text, field)
	except VerifierError as exc:
		evidence.error = exc.message
		return evidence
	if len(onchain) != 32:
		evidence.error = f"The `{field}` value is {len(onchain)} bytes; a SHA-256 hash is 32 bytes."
		return evidence
	evidence.computed_digest = hex_codec.encode(onchain)
	if not hex_codec.is_digest_hex(expected):
		evidence.error = "No expected arg hash to compare against."
		return evidence
	evidence.matched = digest.matches(evidence.computed_digest, expected)
	if not evidence.matched:
		evidence.error = "The on-chain hash in the pasted output does not match the expected arg hash."
	return evidence
