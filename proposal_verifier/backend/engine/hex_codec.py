# proposal_verifier/backend/engine/hex_codec.py
from __future__ import annotations

import re
from typing import Optional

from .errors import InvalidEncoding


_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")
_WS_RE = re.compile(r"\s+")
DIGEST_HEX_LENGTH = 64


def normalize_hex(text: Optional[str]) -> str:
	"""Strip a 0x prefix, all whitespace and a trailing '%' left by some terminals."""
	if not text:
		return ""
	cleaned = str(text).strip()
	if cleaned[:2].lower() == "0x":
		cleaned = cleaned[2:]
	cleaned = _WS_RE.sub("", cleaned)
	if cleaned.endswith("%"):
		cleaned = cleaned[:-1]
	return cleaned


def decode(text: str) -> bytes:
	cleaned = normalize_hex(text)
	if not _HEX_RE.match(cleaned):
		raise InvalidEncoding("Invalid hex input (contains non-hex characters).")
	if len(cleaned) % 2 != 0:
		raise InvalidEncoding(
			"Invalid hex input (odd number of nibbles). Did you miss a leading 0 or copy the whole line?"
		)
	return bytes(int(cleaned[i : i + 2], 16) for i in range(0, len(cleaned), 2))


def encode(data: bytes) -> str:
	return "".join(f"{byte:02x}" for byte in data)


def looks_like_hex(text: Optional[str]) -> bool:
	cleaned = normalize_hex(text)
	return bool(cleaned) and bool(_HEX_RE.match(cleaned)) and len(cleaned) % 2 == 0


def try_decode_double_hex(text: str) -> Optional[bytes]:
	"""Return the inner bytes when `text` is hex whose bytes are themselves hex text."""
	if not looks_like_hex(text):
		return None
	outer = decode(text)
	try:
		inner_text = outer.decode("ascii")
	except UnicodeDecodeError:
		return None
	if not looks_like_hex(inner_text) or normalize_hex(inner_text) != inner_text:
		return None
	return decode(inner_text)


def canonical(text: Optional[str]) -> str:
	return normalize_hex(text).lower()


def hex_equal(left: Optional[str], right: Optional[str]) -> bool:
	a = canonical(left)
	b = canonical(right)
	return bool(a) and a == b


def is_digest_hex(text: Optional[str]) -> bool:
	cleaned = canonical(text)
	return len(cleaned) == DIGEST_HEX_LENGTH and bool(_HEX_RE.match(cleaned))
