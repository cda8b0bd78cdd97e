# proposal_verifier/backend/engine/blob_parser.py
from __future__ import annotations

import re

from .errors import MalformedBlob


ESCAPE_MARKER = "\\"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_BLOB_LITERAL_RE = re.compile(r'^blob\s*"([\s\S]*)"$', re.IGNORECASE)
_RESERVED = frozenset((ord(ESCAPE_MARKER), ord('"')))


def parse(payload: str) -> bytes:
	"""Decode the inside of a blob literal: literal characters plus `\\NN` escapes."""
	out = bytearray()
	i = 0
	length = len(payload)
	while i < length:
		ch = payload[i]
		if ch != ESCAPE_MARKER:
			out.extend(ch.encode("utf-8"))
			i += 1
			continue
		pair = payload[i + 1 : i + 3]
		if len(pair) < 2:
			raise MalformedBlob(f"Escape at offset {i} is truncated; expected two hex digits.")
		if not all(c in _HEX_DIGITS for c in pair):
			raise MalformedBlob(f"Escape at offset {i} is followed by non-hex characters '{pair}'.")
		out.append(int(pair, 16))
		i += 3
	return bytes(out)


def parse_literal(text: str) -> bytes:
	match = _BLOB_LITERAL_RE.match(text.strip())
	if not match:
		raise MalformedBlob('Expected a Candid blob literal like: blob "\\22\\c4\\81..."')
	return parse(match.group(1))


def escape(data: bytes) -> str:
	parts = []
	for byte in data:
		if 0x20 <= byte < 0x7F and byte not in _RESERVED:
			parts.append(chr(byte))
		else:
			parts.append(f"{ESCAPE_MARKER}{byte:02x}")
	return "".join(parts)
