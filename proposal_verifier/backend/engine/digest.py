# proposal_verifier/backend/engine/digest.py
from __future__ import annotations

import hashlib
from typing import Optional

from .hex_codec import canonical, is_digest_hex


def digest(data: bytes) -> str:
	"""SHA-256 over exactly the bytes given; the caller decides what the bytes are."""
	return hashlib.sha256(bytes(data)).hexdigest()


def matches(computed: Optional[str], expected: Optional[str]) -> bool:
	# A match needs a concrete 64-hex expected digest on the other side.
	if not computed or not expected:
		return False
	if not is_digest_hex(expected):
		return False
	return canonical(computed) == canonical(expected)
