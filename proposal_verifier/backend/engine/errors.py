# proposal_verifier/backend/engine/errors.py
from __future__ import annotations


class VerifierError(Exception):
	code = "verifier_error"

	def __init__(self, message: str):
		super().__init__(message)
		self.message = message


class InvalidEncoding(VerifierError):
	code = "invalid_encoding"


class MalformedBlob(VerifierError):
	code = "malformed_blob"


class NetworkUnavailable(VerifierError):
	code = "network_unavailable"


class AccessRestricted(VerifierError):
	code = "access_restricted"

	def __init__(self, message: str, remediation: str = ""):
		super().__init__(message)
		self.remediation = remediation
