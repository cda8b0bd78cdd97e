from __future__ import annotations

import uuid

from fastapi import HTTPException, Request

from proposal_verifier.backend.middleware import SESSION_HEADER
from proposal_verifier.backend.services import session_store
from proposal_verifier.backend.services.session_store import VerificationSession


def session_id_from_request(request: Request) -> str:
	session_id = getattr(request.state, "session_id", None)
	if session_id:
		return session_id
	return request.headers.get(SESSION_HEADER, "").strip() or uuid.uuid4().hex


def current_session(request: Request) -> VerificationSession:
	return session_store.ensure_session(session_id_from_request(request))


def loaded_session(request: Request) -> VerificationSession:
	session = current_session(request)
	if session.evidence is None:
		raise HTTPException(
			status_code=409,
			detail={"code": "proposal_not_loaded", "message": "Fetch a proposal first."},
		)
	return session
