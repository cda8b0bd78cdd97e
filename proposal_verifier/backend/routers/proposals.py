from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Path, Request

from proposal_verifier.backend.engine.errors import NetworkUnavailable
from proposal_verifier.backend.response import success_response
from proposal_verifier.backend.routers.session_context import current_session
from proposal_verifier.backend.schemas import ApiEnvelope, CommitCheckRequest
from proposal_verifier.backend.services import proposal_service, session_service


router = APIRouter(prefix="/api", tags=["proposals"])


@router.post("/proposals/{proposal_id}/fetch", response_model=ApiEnvelope)
async def fetch_proposal(request: Request, proposal_id: int = Path(..., gt=0)):
	session = current_session(request)
	try:
		outcome = await proposal_service.fetch_proposal(session, proposal_id)
	except NetworkUnavailable as exc:
		raise HTTPException(
			status_code=502,
			detail={"code": exc.code, "message": exc.message},
		) from exc
	return success_response(
		request=request,
		data={"outcome": outcome, "session": session_service.serialize(session)},
		session_id=session.session_id,
	)


@router.get("/session", response_model=ApiEnvelope)
async def get_session(request: Request):
	session = current_session(request)
	return success_response(
		request=request,
		data={"session": session_service.serialize(session)},
		session_id=session.session_id,
	)


@router.post("/commit/check", response_model=ApiEnvelope)
async def check_commit(request: Request, payload: Optional[CommitCheckRequest] = None):
	session = current_session(request)
	payload = payload or CommitCheckRequest()
	outcome = await proposal_service.check_commit(
		session,
		repository=payload.repository,
		commit=payload.commit,
	)
	return success_response(
		request=request,
		data={"outcome": outcome, "commit": session_service.serialize(session)["commit"]},
		session_id=session.session_id,
	)
