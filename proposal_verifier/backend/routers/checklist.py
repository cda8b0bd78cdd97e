from __future__ import annotations

from fastapi import APIRouter, Request

from proposal_verifier.backend.response import success_response
from proposal_verifier.backend.routers.session_context import current_session, loaded_session
from proposal_verifier.backend.schemas import ApiEnvelope
from proposal_verifier.backend.services import session_service


router = APIRouter(prefix="/api", tags=["checklist"])


def _checklist_data(session) -> dict:
	snapshot = session_service.serialize(session)
	return {
		"checklist": snapshot["checklist"],
		"type_checklist": snapshot["type_checklist"],
		"manual_review_confirmed": snapshot["manual_review_confirmed"],
	}


@router.get("/checklist", response_model=ApiEnvelope)
async def get_checklist(request: Request):
	session = current_session(request)
	session.recompute()
	return success_response(request=request, data=_checklist_data(session), session_id=session.session_id)


@router.post("/checklist/rebuild-confirmed", response_model=ApiEnvelope)
async def confirm_rebuild(request: Request):
	session = current_session(request)
	session_service.confirm_rebuild(session)
	return success_response(request=request, data=_checklist_data(session), session_id=session.session_id)


@router.post("/checklist/manual-review-confirmed", response_model=ApiEnvelope)
async def confirm_manual_review(request: Request):
	session = current_session(request)
	session_service.confirm_manual_review(session)
	return success_response(request=request, data=_checklist_data(session), session_id=session.session_id)


@router.get("/guidance", response_model=ApiEnvelope)
async def get_guidance(request: Request):
	session = loaded_session(request)
	return success_response(
		request=request,
		data={"guidance": session_service.build_guidance(session)},
		session_id=session.session_id,
	)
