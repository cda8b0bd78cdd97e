from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Request

from proposal_verifier.backend.response import success_response
from proposal_verifier.backend.routers.session_context import current_session
from proposal_verifier.backend.schemas import (
	ApiEnvelope,
	ArgumentInputRequest,
	ArgumentQuickFillRequest,
	ArgumentVerifyRequest,
	DfxVerifyRequest,
)
from proposal_verifier.backend.services import argument_service


router = APIRouter(prefix="/api/argument", tags=["argument"])


@router.put("/input", response_model=ApiEnvelope)
async def set_input(request: Request, payload: ArgumentInputRequest):
	session = current_session(request)
	evidence = argument_service.set_input(session, payload.kind, payload.raw)
	return success_response(
		request=request,
		data={"argument": asdict(evidence), "checklist": asdict(session.checklist)},
		session_id=session.session_id,
	)


@router.post("/quick-fill", response_model=ApiEnvelope)
async def quick_fill(request: Request, payload: ArgumentQuickFillRequest):
	session = current_session(request)
	evidence = argument_service.quick_fill(session, payload.which)
	return success_response(
		request=request,
		data={"argument": asdict(evidence)},
		session_id=session.session_id,
	)


@router.post("/verify", response_model=ApiEnvelope)
async def verify(request: Request, payload: ArgumentVerifyRequest):
	session = current_session(request)
	try:
		outcome = argument_service.verify(
			session,
			kind=payload.kind,
			raw=payload.raw,
			expected=payload.expected,
		)
	except ValueError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
	return success_response(
		request=request,
		data={
			"outcome": outcome,
			"argument": asdict(session.argument),
			"checklist": asdict(session.checklist),
		},
		session_id=session.session_id,
	)


@router.post("/verify-dfx", response_model=ApiEnvelope)
async def verify_dfx(request: Request, payload: DfxVerifyRequest):
	session = current_session(request)
	evidence = argument_service.verify_dfx(session, payload.text, payload.expected, field=payload.field)
	return success_response(
		request=request,
		data={"dfx_argument": asdict(evidence), "checklist": asdict(session.checklist)},
		session_id=session.session_id,
	)
