from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from proposal_verifier.backend.engine.errors import VerifierError
from proposal_verifier.backend.response import success_response
from proposal_verifier.backend.schemas import ApiEnvelope, DigestToolRequest, ScanToolRequest
from proposal_verifier.backend.services import tools_service


router = APIRouter(prefix="/api/tools", tags=["tools"])


@router.post("/digest", response_model=ApiEnvelope)
async def digest(request: Request, payload: DigestToolRequest):
	try:
		result = tools_service.digest_input(payload.kind, payload.input, payload.expected)
	except VerifierError as exc:
		raise HTTPException(
			status_code=400,
			detail={"code": exc.code, "message": exc.message},
		) from exc
	return success_response(request=request, data=result)


@router.post("/scan", response_model=ApiEnvelope)
async def scan(request: Request, payload: ScanToolRequest):
	return success_response(request=request, data=tools_service.scan_text(payload.text, payload.markers))
