from __future__ import annotations

from fastapi import APIRouter, Request

from proposal_verifier.backend import constants
from proposal_verifier.backend.adapters import document_adapter, ic_api_adapter
from proposal_verifier.backend.response import success_response
from proposal_verifier.backend.schemas import ApiEnvelope


router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/summary", response_model=ApiEnvelope)
async def get_summary(request: Request):
	return success_response(
		request=request,
		data={
			"app": constants.APP_NAME,
			"version": constants.APP_VERSION,
			"ic_api_url": ic_api_adapter.base_url(),
			"fetch_relay_configured": document_adapter.relay_url() is not None,
			"direct_fetch_hosts": sorted(constants.DIRECT_FETCH_ALLOWED_HOSTS),
		},
	)
