from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, File, HTTPException, Path, Request, UploadFile

from proposal_verifier.backend.response import success_response
from proposal_verifier.backend.routers.session_context import loaded_session
from proposal_verifier.backend.schemas import ApiEnvelope, DocumentFetchRequest, UrlCheckRequest
from proposal_verifier.backend.services import document_service


router = APIRouter(prefix="/api/documents", tags=["documents"])


def _document_payload(session, index: int, outcome) -> dict:
	doc = session.documents[index]
	data = asdict(doc)
	data["verifiable"] = doc.verifiable
	return {"outcome": outcome, "document": data, "checklist": asdict(session.checklist)}


@router.post("/{index}/upload", response_model=ApiEnvelope)
async def upload_document(request: Request, index: int = Path(..., ge=0), file: UploadFile = File(...)):
	session = loaded_session(request)
	data = await file.read()
	try:
		outcome = document_service.verify_upload(
			session,
			index,
			data,
			filename=file.filename or "upload",
			content_type=file.content_type or "",
		)
	except LookupError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return success_response(
		request=request,
		data=_document_payload(session, index, outcome),
		session_id=session.session_id,
	)


@router.post("/{index}/fetch", response_model=ApiEnvelope)
async def fetch_document(request: Request, payload: DocumentFetchRequest, index: int = Path(..., ge=0)):
	session = loaded_session(request)
	try:
		outcome = await document_service.verify_from_url(session, index, payload.url)
	except LookupError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return success_response(
		request=request,
		data=_document_payload(session, index, outcome),
		session_id=session.session_id,
	)


@router.post("/url-check", response_model=ApiEnvelope)
async def url_check(request: Request, payload: UrlCheckRequest):
	session = loaded_session(request)
	result = await document_service.check_url(session, payload.url, payload.expected)
	data = asdict(result)
	data["verifiable"] = result.verifiable
	return success_response(
		request=request,
		data={"url_check": data},
		session_id=session.session_id,
	)
