from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Request


def now_iso() -> str:
	return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _request_id(request: Optional[Request]) -> Optional[str]:
	if request is None:
		return None
	return getattr(request.state, "request_id", None)


def success_response(
	*,
	request: Optional[Request] = None,
	data: Optional[Dict[str, Any]] = None,
	session_id: Optional[str] = None,
) -> Dict[str, Any]:
	payload: Dict[str, Any] = {
		"ok": True,
		"generated_at": now_iso(),
	}
	request_id = _request_id(request)
	if request_id:
		payload["request_id"] = request_id
	body = dict(data or {})
	if session_id:
		body["session_id"] = session_id
	payload["data"] = body
	return payload


def error_response(
	*,
	code: str,
	message: str,
	request: Optional[Request] = None,
	evidence: Optional[List[str]] = None,
	remediation: Optional[str] = None,
) -> Dict[str, Any]:
	error: Dict[str, Any] = {
		"code": code,
		"message": message,
		"evidence": evidence or [],
	}
	if remediation:
		error["remediation"] = remediation
	payload: Dict[str, Any] = {
		"ok": False,
		"generated_at": now_iso(),
		"error": error,
	}
	request_id = _request_id(request)
	if request_id:
		payload["request_id"] = request_id
	return payload
