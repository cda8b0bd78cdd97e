from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiError(BaseModel):
	model_config = ConfigDict(extra="forbid")

	code: str
	message: str
	evidence: List[str] = Field(default_factory=list)
	remediation: Optional[str] = None


class ApiEnvelope(BaseModel):
	model_config = ConfigDict(extra="allow")

	ok: bool
	generated_at: str
	request_id: Optional[str] = None
	data: Optional[Dict[str, Any]] = None
	error: Optional[ApiError] = None


class CommitCheckRequest(BaseModel):
	model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

	repository: Optional[str] = Field(default=None, description="owner/name; defaults to the extracted repository.")
	commit: Optional[str] = Field(default=None, description="Commit id; defaults to the extracted commit.")


class ArgumentInputRequest(BaseModel):
	model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

	kind: Literal["text", "hex", "vec", "blob", "candid", "auto"] = "text"
	raw: str = ""


class ArgumentQuickFillRequest(BaseModel):
	model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

	which: Literal["unit", "null"]


class ArgumentVerifyRequest(BaseModel):
	model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

	kind: Optional[Literal["text", "hex", "vec", "blob", "candid", "auto"]] = None
	raw: Optional[str] = Field(default=None, description="Argument input; defaults to the stored input.")
	expected: Optional[str] = Field(default=None, description="Expected arg hash; defaults to the proposal's.")


class DfxVerifyRequest(BaseModel):
	model_config = ConfigDict(extra="forbid")

	text: str = Field(..., min_length=1, description="Pasted get_proposal_info output.")
	expected: Optional[str] = None
	field: str = Field(default="arg_hash", min_length=1)


class DocumentFetchRequest(BaseModel):
	model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

	url: str = Field(..., min_length=1)


class UrlCheckRequest(BaseModel):
	model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

	url: str = Field(..., min_length=1)
	expected: Optional[str] = Field(default=None, description="Defaults to the proposal's expected digest.")


class DigestToolRequest(BaseModel):
	model_config = ConfigDict(extra="forbid")

	kind: Literal["text", "hex", "vec", "blob"] = "text"
	input: str = ""
	expected: Optional[str] = None


class ScanToolRequest(BaseModel):
	model_config = ConfigDict(extra="forbid")

	text: str = Field(..., min_length=1)
	markers: Optional[List[str]] = Field(default=None, description="Digest markers in priority order.")
