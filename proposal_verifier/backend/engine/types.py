# proposal_verifier/backend/engine/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from .hex_codec import is_digest_hex


ProposalKind = Literal[
	"ProtocolCanisterManagement",
	"IcOsVersionDeployment",
	"ParticipantManagement",
	"Governance",
	"Unknown",
]
ArgumentInputKind = Literal["text", "hex", "vec", "blob", "candid", "auto", "dfx-blob"]
MatchResult = Literal["unknown", "match", "mismatch"]
CommitTier = Literal["primary", "fallback"]

PROPOSAL_KINDS = (
	"ProtocolCanisterManagement",
	"IcOsVersionDeployment",
	"ParticipantManagement",
	"Governance",
	"Unknown",
)


@dataclass(frozen=True)
class DocRef:
	name: str
	expected_hash: Optional[str] = None


@dataclass
class ProposalEvidence:
	proposal_id: int
	summary: str
	kind: str = "Unknown"
	title: Optional[str] = None
	url: Optional[str] = None
	repository: Optional[str] = None
	commit: Optional[str] = None
	documents: List[DocRef] = field(default_factory=list)
	artifact_path: Optional[str] = None
	urls: List[str] = field(default_factory=list)
	release_urls: List[str] = field(default_factory=list)
	expected_digest: Optional[str] = None
	expected_digest_source: Optional[str] = None
	argument_digest: Optional[str] = None
	argument_digest_source: Optional[str] = None
	payload_rendering: Optional[str] = None
	argument_command: Optional[str] = None

	def __post_init__(self) -> None:
		if self.proposal_id <= 0:
			raise ValueError("proposal_id must be a positive integer.")

	def fill_expected_digest(self, value: Optional[str], source: str) -> bool:
		"""Set the top-level expected digest unless an earlier source already won."""
		if self.expected_digest or not value:
			return False
		self.expected_digest = value.strip().lower()
		self.expected_digest_source = source
		return True

	def fill_argument_digest(self, value: Optional[str], source: str) -> bool:
		if self.argument_digest or not value:
			return False
		self.argument_digest = value.strip().lower()
		self.argument_digest_source = source
		return True


@dataclass
class DocEvidence:
	name: str
	expected_hash: Optional[str] = None
	match: MatchResult = "unknown"
	computed_digest: Optional[str] = None
	error: Optional[str] = None
	preview: Optional[str] = None
	source: Optional[str] = None

	@property
	def verifiable(self) -> bool:
		return is_digest_hex(self.expected_hash)


@dataclass
class ArgumentEvidence:
	input_kind: str = "text"
	raw_input: str = ""
	expected_digest: Optional[str] = None
	computed_digest: Optional[str] = None
	matched: bool = False
	error: Optional[str] = None
	hint: Optional[str] = None


@dataclass(frozen=True)
class CommitCheckResult:
	repository: str
	commit: str
	exists: bool
	tier: CommitTier
	detail: str


@dataclass(frozen=True)
class ChecklistState:
	fetched: bool = False
	commit_verified: bool = False
	argument_digest_verified: bool = False
	document_digest_verified: bool = False
	expected_digest_known: bool = False
	manual_rebuild_confirmed: bool = False
