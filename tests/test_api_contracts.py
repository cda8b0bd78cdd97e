from unittest import TestCase
from unittest.mock import patch

import httpx
from fastapi.testclient import TestClient

from proposal_verifier.backend.adapters import http_adapter
from proposal_verifier.backend.engine import argument, digest
from proposal_verifier.backend.main import app
from proposal_verifier.backend.services import session_store

PROPOSAL_ID = 12345
COMMIT = "0123456789abcdef0123456789abcdef01234567"
WASM_HASH = "c3" * 32
DOC_BYTES = b"%PDF-1.7 participant declaration"
DOC_HASH = digest.digest(DOC_BYTES)
ARG_HASH = digest.digest(bytes.fromhex(argument.ENCODED_UNIT_HEX))
DOC_URL = "https://raw.githubusercontent.com/docs/terms.pdf"

SUMMARY = (
	"Upgrade the governance canister.\n\n"
	f"Source: https://github.com/dfinity/ic/commit/{COMMIT}\n\n"
	f"terms.pdf {DOC_HASH}\n\n"
	"## Argument verification\n"
	"```\ndidc encode '()' | xxd -r -p | sha256sum\n```\n"
)


class ApiContractsTests(TestCase):
	def setUp(self) -> None:
		session_store.reset()
		self.web_status = 200
		self.upstream_calls = []
		build_client = http_adapter.client
		patcher = patch.object(
			http_adapter,
			"client",
			side_effect=lambda: build_client(transport=httpx.MockTransport(self._upstream)),
		)
		patcher.start()
		self.addCleanup(patcher.stop)
		self.client = TestClient(app)
		self.headers = {"X-Session-ID": "session-under-test"}

	def _upstream(self, request: httpx.Request) -> httpx.Response:
		host = request.url.host
		path = request.url.path
		self.upstream_calls.append((request.method, host, path))
		if host == "ic-api.internetcomputer.org" and path == f"/api/v3/proposals/{PROPOSAL_ID}":
			return httpx.Response(
				200,
				json={
					"proposal_id": PROPOSAL_ID,
					"title": "Upgrade governance",
					"summary": SUMMARY,
					"topic": "TOPIC_PROTOCOL_CANISTER_MANAGEMENT",
					"payload": {"wasm_module_hash": WASM_HASH, "arg_hash": ARG_HASH},
				},
			)
		if host == "github.com":
			return httpx.Response(self.web_status)
		if host == "api.github.com":
			return httpx.Response(200, json={"sha": COMMIT})
		if host == "raw.githubusercontent.com" and path == "/docs/terms.pdf":
			return httpx.Response(200, content=DOC_BYTES, headers={"content-type": "application/pdf"})
		return httpx.Response(500)

	def _fetch(self):
		return self.client.post(f"/api/proposals/{PROPOSAL_ID}/fetch", headers=self.headers)

	def test_health_summary(self) -> None:
		response = self.client.get("/api/health/summary")
		self.assertEqual(response.status_code, 200)
		payload = response.json()
		self.assertTrue(payload["ok"])
		self.assertEqual(payload["data"]["app"], "Proposal Verifier")
		self.assertIn("X-Request-ID", response.headers)

	def test_fetch_populates_evidence_and_checklist(self) -> None:
		response = self._fetch()
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.headers["X-Session-ID"], "session-under-test")
		data = response.json()["data"]
		self.assertEqual(data["session_id"], "session-under-test")
		session = data["session"]
		evidence = session["evidence"]
		self.assertEqual(evidence["expected_digest"], WASM_HASH)
		self.assertEqual(evidence["expected_digest_source"], "dashboard")
		self.assertEqual(evidence["argument_digest"], ARG_HASH)
		self.assertEqual(evidence["kind"], "ProtocolCanisterManagement")
		self.assertEqual(evidence["commit"], COMMIT)
		self.assertTrue(session["commit"]["status"].startswith("✅"))
		self.assertEqual(session["commit"]["result"]["tier"], "primary")
		self.assertEqual(session["documents"][0]["name"], "terms.pdf")
		self.assertTrue(session["documents"][0]["verifiable"])
		checklist = session["checklist"]
		self.assertTrue(checklist["fetched"])
		self.assertTrue(checklist["commit_verified"])
		self.assertTrue(checklist["expected_digest_known"])
		self.assertFalse(checklist["document_digest_verified"])
		self.assertFalse(checklist["argument_digest_verified"])
		self.assertNotIn(("GET", "api.github.com", f"/repos/dfinity/ic/commits/{COMMIT}"), self.upstream_calls)

	def test_commit_fallback_is_reported(self) -> None:
		self.web_status = 429
		session = self._fetch().json()["data"]["session"]
		self.assertEqual(session["commit"]["result"]["tier"], "fallback")
		self.assertIn("fallback", session["commit"]["status"])
		self.assertTrue(session["checklist"]["commit_verified"])

		response = self.client.post("/api/commit/check", headers=self.headers, json={"commit": "xyz"})
		self.assertEqual(response.status_code, 200)
		commit = response.json()["data"]["commit"]
		self.assertTrue(commit["status"].startswith("❌"))

	def test_fetch_failure_keeps_previous_proposal(self) -> None:
		self._fetch()
		response = self.client.post("/api/proposals/999/fetch", headers=self.headers)
		self.assertEqual(response.status_code, 502)
		payload = response.json()
		self.assertFalse(payload["ok"])
		self.assertEqual(payload["error"]["code"], "network_unavailable")
		session = self.client.get("/api/session", headers=self.headers).json()["data"]["session"]
		self.assertEqual(session["evidence"]["proposal_id"], PROPOSAL_ID)

	def test_invalid_proposal_id(self) -> None:
		response = self.client.post("/api/proposals/0/fetch", headers=self.headers)
		self.assertEqual(response.status_code, 422)
		self.assertEqual(response.json()["error"]["code"], "validation_error")

	def test_argument_quick_fill_then_verify(self) -> None:
		self._fetch()
		response = self.client.post("/api/argument/quick-fill", headers=self.headers, json={"which": "unit"})
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.json()["data"]["argument"]["raw_input"], argument.ENCODED_UNIT_HEX)
		response = self.client.post("/api/argument/verify", headers=self.headers, json={})
		self.assertEqual(response.status_code, 200)
		data = response.json()["data"]
		self.assertTrue(data["argument"]["matched"])
		self.assertTrue(data["checklist"]["argument_digest_verified"])

	def test_argument_text_input_is_hashed_as_text(self) -> None:
		self._fetch()
		self.client.put("/api/argument/input", headers=self.headers, json={"kind": "text", "raw": "()"})
		data = self.client.post("/api/argument/verify", headers=self.headers, json={}).json()["data"]
		self.assertFalse(data["argument"]["matched"])
		self.assertEqual(data["argument"]["computed_digest"], digest.digest(b"()"))

	def test_document_fetch_and_upload(self) -> None:
		self._fetch()
		response = self.client.post("/api/documents/0/fetch", headers=self.headers, json={"url": DOC_URL})
		self.assertEqual(response.status_code, 200)
		data = response.json()["data"]
		self.assertEqual(data["document"]["match"], "match")
		self.assertTrue(data["checklist"]["document_digest_verified"])

		response = self.client.post(
			"/api/documents/0/upload",
			headers=self.headers,
			files={"file": ("terms.pdf", b"tampered", "application/pdf")},
		)
		data = response.json()["data"]
		self.assertEqual(data["document"]["match"], "mismatch")
		self.assertIn("Local file: terms.pdf", data["document"]["preview"])
		self.assertFalse(data["checklist"]["document_digest_verified"])

	def test_restricted_document_host_keeps_prior_result(self) -> None:
		self._fetch()
		self.client.post("/api/documents/0/fetch", headers=self.headers, json={"url": DOC_URL})
		response = self.client.post(
			"/api/documents/0/fetch",
			headers=self.headers,
			json={"url": "https://forum.example.org/terms.pdf"},
		)
		self.assertEqual(response.status_code, 200)
		document = response.json()["data"]["document"]
		self.assertEqual(document["match"], "match")
		self.assertIn("upload", document["error"])

	def test_document_routes_require_a_loaded_proposal(self) -> None:
		response = self.client.post("/api/documents/0/fetch", headers=self.headers, json={"url": DOC_URL})
		self.assertEqual(response.status_code, 409)
		self.assertEqual(response.json()["error"]["code"], "proposal_not_loaded")

	def test_unknown_document_index(self) -> None:
		self._fetch()
		response = self.client.post("/api/documents/5/fetch", headers=self.headers, json={"url": DOC_URL})
		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.json()["error"]["code"], "http_404")

	def test_url_check_uses_proposal_expected_digest(self) -> None:
		self._fetch()
		response = self.client.post(
			"/api/documents/url-check",
			headers=self.headers,
			json={"url": DOC_URL, "expected": DOC_HASH.upper()},
		)
		self.assertEqual(response.status_code, 200)
		url_check = response.json()["data"]["url_check"]
		self.assertEqual(url_check["match"], "match")
		self.assertEqual(url_check["source"], "url:direct")

	def test_rebuild_confirmation_is_sticky(self) -> None:
		self._fetch()
		response = self.client.post("/api/checklist/rebuild-confirmed", headers=self.headers)
		self.assertTrue(response.json()["data"]["checklist"]["manual_rebuild_confirmed"])
		self.client.put("/api/argument/input", headers=self.headers, json={"kind": "hex", "raw": "00"})
		checklist = self.client.get("/api/checklist", headers=self.headers).json()["data"]
		self.assertTrue(checklist["checklist"]["manual_rebuild_confirmed"])
		rebuild_item = [item for item in checklist["type_checklist"] if item["key"] == "manual_rebuild_confirmed"]
		self.assertTrue(rebuild_item[0]["checked"])

	def test_guidance(self) -> None:
		self._fetch()
		guidance = self.client.get("/api/guidance", headers=self.headers).json()["data"]["guidance"]
		self.assertIn(f"git checkout {COMMIT}", guidance["rebuild_script"])
		self.assertEqual(guidance["recommended_argument_command"], "didc encode '()' | xxd -r -p | sha256sum")

	def test_digest_tool(self) -> None:
		response = self.client.post("/api/tools/digest", json={"kind": "text", "input": ""})
		self.assertEqual(response.status_code, 200)
		self.assertEqual(
			response.json()["data"]["digest"],
			"e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855",
		)
		response = self.client.post("/api/tools/digest", json={"kind": "hex", "input": "abc"})
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()["error"]["code"], "invalid_encoding")

	def test_scan_tool(self) -> None:
		response = self.client.post("/api/tools/scan", json={"text": SUMMARY})
		self.assertEqual(response.status_code, 200)
		data = response.json()["data"]
		self.assertEqual(data["commit"], COMMIT)
		self.assertEqual(data["repository"], "dfinity/ic")
		self.assertEqual(data["documents"], [{"name": "terms.pdf", "expected_hash": DOC_HASH}])
