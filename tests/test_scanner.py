from unittest import TestCase

from proposal_verifier.backend.engine import scanner
from proposal_verifier.backend.engine.types import DocRef

WASM = "a1" * 32
OTHER = "b2" * 32
COMMIT = "0123456789abcdef0123456789abcdef01234567"


class UrlScanTests(TestCase):
	def test_trailing_punctuation_and_unbalanced_paren_are_stripped(self) -> None:
		text = "See (https://example.org/a_(b)), and https://x.io/y. Again https://x.io/y"
		self.assertEqual(scanner.find_urls(text), ["https://example.org/a_(b)", "https://x.io/y"])

	def test_parenthesised_url_followed_by_period(self) -> None:
		self.assertEqual(
			scanner.find_urls("(see https://example.com/a.tar.zst)."),
			["https://example.com/a.tar.zst"],
		)

	def test_quotes_and_brackets_are_stripped(self) -> None:
		self.assertEqual(scanner.find_urls('["https://a.org/b"]'), ["https://a.org/b"])

	def test_release_urls_are_collected_once(self) -> None:
		url = f"https://download.dfinity.systems/ic/{COMMIT}/guest-os/update-img/update-img.tar.zst"
		text = f"Download {url}. Mirror: {url}"
		self.assertEqual(scanner.find_release_urls(text), [url])


class DigestScanTests(TestCase):
	def test_higher_priority_marker_wins_over_position(self) -> None:
		text = f"sha256: {OTHER}\n\nrelease notes follow\n\nwasm_module_hash: {WASM}"
		self.assertEqual(scanner.find_digest_near_markers(text), WASM)

	def test_token_nearest_the_marker_wins(self) -> None:
		text = f"{WASM} is the wasm_module_hash of the new build.\n" + "x " * 150 + f"\nhash: {OTHER}"
		self.assertEqual(scanner.find_digest_near_markers(text), WASM)

	def test_equal_gaps_prefer_the_earlier_token(self) -> None:
		self.assertEqual(scanner.find_digest_near_markers(f"{OTHER} sha256 {WASM}", ["sha256"]), OTHER)

	def test_token_before_marker_is_used_when_none_follows(self) -> None:
		text = f"{WASM} is the sha256"
		self.assertEqual(scanner.find_digest_near_markers(text, ["sha256"]), WASM)

	def test_any_token_is_the_fallback(self) -> None:
		text = f"nothing labelled here {WASM}"
		self.assertEqual(scanner.find_digest_near_markers(text), WASM)
		self.assertIsNone(scanner.find_digest_near_markers(text, ["arg_hash"], fallback_any=False))

	def test_longer_hex_runs_are_not_digests(self) -> None:
		self.assertIsNone(scanner.find_digest_near_markers("hash " + "c" * 70))
		self.assertIsNone(scanner.find_digest_near_markers(""))


class StructureScanTests(TestCase):
	def test_structured_syntax_detection(self) -> None:
		self.assertTrue(scanner.detect_structured_syntax("record { mode = variant { upgrade } }"))
		self.assertTrue(scanner.detect_structured_syntax("( )"))
		self.assertFalse(scanner.detect_structured_syntax("hello world"))

	def test_commit_and_repository_from_commit_url(self) -> None:
		text = f"Built from https://github.com/dfinity/ic/commit/{COMMIT}."
		self.assertEqual(scanner.find_commit(text), COMMIT)
		self.assertEqual(scanner.find_repository(text), "dfinity/ic")

	def test_commit_near_marker(self) -> None:
		self.assertEqual(scanner.find_commit(f"git_commit_id: {COMMIT}"), COMMIT)
		self.assertIsNone(scanner.find_commit("no commit in here"))

	def test_repository_skips_non_repository_paths(self) -> None:
		text = "https://github.com/orgs/dfinity and https://github.com/dfinity/nns-dapp.git"
		self.assertEqual(scanner.find_repository(text), "dfinity/nns-dapp")

	def test_documents_pair_with_digest_on_same_or_next_line(self) -> None:
		text = f"Declaration.pdf {WASM}\nIdentity.pdf\n{OTHER}\nnotes.txt\nhttps://x.org/skipped.pdf"
		self.assertEqual(
			scanner.find_documents(text),
			[
				DocRef("Declaration.pdf", WASM),
				DocRef("Identity.pdf", OTHER),
				DocRef("notes.txt", None),
			],
		)

	def test_artifact_path(self) -> None:
		text = "Then run sha256sum ./artifacts/canisters/governance-canister.wasm.gz to check."
		self.assertEqual(scanner.find_artifact_path(text), "./artifacts/canisters/governance-canister.wasm.gz")

	def test_argument_command_from_fenced_block(self) -> None:
		summary = "## Argument verification\n```\ndidc encode '()' | xxd -r -p | sha256sum\n```\n"
		self.assertEqual(scanner.find_argument_command(summary), "didc encode '()' | xxd -r -p | sha256sum")
		self.assertIsNone(scanner.find_argument_command("no section"))

	def test_payload_rendering_is_found_in_nested_json(self) -> None:
		document = {"proposal": {"details": [{"payload_text_rendering": "  record {}  "}]}}
		self.assertEqual(scanner.extract_payload_rendering(document), "record {}")
		self.assertIsNone(scanner.extract_payload_rendering("not json"))
		self.assertIsNone(scanner.extract_payload_rendering({"title": "nothing"}))
