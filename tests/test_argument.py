from unittest import TestCase

from proposal_verifier.backend.engine import argument, blob_parser, digest, hex_codec
from proposal_verifier.backend.engine.errors import InvalidEncoding

UNIT_BYTES = bytes.fromhex(argument.ENCODED_UNIT_HEX)
UNIT_DIGEST = digest.digest(UNIT_BYTES)


class DecodeArgumentTests(TestCase):
	def test_hex_input(self) -> None:
		self.assertEqual(argument.decode_argument("hex", argument.ENCODED_UNIT_HEX), (UNIT_BYTES, None))

	def test_hex_of_hex_is_auto_corrected(self) -> None:
		data, hint = argument.decode_argument("hex", hex_codec.encode(argument.ENCODED_UNIT_HEX.encode("ascii")))
		self.assertEqual(data, UNIT_BYTES)
		self.assertIn("hex-of-hex", hint)

	def test_vec_literal(self) -> None:
		self.assertEqual(argument.decode_argument("vec", "vec {1; 2; 0xFF}")[0], b"\x01\x02\xff")
		self.assertEqual(argument.parse_vec_literal("vec { 10, 11 }"), b"\x0a\x0b")

	def test_vec_literal_rejects_out_of_range_bytes(self) -> None:
		with self.assertRaises(InvalidEncoding):
			argument.parse_vec_literal("vec {256}")
		with self.assertRaises(InvalidEncoding):
			argument.parse_vec_literal("{1; 2}")

	def test_candid_text_is_never_hashed_directly(self) -> None:
		with self.assertRaises(InvalidEncoding):
			argument.decode_argument("candid", "(record { a = 1 })")

	def test_auto_detection(self) -> None:
		self.assertEqual(argument.decode_argument("auto", "vec {1}")[0], b"\x01")
		self.assertEqual(argument.decode_argument("auto", 'blob "\\01"')[0], b"\x01")
		self.assertEqual(argument.decode_argument("auto", "hello")[0], b"hello")
		self.assertEqual(argument.decode_argument("auto", "0x4449")[0], b"DI")

	def test_empty_text_is_rejected(self) -> None:
		with self.assertRaises(InvalidEncoding):
			argument.decode_argument("text", "   ")

	def test_hints(self) -> None:
		self.assertIn("blob literal", argument.input_hint("text", 'blob "\\01"'))
		self.assertIn("Candid", argument.input_hint("text", "record { a = 1 }"))
		self.assertIsNone(argument.input_hint("text", "plain words"))


class VerifyArgumentTests(TestCase):
	def test_matching_bytes(self) -> None:
		result = argument.verify_argument("hex", argument.ENCODED_UNIT_HEX, UNIT_DIGEST.upper())
		self.assertTrue(result.matched)
		self.assertEqual(result.computed_digest, UNIT_DIGEST)
		self.assertIsNone(result.error)

	def test_mismatch_reports_common_causes(self) -> None:
		result = argument.verify_argument("hex", argument.ENCODED_NULL_HEX, UNIT_DIGEST)
		self.assertFalse(result.matched)
		self.assertEqual(result.computed_digest, digest.digest(bytes.fromhex(argument.ENCODED_NULL_HEX)))
		self.assertEqual(result.error, argument.MISMATCH_ERROR)

	def test_pasting_the_expected_digest_is_refused(self) -> None:
		result = argument.verify_argument("hex", UNIT_DIGEST, UNIT_DIGEST)
		self.assertFalse(result.matched)
		self.assertIsNone(result.computed_digest)
		self.assertEqual(result.error, argument.PASTED_DIGEST_ERROR)

	def test_missing_expected_digest(self) -> None:
		result = argument.verify_argument("text", "anything", None)
		self.assertFalse(result.matched)
		self.assertIn("No expected arg hash", result.error)

	def test_candid_input_reports_encoding_step(self) -> None:
		result = argument.verify_argument("candid", "()", UNIT_DIGEST)
		self.assertFalse(result.matched)
		self.assertEqual(result.error, argument.CANDID_NEEDS_ENCODING)

	def test_decode_failure_becomes_error(self) -> None:
		result = argument.verify_argument("hex", "abc", UNIT_DIGEST)
		self.assertFalse(result.matched)
		self.assertIn("odd", result.error)


class DfxOutputTests(TestCase):
	def _output(self, payload: bytes) -> str:
		return (
			"(\n  opt record {\n    id = opt record { id = 12_345 : nat64 };\n"
			f'    arg_hash = opt blob "{blob_parser.escape(payload)}";\n  }},\n)'
		)

	def test_extract_opt_blob(self) -> None:
		onchain = bytes.fromhex(UNIT_DIGEST)
		self.assertEqual(argument.extract_opt_blob(self._output(onchain)), onchain)

	def test_extract_opt_vec(self) -> None:
		self.assertEqual(argument.extract_opt_blob("arg_hash = opt vec { 1; 2 }"), b"\x01\x02")

	def test_dfx_output_matches_expected(self) -> None:
		result = argument.verify_dfx_output(self._output(bytes.fromhex(UNIT_DIGEST)), UNIT_DIGEST)
		self.assertEqual(result.input_kind, "dfx-blob")
		self.assertTrue(result.matched)
		self.assertEqual(result.computed_digest, UNIT_DIGEST)

	def test_dfx_output_with_short_blob(self) -> None:
		result = argument.verify_dfx_output(self._output(b"\x01\x02"), UNIT_DIGEST)
		self.assertFalse(result.matched)
		self.assertIn("2 bytes", result.error)

	def test_dfx_output_without_blob(self) -> None:
		result = argument.verify_dfx_output("arg_hash = null", UNIT_DIGEST)
		self.assertFalse(result.matched)
		self.assertIsNotNone(result.error)
