from unittest import TestCase

from proposal_verifier.backend.engine import hex_codec
from proposal_verifier.backend.engine.errors import InvalidEncoding


class HexCodecTests(TestCase):
	def test_decode_accepts_mixed_case_and_encode_is_lowercase(self) -> None:
		data = hex_codec.decode("0a1B")
		self.assertEqual(data, b"\x0a\x1b")
		self.assertEqual(hex_codec.encode(data), "0a1b")

	def test_decode_strips_prefix_whitespace_and_trailing_percent(self) -> None:
		self.assertEqual(hex_codec.decode(" 0xDE AD\nbe ef% "), bytes.fromhex("deadbeef"))

	def test_empty_input_decodes_to_empty_bytes(self) -> None:
		self.assertEqual(hex_codec.decode(""), b"")

	def test_odd_length_is_rejected(self) -> None:
		with self.assertRaises(InvalidEncoding) as ctx:
			hex_codec.decode("abc")
		self.assertIn("odd", ctx.exception.message)
		self.assertEqual(ctx.exception.code, "invalid_encoding")

	def test_non_hex_characters_are_rejected(self) -> None:
		with self.assertRaises(InvalidEncoding):
			hex_codec.decode("zz")

	def test_every_byte_value_survives_encode_then_decode(self) -> None:
		data = bytes(range(256))
		self.assertEqual(hex_codec.decode(hex_codec.encode(data)), data)

	def test_double_hex_is_unwrapped(self) -> None:
		outer = hex_codec.encode(b"4449444c0000")
		self.assertEqual(hex_codec.try_decode_double_hex(outer), bytes.fromhex("4449444c0000"))

	def test_plain_hex_is_not_treated_as_double_hex(self) -> None:
		self.assertIsNone(hex_codec.try_decode_double_hex("4449444c0000"))
		self.assertIsNone(hex_codec.try_decode_double_hex("not hex"))

	def test_digest_hex_shape(self) -> None:
		self.assertTrue(hex_codec.is_digest_hex("AB" * 32))
		self.assertTrue(hex_codec.is_digest_hex("0x" + "ab" * 32))
		self.assertFalse(hex_codec.is_digest_hex("ab" * 31))
		self.assertFalse(hex_codec.is_digest_hex(None))

	def test_hex_equal_ignores_case_and_prefix(self) -> None:
		self.assertTrue(hex_codec.hex_equal("0xABCD", "abcd"))
		self.assertFalse(hex_codec.hex_equal("", ""))
