import unittest

import numpy as np

from bakery.errors import HeaderFormatError, UnsupportedKindError
from bakery.header import (
    Header,
    PayloadKind,
    as_words,
    element_count,
    get_height,
    get_width,
    header_word_count,
    is_image,
    pack_header,
    parse_header,
    words_to_bytes,
)


class TestHeaderLayout(unittest.TestCase):
    def test_word_fields_low_to_high(self) -> None:
        head = Header.image(bpp=3, width=2, height=1)
        words = pack_header(head)

        self.assertEqual(head.bit_count, 48)
        self.assertEqual(int(words[0]), 1 | (3 << 8) | (48 << 32))
        self.assertEqual(int(words[1]), 2 | (1 << 16))
        self.assertEqual(int(words[2]), 0)

    def test_dual_color_word(self) -> None:
        head = Header.dual_color_image(bpp=4, width=3, height=5, color0=0x11223344, color1=0xAABBCCDD)
        words = pack_header(head)

        self.assertEqual(int(words[0]), 2 | (4 << 8) | (15 << 32))
        self.assertEqual(int(words[2]), 0x11223344 | (0xAABBCCDD << 32))

    def test_byte_image_is_little_endian(self) -> None:
        raw = words_to_bytes(pack_header(Header.generic(0x01020304)))
        self.assertEqual(raw[0], 0)
        self.assertEqual(raw[4:8], bytes([0x04, 0x03, 0x02, 0x01]))

    def test_round_trip_every_kind(self) -> None:
        heads = [
            Header.generic(12345),
            Header.image(bpp=2, width=640, height=480),
            Header.dual_color_image(bpp=1, width=65535, height=1, color0=0, color1=0xFFFFFFFF),
        ]
        for head in heads:
            self.assertEqual(parse_header(pack_header(head)), head)

    def test_padding_is_ignored(self) -> None:
        w0 = 1 | (3 << 8) | (0xABCD << 16) | (48 << 32)
        w1 = 2 | (1 << 16) | (0xDEADBEEF << 32)
        head = parse_header([w0, w1, 0])

        self.assertEqual(head, Header.image(bpp=3, width=2, height=1))

    def test_header_word_count(self) -> None:
        self.assertEqual(header_word_count(PayloadKind.GENERIC), 1)
        self.assertEqual(header_word_count(PayloadKind.IMAGE), 2)
        self.assertEqual(header_word_count(PayloadKind.DUAL_COLOR_IMAGE), 3)


class TestParseHeader(unittest.TestCase):
    def test_generic_reads_only_first_word(self) -> None:
        head = parse_header([40 << 32])
        self.assertEqual(head, Header.generic(40))
        self.assertIsNone(head.width)
        self.assertIsNone(head.color0)

    def test_image_needs_second_word(self) -> None:
        with self.assertRaises(HeaderFormatError):
            parse_header([1 | (3 << 8)])

    def test_dual_color_needs_third_word(self) -> None:
        with self.assertRaises(HeaderFormatError):
            parse_header([2 | (1 << 8), 8 | (1 << 16)])

    def test_unknown_kind(self) -> None:
        with self.assertRaises(HeaderFormatError):
            parse_header([3, 0, 0])

    def test_empty_sequence(self) -> None:
        with self.assertRaises(HeaderFormatError):
            parse_header([])

    def test_accepts_bytes(self) -> None:
        head = Header.image(bpp=4, width=7, height=9)
        raw = words_to_bytes(pack_header(head))

        self.assertEqual(parse_header(raw), head)
        self.assertEqual(parse_header(bytearray(raw)), head)
        with self.assertRaises(HeaderFormatError):
            parse_header(raw[:-1])

    def test_rejects_non_integer_arrays(self) -> None:
        with self.assertRaises(HeaderFormatError):
            as_words(np.zeros(3, dtype=np.float64))
        with self.assertRaises(HeaderFormatError):
            as_words(np.zeros((3, 1), dtype=np.uint64))

    def test_byte_arrays_are_byte_images(self) -> None:
        head = Header.image(bpp=3, width=2, height=1)
        words = np.concatenate([pack_header(head), np.array([0x605040302010], dtype=np.uint64)])
        raw = words_to_bytes(words)

        as_u8 = as_words(np.frombuffer(raw, dtype=np.uint8))
        as_i8 = as_words(np.frombuffer(raw, dtype=np.int8))

        self.assertEqual(as_u8.size, 4)
        np.testing.assert_array_equal(as_u8, words)
        np.testing.assert_array_equal(as_i8, words)
        self.assertEqual(parse_header(np.frombuffer(raw, dtype=np.uint8)), head)
        with self.assertRaises(HeaderFormatError):
            as_words(np.frombuffer(raw[:-1], dtype=np.uint8))

    def test_rejects_other_item_sizes(self) -> None:
        with self.assertRaises(HeaderFormatError):
            as_words(np.zeros(3, dtype=np.uint32))
        with self.assertRaises(HeaderFormatError):
            as_words(np.zeros(3, dtype=np.int16))

    def test_large_word_values(self) -> None:
        words = as_words([0xFFFFFFFF00000000, 0])
        self.assertEqual(int(words[0]), 0xFFFFFFFF00000000)
        self.assertEqual(parse_header(words).bit_count, 0xFFFFFFFF)


class TestImageQueries(unittest.TestCase):
    def test_image_dimensions(self) -> None:
        words = pack_header(Header.image(bpp=3, width=12, height=34))
        self.assertTrue(is_image(words))
        self.assertEqual(get_width(words), 12)
        self.assertEqual(get_height(words), 34)

    def test_dual_color_is_image(self) -> None:
        words = pack_header(Header.dual_color_image(bpp=1, width=5, height=6, color0=0, color1=1))
        self.assertTrue(is_image(words))
        self.assertEqual(get_width(words), 5)
        self.assertEqual(get_height(words), 6)

    def test_generic_has_no_dimensions(self) -> None:
        words = [64 << 32]
        self.assertFalse(is_image(words))
        self.assertIsNone(get_width(words))
        self.assertIsNone(get_height(words))


class TestHeaderValidation(unittest.TestCase):
    def test_generic_rejects_dimensions(self) -> None:
        with self.assertRaises(HeaderFormatError):
            Header(PayloadKind.GENERIC, 0, 0, width=1, height=1)

    def test_image_requires_dimensions(self) -> None:
        with self.assertRaises(HeaderFormatError):
            Header(PayloadKind.IMAGE, 3, 0)

    def test_image_rejects_colors(self) -> None:
        with self.assertRaises(HeaderFormatError):
            Header(PayloadKind.IMAGE, 3, 0, width=1, height=1, color0=0, color1=0)

    def test_image_bpp_range(self) -> None:
        for bpp in [0, 5, 255]:
            with self.assertRaises(HeaderFormatError):
                Header.image(bpp=bpp, width=1, height=1)
            with self.assertRaises(HeaderFormatError):
                Header.dual_color_image(bpp=bpp, width=1, height=1, color0=0, color1=1)
        with self.assertRaises(HeaderFormatError):
            parse_header([1 | (5 << 8), 1 | (1 << 16)])
        self.assertEqual(Header.generic(8).bpp, 0)

    def test_field_ranges(self) -> None:
        with self.assertRaises(HeaderFormatError):
            Header.image(bpp=1, width=70000, height=1)
        with self.assertRaises(HeaderFormatError):
            Header.generic(1 << 32)
        with self.assertRaises(HeaderFormatError):
            Header.dual_color_image(bpp=1, width=1, height=1, color0=-1, color1=0)

    def test_kind_from_int(self) -> None:
        head = Header(1, 3, 0, width=0, height=0)
        self.assertIs(head.kind, PayloadKind.IMAGE)
        self.assertTrue(head.is_image)
        self.assertEqual(head.word_count, 2)


class TestElementCount(unittest.TestCase):
    def test_image_pixel_count(self) -> None:
        for width, height in [(0, 0), (0, 7), (7, 0), (1, 1), (3, 5), (640, 480)]:
            image = Header.image(bpp=3, width=width, height=height)
            dual = Header.dual_color_image(bpp=4, width=width, height=height, color0=0, color1=1)
            self.assertEqual(element_count(image), width * height)
            self.assertEqual(element_count(dual), width * height)
            self.assertEqual(element_count(dual, np.uint32), width * height)
            self.assertEqual(element_count(dual, np.uint8), width * height)

    def test_generic_needs_element_type(self) -> None:
        with self.assertRaises(UnsupportedKindError):
            element_count(Header.generic(64))

    def test_generic_byte_span(self) -> None:
        for bit_count in [0, 1, 7, 8, 9, 15, 63, 64, 65, 1000, 4096]:
            head = Header.generic(bit_count)
            for size in [1, 2, 4, 8]:
                self.assertEqual(element_count(head, np.dtype(f"<u{size}")), (bit_count // 8) // size)

    def test_image_with_type_uses_byte_span(self) -> None:
        head = Header.image(bpp=3, width=2, height=1)
        self.assertEqual(element_count(head, np.dtype("V3")), 2)
        self.assertEqual(element_count(head, np.uint8), 6)
        self.assertEqual(element_count(head, np.uint32), 1)

    def test_from_words(self) -> None:
        words = pack_header(Header.generic(80))
        self.assertEqual(element_count(words, np.uint16), 5)
        with self.assertRaises(UnsupportedKindError):
            element_count(words)

        image_words = pack_header(Header.image(bpp=1, width=4, height=4))
        self.assertEqual(element_count(image_words), 16)


if __name__ == "__main__":
    unittest.main()
