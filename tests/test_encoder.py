import unittest
from tnetcodec import (
    NULL,
    Boolean,
    DecoderConfig,
    Dictionary,
    EncodeError,
    Float,
    Integer,
    List,
    String,
    decode,
    encode,
)


class EncoderTestCase(unittest.TestCase):
    def test_encode_scalars(self):
        cases = [
            (Boolean(True), b"4:true!"),
            (Boolean(False), b"5:false!"),
            (NULL, b"0:~"),
            (Integer(-1), b"2:-1#"),
            (Integer(12340), b"5:12340#"),
            (Integer(0), b"1:0#"),
            (Float(1.0), b"3:1.0^"),
            (Float(1.25), b"4:1.25^"),
            (Float(123.4), b"5:123.4^"),
            (String(b"hello"), b"5:hello,"),
            (String(b""), b"0:,"),
            (String(b"3:foo,3:bar,"), b"12:3:foo,3:bar,,"),
        ]
        for value, expected in cases:
            with self.subTest(value=value):
                self.assertEqual(encode(value), expected)

    def test_encode_aggregates(self):
        cases = [
            (List([String(b"foo"), String(b"bar")]), b"12:3:foo,3:bar,]"),
            (List([Integer(10), Integer(10)]), b"10:2:10#2:10#]"),
            (List([List([Integer(10), Integer(10)])]), b"14:10:2:10#2:10#]]"),
            (List(), b"0:]"),
            (Dictionary(), b"0:}"),
            (Dictionary([(b"hello", String(b"world"))]), b"16:5:hello,5:world,}"),
            (
                Dictionary(
                    [(b"int", Integer(1)), (b"seq", List([String(b"a"), String(b"b")]))]
                ),
                b"27:3:int,1:1#3:seq,8:1:a,1:b,]}",
            ),
            (
                Dictionary([(b"A", Dictionary([(b"b", Integer(10))]))]),
                b"16:1:A,9:1:b,2:10#}}",
            ),
        ]
        for value, expected in cases:
            with self.subTest(expected=expected):
                self.assertEqual(encode(value), expected)

    def test_length_prefix_counts_bytes(self):
        value = String("héllo")
        self.assertEqual(encode(value), b"6:h\xc3\xa9llo,")

    def test_dictionary_duplicates_and_order_are_emitted(self):
        value = Dictionary([(b"b", Integer(1)), (b"a", Integer(2)), (b"b", Integer(3))])
        self.assertEqual(encode(value), b"24:1:b,1:1#1:a,1:2#1:b,1:3#}")

    def test_encode_rejects_non_values(self):
        for obj in (None, 1, "a", b"a", [1], {"a": 1}):
            with self.subTest(obj=obj):
                with self.assertRaises(EncodeError):
                    encode(obj)

    def test_encode_rejects_non_finite_floats(self):
        for number in (float("inf"), float("-inf"), float("nan")):
            with self.subTest(number=number):
                with self.assertRaises(EncodeError):
                    encode(List([Float(number)]))

    def test_deep_nesting_does_not_hit_recursion_limit(self):
        value = List()
        for _ in range(5000):
            value = List([value])
        data = encode(value)
        self.assertTrue(data.endswith(b"0:]" + b"]" * 5000))
        decoded = decode(data, DecoderConfig(max_depth=5001))
        depth = 0
        while len(decoded):
            decoded = decoded[0]
            depth += 1
        self.assertEqual(depth, 5000)


class RoundTripTestCase(unittest.TestCase):
    def test_round_trip(self):
        values = [
            NULL,
            Boolean(True),
            Boolean(False),
            Integer(0),
            Integer(-42),
            Integer(2 ** 200),
            Integer(-(2 ** 200)),
            Float(0.0),
            Float(-0.0),
            Float(0.1),
            Float(-1.5e-300),
            Float(1.7976931348623157e308),
            String(b""),
            String(b"\x00\x01\xff:,]}"),
            List(),
            Dictionary(),
            List([NULL, List([List([Integer(1)])]), Dictionary([(b"", NULL)])]),
            Dictionary(
                [
                    (b"name", String(b"value")),
                    (b"items", List([Integer(1), Float(2.5), Boolean(False)])),
                    (b"name", Dictionary([(b"nested", List())])),
                ]
            ),
        ]
        for value in values:
            with self.subTest(value=value):
                self.assertEqual(decode(encode(value)), value)

    def test_negative_zero_keeps_its_sign(self):
        self.assertEqual(encode(Float(-0.0)), b"4:-0.0^")
        self.assertNotEqual(decode(encode(Float(-0.0))), Float(0.0))

    def test_reencoding_is_canonical(self):
        # Valid but non canonical float text is normalised on re-encoding
        cases = {
            b"1:1^": b"3:1.0^",
            b"3:1e3^": b"6:1000.0^",
            b"5:007.5^": b"3:7.5^",
            b"17:1:1^5:2.50^3:0:~]]": b"18:3:1.0^3:2.5^3:0:~]]",
        }
        for original, canonical in cases.items():
            with self.subTest(original=original):
                reencoded = encode(decode(original))
                self.assertEqual(reencoded, canonical)
                self.assertEqual(encode(decode(reencoded)), canonical)

    def test_canonical_input_reencodes_identically(self):
        for data in (
            b"18:5:hello,5:world,]",
            b"27:3:int,1:1#3:seq,8:1:a,1:b,]}",
            b"16:1:a,1:1#1:a,1:2#}",
            b"0:~",
        ):
            with self.subTest(data=data):
                self.assertEqual(encode(decode(data)), data)


if __name__ == "__main__":
    unittest.main()
