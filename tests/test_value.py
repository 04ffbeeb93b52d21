import dataclasses
import unittest
from tnetcodec import (
    NULL,
    Boolean,
    Dictionary,
    Float,
    Integer,
    List,
    Null,
    String,
    Tag,
    Value,
)


class ValueTestCase(unittest.TestCase):
    def test_tags(self):
        self.assertIs(Null.tag, Tag.NULL)
        self.assertIs(Boolean(True).tag, Tag.BOOLEAN)
        self.assertIs(Integer(1).tag, Tag.INTEGER)
        self.assertIs(Float(1.0).tag, Tag.FLOAT)
        self.assertIs(String(b"").tag, Tag.STRING)
        self.assertIs(List().tag, Tag.LIST)
        self.assertIs(Dictionary().tag, Tag.DICTIONARY)

    def test_all_values_share_base_class(self):
        values = (NULL, Boolean(False), Integer(0), Float(0.0), String(b""))
        for value in values + (List(), Dictionary()):
            with self.subTest(value=value):
                self.assertIsInstance(value, Value)

    def test_kinds_never_compare_equal(self):
        self.assertNotEqual(Integer(1), Float(1.0))
        self.assertNotEqual(Integer(1), Boolean(True))
        self.assertNotEqual(Integer(0), NULL)
        self.assertNotEqual(String(b"1"), Integer(1))
        self.assertNotEqual(List(), Dictionary())

    def test_null_is_equal_to_null(self):
        self.assertEqual(Null(), NULL)
        self.assertEqual(hash(Null()), hash(NULL))

    def test_float_equality_uses_bit_pattern(self):
        self.assertEqual(Float(0.1), Float(0.1))
        self.assertNotEqual(Float(0.0), Float(-0.0))
        self.assertEqual(hash(Float(2.5)), hash(Float(2.5)))

    def test_float_accepts_int(self):
        value = Float(3)
        self.assertIsInstance(value.value, float)
        self.assertEqual(value, Float(3.0))

    def test_float_rejects_int_out_of_range(self):
        for number in (10 ** 400, -(10 ** 400)):
            with self.subTest(number=number):
                with self.assertRaises(TypeError) as cm:
                    Float(number)
                self.assertNotIsInstance(cm.exception, OverflowError)

    def test_string_coercion(self):
        self.assertEqual(String("héllo").value, "héllo".encode("utf-8"))
        self.assertEqual(String(bytearray(b"ab")).value, b"ab")
        self.assertEqual(String(memoryview(b"ab")).value, b"ab")
        self.assertIsInstance(String(bytearray(b"ab")).value, bytes)

    def test_invalid_member_types(self):
        cases = [
            lambda: Boolean(1),
            lambda: Integer(True),
            lambda: Integer(1.5),
            lambda: Float("1.5"),
            lambda: Float(False),
            lambda: String(1),
            lambda: List([1, 2]),
            lambda: Dictionary([(b"a", 1)]),
            lambda: Dictionary([(1, Integer(1))]),
        ]
        for i, factory in enumerate(cases):
            with self.subTest(case=i):
                with self.assertRaises(TypeError):
                    factory()

    def test_values_are_immutable(self):
        value = Integer(1)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            value.value = 2

        items = [Integer(1)]
        lst = List(items)
        items.append(Integer(2))
        self.assertEqual(len(lst), 1)
        self.assertIsInstance(lst.items, tuple)

    def test_list_sequence_protocol(self):
        lst = List([String(b"a"), Integer(2)])
        self.assertEqual(len(lst), 2)
        self.assertEqual(lst[0], String(b"a"))
        self.assertEqual(list(lst), [String(b"a"), Integer(2)])

    def test_values_are_hashable(self):
        def make_tree():
            return List([Dictionary([(b"k", List([Integer(1)]))]), Float(1.5), NULL])

        self.assertEqual(hash(make_tree()), hash(make_tree()))
        self.assertEqual(len({make_tree(), make_tree()}), 1)

    def test_dictionary_keys_are_wrapped(self):
        d = Dictionary([(b"a", Integer(1)), ("b", Integer(2)), (String(b"c"), Integer(3))])
        self.assertEqual(d.keys(), [String(b"a"), String(b"b"), String(b"c")])
        self.assertEqual(d.values(), [Integer(1), Integer(2), Integer(3)])

    def test_dictionary_from_mapping(self):
        d = Dictionary({"x": Integer(1), "y": NULL})
        self.assertEqual(list(d), [(String(b"x"), Integer(1)), (String(b"y"), NULL)])

    def test_dictionary_preserves_order_and_duplicates(self):
        d = Dictionary([(b"b", Integer(1)), (b"a", Integer(2)), (b"b", Integer(3))])
        self.assertEqual(len(d), 3)
        self.assertEqual([k.value for k in d.keys()], [b"b", b"a", b"b"])

    def test_dictionary_get_returns_first_match(self):
        d = Dictionary([(b"b", Integer(1)), (b"b", Integer(3))])
        self.assertEqual(d.get(b"b"), Integer(1))
        self.assertEqual(d.get("b"), Integer(1))
        self.assertIsNone(d.get(b"missing"))
        self.assertEqual(d.get(b"missing", NULL), NULL)

    def test_dictionary_order_matters_for_equality(self):
        a = Dictionary([(b"a", Integer(1)), (b"b", Integer(2))])
        b = Dictionary([(b"b", Integer(2)), (b"a", Integer(1))])
        self.assertNotEqual(a, b)


if __name__ == "__main__":
    unittest.main()
