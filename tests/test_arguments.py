import dataclasses
import unittest
from typing import Dict

from fixedsize.arguments import parse_arguments
from fixedsize.configuration import DEFAULT_REPLACEMENT_TYPE, Configuration
from fixedsize.core import ERRMSG, InvalidTypAssignment, MalformedArgument


class TestArgumentParser(unittest.TestCase):
    def assertSizes(self, text: str, size_map: Dict[str, int]):
        self.assertEqual(parse_arguments(text).size_map, size_map)

    def assertMalformed(self, text: str, start: int = None) -> MalformedArgument:
        with self.assertRaises(MalformedArgument) as cm:
            parse_arguments(text)
        if start is not None:
            self.assertEqual(cm.exception.start, start)
        return cm.exception

    def test_empty(self):
        configuration = parse_arguments("")
        self.assertEqual(configuration.size_map, {})
        self.assertEqual(configuration.replacement_type, DEFAULT_REPLACEMENT_TYPE)
        self.assertTrue(configuration.is_empty())
        self.assertEqual(parse_arguments("  \n  "), Configuration())

    def test_sizes(self):
        self.assertSizes("code=4", {"code": 4})
        self.assertSizes("name=8, code=4", {"name": 8, "code": 4})
        self.assertSizes("name = 8 ,code= 4", {"name": 8, "code": 4})

    def test_trailing_comma(self):
        self.assertSizes("code=4,", {"code": 4})
        self.assertSizes("name=8, code=4, ", {"name": 8, "code": 4})

    def test_integer_literals(self):
        self.assertSizes(
            "a=0x10, b=0o17, c=0b101, d=1_024, e=007, f=0",
            {"a": 16, "b": 15, "c": 5, "d": 1024, "e": 7, "f": 0},
        )

    def test_duplicate_key(self):
        self.assertSizes("code=4, name=8, code=6", {"code": 6, "name": 8})

    def test_many_fields(self):
        text = ", ".join(f"field_{i}={i + 1}" for i in range(100))
        size_map = parse_arguments(text).size_map
        self.assertEqual(len(size_map), 100)
        self.assertEqual(size_map["field_99"], 100)

    def test_multiline(self):
        text = """
            name=8,  # display name
            code=4,
        """
        self.assertSizes(text, {"name": 8, "code": 4})

    def test_unicode_identifier(self):
        self.assertSizes("título=8", {"título": 8})

    def test_replacement_type(self):
        configuration = parse_arguments("name=8, code=4, typ=MyFixed")
        self.assertEqual(configuration.size_map, {"name": 8, "code": 4})
        self.assertEqual(configuration.replacement_type, "MyFixed")

        configuration = parse_arguments("typ=MyFixed, code=4")
        self.assertEqual(configuration.replacement_type, "MyFixed")

    def test_replacement_type_last_wins(self):
        configuration = parse_arguments("typ=First, code=4, typ=Second")
        self.assertEqual(configuration.replacement_type, "Second")

    def test_typ_as_field_name(self):
        configuration = parse_arguments("typ=4")
        self.assertEqual(configuration.size_map, {"typ": 4})
        self.assertEqual(configuration.replacement_type, DEFAULT_REPLACEMENT_TYPE)

    def test_string_value(self):
        e = self.assertMalformed('x="abc"', start=2)
        self.assertEqual(e.message, ERRMSG)
        self.assertMalformed("x='abc'", start=2)
        self.assertMalformed('x=b"abc"', start=2)

    def test_float_value(self):
        self.assertMalformed("x=1.5", start=2)
        self.assertMalformed("x=1e3", start=2)

    def test_non_identifier_key(self):
        self.assertMalformed("3=foo", start=0)
        self.assertMalformed("code=4, 3=foo", start=8)
        self.assertMalformed('"x"=4', start=0)
        self.assertMalformed("a.b=4", start=0)

    def test_keyword(self):
        self.assertMalformed("class=4", start=0)
        self.assertMalformed("typ=None", start=4)

    def test_invalid_typ_assignment(self):
        with self.assertRaises(InvalidTypAssignment) as cm:
            parse_arguments("code=4, name=Foo")
        self.assertIsInstance(cm.exception, MalformedArgument)
        self.assertEqual(cm.exception.name, "name")
        self.assertEqual(cm.exception.start, 8)
        self.assertTrue(cm.exception.message.startswith(ERRMSG))

    def test_qualified_replacement_type(self):
        e = self.assertMalformed("typ=a.B", start=4)
        self.assertNotIsInstance(e, InvalidTypAssignment)

    def test_syntax_error(self):
        for text in [
            "x",
            "=4",
            ",",
            "x=4,,y=5",
            "x=[1]",
            "x==1",
            "x=(4)",
            "x=4 y=5",
            "x=4;",
        ]:
            with self.subTest(text=text):
                self.assertMalformed(text)

    def test_syntax_error_offset(self):
        self.assertMalformed("x=", start=2)
        self.assertMalformed("x=-1", start=2)
        self.assertMalformed("x=4,,y=5", start=4)

    def test_error_message(self):
        e = self.assertMalformed('x="abc"')
        self.assertIn(ERRMSG, str(e))
        self.assertIn("offset 2", str(e))


class TestConfiguration(unittest.TestCase):
    def test_immutable(self):
        sizes = {"code": 4}
        configuration = Configuration(sizes)
        sizes["name"] = 8
        self.assertEqual(configuration.size_map, {"code": 4})

        with self.assertRaises(TypeError):
            configuration.size_map["name"] = 8
        with self.assertRaises(dataclasses.FrozenInstanceError):
            configuration.replacement_type = "MyFixed"

    def test_hash(self):
        self.assertEqual(
            hash(Configuration({"name": 8, "code": 4})),
            hash(Configuration({"code": 4, "name": 8})),
        )
        self.assertEqual(hash(Configuration()), hash(parse_arguments("")))
        self.assertEqual(len({Configuration({"code": 4}), parse_arguments("code=4")}), 1)
        self.assertNotEqual(Configuration({"code": 4}), Configuration({"code": 4}, "MyFixed"))


if __name__ == "__main__":
    unittest.main()
