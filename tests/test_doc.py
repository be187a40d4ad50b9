import os.path
import re
import unittest

from fixedsize.options import TransformOptions
from fixedsize.transform import transform_source


class TestDocumentation(unittest.TestCase):
    def test_doc(self):
        regexp = re.compile(
            r"""
            ^```python$
            (?P<source>.*?)
            ^```$
            .*?
            ^```python$
            (?P<target>.*?)
            ^```$
        """,
            re.DOTALL | re.MULTILINE | re.VERBOSE,
        )

        options = TransformOptions(annotation="fixed", strict=False, keep_annotation=False)
        path = os.path.join(os.path.dirname(__file__), "..", "README.md")
        with open(path, "r", encoding="utf-8") as f:
            count = 0
            text = f.read()
            for m in regexp.finditer(text):
                matches = m.groupdict()

                source = matches["source"].lstrip("\n")
                target = matches["target"].lstrip("\n")
                self.assertEqual(transform_source(source, options), target)

                count += 1

            self.assertGreater(count, 0)


if __name__ == "__main__":
    unittest.main()
