"""
Apply the annotation to the record classes of Python source code.

Only the type annotations of rewritten fields and the annotation decorator itself change in the output; every other
character of the input, including comments and formatting, is preserved.
"""

import ast
import bisect
import io
import logging
import textwrap
import tokenize
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .arguments import parse_arguments
from .configuration import Configuration
from .core import ArgumentError, DeclarationError, TransformError, UnmatchedFieldError
from .inspection import type_path
from .options import TransformOptions
from .rewriter import FieldRewriter
from .timing import timing


@dataclass(frozen=True)
class _Edit:
    "Replaces the characters between two offsets of the source text."

    start: int
    end: int
    text: str


class _SourceText:
    "Maps syntax tree positions (line number and UTF-8 byte column) to character offsets."

    source: str
    lines: List[str]
    line_offsets: List[int]

    def __init__(self, source: str):
        self.source = source

        # split lines the way the Python tokenizer does (form feeds are not line breaks)
        self.lines = io.StringIO(source, newline="").readlines()
        self.line_offsets = [0]
        for line in self.lines:
            self.line_offsets.append(self.line_offsets[-1] + len(line))

    def offset(self, lineno: int, col_offset: int) -> int:
        if lineno > len(self.lines):
            return len(self.source)

        line = self.lines[lineno - 1]
        column = len(line.encode("utf-8")[:col_offset].decode("utf-8"))
        return self.line_offsets[lineno - 1] + column

    def start_of(self, node: ast.AST) -> int:
        return self.offset(node.lineno, node.col_offset)

    def end_of(self, node: ast.AST) -> int:
        return self.offset(node.end_lineno, node.end_col_offset)

    def location(self, offset: int) -> Tuple[int, int]:
        "Line number and column (both 1-based) of a character offset."

        index = bisect.bisect_right(self.line_offsets, offset) - 1
        return index + 1, offset - self.line_offsets[index] + 1

    def apply(self, edits: List[_Edit]) -> str:
        result = self.source
        for edit in sorted(edits, key=lambda e: e.start, reverse=True):
            result = result[: edit.start] + edit.text + result[edit.end :]
        return result


def find_annotation(declaration: ast.ClassDef, name: str) -> Optional[ast.expr]:
    "The first decorator of a class that refers to the annotation, e.g. `@fixed(...)` or `@fixedsize.fixed(...)`."

    for decorator in declaration.decorator_list:
        if isinstance(decorator, ast.Call):
            target = decorator.func
        else:
            target = decorator

        path = type_path(target)
        if path is not None and path[-1] == name:
            return decorator

    return None


class SourceTransformer:
    "Rewrites every class in a module that carries the annotation."

    text: _SourceText
    options: TransformOptions
    filename: str
    module: ast.Module

    def __init__(
        self,
        source: str,
        options: Optional[TransformOptions] = None,
        filename: str = "<unknown>",
    ):
        self.text = _SourceText(source)
        self.options = options if options is not None else TransformOptions()
        self.filename = filename
        self.module = ast.parse(source, filename=filename)

    def annotated_classes(self) -> List[Tuple[ast.ClassDef, ast.expr]]:
        "Annotated class declarations with their annotation decorator, in source order."

        classes = []
        for node in ast.walk(self.module):
            if not isinstance(node, ast.ClassDef):
                continue

            decorator = find_annotation(node, self.options.annotation)
            if decorator is not None:
                classes.append((node, decorator))

        classes.sort(key=lambda item: (item[0].lineno, item[0].col_offset))
        return classes

    def _argument_text(self, decorator: ast.expr) -> Tuple[str, int]:
        "The argument list of the annotation and its character offset in the source."

        if not isinstance(decorator, ast.Call):
            return "", self.text.end_of(decorator)

        start = self.text.end_of(decorator.func)
        end = self.text.end_of(decorator)
        segment = self.text.source[start:end]
        opening = segment.index("(")
        return segment[opening + 1 : -1], start + opening + 1

    def _sign_line(self, decorator: ast.expr) -> int:
        "Line number of the `@` sign that introduces a decorator, which is not part of the decorator expression."

        lineno = decorator.lineno
        while lineno > 1 and not self.text.lines[lineno - 1].lstrip().startswith("@"):
            lineno -= 1
        return lineno

    def _decorator_lines(
        self, declaration: ast.ClassDef, decorator: ast.expr
    ) -> Tuple[int, int]:
        """
        Offsets of the start of the line with the `@` sign and the end of the line that closes the decorator.

        Parentheses around the decorator expression may extend it past the expression node itself, e.g.
        `@(\\n    fixed(code=4)\\n)`.
        """

        decorators = declaration.decorator_list
        index = decorators.index(decorator)
        if index + 1 < len(decorators):
            limit = self._sign_line(decorators[index + 1])
        else:
            limit = declaration.lineno

        # only closing parentheses and comments may follow the expression before the next decorator or the class
        last = decorator.end_lineno
        for lineno in range(decorator.end_lineno + 1, limit):
            if self.text.lines[lineno - 1].split("#", 1)[0].strip():
                last = lineno

        return self.text.line_offsets[self._sign_line(decorator) - 1], self.text.line_offsets[last]

    def _error(self, message: str, offset: int) -> TransformError:
        line, column = self.text.location(offset)
        return TransformError(message, self.filename, line, column)

    def configuration(self, decorator: ast.expr) -> Configuration:
        arguments, offset = self._argument_text(decorator)
        try:
            return parse_arguments(arguments)
        except ArgumentError as e:
            raise self._error(e.message, offset + (e.start or 0)) from e

    def rewrite_edits(
        self, declaration: ast.ClassDef, configuration: Configuration
    ) -> List[_Edit]:
        "Replacements of the field type annotations that the configuration selects."

        rewriter = FieldRewriter(configuration)
        rewriter.rewrite(declaration)
        if self.options.strict:
            rewriter.check()

        return [
            _Edit(
                self.text.start_of(original.annotation),
                self.text.end_of(original.annotation),
                ast.unparse(field.annotation),
            )
            for original, field in rewriter.rewritten
        ]

    def transform(self) -> str:
        edits = []
        count = 0
        for declaration, decorator in self.annotated_classes():
            configuration = self.configuration(decorator)
            try:
                class_edits = self.rewrite_edits(declaration, configuration)
            except UnmatchedFieldError as e:
                raise self._error(str(e), self.text.start_of(decorator)) from e
            edits.extend(class_edits)
            count += len(class_edits)

            if not self.options.keep_annotation:
                start, end = self._decorator_lines(declaration, decorator)
                edits.append(_Edit(start, end, ""))

        logging.debug("%s: %d field(s) rewritten", self.filename, count)
        return self.text.apply(edits)


def transform_source(
    source: str, options: TransformOptions = None, filename: str = "<unknown>"
) -> str:
    """
    Rewrites the annotated classes in Python source code.

    :param source: Python source code of a module.
    :param options: Transformation settings; defaults are read from the environment.
    :param filename: File name to use in error messages.
    :returns: Source code with selected string fields replaced and annotation decorators removed.
    :raises TransformError: If the annotation arguments are malformed, or a strict check fails.
    """

    return SourceTransformer(source, options, filename).transform()


def collect_configurations(
    source: str, options: TransformOptions = None, filename: str = "<unknown>"
) -> List[Tuple[str, Configuration]]:
    "Parses the annotation of every annotated class in Python source code."

    transformer = SourceTransformer(source, options, filename)
    return [
        (declaration.name, transformer.configuration(decorator))
        for declaration, decorator in transformer.annotated_classes()
    ]


def transform_declaration(arguments: str, declaration: str, strict: bool = False) -> str:
    """
    Rewrites a single class declaration given the argument list of the annotation.

    The result depends on the two source texts alone; environment settings are not consulted.

    :param arguments: Argument list such as `code=4, typ=MyFixed`.
    :param declaration: Source code of a class statement. Common leading indentation is removed.
    :param strict: Whether to report selected names that are not string fields of the class.
    :raises MalformedArgument: If the argument list is malformed.
    :raises DeclarationError: If the declaration is not a single class statement.
    :raises UnmatchedFieldError: In strict mode, if a selected name is not a string field.
    """

    configuration = parse_arguments(arguments)

    options = TransformOptions(annotation="fixed", strict=strict, keep_annotation=False)
    transformer = SourceTransformer(textwrap.dedent(declaration), options)
    statements = transformer.module.body
    if len(statements) != 1 or not isinstance(statements[0], ast.ClassDef):
        raise DeclarationError("expected a single class definition")

    return transformer.text.apply(
        transformer.rewrite_edits(statements[0], configuration)
    )


def read_source(path: Union[str, Path]) -> Tuple[str, str]:
    """
    Reads a Python source file the way the interpreter does.

    The encoding is detected from a byte order mark or an encoding declaration (PEP 263), and falls back to UTF-8.
    Line endings are kept as they are in the file.

    :returns: A tuple of the source text and the encoding. The encoding is `utf-8-sig` if the file starts with a
        UTF-8 byte order mark, which is stripped from the text.
    """

    with open(path, "rb") as f:
        data = f.read()

    encoding, _ = tokenize.detect_encoding(io.BytesIO(data).readline)
    return data.decode(encoding), encoding


@timing
def transform_file(
    path: Union[str, Path], options: TransformOptions = None, in_place: bool = False
) -> str:
    """
    Rewrites the annotated classes of a Python source file, optionally saving the result to the same file.

    When saving, the file keeps its original encoding, byte order mark and line endings.
    """

    source, encoding = read_source(path)

    result = transform_source(source, options, filename=str(path))
    if in_place and result != source:
        with open(path, "wb") as f:
            f.write(result.encode(encoding))
        logging.debug("updated %s (%s)", path, encoding)

    return result
