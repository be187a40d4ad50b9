"""
Parse the argument list of the annotation into a configuration.

The argument list is a comma-separated list of assignments, each either `field_name=size` or `typ=TypeName`.
"""

import functools
import keyword
from typing import Dict, Optional, Tuple, Union

from lark import Lark, Token, Tree, UnexpectedInput, UnexpectedToken

from .configuration import DEFAULT_REPLACEMENT_TYPE, Configuration
from .core import InvalidTypAssignment, MalformedArgument

# reserved argument name that selects the replacement type
TYP_ARGUMENT = "typ"

ARGUMENTS_GRAMMAR = r"""
start: [argument ("," argument)* [","]]

argument: operand "=" operand

?operand: path
        | INT
        | FLOAT
        | STRING

path: NAME ("." NAME)*

NAME: /[^\W\d]\w*/
INT: /0[xX](_?[0-9a-fA-F])+|0[oO](_?[0-7])+|0[bB](_?[01])+|[0-9](_?[0-9])*/
FLOAT.2: /([0-9](_?[0-9])*)?\.[0-9](_?[0-9])*([eE][+-]?[0-9]+)?|[0-9](_?[0-9])*(\.([0-9](_?[0-9])*)?)?[eE][+-]?[0-9]+|[0-9](_?[0-9])*\./
STRING.2: /[rRbBuUfF]{0,2}("([^"\\\n]|\\.)*"|'([^'\\\n]|\\.)*')/
COMMENT: /#[^\n]*/

%import common.WS
%ignore WS
%ignore COMMENT
"""

Operand = Union[Tree, Token]


@functools.lru_cache(maxsize=None)
def _get_parser() -> Lark:
    return Lark(
        ARGUMENTS_GRAMMAR,
        parser="lalr",
        propagate_positions=True,
        maybe_placeholders=False,
    )


def _span_of(node: Operand) -> Tuple[Optional[int], Optional[int]]:
    "Start and end character offset of a parse tree node in the argument text."

    if isinstance(node, Token):
        return node.start_pos, node.end_pos
    meta = node.meta
    if meta.empty:
        return None, None
    return meta.start_pos, meta.end_pos


def _identifier(node: Operand) -> Optional[str]:
    "The name held by a single-segment path, or None if the node is not a bare identifier."

    if not isinstance(node, Tree) or node.data != "path" or len(node.children) != 1:
        return None

    name = str(node.children[0])
    if not name.isidentifier() or keyword.iskeyword(name):
        return None
    return name


def _int_value(tok: Token) -> int:
    text = str(tok)
    if text[1:2] in ("x", "X", "o", "O", "b", "B"):
        return int(text, 0)
    else:
        # decimal literals may have leading zeros
        return int(text, 10)


class ArgumentParser:
    """
    Builds a configuration from the assignments in an annotation argument list.

    Assignments are processed left to right; a later assignment to the same name overwrites an earlier one.
    """

    text: str
    size_map: Dict[str, int]
    replacement_type: str

    def __init__(self, text: str):
        self.text = text
        self.size_map = {}
        self.replacement_type = DEFAULT_REPLACEMENT_TYPE

    def _parse_tree(self) -> Tree:
        try:
            return _get_parser().parse(self.text)
        except UnexpectedInput as e:
            if isinstance(e, UnexpectedToken) and e.token.type == "$END":
                start = len(self.text)
            elif e.pos_in_stream is not None and e.pos_in_stream >= 0:
                start = e.pos_in_stream
            else:
                start = len(self.text)
            raise MalformedArgument(start, start + 1) from e

    def _assign(self, argument: Tree) -> None:
        left, right = argument.children

        key = _identifier(left)
        if key is None:
            raise MalformedArgument(*_span_of(left))

        if isinstance(right, Token) and right.type == "INT":
            self.size_map[key] = _int_value(right)
        elif isinstance(right, Tree) and right.data == "path":
            if key != TYP_ARGUMENT:
                raise InvalidTypAssignment(key, *_span_of(argument))

            value = _identifier(right)
            if value is None:
                raise MalformedArgument(*_span_of(right))
            self.replacement_type = value
        else:
            raise MalformedArgument(*_span_of(right))

    def parse(self) -> Configuration:
        tree = self._parse_tree()
        for argument in tree.children:
            self._assign(argument)

        return Configuration(
            size_map=self.size_map, replacement_type=self.replacement_type
        )


def parse_arguments(text: str) -> Configuration:
    """
    Parses the argument list of the annotation (the text between the parentheses).

    :param text: Argument list such as `name=8, code=4, typ=MyFixed`.
    :returns: The size of each selected field and the replacement type name.
    :raises MalformedArgument: If any argument is not of the form `Ident=Int` or `typ=Identifier`.
    """

    return ArgumentParser(text).parse()
