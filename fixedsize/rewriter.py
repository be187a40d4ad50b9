"""
Rewrite the field types of a record class declaration.

The rewriter is a fold over the syntax tree of the class: every node is copied unchanged except the type annotations
of fields selected by the configuration.
"""

import ast
import copy
import logging
from typing import List, Set, Tuple

from .configuration import Configuration
from .core import UnmatchedFieldError
from .inspection import field_name, is_variable_string


def fixed_type(replacement_type: str, size: int) -> ast.expr:
    "Syntax tree of the generic instantiation `replacement_type[size]`."

    return ast.Subscript(
        value=ast.Name(id=replacement_type, ctx=ast.Load()),
        slice=ast.Constant(value=size),
        ctx=ast.Load(),
    )


class FieldRewriter(ast.NodeTransformer):
    """
    Replaces the type of selected string fields with a fixed-capacity string type.

    Fields that are not selected, and selected fields whose type is not `str`, pass through unchanged.
    """

    configuration: Configuration
    # pairs of original and rewritten field declaration
    rewritten: List[Tuple[ast.AnnAssign, ast.AnnAssign]]
    # names of selected fields that exist but are not of type str
    mismatched: List[str]

    def __init__(self, configuration: Configuration):
        self.configuration = configuration
        self.rewritten = []
        self.mismatched = []
        self.class_name = None

    def visit_ClassDef(self, node: ast.ClassDef) -> ast.ClassDef:
        if self.class_name is not None:
            # fields of a nested class belong to another declaration
            return node

        self.class_name = node.name
        return self.generic_visit(node)

    def visit_FunctionDef(self, node: ast.FunctionDef) -> ast.FunctionDef:
        return node

    def visit_AsyncFunctionDef(
        self, node: ast.AsyncFunctionDef
    ) -> ast.AsyncFunctionDef:
        return node

    def visit_AnnAssign(self, node: ast.AnnAssign) -> ast.AnnAssign:
        name = field_name(node)
        if name is None:
            return node

        size = self.configuration.get_size(name)
        if size is None:
            return node

        if not is_variable_string(node.annotation):
            self.mismatched.append(name)
            return node

        annotation = ast.copy_location(
            fixed_type(self.configuration.replacement_type, size), node.annotation
        )
        field = ast.copy_location(
            ast.AnnAssign(
                target=node.target,
                annotation=annotation,
                value=node.value,
                simple=node.simple,
            ),
            node,
        )
        logging.debug(
            "%s.%s: %s -> %s",
            self.class_name,
            name,
            ast.unparse(node.annotation),
            ast.unparse(annotation),
        )
        self.rewritten.append((node, field))
        return field

    def rewritten_names(self) -> Set[str]:
        return {field_name(field) for _, field in self.rewritten}

    def check(self) -> None:
        "Ensures every selected name refers to a string field."

        unmatched = set(self.configuration.size_map) - self.rewritten_names()
        if not unmatched:
            return

        mismatched = sorted(unmatched & set(self.mismatched))
        missing = sorted(unmatched - set(self.mismatched))
        raise UnmatchedFieldError(self.class_name, missing, mismatched)

    def rewrite(self, declaration: ast.ClassDef) -> ast.ClassDef:
        if not isinstance(declaration, ast.ClassDef):
            raise TypeError(f"expected a class definition but got: {type(declaration)}")

        return ast.fix_missing_locations(self.visit(copy.deepcopy(declaration)))


def rewrite_declaration(
    configuration: Configuration, declaration: ast.ClassDef, strict: bool = False
) -> ast.ClassDef:
    """
    Produces a new class declaration with the selected string fields replaced by a fixed-capacity string type.

    The input declaration is left unmodified.

    :param configuration: Selected fields with their capacity, and the replacement type name.
    :param declaration: Syntax tree of the class to transform.
    :param strict: Whether a selected name that is not a string field of the class is an error.
    :raises UnmatchedFieldError: In strict mode, if a selected name is missing or is not a string field.
    """

    rewriter = FieldRewriter(configuration)
    result = rewriter.rewrite(declaration)
    if strict:
        rewriter.check()
    return result
