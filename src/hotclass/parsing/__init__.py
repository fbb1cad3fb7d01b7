"""Parsing module for dotted class names."""

from hotclass.parsing.name_lexer import QualifiedNameLexer
from hotclass.parsing.name_parser import QualifiedNameParser

__all__ = [
    "QualifiedNameLexer",
    "QualifiedNameParser",
]
