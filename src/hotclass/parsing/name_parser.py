"""Parser for dotted class names."""

from __future__ import annotations

from typing import Any

import ply.yacc as yacc

from hotclass.parsing.name_lexer import QualifiedNameLexer


class QualifiedNameParser:
    """Parses ``a.b.C`` into its segments ``["a", "b", "C"]``."""

    tokens = QualifiedNameLexer.tokens

    def __init__(self) -> None:
        self.lexer = QualifiedNameLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_qualified_name_single(self, p: yacc.YaccProduction) -> None:
        """qualified_name : IDENTIFIER"""
        p[0] = [p[1]]

    def p_qualified_name_nested(self, p: yacc.YaccProduction) -> None:
        """qualified_name : qualified_name DOT IDENTIFIER"""
        p[0] = p[1]
        p[0].append(p[3])

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Unexpected '{p.value}' at position {p.lexpos}")
        else:
            raise SyntaxError("Unexpected end of name")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> list[str]:
        """Parse a dotted name and return its segments."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        if not data:
            raise SyntaxError("Empty name")

        segments = self.parser.parse(data, lexer=self.lexer.lexer)
        if segments is None:
            raise SyntaxError(f"Cannot parse name '{data}'")
        return segments
