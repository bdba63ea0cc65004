"""
Grammar Specification Loader

Turns the grammar specification text format into a Grammar value:

    line 1: comma-separated non-terminals; the first is the start symbol
    line 2: comma-separated terminals
    line 3..n: Head -> Body1 | Body2 | ...

Body symbols are separated by whitespace and the empty body is written as
the single reserved symbol ε. Blank lines and lines starting with '#' are
ignored.
"""

import re
from typing import Dict, List, Optional, Set, Tuple

from slr_parser import END_OF_INPUT, EPSILON, Grammar, Production


class StructuralGrammarError(Exception):
    """Raised when a grammar specification is malformed."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class GrammarLoader:
    """Processes grammar specification text and creates Grammar objects."""

    ARROW_RE = re.compile(r'^\s*(\S+)\s*->\s*(.*)$')
    RESERVED = (EPSILON, END_OF_INPUT)

    def __init__(self):
        self.non_terminals: List[str] = []
        self.terminals: List[str] = []
        self.bodies: Dict[str, List[Tuple[str, ...]]] = {}

    def load(self, text: str) -> Grammar:
        """
        Parse grammar specification text and return a Grammar object.

        Raises:
            StructuralGrammarError: The text does not describe a valid grammar
        """
        self._reset()
        lines = self._clean_input(text)
        if len(lines) < 2:
            raise StructuralGrammarError("expected a non-terminal line and a terminal line")

        (nt_line_no, nt_line), (t_line_no, t_line) = lines[0], lines[1]
        self.non_terminals = self._split_symbols(nt_line, nt_line_no, "non-terminal")
        self.terminals = self._split_symbols(t_line, t_line_no, "terminal")

        overlap = set(self.non_terminals) & set(self.terminals)
        if overlap:
            raise StructuralGrammarError(
                f"symbols declared both terminal and non-terminal: {', '.join(sorted(overlap))}",
                t_line_no)

        for line_number, line in lines[2:]:
            self._add_production_line(line, line_number)

        missing = [nt for nt in self.non_terminals if not self.bodies.get(nt)]
        if missing:
            raise StructuralGrammarError(f"non-terminals without productions: {', '.join(missing)}")

        productions = []
        for head in self.non_terminals:
            for body in self.bodies[head]:
                productions.append(Production(head, body))

        return Grammar(
            non_terminals=frozenset(self.non_terminals),
            terminals=frozenset(self.terminals),
            productions=tuple(dict.fromkeys(productions)),
            start_symbol=self.non_terminals[0],
        )

    def _reset(self):
        """Reset internal state for new grammar parsing."""
        self.non_terminals = []
        self.terminals = []
        self.bodies = {}

    def _clean_input(self, text: str) -> List[Tuple[int, str]]:
        """Return (line number, stripped line) for every meaningful line."""
        lines = []
        for line_number, line in enumerate(text.splitlines(), 1):
            line = line.strip()
            if line and not line.startswith('#'):
                lines.append((line_number, line))
        return lines

    def _split_symbols(self, line: str, line_number: int, kind: str) -> List[str]:
        symbols = [s.strip() for s in line.split(',')]
        if not all(symbols):
            raise StructuralGrammarError(f"empty {kind} name", line_number)
        for symbol in symbols:
            if symbol in self.RESERVED:
                raise StructuralGrammarError(f"'{symbol}' is reserved and cannot be declared", line_number)
            if re.search(r'\s', symbol):
                raise StructuralGrammarError(f"{kind} '{symbol}' contains whitespace", line_number)
        return list(dict.fromkeys(symbols))

    def _add_production_line(self, line: str, line_number: int):
        match = self.ARROW_RE.match(line)
        if not match:
            raise StructuralGrammarError(f"expected 'Head -> Body': {line!r}", line_number)

        head, rhs_text = match.group(1), match.group(2)
        if head not in self.non_terminals:
            raise StructuralGrammarError(f"production head '{head}' is not a declared non-terminal", line_number)

        declared: Set[str] = set(self.non_terminals) | set(self.terminals)
        for alternative in rhs_text.split('|'):
            body = tuple(alternative.split())
            if not body:
                raise StructuralGrammarError(f"empty alternative for '{head}' (write {EPSILON})", line_number)
            if EPSILON in body and len(body) > 1:
                raise StructuralGrammarError(f"{EPSILON} must stand alone in a body", line_number)
            for symbol in body:
                if symbol != EPSILON and symbol not in declared:
                    raise StructuralGrammarError(f"undeclared symbol '{symbol}'", line_number)
            self.bodies.setdefault(head, []).append(body)


def load_grammar(text: str) -> Grammar:
    return GrammarLoader().load(text)


def load_grammar_file(path: str) -> Grammar:
    with open(path, encoding='utf-8') as f:
        return load_grammar(f.read())
