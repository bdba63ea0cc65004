"""
SLR(1) Parser Implementation - Grammar Analysis, Automaton and Table-Driven Parsing

This module implements the core of the SLR parser generator: FIRST/FOLLOW
computation, the canonical collection of LR(0) item sets, SLR ACTION/GOTO
table construction and the shift-reduce engine that builds parse trees.

The core never reads files or writes to the console. Grammars come from
grammar_loader, tokens from lexical_analyzer.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Sequence, Set, Tuple
import warnings


EPSILON = "ε"
END_OF_INPUT = "$"


class AutomatonConflictWarning(UserWarning):
    """Issued when two different actions compete for the same ACTION cell."""


class ParsingError(Exception):
    """Raised when the table has no action for the current (state, lookahead) pair."""

    def __init__(self, state_stack: Sequence[int], token: 'Token', expected: Sequence[str] = ()):
        self.state_stack = tuple(state_stack)
        self.token = token
        self.expected = tuple(expected)
        message = f"Unexpected token {token} in state {self.state_stack[-1] if self.state_stack else '?'}"
        if self.expected:
            message += f". Expected one of: {', '.join(self.expected)}"
        message += f" (state stack: {list(self.state_stack)})"
        super().__init__(message)


@dataclass(frozen=True, order=True)
class Production:
    """A single production rule; an empty body is written as (EPSILON,)."""
    head: str
    body: Tuple[str, ...]

    @property
    def is_epsilon(self) -> bool:
        return self.body == (EPSILON,)

    @property
    def symbols(self) -> Tuple[str, ...]:
        """Symbols consumed from the stack when this production is reduced."""
        if self.is_epsilon:
            return ()
        return self.body

    def __str__(self) -> str:
        return f"{self.head} -> {' '.join(self.body)}"


@dataclass(frozen=True)
class Grammar:
    """Represents a context-free grammar. Immutable once built."""
    non_terminals: FrozenSet[str]
    terminals: FrozenSet[str]
    productions: Tuple[Production, ...]
    start_symbol: str

    @property
    def symbols(self) -> FrozenSet[str]:
        return self.terminals | self.non_terminals

    def is_terminal(self, symbol: str) -> bool:
        return symbol in self.terminals or symbol == END_OF_INPUT

    def is_non_terminal(self, symbol: str) -> bool:
        return symbol in self.non_terminals

    def productions_for(self, head: str) -> Tuple[Production, ...]:
        return tuple(p for p in self.productions if p.head == head)

    def extend(self,
               non_terminals: Iterable[str] = (),
               terminals: Iterable[str] = (),
               productions: Iterable[Production] = (),
               start_symbol: Optional[str] = None,
               prepend: bool = False) -> 'Grammar':
        """
        Build a new grammar from this one plus additions. This grammar is left untouched.

        Args:
            non_terminals: Additional non-terminals
            terminals: Additional terminals
            productions: Additional productions (duplicates are dropped)
            start_symbol: New start symbol, or None to keep the current one
            prepend: Place the new productions before the existing ones

        Returns:
            The extended Grammar
        """
        added = tuple(p for p in dict.fromkeys(productions) if p not in self.productions)
        combined = added + self.productions if prepend else self.productions + added
        return Grammar(
            non_terminals=self.non_terminals | frozenset(non_terminals),
            terminals=self.terminals | frozenset(terminals),
            productions=combined,
            start_symbol=start_symbol if start_symbol is not None else self.start_symbol,
        )

    def __str__(self) -> str:
        lines = [f"Start Symbol: {self.start_symbol}"]
        lines.append(f"Terminals: {sorted(self.terminals)}")
        lines.append(f"Non-terminals: {sorted(self.non_terminals)}")
        lines.append("Productions:")
        for prod in self.productions:
            lines.append(f"  {prod}")
        return "\n".join(lines)


@dataclass(frozen=True)
class Token:
    """A token produced by the lexical analyzer; `name` drives table lookups."""
    name: str
    value: object = None
    position: int = -1

    def __str__(self) -> str:
        return f"<{self.name}, {self.value}>"


def end_token(position: int = -1) -> Token:
    return Token(END_OF_INPUT, END_OF_INPUT, position)


class FirstFollowComputer:
    """Computes FIRST and FOLLOW sets for grammar symbols as least fixed points."""

    def __init__(self, grammar: Grammar):
        self.grammar = grammar
        self._first: Dict[str, Set[str]] = {}
        self._follow: Dict[str, Set[str]] = {}
        self._first_string_cache: Dict[Tuple[str, ...], FrozenSet[str]] = {}

    def compute_first_sets(self) -> Dict[str, Set[str]]:
        """
        Compute FIRST sets for all grammar symbols.

        FIRST(X) is the set of terminals that begin strings derived from X.
        If X derives epsilon, then epsilon is in FIRST(X).
        """
        first: Dict[str, Set[str]] = {}
        for terminal in self.grammar.terminals:
            first[terminal] = {terminal}
        first[END_OF_INPUT] = {END_OF_INPUT}
        first[EPSILON] = {EPSILON}
        for nt in self.grammar.non_terminals:
            first[nt] = set()

        changed = True
        while changed:
            changed = False
            for production in self.grammar.productions:
                target = first[production.head]
                before_size = len(target)
                all_derive_epsilon = True
                for symbol in production.body:
                    symbol_first = first[symbol]
                    target.update(symbol_first - {EPSILON})
                    # Stop at the first symbol that cannot vanish
                    if EPSILON not in symbol_first:
                        all_derive_epsilon = False
                        break
                if all_derive_epsilon:
                    target.add(EPSILON)
                if len(target) > before_size:
                    changed = True

        self._first = first
        self._first_string_cache.clear()
        return {symbol: set(s) for symbol, s in first.items()}

    def compute_follow_sets(self) -> Dict[str, Set[str]]:
        """
        Compute FOLLOW sets for all non-terminals.

        FOLLOW(A) is the set of terminals that can appear immediately
        to the right of A in some sentential form.
        """
        if not self._first:
            self.compute_first_sets()

        follow: Dict[str, Set[str]] = {nt: set() for nt in self.grammar.non_terminals}
        follow[self.grammar.start_symbol].add(END_OF_INPUT)

        # Iterate full passes until no FOLLOW set changes
        changed = True
        while changed:
            changed = False
            for production in self.grammar.productions:
                body = production.symbols
                for i, symbol in enumerate(body):
                    if symbol not in self.grammar.non_terminals:
                        continue
                    target = follow[symbol]
                    before_size = len(target)

                    first_beta = self.first_of_string(body[i + 1:])
                    target.update(first_beta - {EPSILON})
                    if EPSILON in first_beta:
                        target.update(follow[production.head])

                    if len(target) > before_size:
                        changed = True

        self._follow = follow
        return {nt: set(s) for nt, s in follow.items()}

    def get_first(self, symbol: str) -> Set[str]:
        """Get FIRST set for a symbol."""
        if not self._first:
            self.compute_first_sets()
        return set(self._first.get(symbol, {symbol}))

    def get_follow(self, symbol: str) -> Set[str]:
        """Get FOLLOW set for a non-terminal."""
        if not self._follow:
            self.compute_follow_sets()
        return set(self._follow.get(symbol, set()))

    def first_of_string(self, symbols: Sequence[str]) -> FrozenSet[str]:
        """
        Compute FIRST of a string of symbols X1 X2 ... Xn.

        Epsilon is included only if every Xi can derive epsilon (or the
        string is empty).
        """
        key = tuple(symbols)
        cached = self._first_string_cache.get(key)
        if cached is not None:
            return cached

        if not self._first:
            self.compute_first_sets()

        result: Set[str] = set()
        for symbol in key:
            symbol_first = self._first.get(symbol, {symbol})
            result.update(symbol_first - {EPSILON})
            if EPSILON not in symbol_first:
                break
        else:
            result.add(EPSILON)

        frozen = frozenset(result)
        self._first_string_cache[key] = frozen
        return frozen


@dataclass(frozen=True)
class AugmentedGrammar:
    """A grammar plus a fresh start symbol S' and the production S' -> S."""
    source: Grammar
    grammar: Grammar
    start_production: Production
    first_sets: Mapping[str, FrozenSet[str]] = field(compare=False, repr=False)
    follow_sets: Mapping[str, FrozenSet[str]] = field(compare=False, repr=False)

    @classmethod
    def from_grammar(cls, source: Grammar) -> 'AugmentedGrammar':
        start = source.start_symbol + "'"
        while start in source.symbols:
            start += "'"
        start_production = Production(start, (source.start_symbol,))
        grammar = source.extend(
            non_terminals=(start,),
            productions=(start_production,),
            start_symbol=start,
            prepend=True,
        )

        computer = FirstFollowComputer(grammar)
        first = computer.compute_first_sets()
        follow = computer.compute_follow_sets()
        return cls(
            source=source,
            grammar=grammar,
            start_production=start_production,
            first_sets=MappingProxyType({s: frozenset(v) for s, v in first.items()}),
            follow_sets=MappingProxyType({s: frozenset(v) for s, v in follow.items()}),
        )

    @property
    def start_symbol(self) -> str:
        return self.start_production.head


@dataclass(frozen=True, order=True)
class Item:
    """An LR(0) item: a production with a dot marking progress through its body."""
    production: Production
    dot: int

    def is_complete(self) -> bool:
        return self.dot >= len(self.production.body)

    def next_symbol(self) -> Optional[str]:
        """Get the symbol after the dot, or None if at end."""
        if self.is_complete():
            return None
        return self.production.body[self.dot]

    def advance(self) -> 'Item':
        return Item(self.production, self.dot + 1)

    def __str__(self) -> str:
        body = list(self.production.body)
        body.insert(self.dot, "·")
        return f"[{self.production.head} -> {' '.join(body)}]"


@dataclass(frozen=True)
class ItemSet:
    """A structurally deduplicated set of items. Equal items mean an equal set."""
    items: Tuple[Item, ...] = ()

    @classmethod
    def of(cls, items: Iterable[Item]) -> 'ItemSet':
        return cls(tuple(sorted(set(items))))

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, item: object) -> bool:
        return item in self.items

    def __bool__(self) -> bool:
        return bool(self.items)

    def symbols_after_dot(self) -> Set[str]:
        symbols = set()
        for item in self.items:
            next_symbol = item.next_symbol()
            if next_symbol is not None and next_symbol != EPSILON:
                symbols.add(next_symbol)
        return symbols

    def __str__(self) -> str:
        return "\n".join(str(item) for item in self.items)


@dataclass(frozen=True)
class LR0Automaton:
    """The canonical collection: item sets indexed by state number, plus transitions."""
    states: Tuple[ItemSet, ...]
    transitions: Mapping[Tuple[int, str], int]
    start_state_id: int = 0

    def __str__(self) -> str:
        lines = [f"LR(0) Automaton with {len(self.states)} states"]
        lines.append(f"Start state: {self.start_state_id}")
        lines.append("\nStates:")
        for state_id, item_set in enumerate(self.states):
            lines.append(f"State {state_id}:")
            for item in item_set:
                lines.append(f"  {item}")
        lines.append("\nTransitions:")
        for (state_id, symbol), target_id in sorted(self.transitions.items()):
            lines.append(f"  GOTO({state_id}, {symbol}) = {target_id}")
        return "\n".join(lines)


class ItemSetAutomatonBuilder:
    """Builds LR(0) item sets and the canonical collection of an augmented grammar."""

    def __init__(self, augmented: AugmentedGrammar):
        self.augmented = augmented
        self.grammar = augmented.grammar

        self._productions_by_head: Dict[str, Tuple[Production, ...]] = {
            nt: self.grammar.productions_for(nt) for nt in self.grammar.non_terminals
        }
        self._closure_cache: Dict[ItemSet, ItemSet] = {}
        self._goto_cache: Dict[Tuple[ItemSet, str], ItemSet] = {}

    def closure(self, items: Iterable[Item]) -> ItemSet:
        """
        Compute the closure of a set of LR(0) items.

        Algorithm:
        1. Start with the given items
        2. For each item [A -> α·Bβ] where B is a non-terminal,
           add [B -> ·γ] for every production B -> γ
        3. For an epsilon production also add the completed item [B -> ε·]
        4. Repeat until no new items are added
        """
        key = items if isinstance(items, ItemSet) else ItemSet.of(items)
        cached = self._closure_cache.get(key)
        if cached is not None:
            return cached

        closure_items: Set[Item] = set(key)
        worklist: List[Item] = list(key)
        while worklist:
            item = worklist.pop()
            next_symbol = item.next_symbol()
            if next_symbol is None or next_symbol not in self.grammar.non_terminals:
                continue
            for production in self._productions_by_head[next_symbol]:
                new_items = [Item(production, 0)]
                if production.is_epsilon:
                    new_items.append(Item(production, 1))
                for new_item in new_items:
                    if new_item not in closure_items:
                        closure_items.add(new_item)
                        worklist.append(new_item)

        result = ItemSet.of(closure_items)
        self._closure_cache[key] = result
        self._closure_cache.setdefault(result, result)
        return result

    def goto(self, item_set: ItemSet, symbol: str) -> ItemSet:
        """
        Compute GOTO(I, X): the closure of every item of I with the dot moved past X.

        Returns an empty ItemSet when no item has X immediately after its dot.
        """
        cache_key = (item_set, symbol)
        cached = self._goto_cache.get(cache_key)
        if cached is not None:
            return cached

        moved = [item.advance() for item in item_set if item.next_symbol() == symbol]
        result = self.closure(moved) if moved else ItemSet()

        self._goto_cache[cache_key] = result
        return result

    def canonical_collection(self) -> LR0Automaton:
        """
        Build the canonical collection of LR(0) item sets.

        States are numbered breadth-first from the start state, visiting
        symbols in sorted order, so two builds of the same grammar number
        their states identically.
        """
        initial = self.closure([Item(self.augmented.start_production, 0)])
        states: List[ItemSet] = [initial]
        state_ids: Dict[ItemSet, int] = {initial: 0}
        transitions: Dict[Tuple[int, str], int] = {}

        current_state_id = 0
        while current_state_id < len(states):
            item_set = states[current_state_id]
            for symbol in sorted(item_set.symbols_after_dot()):
                target = self.goto(item_set, symbol)
                if not target:
                    continue
                target_id = state_ids.get(target)
                if target_id is None:
                    target_id = len(states)
                    states.append(target)
                    state_ids[target] = target_id
                transitions[(current_state_id, symbol)] = target_id
            current_state_id += 1

        return LR0Automaton(
            states=tuple(states),
            transitions=MappingProxyType(transitions),
            start_state_id=0,
        )


class ActionType(Enum):
    """Enumeration of parsing actions."""
    SHIFT = "shift"
    REDUCE = "reduce"
    ACCEPT = "accept"
    ERROR = "error"


@dataclass(frozen=True)
class ParseAction:
    """A single ACTION table entry."""
    action_type: ActionType
    target: Optional[int] = None  # State ID for shift
    production: Optional[Production] = None  # Production for reduce

    @classmethod
    def shift(cls, target: int) -> 'ParseAction':
        return cls(ActionType.SHIFT, target=target)

    @classmethod
    def reduce(cls, production: Production) -> 'ParseAction':
        return cls(ActionType.REDUCE, production=production)

    def __str__(self) -> str:
        if self.action_type == ActionType.SHIFT:
            return f"shift {self.target}"
        elif self.action_type == ActionType.REDUCE:
            return f"reduce {self.production}"
        elif self.action_type == ActionType.ACCEPT:
            return "accept"
        else:
            return "error"


ACCEPT = ParseAction(ActionType.ACCEPT)
ERROR = ParseAction(ActionType.ERROR)


@dataclass(frozen=True)
class Conflict:
    """Represents a parsing conflict in the SLR tables."""
    state_id: int
    symbol: str
    conflict_type: str  # "shift/reduce", "reduce/reduce" or "accept/reduce"
    kept: ParseAction
    rejected: ParseAction

    @property
    def description(self) -> str:
        return f"kept '{self.kept}', discarded '{self.rejected}'"

    def __str__(self) -> str:
        return (f"{self.conflict_type} conflict in state {self.state_id} "
                f"on symbol '{self.symbol}': {self.description}")


@dataclass(frozen=True)
class ParsingTable:
    """Immutable SLR ACTION/GOTO tables."""
    action_table: Mapping[Tuple[int, str], ParseAction]
    goto_table: Mapping[Tuple[int, str], int]
    start_state: int
    state_count: int
    terminals: FrozenSet[str]
    non_terminals: FrozenSet[str]
    conflicts: Tuple[Conflict, ...] = ()

    def action(self, state: int, terminal: str) -> ParseAction:
        return self.action_table.get((state, terminal), ERROR)

    def goto(self, state: int, non_terminal: str) -> Optional[int]:
        return self.goto_table.get((state, non_terminal))

    def expected_terminals(self, state: int) -> List[str]:
        """Terminals that have an action in the given state."""
        return sorted(symbol for (s, symbol) in self.action_table if s == state)

    def __str__(self) -> str:
        lines = ["Parsing Tables:"]
        lines.append("\nAction Table:")
        for (state, terminal), action in sorted(self.action_table.items()):
            lines.append(f"  ACTION[{state}, {terminal}] = {action}")
        lines.append("\nGoto Table:")
        for (state, non_terminal), target in sorted(self.goto_table.items()):
            lines.append(f"  GOTO[{state}, {non_terminal}] = {target}")
        return "\n".join(lines)


class SLRTableBuilder:
    """Generates SLR parsing tables from the LR(0) automaton and FOLLOW sets."""

    def __init__(self, augmented: AugmentedGrammar, automaton: LR0Automaton):
        self.augmented = augmented
        self.automaton = automaton
        self.action_table: Dict[Tuple[int, str], ParseAction] = {}
        self.goto_table: Dict[Tuple[int, str], int] = {}
        self.conflicts: List[Conflict] = []
        self._production_order = {p: i for i, p in enumerate(augmented.grammar.productions)}

    def build(self) -> ParsingTable:
        """
        Generate the ACTION and GOTO tables.

        For each state i:
        - [S' -> S·] in Ii: ACTION[i, $] = accept
        - [A -> α·aβ] in Ii, GOTO(Ii, a) = Ij: ACTION[i, a] = shift j
        - [A -> α·] in Ii, A != S': ACTION[i, a] = reduce A -> α for a in FOLLOW(A)
        - GOTO(Ii, B) = Ij for a non-terminal B: GOTO[i, B] = j

        Within a state entries are written accept, shifts, then reduces in
        production declaration order; the first entry in a cell wins and
        every later clash is recorded and warned about.
        """
        self.action_table = {}
        self.goto_table = {}
        self.conflicts = []

        grammar = self.augmented.grammar
        transitions = self.automaton.transitions

        for state_id, item_set in enumerate(self.automaton.states):
            completed = [item for item in item_set if item.is_complete()]

            if Item(self.augmented.start_production, 1) in item_set:
                self._add_action(state_id, END_OF_INPUT, ACCEPT)

            for item in item_set:
                next_symbol = item.next_symbol()
                if next_symbol is not None and grammar.is_terminal(next_symbol):
                    target_state = transitions.get((state_id, next_symbol))
                    if target_state is not None:
                        self._add_action(state_id, next_symbol, ParseAction.shift(target_state))

            completed.sort(key=lambda item: self._production_order[item.production])
            for item in completed:
                production = item.production
                if production.head == self.augmented.start_symbol:
                    continue
                for terminal in sorted(self.augmented.follow_sets[production.head]):
                    self._add_action(state_id, terminal, ParseAction.reduce(production))

        for (state_id, symbol), target_state in transitions.items():
            if grammar.is_non_terminal(symbol):
                self.goto_table[(state_id, symbol)] = target_state

        return ParsingTable(
            action_table=MappingProxyType(dict(self.action_table)),
            goto_table=MappingProxyType(dict(self.goto_table)),
            start_state=self.automaton.start_state_id,
            state_count=len(self.automaton.states),
            terminals=self.augmented.source.terminals | {END_OF_INPUT},
            non_terminals=self.augmented.source.non_terminals,
            conflicts=tuple(self.conflicts),
        )

    def _add_action(self, state_id: int, symbol: str, action: ParseAction):
        key = (state_id, symbol)
        existing = self.action_table.get(key)
        if existing is None:
            self.action_table[key] = action
            return
        if existing == action:
            return

        types = {existing.action_type, action.action_type}
        if types == {ActionType.REDUCE}:
            conflict_type = "reduce/reduce"
        elif ActionType.SHIFT in types:
            conflict_type = "shift/reduce"
        else:
            conflict_type = "accept/reduce"
        conflict = Conflict(state_id, symbol, conflict_type, kept=existing, rejected=action)
        self.conflicts.append(conflict)
        warnings.warn(str(conflict), AutomatonConflictWarning, stacklevel=3)


@dataclass(frozen=True)
class ParseTreeNode:
    """A node in the parse tree: leaves wrap tokens, internal nodes wrap reductions."""
    symbol: str
    children: Tuple['ParseTreeNode', ...] = ()
    token: Optional[Token] = None

    @property
    def is_terminal(self) -> bool:
        return self.token is not None

    def leaves(self) -> Iterator['ParseTreeNode']:
        """Yield the token leaves from left to right."""
        if self.is_terminal:
            yield self
            return
        for child in self.children:
            yield from child.leaves()

    def bracketed(self) -> str:
        if self.is_terminal:
            return self.symbol
        return f"{self.symbol}({', '.join(child.bracketed() for child in self.children)})"

    def __str__(self) -> str:
        lines: List[str] = []
        self._render(lines, "", "")
        return "\n".join(lines)

    def _render(self, lines: List[str], prefix: str, children_prefix: str):
        label = self.symbol
        if self.is_terminal and self.token.value is not None and str(self.token.value) != self.symbol:
            label = f"{self.symbol} ({self.token.value})"
        lines.append(prefix + label)
        for i, child in enumerate(self.children):
            if i < len(self.children) - 1:
                child._render(lines, children_prefix + "├── ", children_prefix + "│   ")
            else:
                child._render(lines, children_prefix + "└── ", children_prefix + "    ")


@dataclass(frozen=True)
class ParseStep:
    """A single step in the parsing trace."""
    step_number: int
    state_stack: Tuple[int, ...]
    symbol_stack: Tuple[str, ...]
    remaining: Tuple[Token, ...]
    action: ParseAction

    def __str__(self) -> str:
        input_str = ' '.join(token.name for token in self.remaining[:5])
        if len(self.remaining) > 5:
            input_str += " ..."
        stack_str = ' '.join(map(str, self.state_stack))
        return f"Step {self.step_number}: Stack=[{stack_str}] Input=[{input_str}] Action={self.action}"


class ShiftReduceEngine:
    """
    Table-driven shift-reduce parser.

    The engine only reads its ParsingTable; all mutable state lives in the
    stacks local to each parse() call, so one engine may serve any number
    of parses.
    """

    def __init__(self, table: ParsingTable):
        self.table = table

    def parse(self, tokens: Iterable[Token], trace: Optional[List[ParseStep]] = None) -> ParseTreeNode:
        """
        Parse a token stream.

        Args:
            tokens: Tokens to parse; an end-of-input token is appended
                unless the stream already ends with one
            trace: Optional list that receives one ParseStep per step

        Returns:
            The root ParseTreeNode

        Raises:
            ParsingError: No action exists for the current state and lookahead
        """
        buffer = list(tokens)
        if not buffer or buffer[-1].name != END_OF_INPUT:
            position = buffer[-1].position + 1 if buffer and buffer[-1].position >= 0 else -1
            buffer.append(end_token(position))

        table = self.table
        state_stack: List[int] = [table.start_state]
        node_stack: List[ParseTreeNode] = []
        cursor = 0
        last = len(buffer) - 1
        step_number = 1

        while True:
            state = state_stack[-1]
            token = buffer[cursor]
            # Only the final token may end the input
            if token.name == END_OF_INPUT and cursor < last:
                action = ERROR
            else:
                action = table.action(state, token.name)

            if trace is not None:
                trace.append(ParseStep(
                    step_number=step_number,
                    state_stack=tuple(state_stack),
                    symbol_stack=tuple(node.symbol for node in node_stack),
                    remaining=tuple(buffer[cursor:]),
                    action=action,
                ))
                step_number += 1

            if action.action_type == ActionType.SHIFT:
                state_stack.append(action.target)
                node_stack.append(ParseTreeNode(token.name, token=token))
                cursor += 1

            elif action.action_type == ActionType.REDUCE:
                production = action.production
                count = len(production.symbols)
                children: Tuple[ParseTreeNode, ...] = ()
                if count:
                    children = tuple(node_stack[-count:])
                    del node_stack[-count:]
                    del state_stack[-count:]

                target = table.goto(state_stack[-1], production.head)
                if target is None:
                    raise ParsingError(state_stack, token, table.expected_terminals(state))
                state_stack.append(target)
                node_stack.append(ParseTreeNode(production.head, children))

            elif action.action_type == ActionType.ACCEPT:
                return node_stack[-1]

            else:
                raise ParsingError(state_stack, token, table.expected_terminals(state))


def build_table(grammar: Grammar) -> ParsingTable:
    """Build the SLR parsing table of a grammar (pure and deterministic)."""
    augmented = AugmentedGrammar.from_grammar(grammar)
    automaton = ItemSetAutomatonBuilder(augmented).canonical_collection()
    return SLRTableBuilder(augmented, automaton).build()


def parse(tokens: Iterable[Token], table: ParsingTable) -> ParseTreeNode:
    """Parse a token stream with a previously built table."""
    return ShiftReduceEngine(table).parse(tokens)
