import unittest

from grammar_loader import load_grammar
from slr_parser import (ActionType, END_OF_INPUT, ParseTreeNode, ParsingError, Production,
                        ShiftReduceEngine, Token, build_table, end_token, parse)


SCENARIO = """\
S, E, T, F
id, +, *
S -> E
E -> E + T | T
T -> T * F | F
F -> id
"""

OPTIONAL_PREFIX = """\
S, A
a, b
S -> A b
A -> a | ε
"""


NULLABLE_PARTS = """\
S, A, B
a, b, c
S -> A B c
A -> a A | ε
B -> b | ε
"""


def tokens(*names):
    return [Token(name, name, i) for i, name in enumerate(names)]


def sentences(grammar, max_length):
    """Terminal strings reachable by leftmost derivation through forms of at most max_length symbols."""
    found = set()
    seen = set()
    frontier = [(grammar.start_symbol,)]
    while frontier:
        form = frontier.pop()
        if form in seen or len(form) > max_length:
            continue
        seen.add(form)
        index = next((i for i, symbol in enumerate(form) if grammar.is_non_terminal(symbol)), None)
        if index is None:
            found.add(form)
            continue
        for production in grammar.productions_for(form[index]):
            frontier.append(form[:index] + production.symbols + form[index + 1:])
    return sorted(found)


class TestShiftReduceEngine(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.table = build_table(load_grammar(SCENARIO))

    def test_scenario_tree(self):
        stream = tokens('id', '+', 'id', '*', 'id') + [end_token()]
        tree = parse(stream, self.table)

        self.assertEqual(tree.bracketed(), "S(E(E(T(F(id))), +, T(T(F(id)), *, F(id))))")

    def test_end_of_input_is_appended(self):
        tree = parse(tokens('id', '+', 'id', '*', 'id'), self.table)

        self.assertEqual(tree.bracketed(), "S(E(E(T(F(id))), +, T(T(F(id)), *, F(id))))")

    def test_leaves_reproduce_the_input(self):
        stream = [Token('id', 'a', 0), Token('*', '*', 1), Token('id', 'b', 2),
                  Token('+', '+', 3), Token('id', 'c', 4)]
        tree = ShiftReduceEngine(self.table).parse(stream)

        leaves = list(tree.leaves())
        self.assertEqual([leaf.token for leaf in leaves], stream)
        self.assertTrue(all(leaf.is_terminal for leaf in leaves))
        self.assertEqual(tree.symbol, 'S')

    def test_reductions_form_reverse_rightmost_derivation(self):
        trace = []
        ShiftReduceEngine(self.table).parse(tokens('id', '+', 'id', '*', 'id'), trace=trace)

        reductions = [str(step.action.production) for step in trace
                      if step.action.action_type == ActionType.REDUCE]
        self.assertEqual(reductions, [
            "F -> id", "T -> F", "E -> T",
            "F -> id", "T -> F",
            "F -> id", "T -> T * F", "E -> E + T", "S -> E",
        ])
        self.assertEqual(trace[-1].action.action_type, ActionType.ACCEPT)
        self.assertEqual([step.step_number for step in trace], list(range(1, len(trace) + 1)))

    def test_stacks_stay_parallel(self):
        trace = []
        ShiftReduceEngine(self.table).parse(tokens('id', '*', 'id'), trace=trace)

        for step in trace:
            self.assertEqual(len(step.state_stack), len(step.symbol_stack) + 1)
            self.assertEqual(step.state_stack[0], self.table.start_state)

    def test_missing_operand_raises(self):
        with self.assertRaises(ParsingError) as ctx:
            parse(tokens('id', '+'), self.table)

        error = ctx.exception
        self.assertEqual(error.token.name, END_OF_INPUT)
        self.assertEqual(error.expected, ('id',))
        self.assertTrue(error.state_stack)
        self.assertEqual(error.state_stack[0], self.table.start_state)

    def test_adjacent_operands_raise(self):
        stream = tokens('id', 'id')
        with self.assertRaises(ParsingError) as ctx:
            parse(stream, self.table)

        self.assertIs(ctx.exception.token, stream[1])

    def test_unknown_token_name_raises(self):
        with self.assertRaises(ParsingError) as ctx:
            parse([Token('number', 3, 0)], self.table)

        self.assertEqual(ctx.exception.token.name, 'number')
        self.assertEqual(ctx.exception.state_stack, (self.table.start_state,))

    def test_empty_input_is_rejected(self):
        with self.assertRaises(ParsingError):
            parse([], self.table)

    def test_engine_is_reusable_after_error(self):
        engine = ShiftReduceEngine(self.table)
        before = dict(self.table.action_table)

        with self.assertRaises(ParsingError):
            engine.parse(tokens('+'))
        tree = engine.parse(tokens('id'))

        self.assertEqual(tree.bracketed(), "S(E(T(F(id))))")
        self.assertEqual(dict(self.table.action_table), before)

    def test_end_of_input_inside_stream_is_rejected(self):
        stream = [Token('id', 'a', 0), end_token(1), Token('+', '+', 2), Token('id', 'b', 3)]

        with self.assertRaises(ParsingError) as ctx:
            parse(stream, self.table)

        self.assertIs(ctx.exception.token, stream[1])

    def test_end_of_input_inside_terminated_stream_is_rejected(self):
        stream = [Token('id', 'a', 0), end_token(1), Token('id', 'b', 2), end_token(3)]

        with self.assertRaises(ParsingError) as ctx:
            parse(stream, self.table)

        self.assertIs(ctx.exception.token, stream[1])


class TestDerivedSentences(unittest.TestCase):
    def assertSentencesRoundTrip(self, text, max_length, minimum):
        grammar = load_grammar(text)
        table = build_table(grammar)
        self.assertEqual(table.conflicts, ())

        derived = sentences(grammar, max_length)
        self.assertGreaterEqual(len(derived), minimum)
        engine = ShiftReduceEngine(table)
        for sentence in derived:
            with self.subTest(sentence=' '.join(sentence)):
                stream = [Token(name, f"{name}{i}", i) for i, name in enumerate(sentence)]
                tree = engine.parse(stream)

                self.assertEqual(tree.symbol, grammar.start_symbol)
                self.assertEqual([leaf.token for leaf in tree.leaves()], stream)

    def test_expression_sentences(self):
        self.assertSentencesRoundTrip(SCENARIO, 5, 7)

    def test_optional_prefix_sentences(self):
        self.assertSentencesRoundTrip(OPTIONAL_PREFIX, 3, 2)

    def test_nullable_sentences(self):
        self.assertSentencesRoundTrip(NULLABLE_PARTS, 5, 6)


class TestEpsilonReduction(unittest.TestCase):
    def setUp(self):
        self.table = build_table(load_grammar(OPTIONAL_PREFIX))

    def test_epsilon_child_is_empty(self):
        tree = parse(tokens('b'), self.table)

        self.assertEqual(tree.bracketed(), "S(A(), b)")
        self.assertEqual(tree.children[0], ParseTreeNode('A'))

    def test_epsilon_reduce_pops_nothing_and_keeps_lookahead(self):
        trace = []
        ShiftReduceEngine(self.table).parse(tokens('b'), trace=trace)

        first, second = trace[0], trace[1]
        self.assertEqual(first.action.action_type, ActionType.REDUCE)
        self.assertEqual(first.action.production, Production('A', ('ε',)))
        self.assertEqual(first.state_stack, (self.table.start_state,))
        self.assertEqual(second.state_stack[:1], first.state_stack)
        self.assertEqual(len(second.state_stack), 2)
        self.assertEqual(second.symbol_stack, ('A',))
        self.assertEqual(second.remaining, first.remaining)

    def test_non_empty_alternative(self):
        tree = parse(tokens('a', 'b'), self.table)

        self.assertEqual(tree.bracketed(), "S(A(a), b)")


class TestParseTreeNode(unittest.TestCase):
    def test_horizontal_rendering(self):
        table = build_table(load_grammar("E, T\nid, +\nE -> E + T | T\nT -> id\n"))
        tree = parse([Token('id', 'x', 0), Token('+', '+', 1), Token('id', 'y', 2)], table)

        self.assertEqual(str(tree), "\n".join([
            "E",
            "├── E",
            "│   └── T",
            "│       └── id (x)",
            "├── +",
            "└── T",
            "    └── id (y)",
        ]))

    def test_nodes_are_immutable(self):
        node = ParseTreeNode('A')

        with self.assertRaises(AttributeError):
            node.symbol = 'B'


if __name__ == '__main__':
    unittest.main()
