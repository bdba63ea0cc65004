import unittest

from grammar_loader import load_grammar
from slr_parser import (AugmentedGrammar, END_OF_INPUT, EPSILON, FirstFollowComputer,
                        Grammar, Production)


SIMPLE = """\
S, E, T
id, +
S -> E
E -> E + T | T
T -> id
"""

OPTIONAL_PREFIX = """\
S, A
a, b
S -> A b
A -> a | ε
"""

NULLABLE = """\
S, A, B
a, b
S -> A B
A -> a | ε
B -> b | ε
"""


class TestFirstFollow(unittest.TestCase):
    def test_first_sets_of_left_recursive_grammar(self):
        computer = FirstFollowComputer(load_grammar(SIMPLE))
        first = computer.compute_first_sets()

        self.assertEqual(first['E'], {'id'})
        self.assertEqual(first['T'], {'id'})
        self.assertEqual(first['S'], {'id'})
        self.assertEqual(first['+'], {'+'})
        self.assertEqual(first[EPSILON], {EPSILON})

    def test_follow_sets_of_left_recursive_grammar(self):
        computer = FirstFollowComputer(load_grammar(SIMPLE))
        follow = computer.compute_follow_sets()

        self.assertTrue({'+', END_OF_INPUT} <= follow['E'])
        self.assertEqual(follow['S'], {END_OF_INPUT})
        self.assertEqual(follow['T'], {'+', END_OF_INPUT})

    def test_epsilon_production(self):
        computer = FirstFollowComputer(load_grammar(OPTIONAL_PREFIX))

        self.assertEqual(computer.get_first('A'), {'a', EPSILON})
        self.assertEqual(computer.get_first('S'), {'a', 'b'})
        self.assertEqual(computer.get_follow('A'), {'b'})

    def test_epsilon_added_only_when_every_symbol_vanishes(self):
        computer = FirstFollowComputer(load_grammar(NULLABLE))

        self.assertEqual(computer.get_first('S'), {'a', 'b', EPSILON})
        self.assertEqual(computer.get_follow('A'), {'b', END_OF_INPUT})
        self.assertEqual(computer.get_follow('B'), {END_OF_INPUT})

    def test_first_of_string(self):
        computer = FirstFollowComputer(load_grammar(NULLABLE))

        self.assertEqual(computer.first_of_string(()), {EPSILON})
        self.assertEqual(computer.first_of_string(('A', 'b')), {'a', 'b'})
        self.assertEqual(computer.first_of_string(('A', 'B')), {'a', 'b', EPSILON})


class TestAugmentation(unittest.TestCase):
    def test_source_grammar_is_not_mutated(self):
        grammar = load_grammar(SIMPLE)
        augmented = AugmentedGrammar.from_grammar(grammar)

        self.assertEqual(grammar.start_symbol, 'S')
        self.assertNotIn("S'", grammar.non_terminals)
        self.assertEqual(len(grammar.productions), 4)

        self.assertEqual(augmented.start_symbol, "S'")
        self.assertIn("S'", augmented.grammar.non_terminals)
        self.assertEqual(augmented.grammar.productions[0], Production("S'", ('S',)))
        self.assertEqual(augmented.grammar.productions[1:], grammar.productions)
        self.assertIs(augmented.source, grammar)

    def test_fresh_start_symbol_avoids_declared_names(self):
        grammar = Grammar(
            non_terminals=frozenset({'S', "S'"}),
            terminals=frozenset({'a'}),
            productions=(Production('S', ("S'",)), Production("S'", ('a',))),
            start_symbol='S',
        )
        augmented = AugmentedGrammar.from_grammar(grammar)

        self.assertEqual(augmented.start_symbol, "S''")

    def test_follow_of_augmented_start(self):
        augmented = AugmentedGrammar.from_grammar(load_grammar(SIMPLE))

        self.assertEqual(augmented.follow_sets["S'"], {END_OF_INPUT})
        self.assertEqual(augmented.follow_sets['S'], {END_OF_INPUT})

    def test_extend_returns_new_grammar(self):
        grammar = load_grammar(SIMPLE)
        extended = grammar.extend(terminals=('*',), productions=(Production('T', ('T', '*', 'id')),))

        self.assertNotIn('*', grammar.terminals)
        self.assertIn('*', extended.terminals)
        self.assertEqual(extended.productions[-1], Production('T', ('T', '*', 'id')))
        self.assertEqual(len(extended.productions_for('T')), 2)
        self.assertEqual(len(grammar.productions_for('T')), 1)


if __name__ == '__main__':
    unittest.main()
