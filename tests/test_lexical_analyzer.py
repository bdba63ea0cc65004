import unittest

from grammar_loader import load_grammar
from lexical_analyzer import InvalidCharError, LexicalAnalyzer, TokenName
from slr_parser import build_table, parse


ARITHMETIC = """\
E, T, F, P
+, -, *, !, cos, int, float
E -> E + T | E - T | T
T -> T * F | F
F -> cos F | P
P -> P ! | int | float
"""


class TestLexicalAnalyzer(unittest.TestCase):
    def setUp(self):
        self.lexer = LexicalAnalyzer()

    def test_token_names_and_values(self):
        tokens = self.lexer.tokenize("3 + 4.5 * cos 2!")

        self.assertEqual([t.name for t in tokens], ['int', '+', 'float', '*', 'cos', 'int', '!'])
        self.assertEqual([t.value for t in tokens], [3, '+', 4.5, '*', 'cos', 2, '!'])
        self.assertEqual([t.position for t in tokens], [0, 2, 4, 8, 10, 14, 15])

    def test_token_names_match_enum(self):
        names = {t.name for t in self.lexer.tokenize("1 1.0 cos + - * !")}

        self.assertEqual(names, {member.value for member in TokenName})

    def test_float_without_fraction_digits(self):
        tokens = self.lexer.tokenize("3.")

        self.assertEqual(tokens[0].name, 'float')
        self.assertEqual(tokens[0].value, 3.0)

    def test_operators_without_spaces(self):
        tokens = self.lexer.tokenize("12-3*cos4")

        self.assertEqual([t.name for t in tokens], ['int', '-', 'int', '*', 'cos', 'int'])
        self.assertEqual(tokens[0].value, 12)

    def test_invalid_character(self):
        with self.assertRaises(InvalidCharError) as ctx:
            self.lexer.tokenize("3 / 4")

        self.assertEqual(ctx.exception.char, '/')
        self.assertEqual(ctx.exception.position, 2)

    def test_broken_cos(self):
        with self.assertRaises(InvalidCharError) as ctx:
            self.lexer.tokenize("co5")

        self.assertEqual(ctx.exception.char, '5')
        self.assertEqual(ctx.exception.position, 2)

    def test_empty_input(self):
        self.assertEqual(self.lexer.tokenize("  \n"), [])


class TestLexerWithParser(unittest.TestCase):
    def test_arithmetic_expression(self):
        table = build_table(load_grammar(ARITHMETIC))
        tree = parse(LexicalAnalyzer().tokenize("2 + cos 3! * 1.5"), table)

        self.assertEqual(table.conflicts, ())
        self.assertEqual(tree.bracketed(),
                         "E(E(T(F(P(int)))), +, T(T(F(cos, F(P(P(int), !)))), *, F(P(float))))")
        self.assertEqual([leaf.token.value for leaf in tree.leaves()], [2, '+', 'cos', 3, '!', '*', 1.5])


if __name__ == '__main__':
    unittest.main()
