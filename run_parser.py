"""
Command-line driver: build the SLR table for a grammar file and parse an input file.

Usage: python run_parser.py GRAMMAR_FILE INPUT_FILE
"""

import sys
import warnings

from grammar_loader import StructuralGrammarError, load_grammar_file
from lexical_analyzer import InvalidCharError, LexicalAnalyzer
from slr_parser import AutomatonConflictWarning, ParsingError, ShiftReduceEngine, build_table


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 2:
        print(__doc__.strip(), file=sys.stderr)
        return 2
    grammar_path, input_path = argv

    try:
        grammar = load_grammar_file(grammar_path)
        tokens = LexicalAnalyzer().tokenize_file(input_path)

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", AutomatonConflictWarning)
            table = build_table(grammar)
        for conflict in table.conflicts:
            print(f"--- Conflict: {conflict} ---", file=sys.stderr)

        tree = ShiftReduceEngine(table).parse(tokens)
    except OSError as e:
        print(f"--- Can't access file: {e} ---", file=sys.stderr)
        return 1
    except (StructuralGrammarError, InvalidCharError, ParsingError) as e:
        print(f"--- {type(e).__name__}: {e} ---", file=sys.stderr)
        return 1

    print(tree)
    return 0


if __name__ == '__main__':
    sys.exit(main())
