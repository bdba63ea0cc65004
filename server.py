import os
import sys
import traceback
from flask import Flask, request, jsonify

from grammar_loader import StructuralGrammarError, load_grammar
from lexical_analyzer import InvalidCharError, LexicalAnalyzer
from slr_parser import (AugmentedGrammar, ItemSetAutomatonBuilder, ParsingError,
                        SLRTableBuilder, ShiftReduceEngine)
from visualization import DOTGenerator, ErrorMessageFormatter, HTMLTableGenerator, ParseTraceFormatter

app = Flask(__name__)

DEFAULT_HOST = '127.0.0.1'
DEFAULT_PORT = 5000

# --- Build Helpers ---
def build_from_text(grammar_text):
    """Load a grammar and build its automaton and table; returns (augmented, automaton, table)."""
    grammar = load_grammar(grammar_text)
    augmented = AugmentedGrammar.from_grammar(grammar)
    automaton = ItemSetAutomatonBuilder(augmented).canonical_collection()
    # Conflicts are reported through table.conflicts in the response
    table = SLRTableBuilder(augmented, automaton).build()
    return augmented, automaton, table

def table_info(table):
    return {
        "states_count": table.state_count,
        "action_entries": len(table.action_table),
        "goto_entries": len(table.goto_table),
    }

def conflict_list(table):
    return [
        {
            "state": c.state_id,
            "symbol": c.symbol,
            "type": c.conflict_type,
            "kept": str(c.kept),
            "discarded": str(c.rejected),
        }
        for c in table.conflicts
    ]

def grammar_error_response(e):
    print(f"--- Grammar Loading FAILED: {e} ---", file=sys.stderr)
    return jsonify({"error": str(e), "error_type": "grammar_error"}), 400

def unexpected_error_response(e):
    print(f"--- UNEXPECTED Python Error: {e} ---", file=sys.stderr)
    traceback.print_exc(file=sys.stderr)
    return jsonify({
        "error": f"Unexpected server error: {e}",
        "error_type": "system_error"
    }), 500

# --- Flask Endpoints ---

@app.route('/first-follow', methods=['POST'])
def first_follow():
    """Return FIRST sets of every symbol and FOLLOW sets of every non-terminal."""
    data = request.get_json(silent=True) or {}
    grammar_input = data.get('grammar')
    if not grammar_input:
        return jsonify({"error": "No grammar provided"}), 400

    try:
        print("--- Computing FIRST/FOLLOW ---", file=sys.stderr)
        augmented = AugmentedGrammar.from_grammar(load_grammar(grammar_input))
        source = augmented.source
        return jsonify({
            "success": True,
            "start_symbol": source.start_symbol,
            "first": {s: sorted(augmented.first_sets[s]) for s in sorted(source.symbols)},
            "follow": {nt: sorted(augmented.follow_sets[nt]) for nt in sorted(source.non_terminals)},
        })
    except StructuralGrammarError as e:
        return grammar_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)

@app.route('/build-parse-table', methods=['POST'])
def build_parse_table():
    """
    Build the SLR parse table for a grammar.

    Returns the table in HTML, the LR(0) automaton in DOT, counts and any
    conflicts resolved while building.
    """
    data = request.get_json(silent=True) or {}
    grammar_input = data.get('grammar')
    if not grammar_input:
        return jsonify({"error": "No grammar provided"}), 400

    try:
        print("--- Building Parse Table ---", file=sys.stderr)
        augmented, automaton, table = build_from_text(grammar_input)

        info = table_info(table)
        print("--- Parse Table Building SUCCEEDED ---", file=sys.stderr)
        print(f"States created: {info['states_count']}", file=sys.stderr)
        if table.conflicts:
            print(f"Conflicts detected: {len(table.conflicts)}", file=sys.stderr)

        return jsonify({
            "success": True,
            "start_symbol": augmented.source.start_symbol,
            "parse_table_html": HTMLTableGenerator().generate_action_goto_tables_html(table),
            "automaton_dot": DOTGenerator().generate_automaton_dot(automaton),
            "conflicts_html": ErrorMessageFormatter().format_conflict_report(table.conflicts),
            "table_info": info,
            "conflicts": conflict_list(table),
        })
    except StructuralGrammarError as e:
        return grammar_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)

@app.route('/parse', methods=['POST'])
def parse_input():
    """Tokenize the input string, parse it and return the tree and trace."""
    data = request.get_json(silent=True) or {}
    grammar_input = data.get('grammar')
    string_input = data.get('input')

    if not grammar_input:
        return jsonify({"error": "No grammar provided"}), 400
    if string_input is None:
        return jsonify({"error": "No input string provided"}), 400

    try:
        print("--- Building Parse Table ---", file=sys.stderr)
        _, _, table = build_from_text(grammar_input)

        print(f"--- Parsing Input String: '{string_input}' ---", file=sys.stderr)
        tokens = LexicalAnalyzer().tokenize(string_input)
        trace = []
        try:
            tree = ShiftReduceEngine(table).parse(tokens, trace=trace)
        except ParsingError as e:
            print(f"--- Parsing FAILED ---", file=sys.stderr)
            print(f"Error: {e}", file=sys.stderr)
            return jsonify({
                "error": str(e),
                "error_type": "parsing_error",
                "error_html": ErrorMessageFormatter().format_parse_error(e),
                "state_stack": list(e.state_stack),
                "token": {"name": e.token.name, "value": str(e.token.value), "position": e.token.position},
                "expected": list(e.expected),
                "parseTraceHtml": ParseTraceFormatter().generate_trace_html(trace),
                "traceSteps": len(trace),
            }), 400

        print("--- Parsing SUCCEEDED ---", file=sys.stderr)
        return jsonify({
            "success": True,
            "tree": tree.bracketed(),
            "treeText": str(tree),
            "parseTreeDot": DOTGenerator().generate_parse_tree_dot(tree),
            "parseTraceHtml": ParseTraceFormatter().generate_trace_html(trace),
            "traceSteps": len(trace),
            "tableInfo": table_info(table),
            "conflicts": conflict_list(table),
        })
    except StructuralGrammarError as e:
        return grammar_error_response(e)
    except InvalidCharError as e:
        print(f"--- Lexical Analysis FAILED: {e} ---", file=sys.stderr)
        return jsonify({"error": str(e), "error_type": "lexical_error", "error_position": e.position}), 400
    except Exception as e:
        return unexpected_error_response(e)

# --- Main Execution ---
if __name__ == '__main__':
    host = os.environ.get('SLR_SERVER_HOST', DEFAULT_HOST)
    port = int(os.environ.get('SLR_SERVER_PORT', DEFAULT_PORT))
    debug = os.environ.get('SLR_SERVER_DEBUG', '1') not in ('0', 'false', 'False')

    print("--- SLR Parser Server ---")
    print(f"Running on http://{host}:{port}")
    print("-" * 34)
    app.run(debug=debug, host=host, port=port, use_reloader=False)
