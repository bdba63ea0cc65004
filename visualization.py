"""
Visualization and Output Formatting Module

This module provides visualization and formatting capabilities for the SLR parser,
including HTML table generation, DOT format output, and parsing trace formatting.
"""

from typing import List, Optional, Sequence
from dataclasses import dataclass
import html

from slr_parser import (ActionType, Conflict, END_OF_INPUT, LR0Automaton, ParseAction,
                        ParseStep, ParseTreeNode, ParsingError, ParsingTable)


@dataclass
class VisualizationConfig:
    """Configuration options for visualization output."""
    table_css_classes: str = "parse-table"
    trace_css_classes: str = "parsing-trace"
    error_css_classes: str = "error-message"
    compact_mode: bool = False
    max_stack_chars: int = 60
    max_input_tokens: int = 10
    max_state_items: int = 3


ACTION_CSS_CLASSES = {
    ActionType.SHIFT: "grammar-action-shift",
    ActionType.REDUCE: "grammar-action-reduce",
    ActionType.ACCEPT: "grammar-action-accept",
    ActionType.ERROR: "grammar-action-error",
}


class HTMLTableGenerator:
    """Generates HTML tables for SLR parsing tables."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def generate_action_goto_tables_html(self, table: ParsingTable) -> str:
        """
        Generate combined HTML table for ACTION and GOTO tables.

        Cells that lost a conflict are marked with the discarded actions
        next to the action that was kept.

        Args:
            table: The parsing table to render

        Returns:
            HTML string containing the combined parsing table
        """
        if not table.state_count:
            return self._generate_empty_table_html("No parsing states found")

        # End-of-input goes last, as in the textbook layout
        terminals = sorted(table.terminals - {END_OF_INPUT}) + [END_OF_INPUT]
        non_terminals = sorted(table.non_terminals)

        rejected = {}
        for conflict in table.conflicts:
            rejected.setdefault((conflict.state_id, conflict.symbol), []).append(conflict.rejected)

        html_lines = []
        html_lines.append(f'<table class="grammar-table {self.config.table_css_classes}" role="table" '
                          f'aria-label="SLR Parsing Table with ACTION and GOTO sections">')
        html_lines.append(self._generate_table_header(terminals, non_terminals))

        html_lines.append('<tbody>')
        for state in range(table.state_count):
            html_lines.append(self._generate_table_row(state, terminals, non_terminals, table, rejected))
        html_lines.append('</tbody>')

        html_lines.append('</table>')

        return '\n'.join(html_lines)

    def _generate_table_header(self, terminals: List[str], non_terminals: List[str]) -> str:
        """Generate the table header with ACTION and GOTO sections."""
        lines = []
        lines.append('<thead>')

        lines.append('<tr>')
        lines.append('<th class="grammar-table-header grammar-table-header-primary" scope="col" rowspan="2">State</th>')
        lines.append(f'<th class="grammar-table-header" scope="colgroup" colspan="{len(terminals)}">ACTION</th>')
        if non_terminals:
            lines.append(f'<th class="grammar-table-header" scope="colgroup" colspan="{len(non_terminals)}">GOTO</th>')
        lines.append('</tr>')

        lines.append('<tr>')
        for symbol in terminals + non_terminals:
            lines.append(f'<th class="grammar-table-header" scope="col">{html.escape(symbol)}</th>')
        lines.append('</tr>')

        lines.append('</thead>')
        return '\n'.join(lines)

    def _generate_table_row(self, state: int, terminals: List[str], non_terminals: List[str],
                            table: ParsingTable, rejected: dict) -> str:
        lines = []
        lines.append('<tr>')
        lines.append(f'<th class="grammar-table-cell grammar-table-cell-primary" scope="row">{state}</th>')

        for terminal in terminals:
            action = table.action_table.get((state, terminal))
            formatted = self._format_action(action, rejected.get((state, terminal), []))
            lines.append(f'<td class="grammar-table-cell">{formatted}</td>')

        for non_terminal in non_terminals:
            target_state = table.goto(state, non_terminal)
            lines.append(f'<td class="grammar-table-cell">{"" if target_state is None else target_state}</td>')

        lines.append('</tr>')
        return '\n'.join(lines)

    def _format_action(self, action: Optional[ParseAction], rejected: Sequence[ParseAction]) -> str:
        """Format an action for HTML display."""
        if action is None:
            return ''

        kept = f'<span class="{ACTION_CSS_CLASSES[action.action_type]}">{html.escape(str(action))}</span>'
        if not rejected:
            return kept

        discarded = ' / '.join(f'<span class="conflict-action">{html.escape(str(a))}</span>' for a in rejected)
        return f'<span class="grammar-action-conflict">{kept} / {discarded}</span>'

    def _generate_empty_table_html(self, message: str) -> str:
        return f'<div class="{self.config.error_css_classes}">\n<p>{html.escape(message)}</p>\n</div>'


class DOTGenerator:
    """Generates DOT format output for parse trees and the LR(0) automaton."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()
        self.node_counter = 0

    def generate_parse_tree_dot(self, parse_tree: Optional[ParseTreeNode], title: str = "Parse Tree") -> str:
        """
        Generate DOT format representation of a parse tree.

        Args:
            parse_tree: ParseTreeNode object representing the root of the tree
            title: Title for the graph

        Returns:
            DOT format string
        """
        if parse_tree is None:
            return self._generate_empty_tree_dot(title, "Parse tree is empty")

        self.node_counter = 0
        lines = []

        lines.append(f'digraph "{self._escape_dot_string(title)}" {{')
        lines.append('  rankdir=TB;')
        lines.append('  node [fontname="Arial", fontsize=12];')
        lines.append('  edge [fontsize=9, color="#333333"];')
        lines.append('  splines=false;')

        lines.append(self._generate_node_dot(parse_tree))

        lines.append('}')

        return '\n'.join(lines)

    def generate_automaton_dot(self, automaton: LR0Automaton, title: str = "LR(0) Automaton") -> str:
        """Generate DOT format representation of the LR(0) automaton."""
        lines = []

        lines.append(f'digraph "{self._escape_dot_string(title)}" {{')
        lines.append('  rankdir=LR;')
        lines.append('  node [shape=box, fontname="Courier New", fontsize=8];')
        lines.append('  edge [fontname="Arial", fontsize=8];')

        for state_id, item_set in enumerate(automaton.states):
            state_label = self._format_state_label(state_id, item_set)
            style = ', style=bold' if state_id == automaton.start_state_id else ''
            lines.append(f'  state{state_id} [label="{state_label}"{style}];')

        for (from_state, symbol), to_state in sorted(automaton.transitions.items()):
            lines.append(f'  state{from_state} -> state{to_state} [label="{self._escape_dot_string(symbol)}"];')

        lines.append('}')

        return '\n'.join(lines)

    def _generate_node_dot(self, node: ParseTreeNode) -> str:
        lines = []
        current_id = self.node_counter
        self.node_counter += 1

        escaped_label = self._escape_dot_string(node.symbol)

        if node.is_terminal:
            value = node.token.value
            if value is not None and str(value) != node.symbol:
                escaped_label += "\\n" + self._escape_dot_string(str(value))
            lines.append(f'  node{current_id} [label="{escaped_label}", shape=box, style=filled, '
                         f'fillcolor="#e3f2fd", color="#1976d2", fontname="Courier New"];')
        elif not node.children:
            # Reduced by an epsilon production
            lines.append(f'  node{current_id} [label="{escaped_label}", shape=circle, style=dashed];')
        else:
            lines.append(f'  node{current_id} [label="{escaped_label}", shape=circle, style=filled, '
                         f'fillcolor="#e8f5e8", color="#388e3c"];')

        for child in node.children:
            child_id = self.node_counter
            lines.append(self._generate_node_dot(child))
            lines.append(f'  node{current_id} -> node{child_id};')

        return '\n'.join(lines)

    def _format_state_label(self, state_id: int, item_set) -> str:
        if self.config.compact_mode:
            return str(state_id)

        items_text = []
        for i, item in enumerate(item_set):
            if i >= self.config.max_state_items:
                items_text.append("...")
                break
            items_text.append(str(item))

        label = f"State {state_id}\n" + "\n".join(items_text)
        return self._escape_dot_string(label)

    def _generate_empty_tree_dot(self, title: str, message: str) -> str:
        lines = []
        lines.append(f'digraph "{self._escape_dot_string(title)}" {{')
        lines.append(f'  empty [label="{self._escape_dot_string(message)}", shape=box, color=red];')
        lines.append('}')
        return '\n'.join(lines)

    def _escape_dot_string(self, text: str) -> str:
        """Escape a string for use in DOT format."""
        if not text:
            return ""

        text = str(text)
        text = text.replace('\\', '\\\\')
        text = text.replace('"', '\\"')
        text = text.replace('\n', '\\n')
        text = text.replace('\t', '\\t')
        text = text.replace('\r', '\\r')

        return text


class ParseTraceFormatter:
    """Formats parsing traces as HTML with step-by-step details."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def generate_trace_html(self, trace_steps: Sequence[ParseStep], title: str = "Parsing Trace") -> str:
        """
        Generate HTML representation of parsing trace.

        Args:
            trace_steps: ParseStep objects recorded by the engine
            title: Title for the trace

        Returns:
            HTML string showing step-by-step parsing
        """
        if not trace_steps:
            return (f'<div class="{self.config.error_css_classes}">\n'
                    f'<p>No parsing steps recorded</p>\n</div>')

        html_lines = []

        html_lines.append(f'<div class="{self.config.trace_css_classes}">')
        html_lines.append(f'<h3>{html.escape(title)}</h3>')

        html_lines.append('<table class="grammar-table trace-table" role="table" aria-label="Step-by-step parsing trace">')
        html_lines.append('<thead>')
        html_lines.append('<tr>')
        for header in ("Step", "Stack", "Input", "Action"):
            html_lines.append(f'<th class="grammar-table-header" scope="col">{header}</th>')
        html_lines.append('</tr>')
        html_lines.append('</thead>')
        html_lines.append('<tbody>')

        for step in trace_steps:
            html_lines.append(self._format_trace_step(step))

        html_lines.append('</tbody>')
        html_lines.append('</table>')
        html_lines.append('</div>')

        return '\n'.join(html_lines)

    def _format_trace_step(self, step: ParseStep) -> str:
        """Format a single parsing step as HTML table row."""
        action_type = step.action.action_type
        lines = []

        lines.append(f'<tr class="{action_type.value}-step">')
        lines.append(f'<td class="grammar-table-cell grammar-table-cell-primary step-number">{step.step_number}</td>')

        stack_display = self._interleave_stacks(step)
        if len(stack_display) > self.config.max_stack_chars:
            stack_display = "..." + stack_display[-(self.config.max_stack_chars - 3):]
        lines.append(f'<td class="grammar-table-cell stack">{html.escape(stack_display)}</td>')

        input_tokens = [token.name for token in step.remaining[:self.config.max_input_tokens]]
        if len(step.remaining) > self.config.max_input_tokens:
            input_tokens.append("...")
        lines.append(f'<td class="grammar-table-cell input">{html.escape(" ".join(input_tokens))}</td>')

        lines.append(f'<td class="grammar-table-cell action">'
                     f'<span class="{ACTION_CSS_CLASSES[action_type]}">{html.escape(str(step.action))}</span></td>')

        lines.append('</tr>')

        return '\n'.join(lines)

    def _interleave_stacks(self, step: ParseStep) -> str:
        # Textbook "0 E 1 + 6" layout: state, symbol, state, ...
        parts = [str(step.state_stack[0])]
        for symbol, state in zip(step.symbol_stack, step.state_stack[1:]):
            parts.append(symbol)
            parts.append(str(state))
        return ' '.join(parts)


class ErrorMessageFormatter:
    """Formats error messages and conflict reports."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def format_parse_error(self, error: ParsingError) -> str:
        """Format a ParsingError with the offending token and the state stack."""
        html_lines = []

        html_lines.append(f'<div class="{self.config.error_css_classes}">')
        html_lines.append('<h4>Parse Error</h4>')
        html_lines.append(f'<p class="error-text">{html.escape(str(error))}</p>')
        html_lines.append(f'<p><strong>Token:</strong> {html.escape(str(error.token))}</p>')
        html_lines.append(f'<p><strong>State stack:</strong> {html.escape(" ".join(map(str, error.state_stack)))}</p>')
        if error.expected:
            html_lines.append(f'<p><strong>Expected:</strong> {html.escape(", ".join(error.expected))}</p>')
        html_lines.append('</div>')

        return '\n'.join(html_lines)

    def format_conflict_report(self, conflicts: Sequence[Conflict]) -> str:
        """
        Format a conflict report as HTML.

        Args:
            conflicts: Conflict objects recorded on the parsing table

        Returns:
            Formatted HTML conflict report
        """
        if not conflicts:
            return '<div class="no-conflicts">No conflicts detected in the grammar.</div>'

        html_lines = []

        html_lines.append('<div class="conflict-report">')
        html_lines.append(f'<h4>Grammar Conflicts ({len(conflicts)} found)</h4>')

        for i, conflict in enumerate(conflicts, 1):
            html_lines.append('<div class="conflict-item">')
            html_lines.append(f'<h5>Conflict {i}: {html.escape(conflict.conflict_type)}</h5>')
            html_lines.append(f'<p><strong>State:</strong> {conflict.state_id}</p>')
            html_lines.append(f'<p><strong>Symbol:</strong> {html.escape(conflict.symbol)}</p>')
            html_lines.append(f'<p><strong>Kept:</strong> {html.escape(str(conflict.kept))}</p>')
            html_lines.append(f'<p><strong>Discarded:</strong> {html.escape(str(conflict.rejected))}</p>')
            html_lines.append('</div>')

        html_lines.append('</div>')

        return '\n'.join(html_lines)
