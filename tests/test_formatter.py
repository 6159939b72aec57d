"""Tests for the Mermaid formatter."""

import pytest

from mermaid_fmt.config import FormatConfig, IndentUnit
from mermaid_fmt.exceptions import GrammarError, SemanticDecodeError
from mermaid_fmt.formatter import (
    RenderContext,
    format_diagram,
    format_mermaid,
    needs_blank_before,
    render_statement,
    statement_depth,
)
from mermaid_fmt.parser import parse
from mermaid_fmt.statements import (
    Arrow,
    BlankLine,
    BlockEnd,
    BlockKind,
    BlockStart,
    BraceBlockEnd,
    BraceBlockKind,
    BraceBlockStart,
    Comment,
    Diagram,
    DiagramDecl,
    DiagramKind,
    DiagramType,
    GenericLine,
    Message,
    Note,
    Participant,
    ParticipantKeyword,
)

MESSAGES = FormatConfig(normalize_messages=True)


# ============================================================
# Rules
# ============================================================


class TestStatementDepth:
    def test_before_declaration(self):
        context = RenderContext()
        assert statement_depth(GenericLine("A"), context) == 0
        assert statement_depth(DiagramDecl(DiagramType(DiagramKind.PIE)), context) == 0

    def test_content_after_declaration(self):
        context = RenderContext(seen_diagram_decl=True)
        assert statement_depth(GenericLine("A"), context) == 1
        assert statement_depth(Comment("%% c"), context) == 1

    def test_end_closed_blocks_at_column_zero(self):
        context = RenderContext(seen_diagram_decl=True, brace_depth=2)
        assert statement_depth(BlockStart(BlockKind.LOOP), context) == 0
        assert statement_depth(BlockEnd(), context) == 0

    def test_inside_brace_block(self):
        context = RenderContext(seen_diagram_decl=True, brace_depth=2)
        assert statement_depth(GenericLine("x"), context) == 2
        assert statement_depth(BraceBlockStart(BraceBlockKind.CLASS, "C"), context) == 2

    def test_close_brace_floors_at_zero(self):
        context = RenderContext(seen_diagram_decl=True)
        context.close_brace()
        assert context.brace_depth == 0


class TestBlankBeforeBlock:
    @pytest.mark.parametrize("previous", [
        BlockEnd(),
        BraceBlockEnd(),
        GenericLine("A"),
        Note("Note over A: x"),
        Participant(ParticipantKeyword.ACTOR, "A"),
        Message("A", Arrow.SOLID, "B"),
    ])
    def test_block_after_content(self, previous):
        assert needs_blank_before(BlockStart(BlockKind.ALT), previous)
        assert needs_blank_before(BraceBlockStart(BraceBlockKind.STATE, "S"), previous)

    def test_block_after_declaration(self):
        decl = DiagramDecl(DiagramType(DiagramKind.SEQUENCE))
        assert not needs_blank_before(BlockStart(BlockKind.LOOP), decl)

    def test_nested_opener(self):
        assert not needs_blank_before(BlockStart(BlockKind.LOOP), BlockStart(BlockKind.ALT))

    def test_first_statement(self):
        assert not needs_blank_before(BlockStart(BlockKind.LOOP), None)

    def test_non_block(self):
        assert not needs_blank_before(GenericLine("A"), BlockEnd())


class TestRenderStatement:
    def test_participant_alias(self):
        s = Participant(ParticipantKeyword.PARTICIPANT, "A", "Alice")
        assert render_statement(s) == "participant A as Alice"

    def test_block_without_label(self):
        assert render_statement(BlockStart(BlockKind.OPT)) == "opt"

    def test_brace_block(self):
        assert render_statement(BraceBlockStart(BraceBlockKind.NAMESPACE, "Animals")) == "namespace Animals {"

    def test_message(self):
        s = Message("A", Arrow.DOTTED, "B", "hi  there", activation="-")
        assert render_statement(s) == "A -->>- B: hi there"

    def test_message_without_text(self):
        assert render_statement(Message("A", Arrow.SOLID, "B")) == "A ->> B:"

    def test_blank(self):
        assert render_statement(BlankLine()) == ""


# ============================================================
# Whole-diagram formatting
# ============================================================


class TestFormatMermaid:
    def test_empty(self):
        assert format_mermaid("") == ""
        assert format_mermaid("\n\n\n") == ""

    def test_flowchart(self):
        assert format_mermaid("flowchart TD\nA-->B") == "flowchart TD\n    A-->B\n"

    def test_sequence_with_loop(self):
        source = (
            "sequenceDiagram\nA ->> B: hi\nloop Every minute\n"
            "B ->> A: pong\nend\nNote right of A: done"
        )
        assert format_mermaid(source) == (
            "sequenceDiagram\n"
            "    A ->> B: hi\n"
            "\n"
            "loop Every minute\n"
            "    B ->> A: pong\n"
            "end\n"
            "    Note right of A: done\n"
        )

    def test_alt_else(self):
        source = "sequenceDiagram\nalt ok\nA->>B: x\nelse   fail\nB->>A: y\nend"
        assert format_mermaid(source) == (
            "sequenceDiagram\nalt ok\n    A->>B: x\nelse fail\n    B->>A: y\nend\n"
        )

    def test_par_and(self):
        source = "sequenceDiagram\npar Alice\nA->>B: x\nand Bob\nB->>A: y\nend"
        assert format_mermaid(source) == (
            "sequenceDiagram\npar Alice\n    A->>B: x\nand Bob\n    B->>A: y\nend\n"
        )

    def test_nested_brace_blocks(self):
        source = "classDiagram\nnamespace Animals {\nclass Dog {\n+bark()\n}\n}"
        assert format_mermaid(source) == (
            "classDiagram\n"
            "namespace Animals {\n"
            "    class Dog {\n"
            "        +bark()\n"
            "    }\n"
            "}\n"
        )

    def test_sibling_brace_blocks_separated(self):
        source = "classDiagram\nclass A {\n+x\n}\nclass B {\n+y\n}"
        assert format_mermaid(source) == (
            "classDiagram\nclass A {\n    +x\n}\n\nclass B {\n    +y\n}\n"
        )

    def test_state_diagram_already_formatted(self):
        source = "stateDiagram-v2\nstate X {\n    [*] --> Y\n}\n"
        assert format_mermaid(source) == source

    def test_else_outside_sequence_is_content(self):
        source = "flowchart TD\nsubgraph Group\nelse --> B\nend"
        assert format_mermaid(source) == "flowchart TD\nsubgraph Group\n    else --> B\nend\n"

    def test_unknown_declaration_becomes_flowchart(self):
        assert format_mermaid("zenuml\nA --> B") == "flowchart\n    A --> B\n"

    def test_leading_and_trailing_blanks(self):
        assert format_mermaid("\n\nflowchart TD\nA-->B\n\n\n") == "flowchart TD\n    A-->B\n"

    def test_blank_runs_collapse(self):
        assert format_mermaid("flowchart TD\nA\n\n\n\nB") == "flowchart TD\n    A\n\n    B\n"

    def test_existing_blank_before_block_not_doubled(self):
        assert format_mermaid("flowchart\nA\n\nsubgraph S\nend") == "flowchart\n    A\n\nsubgraph S\nend\n"

    def test_preamble_stays_at_column_zero(self):
        source = "%%{init: {}}%%\n  %% header\nsequenceDiagram\n%%{wrap}%%\n%% body comment\nA->>B: hi"
        assert format_mermaid(source) == (
            "%%{init: {}}%%\n"
            "%% header\n"
            "sequenceDiagram\n"
            "%%{wrap}%%\n"
            "    %% body comment\n"
            "    A->>B: hi\n"
        )

    def test_content_before_declaration(self):
        assert format_mermaid("A --> B\nflowchart") == "A --> B\nflowchart\n"

    def test_unbalanced_closers(self):
        assert format_mermaid("classDiagram\n}\n}\nA") == "classDiagram\n}\n}\n    A\n"

    def test_generic_lines_normalized(self):
        assert format_mermaid("flowchart LR\nA[ Start ]  -->| go |  B") == "flowchart LR\n    A[Start] -->|go| B\n"

    def test_crlf_input(self):
        assert format_mermaid("flowchart TD\r\nA-->B\r\n") == "flowchart TD\n    A-->B\n"

    def test_grammar_error_propagates(self):
        with pytest.raises(GrammarError):
            format_mermaid("flowchart\nA\x01")


class TestIndentation:
    SOURCE = "flowchart TD\nsubgraph X\nA\nend"

    def test_tabs(self):
        config = FormatConfig(indent_unit=IndentUnit.TABS)
        assert format_mermaid(self.SOURCE, config) == "flowchart TD\nsubgraph X\n\tA\nend\n"

    def test_width(self):
        config = FormatConfig(indent_width=2)
        assert format_mermaid(self.SOURCE, config) == "flowchart TD\nsubgraph X\n  A\nend\n"

    def test_nested_width(self):
        config = FormatConfig(indent_width=2)
        source = "classDiagram\nnamespace N {\nclass C {\n+x\n}\n}"
        assert format_mermaid(source, config) == "classDiagram\nnamespace N {\n  class C {\n    +x\n  }\n}\n"


class TestMessages:
    @pytest.mark.parametrize("line,expected", [
        ("A  ->>  B:  hello  world", "A ->> B: hello world"),
        ("A->>+B: Hello", "A ->>+ B: Hello"),
        ("A->>B:", "A ->> B:"),
        ("Alice-)Bob: async", "Alice -) Bob: async"),
    ])
    def test_messages_respaced(self, line, expected):
        assert format_mermaid(f"sequenceDiagram\n{line}", MESSAGES) == f"sequenceDiagram\n    {expected}\n"

    def test_messages_untouched_by_default(self):
        assert format_mermaid("sequenceDiagram\nA->>B: hi") == "sequenceDiagram\n    A->>B: hi\n"

    def test_flowchart_edges_not_messages(self):
        assert format_mermaid("flowchart\nA-->B: x", MESSAGES) == "flowchart\n    A-->B: x\n"

    def test_unknown_arrow(self):
        with pytest.raises(SemanticDecodeError):
            format_mermaid("sequenceDiagram\nA --->> B: x", MESSAGES)


class TestIndentSensitiveDiagrams:
    def test_mindmap_passthrough(self):
        assert format_mermaid("mindmap\n  root\n    child") == "mindmap\n  root\n    child\n"

    def test_timeline_passthrough_normalizes_endings(self):
        assert format_mermaid("timeline\r\n  2020 : a\r\n\r\n") == "timeline\n  2020 : a\n"

    def test_passthrough_disabled(self):
        config = FormatConfig(preserve_indent_sensitive=False)
        assert format_mermaid("mindmap\n  root\n    child", config) == "mindmap\n    root\n    child\n"


class TestFormatDiagram:
    def test_from_statements(self):
        diagram = Diagram((
            DiagramDecl(DiagramType(DiagramKind.GRAPH, "LR")),
            GenericLine("A --> B"),
            BlankLine(),
            BlankLine(),
        ))
        assert format_diagram(diagram) == "graph LR\n    A --> B\n"

    def test_empty(self):
        assert format_diagram(Diagram()) == ""


class TestIdempotence:
    @pytest.mark.parametrize("source", [
        "sequenceDiagram\nA ->> B: hi\nloop Every minute\nB ->> A: pong\nend\nNote right of A: done",
        "classDiagram\nnamespace Animals {\nclass Dog {\n+bark()\n}\n}\nclass Cat {\n}",
        "%%{init: {}}%%\n\n\nflowchart LR\n  A[ x [ y ] ] -->| a |B\n\n\nsubgraph S\n C\nend\nD",
        "stateDiagram-v2\n[*] --> A\nstate A {\nB --> C\n}\nnote right of A: n",
        "erDiagram\nCUSTOMER ||--o{ ORDER : places\n\n\n",
    ])
    def test_format_is_idempotent(self, source):
        once = format_mermaid(source)
        assert format_mermaid(once) == once

    def test_idempotent_with_messages(self):
        once = format_mermaid("sequenceDiagram\nA->>+B:  x\nB-->>-A: y", MESSAGES)
        assert format_mermaid(once, MESSAGES) == once

    def test_parse_of_output_round_trips(self):
        once = format_mermaid("flowchart TD\nsubgraph S\nA\nend")
        assert format_diagram(parse(once)) == once


class TestDeclarationDetection:
    def test_mindmap_after_frontmatter_passes_through(self):
        source = "---\ntitle: T\n---\nmindmap\n  root\n    child\n      leaf\n"
        assert format_mermaid(source) == source

    def test_flowchart_after_frontmatter_is_indented(self):
        source = "---\ntitle: T\n---\nflowchart TD\nA --> B\n"
        assert format_mermaid(source) == "---\ntitle: T\n---\nflowchart TD\n    A --> B\n"

    def test_frontmatter_kept_verbatim(self):
        source = "---\nconfig:\n  theme:   dark\n---\nflowchart\nA"
        assert format_mermaid(source) == "---\nconfig:\n  theme:   dark\n---\nflowchart\n    A\n"

    @pytest.mark.parametrize("header", [
        "gitGraph LR:",
        "xychart-beta horizontal",
        "flowchart-elk TD",
        "pie title Pets",
    ])
    def test_header_with_trailing_text(self, header):
        assert format_mermaid(f"{header}\nbody line\n") == f"{header}\n    body line\n"

    def test_git_graph_body_indented(self):
        source = "gitGraph LR:\ncommit\nbranch dev\n"
        assert format_mermaid(source) == "gitGraph LR:\n    commit\n    branch dev\n"

    def test_architecture_header_kept(self):
        source = "architecture-beta\ngroup api(cloud)[API]\n"
        assert format_mermaid(source) == "architecture-beta\n    group api(cloud)[API]\n"

    def test_frontmatter_output_is_stable(self):
        once = format_mermaid("---\ntitle: T\n---\n\n\ngitGraph LR:\ncommit")
        assert format_mermaid(once) == once
