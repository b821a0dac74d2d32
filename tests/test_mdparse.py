"""Tests for the markdown parser and Docs API request builder."""

import pytest

from gdrive.mdparse import (
    EditScript,
    FormatOp,
    TextSpan,
    build_edit_script,
    markdown_to_requests,
    parse_inline,
    parse_line,
    parse_markdown,
    strip_markdown,
    to_docs_requests,
)


class FakeDocument:
    """In-memory stand-in for an empty Google Doc.

    Applies the subset of batchUpdate requests the translator emits, using
    the Docs API's 1-based indices. A fresh document holds just its
    terminal newline at index 1.
    """

    def __init__(self):
        self.chars = ["\n"]
        self.bold = [False]
        self.italic = [False]
        self.para_styles: dict[int, str] = {}
        self.bullets: set[int] = set()

    def _paragraph_starts(self) -> list[int]:
        starts = [1]
        for i, ch in enumerate(self.chars[:-1]):
            if ch == "\n":
                starts.append(i + 2)
        return starts

    def _paragraphs_in(self, start: int, end: int) -> list[int]:
        text_end = len(self.chars) + 1
        starts = self._paragraph_starts()
        hits = []
        for i, p_start in enumerate(starts):
            p_end = starts[i + 1] if i + 1 < len(starts) else text_end
            if p_start < end and start < p_end:
                hits.append(p_start)
        return hits

    def apply(self, requests: list[dict]) -> None:
        for req in requests:
            (name, body), = req.items()
            if name == "insertText":
                at = body["location"]["index"] - 1
                new = list(body["text"])
                self.chars[at:at] = new
                self.bold[at:at] = [False] * len(new)
                self.italic[at:at] = [False] * len(new)
                continue

            start = body["range"]["startIndex"]
            end = body["range"]["endIndex"]
            assert 1 <= start < end <= len(self.chars) + 1
            if name == "updateTextStyle":
                flags = self.bold if body["fields"] == "bold" else self.italic
                for i in range(start - 1, end - 1):
                    flags[i] = True
            elif name == "updateParagraphStyle":
                for p in self._paragraphs_in(start, end):
                    self.para_styles[p] = body["paragraphStyle"]["namedStyleType"]
            elif name == "createParagraphBullets":
                self.bullets.update(self._paragraphs_in(start, end))
            else:
                raise AssertionError(f"unexpected request {name}")

    @property
    def text(self) -> str:
        return "".join(self.chars)

    def styled(self, flags: list[bool]) -> str:
        return "".join(c for c, f in zip(self.chars, flags) if f)

    def paragraph_style(self, paragraph_index: int) -> str:
        start = self._paragraph_starts()[paragraph_index]
        return self.para_styles.get(start, "NORMAL_TEXT")

    def is_bullet(self, paragraph_index: int) -> bool:
        return self._paragraph_starts()[paragraph_index] in self.bullets


def _render(markdown: str) -> FakeDocument:
    doc = FakeDocument()
    doc.apply(markdown_to_requests(markdown))
    return doc


class TestParseLine:
    def test_blank_line_is_none(self):
        assert parse_line("") is None
        assert parse_line("   \t") is None

    @pytest.mark.parametrize("line, kind, text", [
        ("# Title", "heading1", "Title"),
        ("## Sub", "heading2", "Sub"),
        ("### Small", "heading3", "Small"),
        ("- item", "bullet", "item"),
        ("* item", "bullet", "item"),
        ("-   spaced", "bullet", "spaced"),
        ("1. first", "bullet", "first"),
        ("42.\tanswer", "bullet", "answer"),
        ("plain text", "paragraph", "plain text"),
    ])
    def test_classification(self, line, kind, text):
        parsed = parse_line(line)
        assert parsed.kind == kind
        assert parsed.text == text

    def test_hash_without_space_is_paragraph(self):
        assert parse_line("#").kind == "paragraph"
        assert parse_line("##").kind == "paragraph"
        assert parse_line("#hashtag").text == "#hashtag"

    def test_four_hashes_is_paragraph(self):
        parsed = parse_line("#### Deep")
        assert parsed.kind == "paragraph"
        assert parsed.text == "#### Deep"

    def test_heading_content_keeps_extra_spaces(self):
        assert parse_line("#  Title").text == " Title"

    def test_bold_line_is_not_bullet(self):
        parsed = parse_line("**bold** start")
        assert parsed.kind == "paragraph"
        assert parsed.spans[0] == TextSpan("bold", "bold")

    def test_number_without_dot_space_is_paragraph(self):
        assert parse_line("2024 was a year").kind == "paragraph"
        assert parse_line("1.5 liters").kind == "paragraph"

    def test_indented_bullet_is_paragraph(self):
        assert parse_line("  - nested").kind == "paragraph"

    def test_stripped_content_is_not_reclassified(self):
        # "- # x" is a bullet whose text happens to look like a heading
        parsed = parse_line("- # x")
        assert parsed.kind == "bullet"
        assert parsed.text == "# x"


class TestParseInline:
    def test_no_markers(self):
        assert parse_inline("hello") == [TextSpan("hello")]

    def test_empty(self):
        assert parse_inline("") == [TextSpan("")]

    def test_bold_in_sentence(self):
        assert parse_inline("this is **bold** text") == [
            TextSpan("this is "),
            TextSpan("bold", "bold"),
            TextSpan(" text"),
        ]

    def test_italic(self):
        assert parse_inline("*it*") == [TextSpan("it", "italic")]

    def test_bold_then_italic_adjacent(self):
        assert parse_inline("**a***b*") == [
            TextSpan("a", "bold"),
            TextSpan("b", "italic"),
        ]

    def test_unterminated_bold_is_literal(self):
        assert parse_inline("a ** b") == [TextSpan("a ** b")]

    def test_bare_double_marker_is_literal(self):
        assert parse_inline("**") == [TextSpan("**")]

    def test_lone_asterisk_is_literal(self):
        assert parse_inline("5 * 3") == [TextSpan("5 * 3")]

    def test_bold_content_may_contain_spaces(self):
        assert parse_inline("a ** b **") == [
            TextSpan("a "), TextSpan(" b ", "bold"),
        ]

    def test_non_greedy(self):
        assert parse_inline("*a* and *b*") == [
            TextSpan("a", "italic"),
            TextSpan(" and "),
            TextSpan("b", "italic"),
        ]

    def test_nested_takes_outer_marker(self):
        spans = parse_inline("**bold *x* here**")
        assert spans == [TextSpan("bold *x* here", "bold")]

    @pytest.mark.parametrize("text", [
        "plain", "**b** and *i*", "x ** y", "*a**b*", "a*b*c**d**e",
    ])
    def test_no_empty_spans(self, text):
        assert all(s.text for s in parse_inline(text))


class TestParseMarkdown:
    def test_empty(self):
        assert parse_markdown("") == []

    def test_spacer_between_blocks(self):
        lines = parse_markdown("# Title\n\nHello **world**")
        assert [l.kind for l in lines] == ["heading1", "paragraph", "paragraph"]
        assert lines[1].text == ""
        assert list(lines[2].spans) == [TextSpan("Hello "), TextSpan("world", "bold")]

    def test_multiple_blank_lines_give_one_spacer(self):
        lines = parse_markdown("a\n\n\n\nb")
        assert [l.text for l in lines] == ["a", "", "b"]

    def test_leading_and_trailing_blanks_ignored(self):
        lines = parse_markdown("\n\nonly\n\n")
        assert [l.text for l in lines] == ["only"]

    def test_whitespace_line_counts_as_blank(self):
        lines = parse_markdown("a\n   \nb")
        assert [l.text for l in lines] == ["a", "", "b"]


class TestBuildEditScript:
    def test_empty_input(self):
        script = build_edit_script("")
        assert script == EditScript(insert_text="", format_ops=[])
        assert to_docs_requests(script) == []

    def test_blank_only_input(self):
        assert build_edit_script("\n  \n").insert_text == ""

    def test_plain_lines(self):
        script = build_edit_script("line one\nline two")
        assert script.insert_text == "line one\nline two\n"
        assert script.format_ops == []

    def test_heading_and_bold_scenario(self):
        script = build_edit_script("# Title\n\nHello **world**")
        assert script.insert_text == "Title\n\nHello world\n"
        assert script.format_ops == [
            FormatOp("heading", 1, 6, level=1),
            FormatOp("bold", 14, 19),
        ]
        assert script.insert_text[14 - 1:19 - 1] == "world"

    def test_bullets_scenario(self):
        script = build_edit_script("- one\n- two")
        assert script.insert_text == "one\ntwo\n"
        assert script.format_ops == [
            FormatOp("bullet", 1, 4),
            FormatOp("bullet", 5, 8),
        ]

    def test_numbered_items_become_bullets(self):
        script = build_edit_script("1. a\n2. b")
        assert script.insert_text == "a\nb\n"
        assert [op.kind for op in script.format_ops] == ["bullet", "bullet"]

    def test_heading_levels(self):
        script = build_edit_script("# a\n## b\n### c")
        assert [op.level for op in script.format_ops] == [1, 2, 3]

    def test_adjacent_bold_italic(self):
        script = build_edit_script("**a***b*")
        assert script.insert_text == "ab\n"
        assert script.format_ops == [FormatOp("bold", 1, 2), FormatOp("italic", 2, 3)]

    def test_empty_heading_emits_no_zero_width_range(self):
        script = build_edit_script("# \nafter")
        assert script.insert_text == "\nafter\n"
        assert script.format_ops == []

    def test_emphasis_inside_bullet_offsets(self):
        script = build_edit_script("intro\n- a *b* c")
        assert script.insert_text == "intro\na b c\n"
        italic = [op for op in script.format_ops if op.kind == "italic"]
        assert italic == [FormatOp("italic", 9, 10)]

    @pytest.mark.parametrize("text", [
        "# T\n\n- **a** *b*\n2. c\n\nplain *x* **y**",
        "**a***b*\n\n\n### *h*",
        "x",
    ])
    def test_ranges_within_inserted_text(self, text):
        script = build_edit_script(text)
        limit = len(script.insert_text) + 1
        for op in script.format_ops:
            assert 1 <= op.start < op.end <= limit
            if op.kind in ("bold", "italic"):
                # span ranges never reach a line's newline
                assert "\n" not in script.insert_text[op.start - 1:op.end - 1]

    def test_span_ranges_inside_paragraph_ranges(self):
        script = build_edit_script("## a **b** *c*\n- **d**")
        paragraphs = [op for op in script.format_ops if op.kind in ("heading", "bullet")]
        for op in script.format_ops:
            if op.kind in ("bold", "italic"):
                assert any(p.start <= op.start and op.end <= p.end for p in paragraphs)

    def test_deterministic(self):
        text = "# A\n\n- *b*\n**c**"
        assert build_edit_script(text) == build_edit_script(text)


class TestToDocsRequests:
    def test_insert_first_then_formatting(self):
        requests = to_docs_requests(build_edit_script("# Title\n\nHello **world**"))
        assert requests[0] == {
            "insertText": {"location": {"index": 1}, "text": "Title\n\nHello world\n"}
        }
        assert requests[1] == {
            "updateParagraphStyle": {
                "range": {"startIndex": 1, "endIndex": 6},
                "paragraphStyle": {"namedStyleType": "HEADING_1"},
                "fields": "namedStyleType",
            }
        }
        assert requests[2] == {
            "updateTextStyle": {
                "range": {"startIndex": 14, "endIndex": 19},
                "textStyle": {"bold": True},
                "fields": "bold",
            }
        }
        assert len(requests) == 3

    def test_bullet_request(self):
        requests = to_docs_requests(build_edit_script("- one"))
        assert requests[1] == {
            "createParagraphBullets": {
                "range": {"startIndex": 1, "endIndex": 4},
                "bulletPreset": "BULLET_DISC_CIRCLE_SQUARE",
            }
        }

    def test_italic_request(self):
        requests = to_docs_requests(build_edit_script("*x*"))
        assert requests[1]["updateTextStyle"]["textStyle"] == {"italic": True}
        assert requests[1]["updateTextStyle"]["fields"] == "italic"


class TestRenderedDocument:
    def test_heading_spacer_and_bold(self):
        doc = _render("# Title\n\nHello **world**")
        assert doc.text == "Title\n\nHello world\n\n"
        assert doc.paragraph_style(0) == "HEADING_1"
        assert doc.paragraph_style(1) == "NORMAL_TEXT"
        assert doc.paragraph_style(2) == "NORMAL_TEXT"
        assert doc.styled(doc.bold) == "world"
        assert doc.styled(doc.italic) == ""

    def test_bullets(self):
        doc = _render("- one\n- two\nafter")
        assert doc.is_bullet(0)
        assert doc.is_bullet(1)
        assert not doc.is_bullet(2)

    def test_formatting_order_does_not_matter(self):
        requests = markdown_to_requests("## *A* **B**\n- c **d**")
        forward, backward = FakeDocument(), FakeDocument()
        forward.apply(requests)
        backward.apply(requests[:1] + requests[:0:-1])
        assert forward.text == backward.text
        assert forward.bold == backward.bold
        assert forward.italic == backward.italic
        assert forward.para_styles == backward.para_styles
        assert forward.bullets == backward.bullets
        assert forward.styled(forward.bold) == "Bd"
        assert forward.styled(forward.italic) == "A"


class TestStripMarkdown:
    def test_strips_markers(self):
        text = "# Title\n- **bold** and *it*\n* item"
        assert strip_markdown(text) == "Title\n• bold and it\n• item"

    def test_plain_unchanged(self):
        assert strip_markdown("nothing here") == "nothing here"
