"""Tests for reflect_anki.parser."""

import pytest

from reflect_anki.parser import (
    PatternKind,
    StudyItem,
    TagMarker,
    _node_text,
    extract_items,
    find_markers,
    parse_document,
    resolve_item,
)
from conftest import flat_list_item, tag_link


def _markers(html):
    return list(find_markers(parse_document(html)))


def _single_item(html):
    items = list(extract_items(html))
    assert len(items) == 1
    return items[0]


# ── _node_text ───────────────────────────────────────────────────────────

class TestNodeText:
    def test_strips_whitespace(self):
        p = parse_document("<p>   hello  </p>").p
        assert _node_text(p) == "hello"

    def test_br_becomes_newline(self):
        p = parse_document("<p>line1<br>line2</p>").p
        assert _node_text(p) == "line1\nline2"

    def test_inline_markup_flattened(self):
        p = parse_document("<p><strong>bold</strong> and <em>italic</em></p>").p
        assert _node_text(p) == "bold and italic"

    def test_comments_ignored(self):
        p = parse_document("<p>text<!-- hidden --></p>").p
        assert _node_text(p) == "text"

    def test_none(self):
        assert _node_text(None) is None


# ── find_markers ─────────────────────────────────────────────────────────

class TestFindMarkers:
    def test_attribute_marker(self, spaced_html):
        markers = _markers(spaced_html)
        assert len(markers) == 1
        assert markers[0].kind is PatternKind.SPACED
        assert markers[0].node.name == "a"
        assert markers[0].legacy is False

    def test_legacy_marker(self, legacy_html):
        markers = _markers(legacy_html)
        assert len(markers) == 1
        assert markers[0].kind is PatternKind.SPACED
        assert markers[0].node.name == "p"
        assert markers[0].legacy is True

    def test_attribute_marker_not_counted_twice(self):
        html = f"<p>{tag_link('type')}</p>"
        markers = _markers(html)
        assert len(markers) == 1
        assert markers[0].legacy is False

    def test_no_markers(self, no_tags_html):
        assert _markers(no_tags_html) == []

    def test_empty_document(self):
        assert _markers("") == []

    def test_unknown_tag_ignored(self):
        html = '<p><a data-tag="later">#later</a></p>'
        assert _markers(html) == []

    def test_kinds_in_fixed_order(self):
        html = (
            f"<p>{tag_link('cloze')}</p>"
            f"<p>{tag_link('type')}</p>"
            f"<p>{tag_link('spaced')}</p>"
            f"<p>{tag_link('reversed')}</p>"
        )
        kinds = [m.kind for m in _markers(html)]
        assert kinds == [
            PatternKind.SPACED,
            PatternKind.REVERSED,
            PatternKind.TYPE,
            PatternKind.CLOZE,
        ]

    def test_document_order_within_kind(self):
        html = "<p>#spaced first</p><p>middle</p><p>#spaced second</p>"
        texts = [m.node.get_text() for m in _markers(html)]
        assert texts == ["#spaced first", "#spaced second"]

    def test_mixed_eras(self):
        html = f"<p>{tag_link('spaced')}</p><p>Q</p><p>A</p><p>#spaced</p><p>Q</p><p>A</p>"
        markers = _markers(html)
        assert [m.legacy for m in markers] == [False, True]

    def test_span_marker(self):
        html = '<p><span data-tag="reversed">#reversed</span></p>'
        markers = _markers(html)
        assert len(markers) == 1
        assert markers[0].kind is PatternKind.REVERSED


# ── resolve_item ─────────────────────────────────────────────────────────

class TestResolveItem:
    def test_nested_bullets(self, spaced_html):
        item = _single_item(spaced_html)
        assert item == StudyItem(
            kind=PatternKind.SPACED,
            question="Capital of France",
            answers=["Paris"],
        )

    def test_multiple_answers_in_order(self, multi_answer_html):
        item = _single_item(multi_answer_html)
        assert item.kind is PatternKind.REVERSED
        assert item.question == "Longest river in Europe"
        assert item.answers == ["Volga", "about 3,530 km"]

    def test_nested_rule_takes_precedence(self):
        html = (
            "<ul>"
            f"<li><p>{tag_link('spaced')}</p>"
            "<ul><li><p>Q</p></li><li><p>A1</p></li><li><p>A2</p></li></ul>"
            "</li>"
            "<li><p>Other</p></li>"
            "</ul>"
        )
        item = _single_item(html)
        assert item.question == "Q"
        assert item.answers == ["A1", "A2"]

    def test_legacy_sibling_fallback(self, legacy_html):
        item = _single_item(legacy_html)
        assert item.question == "Q2"
        assert item.answers == ["A2"]

    def test_sibling_fallback_for_list_items(self):
        html = (
            "<ul>"
            f"<li><p>{tag_link('type')}</p></li>\n"
            "<li><p>Q</p></li>\n"
            "<li><p>A</p></li>\n"
            "<li><p>ignored</p></li>"
            "</ul>"
        )
        item = _single_item(html)
        assert item.question == "Q"
        assert item.answers == ["A"]

    def test_single_sub_bullet_falls_back(self):
        html = flat_list_item(tag_link("spaced"), flat_list_item("only one"))
        item = _single_item(html)
        assert item.question is None
        assert item.answers == []

    def test_question_without_answer(self):
        html = "<p>#spaced</p><p>Lonely question</p>"
        item = _single_item(html)
        assert item.question == "Lonely question"
        assert item.answers == []

    def test_nothing_after_marker(self):
        item = _single_item("<p>#cloze</p>")
        assert item.kind is PatternKind.CLOZE
        assert item.question is None

    def test_cloze_text_from_sibling(self, cloze_html):
        item = _single_item(cloze_html)
        assert item.question == "{{c1::Paris}} is the capital of France"

    def test_multiline_answer_keeps_break(self):
        html = flat_list_item(
            tag_link("spaced"),
            flat_list_item("Phases of mitosis"),
            flat_list_item("Prophase<br>Metaphase"),
        )
        item = _single_item(html)
        assert item.answers == ["Prophase\nMetaphase"]

    def test_detached_marker_has_no_content(self):
        p = parse_document("<p>#spaced</p>").p.extract()
        marker = TagMarker(kind=PatternKind.SPACED, node=p, legacy=True)
        assert resolve_item(marker) is None


# ── extract_items ────────────────────────────────────────────────────────

class TestExtractItems:
    def test_no_tags_no_items(self, no_tags_html):
        assert list(extract_items(no_tags_html)) == []

    def test_several_bullets(self, spaced_html, multi_answer_html):
        items = list(extract_items(spaced_html + multi_answer_html))
        assert [i.kind for i in items] == [PatternKind.SPACED, PatternKind.REVERSED]

    def test_is_lazy(self, spaced_html):
        items = extract_items(spaced_html)
        assert next(items).question == "Capital of France"
        with pytest.raises(StopIteration):
            next(items)
