"""
Reflect document parsing.

Handles parsing the document_html of a Reflect export row, finding the
#spaced / #reversed / #type / #cloze tag markers, and resolving each
marker to its question and answers.

Two note layouts are supported:
- Nested bullets: the tagged bullet's sub-bullets hold the question
  (first) and the answers (the rest).
- Legacy flat paragraphs: the question and answer are the two elements
  that follow the tagged block.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from bs4 import BeautifulSoup, Comment, NavigableString, Tag


class PatternKind(Enum):
    SPACED = "spaced"
    REVERSED = "reversed"
    TYPE = "type"
    CLOZE = "cloze"


# Attribute Reflect puts on tag links: <a data-tag="spaced">#spaced</a>
TAG_ATTRIBUTE = "data-tag"
TAG_NODE_NAMES = ["a", "span"]

# Paragraphs of sub-bullets below a list item (Reflect flat lists or plain <li>)
NESTED_ITEM_SELECTOR = (
    ":scope div.prosemirror-flat-list div.list-content p, "
    ":scope li p"
)


@dataclass
class TagMarker:
    """A tag found in a document, e.g. the #spaced link on a bullet."""
    kind: PatternKind
    node: Tag
    legacy: bool = False  # matched by "#kind" paragraph text, not by attribute


@dataclass
class StudyItem:
    """The question/answers a tag marker points at."""
    kind: PatternKind
    question: str | None
    answers: list[str] = field(default_factory=list)


def parse_document(document_html: str) -> BeautifulSoup:
    """Parse a document_html string into a navigable tree."""
    return BeautifulSoup(document_html, "html.parser")


def _node_text(node: Tag | None) -> str | None:
    """Text of a node with <br> kept as a line break, stripped."""
    if node is None:
        return None
    parts = []
    for child in node.descendants:
        if isinstance(child, Tag):
            if child.name == "br":
                parts.append("\n")
        elif isinstance(child, NavigableString) and not isinstance(child, Comment):
            parts.append(str(child))
    return "".join(parts).strip()


def _is_list_item(tag: Tag) -> bool:
    if tag.name == "li":
        return True
    return tag.name == "div" and "list-content" in (tag.get("class") or [])


def _is_attribute_marker(node: Tag, kind: PatternKind) -> bool:
    return node.name in TAG_NODE_NAMES and node.get(TAG_ATTRIBUTE) == kind.value


def _is_legacy_marker(node: Tag, kind: PatternKind) -> bool:
    if node.name != "p" or f"#{kind.value}" not in node.get_text():
        return False
    # Already reported through its data-tag link
    return node.find(TAG_NODE_NAMES, attrs={TAG_ATTRIBUTE: kind.value}) is None


def find_markers(soup: BeautifulSoup) -> Iterator[TagMarker]:
    """
    Yield every tag marker in the document.

    Kinds are visited in PatternKind order; within a kind, markers come in
    document order. Both the data-tag attribute form and the legacy
    "#kind" paragraph text form are recognized.
    """
    for kind in PatternKind:
        for node in soup.find_all(["p", *TAG_NODE_NAMES]):
            if _is_attribute_marker(node, kind):
                yield TagMarker(kind=kind, node=node)
            elif _is_legacy_marker(node, kind):
                yield TagMarker(kind=kind, node=node, legacy=True)


def _structural_parent(marker: TagMarker) -> Tag | None:
    """
    The block whose contents belong to the marker.

    The closest enclosing list item; without one, the tagged paragraph.
    """
    node = marker.node
    if node.parent is None:
        return None

    list_item = node.find_parent(_is_list_item)
    if list_item is not None:
        return list_item
    if marker.legacy:
        return node
    paragraph = node.find_parent("p")
    return paragraph if paragraph is not None else node


def resolve_item(marker: TagMarker) -> StudyItem | None:
    """
    Resolve a tag marker to its question and answers.

    Returns None when the marker isn't attached to a usable block.
    """
    parent = _structural_parent(marker)
    if parent is None:
        return None

    # Nested bullets: first is the question, the rest are answers
    sub_bullets = parent.select(NESTED_ITEM_SELECTOR)
    if len(sub_bullets) >= 2:
        return StudyItem(
            kind=marker.kind,
            question=_node_text(sub_bullets[0]),
            answers=[_node_text(b) for b in sub_bullets[1:]],
        )

    # Legacy format: question and answer are the next two siblings
    question_node = parent.find_next_sibling()
    answers = []
    if question_node is not None:
        answer_node = question_node.find_next_sibling()
        if answer_node is not None:
            answers.append(_node_text(answer_node))

    return StudyItem(
        kind=marker.kind,
        question=_node_text(question_node),
        answers=answers,
    )


def extract_items(document_html: str) -> Iterator[StudyItem]:
    """
    Parse a document and yield a StudyItem for every tag marker.

    Markers that can't be resolved still yield an item with no question
    so the caller can report them.
    """
    soup = parse_document(document_html)
    for marker in find_markers(soup):
        item = resolve_item(marker)
        if item is None:
            print(f"[parser] WARNING: #{marker.kind.value} tag is not attached to any block")
            item = StudyItem(kind=marker.kind, question=None)
        yield item
