"""Shared fixtures for reflect_anki tests."""

import csv

import pytest

import reflect_anki.config as config_mod


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _patch_config_file(tmp_path, monkeypatch):
    """Redirect CONFIG_FILE to a temp directory for every test."""
    cfg = tmp_path / "config.json"
    monkeypatch.setattr(config_mod, "CONFIG_FILE", cfg)
    return cfg


# ---------------------------------------------------------------------------
# Document HTML fixtures
# ---------------------------------------------------------------------------

def flat_list_item(content: str, *children: str) -> str:
    """Build a Reflect flat-list bullet, optionally with nested bullets."""
    nested = "".join(children)
    return (
        '<div class="prosemirror-flat-list" data-list-kind="bullet">'
        '<div class="list-marker"></div>'
        f'<div class="list-content"><p>{content}</p>{nested}</div>'
        "</div>"
    )


def tag_link(kind: str) -> str:
    return f'<a data-tag="{kind}" href="/tags/{kind}">#{kind}</a>'


@pytest.fixture
def spaced_html():
    """One #spaced bullet with a question and an answer sub-bullet."""
    return flat_list_item(
        tag_link("spaced"),
        flat_list_item("Capital of France"),
        flat_list_item("Paris"),
    )


@pytest.fixture
def multi_answer_html():
    return flat_list_item(
        f"Rivers {tag_link('reversed')}",
        flat_list_item("Longest river in Europe"),
        flat_list_item("Volga"),
        flat_list_item("about 3,530 km"),
    )


@pytest.fixture
def cloze_html():
    return (
        "<ul>"
        f"<li><p>{tag_link('cloze')}</p></li>"
        "<li><p>{{c1::Paris}} is the capital of France</p></li>"
        "</ul>"
    )


@pytest.fixture
def legacy_html():
    """Old export format: tag paragraph followed by question and answer."""
    return "<p>#spaced</p><p>Q2</p><p>A2</p>"


@pytest.fixture
def no_tags_html():
    return flat_list_item("Just a note", flat_list_item("with"), flat_list_item("children"))


# ---------------------------------------------------------------------------
# Export / watermark file fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def write_export(tmp_path):
    """Factory writing a Reflect CSV export and returning its path."""

    def _write(rows, name="reflect-test.csv"):
        path = tmp_path / name
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=["id", "subject", "edited_at", "document_html"])
            writer.writeheader()
            for row in rows:
                writer.writerow({"subject": "", **row})
        return path

    return _write


@pytest.fixture
def synced_at_file(tmp_path):
    """Path of a (not yet existing) .synced_at file."""
    return tmp_path / ".synced_at"
