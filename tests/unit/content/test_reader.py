import pytest

from docweave.content import read_document
from docweave.exceptions import ContentNotFoundError


def test_reads_flat_layout_and_frontmatter(write_files, content_dir):
    write_files({"learn/thinking.md": "---\ntitle: Thinking\norder: 2\n---\n\n# Body\n"})

    doc = read_document(content_dir, ["learn", "thinking"])

    assert doc.segments == ("learn", "thinking")
    assert doc.path == "learn/thinking"
    assert doc.meta == {"title": "Thinking", "order": 2}
    assert doc.body.strip() == "# Body"
    assert doc.source == content_dir / "learn" / "thinking.md"


def test_falls_back_to_index_layout(write_files, content_dir):
    write_files({"learn/index.md": "Landing"})

    doc = read_document(content_dir, ["learn"])

    assert doc.body == "Landing"
    assert doc.source == content_dir / "learn" / "index.md"


def test_flat_file_wins_over_index(write_files, content_dir):
    write_files({"learn.md": "flat", "learn/index.md": "nested"})
    assert read_document(content_dir, ["learn"]).body == "flat"


def test_root_document_is_index(write_files, content_dir):
    write_files({"index.md": "Home"})

    doc = read_document(content_dir, [])

    assert doc.is_index
    assert doc.path == ""
    assert doc.body == "Home"


def test_missing_document_raises(content_dir):
    with pytest.raises(ContentNotFoundError) as excinfo:
        read_document(content_dir, ["nope"])

    assert excinfo.value.path == "nope"
    assert excinfo.value.candidates == ["nope.md", "nope/index.md"]


def test_parent_segments_are_rejected(write_files, content_dir):
    write_files({"secret.md": "x"})
    with pytest.raises(ContentNotFoundError):
        read_document(content_dir / "sub", ["..", "secret"])


def test_dates_in_frontmatter_become_strings(write_files, content_dir):
    write_files({"post.md": "---\ndate: 2024-05-01\ntags: [a, b]\n---\ntext"})

    doc = read_document(content_dir, ["post"])

    assert doc.meta == {"date": "2024-05-01", "tags": ["a", "b"]}


def test_malformed_frontmatter_keeps_whole_text(write_files, content_dir):
    write_files({"bad.md": "---\ntitle: [unclosed\n---\nbody"})

    doc = read_document(content_dir, ["bad"])

    assert doc.meta == {}
    assert "body" in doc.body
