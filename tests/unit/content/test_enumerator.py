from pathlib import Path

from docweave.content import enumerate_paths, segments_for


def test_segments_are_derived_from_file_layout(write_files, content_dir):
    write_files({"a/b.md": "", "a/c/index.md": "", "d.md": ""})

    assert enumerate_paths(content_dir) == [("a", "b"), ("a", "c"), ("d",)]


def test_root_index_maps_to_empty_path(write_files, content_dir):
    write_files({"index.md": "", "learn/index.md": ""})

    assert enumerate_paths(content_dir) == [(), ("learn",)]


def test_non_document_files_are_ignored(write_files, content_dir):
    write_files({"a.md": "", "images/logo.svg": "", "notes.txt": ""})

    assert enumerate_paths(content_dir) == [("a",)]


def test_duplicate_layouts_are_listed_once(write_files, content_dir):
    write_files({"learn.md": "", "learn/index.md": ""})

    assert enumerate_paths(content_dir) == [("learn",)]


def test_custom_extensions(write_files, content_dir):
    write_files({"a.md": "", "b.mdx": ""})

    assert enumerate_paths(content_dir, [".md", ".mdx"]) == [("a",), ("b",)]


def test_segments_for():
    assert segments_for(Path("foo/bar/baz.md")) == ("foo", "bar", "baz")
    assert segments_for(Path("foo/bar/qux/index.md")) == ("foo", "bar", "qux")
