from docweave.compiler import compile_document
from docweave.postprocess import prepare_tree, text_content
from docweave.runtime import Element, create_element, execute

NAMES = ["Note"]


def test_toc_lists_top_level_headings():
    body = "# Title\n\n## Part `one`\n\n#### Deep\n\n<Note>\n\n## Hidden\n\n</Note>\n"
    tree = execute(compile_document(body, NAMES), NAMES)

    toc, children = prepare_tree(tree)

    assert [(entry["url"], entry["depth"]) for entry in toc] == [("#title", 1), ("#part-one", 2)]
    assert toc[0]["text"] == "Title"
    assert toc[1]["text"][0] == "Part "
    assert toc[1]["text"][1].type == "code"
    assert len(children) == 4


def test_whitespace_only_children_are_dropped():
    root = create_element("#group", None, "\n", create_element("p", None, "x"), "  ", "y")

    toc, children = prepare_tree(root)

    assert toc == []
    assert [getattr(child, "type", child) for child in children] == ["p", "y"]


def test_heading_without_id_gets_a_slug():
    root = create_element("#group", None, create_element("h2", None, "Hello World"))

    toc, _ = prepare_tree(root)

    assert toc == [{"url": "#hello-world", "depth": 2, "text": "Hello World"}]


def test_single_child_root():
    toc, children = prepare_tree(create_element("#group", None, create_element("p", None, "only")))

    assert toc == []
    assert children == [Element("p", None, {"children": "only"})]


def test_text_content():
    node = create_element("p", None, "a ", create_element("em", None, "b"), 3)

    assert text_content(node) == "a b3"
