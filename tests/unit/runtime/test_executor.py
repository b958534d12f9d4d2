import pytest

from docweave.compiler import compile_document
from docweave.exceptions import ExecutionError
from docweave.runtime import Element, execute
from docweave.runtime.tree import create_element

NAMES = ["Intro", "Note"]


def test_components_resolve_to_their_own_names():
    code = compile_document('<Note title="Hi">\n\nBody\n\n</Note>\n', NAMES)

    root = execute(code, NAMES)

    assert root.type == "#group"
    note = root.children
    assert isinstance(note, Element)
    assert note.type == "Note"
    assert note.props["title"] == "Hi"
    assert note.props["debug_type"] == "Note"
    assert note.props["original_type"] == "Note"
    assert note.children == Element("p", None, {"parent_name": "Note", "children": "Body"})


def test_every_node_type_is_a_string():
    body = "# T\n\n- one\n- two\n\n<Intro>\n\n**x** <Note>y</Note>\n\n</Intro>\n"
    root = execute(compile_document(body, NAMES), NAMES)

    def walk(node):
        if isinstance(node, Element):
            assert isinstance(node.type, str)
            children = node.children if isinstance(node.children, list) else [node.children]
            for child in children:
                walk(child)

    walk(root)


def test_tight_list_items_have_no_paragraphs():
    root = execute(compile_document("- one\n- two\n", NAMES), NAMES)

    ul = root.children
    assert ul.type == "ul"
    assert [li.children for li in ul.children] == ["one", "two"]


def test_all_node_creation_goes_through_the_primitive():
    created = []

    def recording(type_, props, *children):
        created.append(type_)
        return create_element(type_, props, *children)

    execute(compile_document("Hello *there*\n", NAMES), NAMES, create=recording)

    assert created == ["em", "p", "#group"]


def test_keys_are_lifted_out_of_props():
    root = execute(compile_document('<Intro key="first" />\n', NAMES), NAMES)

    assert root.children.key == "first"
    assert "key" not in root.children.props


@pytest.mark.parametrize(
    ("code", "reason"),
    [
        ("import os\ndefault = h('p', None)\n", "undeclared component 'os'"),
        ("default = open('x')\n", "only h() may be called"),
        ("default = h('p', None, secret)\n", "undefined name 'secret'"),
        ("x = 1\n", "unsupported statement"),
        ("import Note\n", "no 'default' export"),
        ("default = 'text'\n", "not an element"),
        ("default = h('p', None, 1 + 2)\n", "unsupported expression BinOp"),
        ("default = h('p', None)\ndefault = h('p', None)\n", "assigned twice"),
        ("default = h(Note, None)\n", "undefined name 'Note'"),
        ("default = h('p', {1: 2})\n", "dict keys must be strings"),
        ("default = h('p', **{})\n", "positional arguments only"),
        ("default = (\n", "invalid compiled code"),
    ],
)
def test_rejects_anything_but_tree_construction(code, reason):
    with pytest.raises(ExecutionError) as excinfo:
        execute(code, NAMES, path="learn/x")

    assert reason in excinfo.value.reason
    assert excinfo.value.path == "learn/x"


def test_negative_numbers_are_literals():
    root = execute("default = h('p', {'offset': -2})\n", NAMES)

    assert root.props["offset"] == -2


def test_primitive_failures_become_execution_errors():
    def broken(type_, props, *children):
        raise ValueError("boom")

    with pytest.raises(ExecutionError, match="boom"):
        execute("default = h('p', None)\n", NAMES, create=broken, path="a")


def test_unencodable_code_becomes_execution_error():
    with pytest.raises(ExecutionError) as excinfo:
        execute('default = h("p", None, "\ud800")\n', NAMES, path="a")

    assert "invalid compiled code" in excinfo.value.reason
    assert excinfo.value.path == "a"
