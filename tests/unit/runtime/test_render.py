from docweave.compiler import compile_document
from docweave.components import REGISTRY, component_names
from docweave.runtime import Element, Fragment, create_element, deserialize, execute, render_html, serialize


def test_builtin_tags_and_escaping():
    node = create_element("p", {"className": "lead", "hidden": True, "title": None}, "a < b")

    assert render_html(node) == '<p class="lead" hidden>a &lt; b</p>'


def test_void_elements_have_no_closing_tag():
    node = create_element("img", {"src": "/x.png", "alt": '"quoted"'})

    assert render_html(node) == '<img src="/x.png" alt="&#34;quoted&#34;">'


def test_fragments_render_children_only():
    node = Element(Fragment, None, {"children": ["a", create_element("br", None), "b"]})

    assert render_html(node) == "a<br>b"


def test_components_are_called_with_props():
    def shout(children=None, **_):
        return create_element("strong", None, children)

    node = Element(shout, None, {"children": "hey", "debug_type": "Shout"})

    assert render_html(node) == "<strong>hey</strong>"


def test_default_components_render_a_compiled_document():
    names = component_names()
    code = compile_document('<Note title="Careful">\n\nMind the *gap*.\n\n</Note>\n', names)
    tree = deserialize(serialize(execute(code, names)), REGISTRY)

    html = render_html(tree)

    assert html.startswith('<aside class="callout callout-note">')
    assert '<h4 class="callout-title">Careful</h4>' in html
    assert "<p>Mind the <em>gap</em>.</p>" in html
