"""Default presentation components and the registry that resolves them.

Components receive the element's props as keyword arguments (``children``
included) and return a tree, exactly like any other node source. Sites can
pass their own registry to :func:`docweave.site.render_page`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from docweave.runtime.tree import COMPONENT_NAME_ATTR, create_element

C = TypeVar("C", bound=Callable[..., Any])

REGISTRY: dict[str, Callable[..., Any]] = {}


def component(name: str, registry: dict[str, Callable[..., Any]] | None = None) -> Callable[[C], C]:
    """Register a component under ``name`` and remember the name on the callable."""

    def decorator(fn: C) -> C:
        setattr(fn, COMPONENT_NAME_ATTR, name)
        (REGISTRY if registry is None else registry)[name] = fn
        return fn

    return decorator


def _callout(kind: str, title: str, children: Any) -> Any:
    return create_element(
        "aside",
        {"class": f"callout callout-{kind}"},
        create_element("h4", {"class": "callout-title"}, title),
        create_element("div", {"class": "callout-body"}, children),
    )


@component("Intro")
def intro(children: Any = None, **_: Any) -> Any:
    return create_element("section", {"class": "intro"}, children)


@component("Note")
def note(children: Any = None, title: str = "Note", **_: Any) -> Any:
    return _callout("note", title, children)


@component("Pitfall")
def pitfall(children: Any = None, title: str = "Pitfall", **_: Any) -> Any:
    return _callout("pitfall", title, children)


@component("YouWillLearn")
def you_will_learn(children: Any = None, title: str = "You will learn", **_: Any) -> Any:
    return _callout("learn", title, children)


@component("Recipes")
def recipes(children: Any = None, title: str = "Examples", **_: Any) -> Any:
    return create_element("details", {"class": "recipes", "open": True}, create_element("summary", None, title), children)


@component("Diagram")
def diagram(children: Any = None, name: str = "", alt: str = "", height: int | None = None, **_: Any) -> Any:
    image = create_element("img", {"src": f"/images/diagrams/{name}.svg", "alt": alt, "height": height})
    caption = create_element("figcaption", None, children) if children else None
    return create_element("figure", {"class": "diagram"}, image, caption)


@component("Badge")
def badge(children: Any = None, **_: Any) -> Any:
    return create_element("span", {"class": "badge"}, children)


@component("CodeStep")
def code_step(children: Any = None, step: int = 1, **_: Any) -> Any:
    return create_element("mark", {"class": f"code-step code-step-{step}"}, children)


def component_names(registry: dict[str, Callable[..., Any]] | None = None) -> list[str]:
    """Declared component names, in registration order."""
    return list(REGISTRY if registry is None else registry)
