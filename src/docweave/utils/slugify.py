"""Heading slug generation shared by the compiler and table of contents."""

from unicodedata import normalize

from pymdownx.slugs import slugify as _md_slugify

# Pre-configure a slugify instance for reuse.
slugify_lower = _md_slugify(case="lower", separator="-")


def slugify(text: str, max_len: int = 80) -> str:
    """Convert heading text to an anchor id using Python-Markdown semantics.

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
        >>> slugify("Café à Paris")
        'cafe-a-paris'
        >>> slugify("!!!")
        'section'

    """
    if text is None:
        return ""

    normalized = normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = slugify_lower(normalized, sep="-")

    slug = slug or "section"
    if len(slug) > max_len:
        slug = slug[:max_len].rstrip("-")

    return slug
