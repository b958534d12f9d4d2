"""Content store access: reading documents and discovering build targets."""

from docweave.content.enumerator import enumerate_paths, segments_for
from docweave.content.reader import Document, read_document

__all__ = ["Document", "enumerate_paths", "read_document", "segments_for"]
