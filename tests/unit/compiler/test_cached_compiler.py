import logging

import pytest

from docweave.cache import CompileCache, fingerprint
from docweave.compiler import CachedCompiler, compile_document, read_lockfile
from docweave.compiler.plugins import DEFAULT_PLUGINS, heading_ids, plugin_signature

NAMES = ["Intro", "Note"]


class CountingCompile:
    def __init__(self):
        self.calls = 0

    def __call__(self, body, names, **kwargs):
        self.calls += 1
        return compile_document(body, names, **kwargs)


@pytest.fixture
def cache(tmp_path):
    with CompileCache(tmp_path / "cache") as cache:
        yield cache


def test_second_compile_is_served_from_cache(cache, caplog):
    counting = CountingCompile()
    compiler = CachedCompiler(cache, compile_fn=counting)

    first = compiler.compile("# Hi\n", NAMES, path="a")
    with caplog.at_level(logging.INFO):
        second = compiler.compile("# Hi\n", NAMES, path="a")

    assert counting.calls == 1
    assert first == second == compile_document("# Hi\n", NAMES)
    assert "Reading compiled document for /a from cache" in caplog.text


def test_cache_survives_a_new_compiler(tmp_path):
    counting = CountingCompile()
    with CompileCache(tmp_path / "cache") as cache:
        CachedCompiler(cache, compile_fn=counting).compile("x", NAMES)
    with CompileCache(tmp_path / "cache") as cache:
        CachedCompiler(cache, compile_fn=counting).compile("x", NAMES)

    assert counting.calls == 1


@pytest.mark.parametrize(
    ("body", "names", "lockfile"),
    [
        ("y", NAMES, ""),
        ("x", ["Note", "Intro"], ""),
        ("x", ["Intro"], ""),
        ("x", NAMES, "changed"),
    ],
)
def test_any_input_change_recompiles(cache, body, names, lockfile):
    counting = CountingCompile()
    CachedCompiler(cache, compile_fn=counting).compile("x", NAMES)

    CachedCompiler(cache, lockfile=lockfile, compile_fn=counting).compile(body, names)

    assert counting.calls == 2


def test_key_uses_format_version_for_default_plugins(cache):
    compiler = CachedCompiler(cache, lockfile="lock")

    assert compiler.cache_key("x", NAMES) == fingerprint("x", NAMES, "lock")


def test_custom_plugins_get_their_own_keys(cache):
    def no_op(md):
        pass

    default = CachedCompiler(cache)
    custom = CachedCompiler(cache, plugins=(*DEFAULT_PLUGINS, no_op))

    assert custom.version == f"1+{plugin_signature((heading_ids, no_op))}"
    assert default.cache_key("x", NAMES) != custom.cache_key("x", NAMES)


def test_works_without_an_open_cache(tmp_path):
    counting = CountingCompile()
    compiler = CachedCompiler(CompileCache(tmp_path / "never-opened"), compile_fn=counting)

    compiler.compile("x", NAMES)
    compiler.compile("x", NAMES)

    assert counting.calls == 2


def test_missing_lockfile_reads_as_empty(tmp_path):
    assert read_lockfile(tmp_path / "uv.lock") == ""
    (tmp_path / "uv.lock").write_text("version = 1\n")
    assert read_lockfile(tmp_path / "uv.lock") == "version = 1\n"
