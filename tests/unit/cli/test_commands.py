from unittest.mock import patch

import pytest
import typer
from typer.testing import CliRunner

from docweave.cli import app, handle_cli_errors
from docweave.exceptions import CompileError, ConfigLoadError, ContentNotFoundError, PayloadError

runner = CliRunner()

SITE = {
    "index.md": "# Home\n",
    "learn/thinking.md": "---\ntitle: Thinking\n---\n\n## Steps\n\n<Pitfall>\n\nCareful.\n\n</Pitfall>\n",
}


@pytest.fixture
def site_root(write_files, tmp_path, monkeypatch):
    for name in ("DOCWEAVE_BUILD__WORKERS", "DOCWEAVE_PATHS__OUTPUT_DIR", "DOCWEAVE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    write_files(SITE)
    return str(tmp_path)


def test_build_command(site_root, tmp_path):
    result = runner.invoke(app, ["build", "-C", site_root, "-j", "2"])

    assert result.exit_code == 0, result.output
    assert "Built 2 page(s)" in result.output
    assert (tmp_path / "build" / "learn" / "thinking" / "page.json").is_file()


def test_build_reports_failures(site_root, write_files):
    write_files({"broken.md": "import Nope\n"})

    result = runner.invoke(app, ["build", "-C", site_root])

    assert result.exit_code == 1
    assert "Failed documents" in result.output
    assert "/broken" in result.output


def test_paths_command(site_root):
    result = runner.invoke(app, ["paths", "-C", site_root])

    assert result.exit_code == 0
    lines = result.output.split()
    assert "/" in lines
    assert lines.index("/") < lines.index("/learn/thinking")


def test_show_command(site_root):
    result = runner.invoke(app, ["show", "learn/thinking", "-C", site_root])

    assert result.exit_code == 0, result.output
    assert '"title": "Thinking"' in result.output
    assert "Pitfall" in result.output


def test_show_missing_document(site_root):
    result = runner.invoke(app, ["show", "/nope/", "-C", site_root])

    assert result.exit_code == 1
    assert "Not found" in result.output


def test_render_command(site_root, tmp_path):
    runner.invoke(app, ["build", "-C", site_root])
    target = tmp_path / "thinking.html"

    result = runner.invoke(
        app, ["render", str(tmp_path / "build" / "learn" / "thinking" / "page.json"), "-o", str(target)]
    )

    assert result.exit_code == 0, result.output
    html = target.read_text(encoding="utf-8")
    assert "<title>Thinking</title>" in html
    assert '<aside class="callout callout-pitfall">' in html


def test_render_malformed_payload(tmp_path):
    broken = tmp_path / "page.json"
    broken.write_text("not json", encoding="utf-8")

    result = runner.invoke(app, ["render", str(broken)])

    assert result.exit_code == 1
    assert "Invalid payload" in result.output
    assert "Traceback" not in result.output


def test_cache_clear_command(site_root):
    runner.invoke(app, ["build", "-C", site_root])

    result = runner.invoke(app, ["cache", "clear", "-C", site_root])

    assert result.exit_code == 0
    assert "Removed 2 cached document(s)" in result.output


def test_bad_config_file(site_root, tmp_path):
    (tmp_path / ".docweave.toml").write_text("not toml [")

    result = runner.invoke(app, ["paths", "-C", site_root])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


@pytest.mark.parametrize(
    ("error", "label"),
    [
        (ConfigLoadError(".docweave.toml", "bad"), "Configuration error"),
        (ContentNotFoundError("a"), "Not found"),
        (CompileError("a", "unclosed <Note>"), "Build error"),
        (PayloadError("page.json", "not JSON"), "Invalid payload"),
    ],
)
def test_handle_cli_errors_prints_friendly_message(error, label):
    """Verify known errors exit with code 1 and a labelled message."""
    with patch("docweave.cli.console.print") as mock_print:
        with pytest.raises(typer.Exit) as excinfo:
            with handle_cli_errors(debug=False):
                raise error

    assert excinfo.value.exit_code == 1
    args = [str(arg) for call in mock_print.call_args_list for arg in call[0]]
    assert any(label in arg for arg in args)


def test_handle_cli_errors_debug_mode_re_raises():
    with pytest.raises(CompileError):
        with handle_cli_errors(debug=True):
            raise CompileError("a", "boom")
