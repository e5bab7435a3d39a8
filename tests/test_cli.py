import io
from pathlib import Path

import richfigure.cli as cli
import richfigure.core as core

SAMPLE_HTML = """<html><body>
<h1>Replicants</h1>
<p><img src="assets/voight-kampff.jpg" alt="Brion James"></p>
<p>: A test, designed to provoke an <em>emotional</em> response</p>
<p>Closing text.</p>
</body></html>
"""


def _write_sample(tmp_path: Path, html: str = SAMPLE_HTML) -> Path:
    source = tmp_path / "page.html"
    source.write_text(html, encoding="utf-8")
    return source


def test_version_flags_print_version(capsys):
    assert cli.main(["--version"]) == 0
    out = capsys.readouterr().out.strip()
    assert out == cli.__version__

    assert cli.main(["--ver"]) == 0
    out = capsys.readouterr().out.strip()
    assert out == cli.__version__


def test_help_and_no_args_show_usage(capsys):
    assert cli.main([]) == 0
    out = capsys.readouterr().out
    assert "richfigure" in out
    assert cli.__version__ in out

    assert cli.main(["--help"]) == 0
    out = capsys.readouterr().out
    assert "--figure-class" in out


def test_unknown_option_prints_usage(capsys):
    assert cli.main(["--bogus"]) == 2
    assert "Usage:" in capsys.readouterr().out


def test_missing_input_is_rejected(capsys):
    assert cli.main(["--wrap"]) == 6
    assert "--input is required" in capsys.readouterr().err


def test_rewrites_file_to_stdout(tmp_path, capsys):
    source = _write_sample(tmp_path)

    assert cli.main(["--input", str(source), "--loading", "lazy"]) == 0
    out = capsys.readouterr().out
    assert "<figure>" in out
    assert 'loading="lazy"' in out
    assert "<figcaption>A test, designed to provoke an <em>emotional</em> response</figcaption>" in out
    assert "<p>Closing text.</p>" in out
    assert ": A test" not in out


def test_rewrites_file_to_output_path(tmp_path):
    source = _write_sample(tmp_path)
    target = tmp_path / "out.html"

    rc = cli.main(
        [
            "--input",
            str(source),
            "--output",
            str(target),
            "--figure-class",
            "wide framed",
            "--wrap",
            "--wrap-class",
            "outer",
        ]
    )
    assert rc == 0
    text = target.read_text(encoding="utf-8")
    assert '<div class="outer"><figure class="wide framed">' in text
    assert "</figure></div>" in text


def test_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr(cli.sys, "stdin", io.StringIO('<p><img src="a.jpg"></p><p>: cap</p>'))

    assert cli.main(["--input", "-"]) == 0
    out = capsys.readouterr().out
    assert out == '<figure><img src="a.jpg"/><figcaption>cap</figcaption></figure>'


def test_invalid_loading_is_rejected(tmp_path, capsys):
    source = _write_sample(tmp_path)

    assert cli.main(["--input", str(source), "--loading", "soon"]) == 6
    assert "Invalid value for loading" in capsys.readouterr().err


def test_wrap_class_requires_wrap(tmp_path, capsys):
    source = _write_sample(tmp_path)

    assert cli.main(["--input", str(source), "--wrap-class", "outer"]) == 6
    assert "--wrap-class requires --wrap" in capsys.readouterr().err


def test_missing_input_file(tmp_path, capsys):
    assert cli.main(["--input", str(tmp_path / "missing.html")]) == 6
    assert "Unable to read input" in capsys.readouterr().err


def test_output_directory_must_exist(tmp_path, capsys):
    source = _write_sample(tmp_path)
    target = tmp_path / "nested" / "out.html"

    assert cli.main(["--input", str(source), "--output", str(target)]) == 7
    assert "Output directory not found" in capsys.readouterr().err
    assert not target.exists()


def test_output_path_cannot_be_directory(tmp_path, capsys):
    source = _write_sample(tmp_path)

    assert cli.main(["--input", str(source), "--output", str(tmp_path)]) == 7
    assert "is a directory" in capsys.readouterr().err


def test_output_keeps_source_attribute_order(tmp_path, capsys):
    source = _write_sample(tmp_path)

    assert cli.main(["--input", str(source)]) == 0
    out = capsys.readouterr().out
    assert '<img src="assets/voight-kampff.jpg" alt="Brion James"/>' in out
    assert out == core.process_html(SAMPLE_HTML)
