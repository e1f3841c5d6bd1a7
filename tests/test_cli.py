"""Tests for the command line interface and batch conversion."""
import pytest

pytest.importorskip("potrace")

from flatvec.batch import batch_convert, get_image_files
from flatvec.cli import create_parser, main

from conftest import glyph_image, write_png


class TestCli:
    """Test argument handling and exit codes."""

    def test_parser_defaults(self):
        args = create_parser().parse_args(["image.png"])
        assert args.steps is None
        assert args.stroke is None
        assert args.inspect is False

    def test_stroke_flags(self):
        parser = create_parser()
        assert parser.parse_args(["x.png", "--stroke"]).stroke is True
        assert parser.parse_args(["x.png", "--no-stroke"]).stroke is False

    def test_invalid_steps_rejected(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["x.png", "--steps", "5"])

    def test_missing_input(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.png")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_inspect(self, glyph_png, capsys):
        assert main([str(glyph_png), "--inspect"]) == 0
        assert capsys.readouterr().out.strip() == "1: #000000"
        assert not glyph_png.with_suffix(".svg").exists()

    def test_convert(self, glyph_png, capsys):
        assert main([str(glyph_png)]) == 0
        assert glyph_png.with_suffix(".svg").exists()
        assert "1 step(s)" in capsys.readouterr().out

    def test_undecodable_image(self, tmp_path, capsys):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not an image")
        assert main([str(bad)]) == 1
        assert "Error" in capsys.readouterr().err


class TestBatch:
    """Test folder conversion."""

    def test_get_image_files(self, tmp_path):
        write_png(glyph_image(), tmp_path / "a.png")
        (tmp_path / "notes.txt").write_text("skip me")
        assert [p.name for p in get_image_files(tmp_path)] == ["a.png"]

    def test_batch_convert(self, tmp_path):
        source = tmp_path / "in"
        source.mkdir()
        write_png(glyph_image(30), source / "a.png")
        write_png(glyph_image(40), source / "b.png")
        (source / "c.png").write_bytes(b"broken")

        results = batch_convert(str(source), str(tmp_path / "out"), max_workers=2)

        assert results['total'] == 3
        assert results['success'] == 2
        assert results['failed'] == 1
        assert (tmp_path / "out" / "a.svg").exists()
        assert (tmp_path / "out" / "b.svg").exists()
        failed = [r for r in results['results'] if not r['success']]
        assert failed[0]['input'].endswith("c.png")

    def test_empty_folder(self, tmp_path):
        with pytest.raises(ValueError):
            batch_convert(str(tmp_path))

    def test_cli_batch(self, tmp_path, capsys):
        write_png(glyph_image(), tmp_path / "a.png")
        assert main([str(tmp_path), "--workers", "1"]) == 0
        assert (tmp_path / "a.svg").exists()
        assert "Converted 1/1" in capsys.readouterr().out

    def test_cli_inspect_folder(self, tmp_path, capsys):
        write_png(glyph_image(), tmp_path / "a.png")
        write_png(glyph_image(30), tmp_path / "b.png")

        assert main([str(tmp_path), "--inspect"]) == 0

        out = capsys.readouterr().out
        assert out.splitlines() == ["a.png:", "  1: #000000", "b.png:", "  1: #000000"]
        assert not (tmp_path / "a.svg").exists()
        assert not (tmp_path / "b.svg").exists()

    def test_cli_inspect_empty_folder(self, tmp_path, capsys):
        assert main([str(tmp_path), "--inspect"]) == 1
        assert "No images" in capsys.readouterr().err
