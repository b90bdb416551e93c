"""
test_cli.py

Tests for the command-line entry point and the interactive browse loop.
"""

from unittest.mock import patch

import pytest

from cli.cli_entry import create_parser, main, options_from_args
from cli.cli_interactive import interactive_mode
from core.models_fs import BrowseOptions
from core.transforms import AddAppendage, RemoveSubstring, ReorderNumbers, ReplaceSubstring, TrimPrefixCount


def feed_input(monkeypatch, *answers):
    """Answer input() prompts in order"""
    replies = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(replies))


class TestParser:
    def test_transforms_keep_command_line_order(self):
        args = create_parser().parse_args([
            "rename", "photos",
            "--remove", ".realcugan", "--add", "_hd", "--reorder",
            "--replace", "a", "b", "--trim", "2",
        ])

        assert args.transforms == [
            RemoveSubstring(".realcugan"),
            AddAppendage("_hd"),
            ReorderNumbers(),
            ReplaceSubstring("a", "b"),
            TrimPrefixCount(2),
        ]

    def test_bad_trim_count(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["rename", "photos", "--trim", "two"])

    def test_options(self):
        args = create_parser().parse_args([
            "list", "photos", "--ext", "PNG", "--ext", ".gif", "--recursive", "--no-thumbnails", "-w", "2",
        ])
        options = options_from_args(args)

        assert options.extensions == {".png", ".gif"}
        assert options.recursive
        assert not options.thumbnails
        assert options.max_workers == 2

    def test_default_options(self):
        options = options_from_args(create_parser().parse_args(["list", "photos"]))
        assert options.extensions == BrowseOptions().extensions
        assert options.thumbnails

    def test_options_before_subcommand_are_kept(self):
        args = create_parser().parse_args(["-r", "--hidden", "-e", "png", "list", "photos"])
        options = options_from_args(args)

        assert options.recursive
        assert options.include_hidden
        assert options.extensions == {".png"}

    def test_options_after_subcommand(self):
        args = create_parser().parse_args(["list", "photos", "--hidden", "-w", "3"])

        assert args.hidden
        assert args.workers == 3
        assert not args.recursive

    def test_interactive_options(self):
        args = create_parser().parse_args(["--dir", "photos", "-r", "--no-thumbnails"])

        assert args.command is None
        assert args.dir == "photos"
        assert args.recursive
        assert args.no_thumbnails


class TestListCommand:
    def test_lists_ids_and_names(self, image_dir, capsys):
        assert main(["list", str(image_dir), "--no-thumbnails"]) == 0

        out = capsys.readouterr().out
        assert "Found 3 images" in out
        assert "0  img1.jpg" in out
        assert "2  img10.png" in out
        assert "notes.txt" not in out

    def test_shows_preview_sizes(self, image_dir, capsys):
        assert main(["list", str(image_dir)]) == 0

        assert "64x48" in capsys.readouterr().out

    def test_no_images_suggests_suffixes(self, tmp_path, capsys):
        (tmp_path / "scan.tiff").write_bytes(b"x")
        (tmp_path / "notes.txt").write_text("x")

        assert main(["list", str(tmp_path), "--ext", ".png", "--no-thumbnails"]) == 0

        out = capsys.readouterr().out
        assert "No matching images found" in out
        assert ".tiff, .txt" in out

    def test_missing_folder(self, tmp_path, capsys):
        assert main(["list", str(tmp_path / "missing"), "--no-thumbnails"]) == 1
        assert "Error" in capsys.readouterr().out

    def test_bad_worker_count(self, image_dir, capsys):
        assert main(["list", str(image_dir), "--workers", "0"]) == 1


class TestRenameCommand:
    def test_rename_with_yes(self, image_dir, capsys):
        code = main(["rename", str(image_dir), "--add", "_x", "--yes", "--no-thumbnails"])

        assert code == 0
        assert sorted(p.name for p in image_dir.glob("img*")) == ["img10_x.png", "img1_x.jpg", "img2_x.png"]
        assert "Success: 3" in capsys.readouterr().out

    def test_dry_run(self, image_dir, capsys):
        code = main(["rename", str(image_dir), "--remove", "img", "--dry-run", "--no-thumbnails"])

        assert code == 0
        out = capsys.readouterr().out
        assert "img2.png" in out and "-> 2.png" in out
        assert (image_dir / "img2.png").exists()

    def test_cancelled(self, image_dir, monkeypatch):
        feed_input(monkeypatch, "n")

        assert main(["rename", str(image_dir), "--add", "_x", "--no-thumbnails"]) == 0
        assert (image_dir / "img2.png").exists()

    def test_nothing_to_do(self, image_dir, capsys):
        assert main(["rename", str(image_dir), "--remove", "zzz", "--no-thumbnails"]) == 0
        assert "No files need renaming" in capsys.readouterr().out

    def test_no_transform(self, image_dir):
        assert main(["rename", str(image_dir), "--no-thumbnails"]) == 1

    def test_overwrite_prompt_declined(self, image_dir, monkeypatch, capsys):
        (image_dir / "taken.png").write_bytes(b"existing")
        feed_input(monkeypatch, "n")

        code = main(["rename", str(image_dir), "--replace", "img2", "taken", "--yes", "--no-thumbnails"])

        assert code == 0
        assert "Skipped: 1" in capsys.readouterr().out
        assert (image_dir / "img2.png").exists()
        assert (image_dir / "taken.png").read_bytes() == b"existing"

    def test_overwrite_flag(self, tmp_path, make_images, capsys):
        make_images("a_1.png", "1.png")

        code = main(["rename", str(tmp_path), "--remove", "a_", "--yes", "--overwrite", "--no-thumbnails"])

        assert code == 0
        assert "Success: 1" in capsys.readouterr().out
        assert (tmp_path / "1.png").exists()
        assert not (tmp_path / "a_1.png").exists()


class TestDeleteCommand:
    def test_delete(self, image_dir, capsys):
        with patch("core.session.delete_file", return_value=True) as delete:
            assert main(["delete", str(image_dir), "1", "--no-thumbnails"]) == 0

        assert delete.call_args.args[0].name == "img2.png"
        assert "Deleted img2.png" in capsys.readouterr().out

    def test_unknown_id(self, image_dir, capsys):
        assert main(["delete", str(image_dir), "9", "--no-thumbnails"]) == 1
        assert "Error" in capsys.readouterr().out

    def test_delete_failed(self, image_dir):
        with patch("core.session.delete_file", return_value=False):
            assert main(["delete", str(image_dir), "0", "--no-thumbnails"]) == 1


class TestInteractive:
    def test_browse_loop(self, image_dir, monkeypatch, capsys):
        feed_input(monkeypatch, "n", "n", "n", "p", "l", "x", "q")

        code = interactive_mode(BrowseOptions(thumbnails=False), image_dir)

        assert code == 0
        out = capsys.readouterr().out
        assert "Loaded 3 images" in out
        assert "Already at the last image" in out
        assert "[2/3] #1 img2.png" in out
        assert "Invalid choice" in out

    def test_goto_and_rename(self, image_dir, monkeypatch, capsys):
        feed_input(monkeypatch, "g", "2", "r", "cover.png", "q")

        assert interactive_mode(BrowseOptions(thumbnails=False), image_dir) == 0
        assert (image_dir / "cover.png").exists()
        assert "Renamed to cover.png" in capsys.readouterr().out

    def test_goto_unknown_id(self, image_dir, monkeypatch, capsys):
        feed_input(monkeypatch, "g", "42", "q")

        assert interactive_mode(BrowseOptions(thumbnails=False), image_dir) == 0
        assert "Error" in capsys.readouterr().out

    def test_delete(self, image_dir, monkeypatch, capsys):
        feed_input(monkeypatch, "d", "y", "q")

        with patch("core.session.delete_file", return_value=True):
            assert interactive_mode(BrowseOptions(thumbnails=False), image_dir) == 0
        assert "#1 img2.png" in capsys.readouterr().out

    def test_batch_rename(self, image_dir, monkeypatch):
        feed_input(monkeypatch, "b", "add _x", "bogus", "", "y", "q")

        assert interactive_mode(BrowseOptions(thumbnails=False), image_dir) == 0
        assert (image_dir / "img10_x.png").exists()

    def test_folder_prompt(self, image_dir, monkeypatch, capsys):
        feed_input(monkeypatch, str(image_dir), "q")

        assert interactive_mode(BrowseOptions(thumbnails=False)) == 0
        assert "Loaded 3 images" in capsys.readouterr().out

    def test_quit_at_folder_prompt(self, monkeypatch):
        feed_input(monkeypatch, "q")
        assert interactive_mode(BrowseOptions(thumbnails=False)) == 0
