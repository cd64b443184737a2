"""CLI behavior tests.

Verifies how ``hpiview.cli.main`` lists, extracts, and prints archived files,
and how invalid archives and missing paths are reported.
"""

from __future__ import annotations

import io
import re
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from hpiview import cli
from hpiview.archive import Archive
from hpiview.archive.header import BANK_MAGIC

from hpi_fixtures import DirSpec, FileSpec, build_archive, directory_chain

ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


def _write_sample(root: Path, **kwargs) -> Path:
    target = root / "sample.hpi"
    target.write_bytes(
        build_archive(
            [
                FileSpec("readme.txt", b"hello archive\n"),
                DirSpec("scripts", [FileSpec("build.py", b"print('hi')\n")]),
            ],
            **kwargs,
        )
    )
    return target


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch("hpiview.cli.configure_logging")
        patcher.start()
        self.addCleanup(patcher.stop)
        config_patcher = mock.patch("hpiview.config.CONFIG_PATH", Path(tempfile.gettempdir()) / "hpiview-missing" / "c.json")
        config_patcher.start()
        self.addCleanup(config_patcher.stop)

    def _run(self, argv: list[str]) -> str:
        stdout = io.StringIO()
        with mock.patch("sys.stdout", stdout):
            cli.main(argv)
        return stdout.getvalue()

    def test_default_action_prints_tree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = _write_sample(Path(tmp))

            plain = ANSI_RE.sub("", self._run([str(target), "--no-color"]))

        self.assertIn("scripts/", plain)
        self.assertIn("└─ build.py", plain)
        self.assertIn("readme.txt", plain)
        self.assertLess(plain.index("scripts/"), plain.index("readme.txt"))

    def test_list_prints_files_with_sizes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = _write_sample(Path(tmp))

            output = self._run([str(target), "--list"])

        lines = [line.split() for line in output.splitlines()]
        self.assertEqual(lines, [["14", "readme.txt"], ["12", "scripts/build.py"]])

    def test_catalog_prints_post_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = _write_sample(Path(tmp))

            output = self._run([str(target), "--catalog"])

        paths = [line.split()[-1] for line in output.splitlines()]
        self.assertEqual(paths, ["readme.txt", "scripts/build.py", "scripts", "/"])

    def test_extract_single_entry_case_insensitively(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            target = _write_sample(root)
            dest = root / "out" / "b.py"

            self._run([str(target), "--extract", "SCRIPTS\\Build.py", str(dest)])

            self.assertEqual(dest.read_bytes(), b"print('hi')\n")

    def test_extract_all_preserves_tree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            target = _write_sample(root)
            out_dir = root / "out"

            self._run([str(target), "--extract-all", str(out_dir)])

            self.assertEqual((out_dir / "readme.txt").read_bytes(), b"hello archive\n")
            self.assertEqual((out_dir / "scripts" / "build.py").read_bytes(), b"print('hi')\n")

    def test_cat_without_color_prints_plain_text(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = _write_sample(Path(tmp))

            output = self._run([str(target), "--cat", "readme.txt", "--no-color"])

        self.assertEqual(output, "hello archive\n")

    def test_cat_with_color_highlights_source(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = _write_sample(Path(tmp))

            output = self._run([str(target), "--cat", "scripts/build.py"])

        self.assertIn("\x1b[", output)
        self.assertEqual(ANSI_RE.sub("", output), "print('hi')\n")

    def test_missing_entry_exits_with_message(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = _write_sample(Path(tmp))

            with self.assertRaises(SystemExit) as ctx:
                self._run([str(target), "--cat", "nope.txt"])

        self.assertIn("not found", str(ctx.exception.code))

    def test_invalid_header_exits_with_diagnostic(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = _write_sample(Path(tmp), version=BANK_MAGIC)

            with self.assertRaises(SystemExit) as ctx:
                self._run([str(target)])

        self.assertIn("saved game", str(ctx.exception.code))

    def test_missing_archive_path_exits(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self._run(["/nonexistent/archive.hpi"])

        self.assertIn("Path not found", str(ctx.exception.code))

    def test_cat_prefers_exact_case_among_colliding_names(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "case.hpi"
            target.write_bytes(build_archive([FileSpec("Readme.txt", b"upper\n"), FileSpec("readme.txt", b"lower\n")]))

            exact = self._run([str(target), "--cat", "readme.txt", "--no-color"])
            folded = self._run([str(target), "--cat", "README.TXT", "--no-color"])

        self.assertEqual(exact, "lower\n")
        self.assertEqual(folded, "upper\n")

    def test_deeply_nested_archive_prints_full_tree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "deep.hpi"
            target.write_bytes(directory_chain(1500))

            lines = self._run([str(target), "--no-color"]).splitlines()

        self.assertEqual(len(lines), 2 + 1500)
        self.assertEqual(lines[-1], "   " * 1499 + "└─ d/")

    def test_shared_directory_blowup_exits_with_diagnostic(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "shared.hpi"
            target.write_bytes(directory_chain(20, fanout=2))

            with self.assertRaises(SystemExit) as ctx:
                self._run([str(target)])

        self.assertIn("record limit", str(ctx.exception.code))

    def test_strict_size_flag_is_passed_to_archive(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = _write_sample(Path(tmp))

            with mock.patch("hpiview.cli.open_archive", wraps=cli.open_archive) as opener:
                self._run([str(target), "--list", "--strict-size"])

        self.assertTrue(opener.call_args.kwargs["strict_size"])
        self.assertFalse(opener.call_args.kwargs["packed_chunks"])


class SafeDestinationTests(unittest.TestCase):
    def test_rejects_traversal_segments(self) -> None:
        archive = Archive(build_archive([DirSpec("..", [FileSpec("evil.txt", b"x")])]))
        entry = archive.find("../evil.txt")

        with self.assertRaises(SystemExit):
            cli.safe_destination(Path("/tmp/out"), entry)

    def test_maps_segments_under_root(self) -> None:
        archive = Archive(build_archive([DirSpec("a", [FileSpec("b.txt", b"x")])]))

        destination = cli.safe_destination(Path("/tmp/out"), archive.find("a/b.txt"))

        self.assertEqual(destination, Path("/tmp/out/a/b.txt"))


if __name__ == "__main__":
    unittest.main()
