"""Tree rendering tests for archive catalogs."""

from __future__ import annotations

import re
import unittest

from hpiview.archive import Archive
from hpiview.render import format_catalog_row, format_size_label, render_archive_tree

from hpi_fixtures import DirSpec, FileSpec, build_archive, compressible, directory_chain

ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


def _archive() -> Archive:
    return Archive(
        build_archive(
            [
                FileSpec("Zeta.txt", b"z"),
                FileSpec("alpha.txt", compressible(20 * 1024)),
                DirSpec("units", [FileSpec("arm.fbi", b"a"), FileSpec("core.fbi", b"c")]),
            ]
        ),
        name="totala1.hpi",
    )


class ArchiveTreeRenderTests(unittest.TestCase):
    def test_directories_first_then_case_insensitive_names(self) -> None:
        text, truncated = render_archive_tree(_archive(), no_color=True)

        self.assertFalse(truncated)
        self.assertEqual(
            text.splitlines(),
            [
                "totala1.hpi/",
                "",
                "├─ units/",
                "│  ├─ arm.fbi",
                "│  └─ core.fbi",
                "├─ alpha.txt [20 KB]",
                "└─ Zeta.txt",
            ],
        )

    def test_colored_output_strips_to_plain_layout(self) -> None:
        colored, _ = render_archive_tree(_archive())
        plain, _ = render_archive_tree(_archive(), no_color=True)

        self.assertIn("\x1b[", colored)
        self.assertEqual(ANSI_RE.sub("", colored), plain)

    def test_size_labels_can_be_disabled(self) -> None:
        text, _ = render_archive_tree(_archive(), no_color=True, show_size_labels=False)

        self.assertIn("├─ alpha.txt\n", text)

    def test_truncates_after_max_entries(self) -> None:
        text, truncated = render_archive_tree(_archive(), no_color=True, max_entries=2)

        self.assertTrue(truncated)
        self.assertTrue(text.endswith("... truncated after 2 entries ..."))

    def test_deep_nesting_renders_every_level(self) -> None:
        archive = Archive(directory_chain(1200), name="deep.hpi")

        text, truncated = render_archive_tree(archive, no_color=True)

        lines = text.splitlines()
        self.assertFalse(truncated)
        self.assertEqual(len(lines), 2 + 1200)
        self.assertEqual(lines[2], "└─ d/")
        self.assertEqual(lines[-1], "   " * 1199 + "└─ d/")

    def test_invalid_archive_renders_only_label(self) -> None:
        archive = Archive(build_archive([], signature=0), name="bad.hpi")

        text, truncated = render_archive_tree(archive, no_color=True)

        self.assertEqual(text, "bad.hpi/\n")
        self.assertFalse(truncated)

    def test_size_label_threshold(self) -> None:
        self.assertEqual(format_size_label(10 * 1024 - 1), "")
        self.assertEqual(format_size_label(10 * 1024), " [10 KB]")

    def test_catalog_row_names_root_as_slash(self) -> None:
        archive = _archive()

        self.assertTrue(format_catalog_row(archive.root).startswith("dir "))
        self.assertTrue(format_catalog_row(archive.root).endswith(" /"))
        self.assertTrue(format_catalog_row(archive.find("units/arm.fbi")).endswith(" units/arm.fbi"))


if __name__ == "__main__":
    unittest.main()
