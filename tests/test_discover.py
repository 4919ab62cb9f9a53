import tempfile
import unittest
from pathlib import Path

from catalogview.ingest.discover import discover_catalog_files, iter_files, should_exclude_dir
from catalogview.ingest.loader import load_all_entities


class TestDiscover(unittest.TestCase):
    def test_should_exclude_dir(self):
        for name in (".git", ".venv", "node_modules", "target", "bazel-out", "__pycache__", "dist"):
            self.assertTrue(should_exclude_dir(name), name)
        for name in ("src", "services", "docs", "bazel"):
            self.assertFalse(should_exclude_dir(name), name)

    def test_discover_sorted_and_pruned(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for rel in (
                "b/catalog-info.yaml",
                "a/catalog-info.yml",
                "a/nested/catalog-info.yaml",
                ".hidden/catalog-info.yaml",
                "build/catalog-info.yaml",
                "a/catalog-info.json",
            ):
                p = root / rel
                p.parent.mkdir(parents=True, exist_ok=True)
                p.write_text("", encoding="utf-8")

            found = [p.relative_to(root).as_posix() for p in discover_catalog_files(root)]
            all_files = [p.relative_to(root).as_posix() for p in iter_files(root)]

        self.assertEqual(found, ["a/catalog-info.yml", "a/nested/catalog-info.yaml", "b/catalog-info.yaml"])
        self.assertNotIn(".hidden/catalog-info.yaml", all_files)
        self.assertIn("a/catalog-info.json", all_files)

    def test_symlink_to_parent_is_walked_once(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a").mkdir()
            (root / "a" / "catalog-info.yaml").write_text(
                "kind: Group\nmetadata:\n  name: team\n", encoding="utf-8"
            )
            try:
                (root / "a" / "loop").symlink_to("..", target_is_directory=True)
            except (OSError, NotImplementedError):
                self.skipTest("symlinks not supported")

            found = discover_catalog_files(root)
            entities = load_all_entities(root, validate=False)

        self.assertEqual(found, [root / "a" / "catalog-info.yaml"])
        self.assertEqual([e.ref_key() for e in entities], ["group:default/team"])

    def test_symlinked_directory_is_followed(self):
        with tempfile.TemporaryDirectory() as tmp, tempfile.TemporaryDirectory() as outside:
            root = Path(tmp)
            (Path(outside) / "catalog-info.yaml").write_text("", encoding="utf-8")
            try:
                (root / "linked").symlink_to(outside, target_is_directory=True)
            except (OSError, NotImplementedError):
                self.skipTest("symlinks not supported")

            followed = discover_catalog_files(root)
            not_followed = discover_catalog_files(root, follow_links=False)

        self.assertEqual(followed, [root / "linked" / "catalog-info.yaml"])
        self.assertEqual(not_followed, [])


if __name__ == "__main__":
    unittest.main()
