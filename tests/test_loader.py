import tempfile
import unittest
from pathlib import Path

from catalog_fixtures import SAMPLE_CATALOG

from catalogview.catalog.entity import EntityKind
from catalogview.ingest.loader import (
    CatalogLoadError,
    EntityParseError,
    entity_from_dict,
    load_all_entities,
    parse_catalog_file,
    parse_catalog_text,
)


class TestEntityFromDict(unittest.TestCase):
    def test_full_document(self):
        e = entity_from_dict(
            {
                "apiVersion": "backstage.io/v1alpha1",
                "kind": "component",
                "metadata": {
                    "name": "svc",
                    "namespace": "ops",
                    "labels": {"tier": 1},
                    "tags": ["a", None, 3],
                    "links": [{"url": "https://example.com", "title": "Home"}, "junk"],
                },
                "spec": {"owner": "team"},
            }
        )
        self.assertIs(e.kind, EntityKind.COMPONENT)
        self.assertEqual(e.ref_key(), "component:ops/svc")
        self.assertEqual(e.metadata.labels, {"tier": "1"})
        self.assertEqual(e.metadata.tags, ["a", "3"])
        self.assertEqual(len(e.metadata.links), 1)
        self.assertEqual(e.metadata.links[0].title, "Home")
        self.assertEqual(e.owner(), "team")

    def test_unknown_kind_is_kept(self):
        e = entity_from_dict({"kind": "Template", "metadata": {"name": "t"}})
        self.assertIs(e.kind, EntityKind.UNKNOWN)
        self.assertIsNone(e.spec)

    def test_rejects_unusable_documents(self):
        for doc in (
            "just a string",
            {"metadata": {"name": "x"}},
            {"kind": "Component"},
            {"kind": "Component", "metadata": {"title": "no name"}},
            {"kind": "", "metadata": {"name": "x"}},
        ):
            with self.assertRaises(EntityParseError):
                entity_from_dict(doc)


class TestParseCatalogText(unittest.TestCase):
    def test_multi_document(self):
        entities = parse_catalog_text(SAMPLE_CATALOG, "repo/catalog-info.yaml")
        self.assertEqual(
            [e.ref_key() for e in entities],
            [
                "domain:default/platform",
                "system:default/auth",
                "component:default/auth-service",
                "api:default/token-api",
                "group:default/platform-team",
            ],
        )
        self.assertTrue(all(e.source_file == Path("repo/catalog-info.yaml") for e in entities))
        self.assertEqual([e for e in entities if e.validation_errors], [])

    def test_bad_documents_are_skipped(self):
        text = "---\n---\nkind: Component\n---\n- a list\n---\nkind: Group\nmetadata:\n  name: team\n"
        with self.assertLogs("catalogview.ingest.loader", level="WARNING"):
            entities = parse_catalog_text(text, "x.yaml", validate=False)
        self.assertEqual([e.ref_key() for e in entities], ["group:default/team"])

    def test_yaml_error_keeps_earlier_documents(self):
        text = "kind: Group\nmetadata:\n  name: team\n---\nkind: [unclosed\n"
        with self.assertLogs("catalogview.ingest.loader", level="WARNING") as logs:
            entities = parse_catalog_text(text, "x.yaml", validate=False)
        self.assertEqual([e.ref_key() for e in entities], ["group:default/team"])
        self.assertIn("YAML error", logs.output[0])

    def test_validation_errors_are_attached(self):
        text = "apiVersion: v1\nkind: Component\nmetadata:\n  name: svc\nspec:\n  type: service\n"
        (ews,) = parse_catalog_text(text, "x.yaml")
        paths = {err.path for err in ews.validation_errors}
        self.assertEqual(paths, {"/spec"})
        self.assertTrue(any("lifecycle" in err.message for err in ews.validation_errors))

        (unchecked,) = parse_catalog_text(text, "x.yaml", validate=False)
        self.assertEqual(unchecked.validation_errors, ())


class TestLoadAllEntities(unittest.TestCase):
    def test_walks_directory_and_skips_excluded(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "svc").mkdir()
            (root / "svc" / "catalog-info.yaml").write_text(SAMPLE_CATALOG, encoding="utf-8")
            (root / "lib").mkdir()
            (root / "lib" / "catalog-info.yml").write_text(
                "kind: Group\nmetadata:\n  name: lib-team\n", encoding="utf-8"
            )
            (root / "node_modules" / "pkg").mkdir(parents=True)
            (root / "node_modules" / "pkg" / "catalog-info.yaml").write_text(
                "kind: Group\nmetadata:\n  name: vendored\n", encoding="utf-8"
            )
            (root / "other.yaml").write_text("kind: Group\nmetadata:\n  name: ignored\n", encoding="utf-8")

            entities = load_all_entities(root, validate=False)

        names = [e.entity.name for e in entities]
        self.assertEqual(names[0], "lib-team")
        self.assertEqual(len(names), 6)
        self.assertNotIn("vendored", names)
        self.assertNotIn("ignored", names)

    def test_single_file_root(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "anything.yaml"
            path.write_text("kind: User\nmetadata:\n  name: alice\n", encoding="utf-8")
            entities = load_all_entities(path, validate=False)
        self.assertEqual([e.ref_key() for e in entities], ["user:default/alice"])

    def test_empty_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(load_all_entities(tmp), [])

    def test_missing_root_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(CatalogLoadError):
                load_all_entities(Path(tmp) / "nope")

    def test_unreadable_file_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(CatalogLoadError):
                parse_catalog_file(Path(tmp) / "missing.yaml")


if __name__ == "__main__":
    unittest.main()
