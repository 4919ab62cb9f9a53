import unittest

from catalog_fixtures import make

from catalogview.catalog.entity import ValidationError
from catalogview.catalog.schema import validate_document, validate_entity


def component(**spec):
    return {
        "apiVersion": "backstage.io/v1alpha1",
        "kind": "Component",
        "metadata": {"name": "svc"},
        "spec": spec,
    }


class TestSchema(unittest.TestCase):
    def test_valid_component(self):
        self.assertEqual(validate_document(component(type="service", lifecycle="production", owner="team")), [])

    def test_missing_required_fields(self):
        errors = validate_document(component(type="service"))
        self.assertEqual([e.path for e in errors], ["/spec", "/spec"])
        self.assertEqual(
            sorted(e.message for e in errors),
            ["'lifecycle' is a required property", "'owner' is a required property"],
        )

    def test_envelope_errors(self):
        errors = validate_document({"kind": "Group"})
        self.assertIn(ValidationError("/", "'apiVersion' is a required property"), errors)
        self.assertIn(ValidationError("/", "'metadata' is a required property"), errors)

    def test_nested_paths(self):
        doc = component(type="service", lifecycle="production", owner="team", dependsOn=["ok", ""])
        doc["metadata"]["name"] = "bad name!"
        paths = [e.path for e in validate_document(doc)]
        self.assertEqual(paths, ["/metadata/name", "/spec/dependsOn/1"])

    def test_unknown_kind_only_checks_envelope(self):
        doc = {"apiVersion": "x", "kind": "Template", "metadata": {"name": "t"}, "spec": {"anything": 1}}
        self.assertEqual(validate_document(doc), [])

    def test_validate_entity(self):
        ok = make("System", "auth", spec={"owner": "team"}).entity
        self.assertEqual(validate_entity(ok), [])
        bad = make("Domain", "d", spec={}).entity
        self.assertEqual(validate_entity(bad), [ValidationError("/spec", "'owner' is a required property")])


if __name__ == "__main__":
    unittest.main()
