import unittest

from catalogview.catalog.refs import DEFAULT_NAMESPACE, EntityRef, canonical_key, parse_ref


class TestParseRef(unittest.TestCase):
    def test_full_reference(self):
        ref = parse_ref("API:payments/charge-api", "component")
        self.assertEqual(ref.kind, "api")
        self.assertEqual(ref.namespace, "payments")
        self.assertEqual(ref.name, "charge-api")
        self.assertFalse(ref.kind_inferred)
        self.assertFalse(ref.namespace_inferred)
        self.assertEqual(ref.canonical(), "api:payments/charge-api")

    def test_bare_name_uses_defaults(self):
        ref = parse_ref("svc", "Group")
        self.assertEqual(ref.canonical(), "group:default/svc")
        self.assertTrue(ref.kind_inferred)
        self.assertTrue(ref.namespace_inferred)

    def test_namespace_without_kind(self):
        ref = parse_ref("prod/db", "resource")
        self.assertEqual(ref.canonical(), "resource:prod/db")
        self.assertTrue(ref.kind_inferred)
        self.assertFalse(ref.namespace_inferred)

    def test_name_case_is_preserved(self):
        self.assertEqual(parse_ref("Component:Team/MyService", "x").canonical(), "component:Team/MyService")

    def test_total_on_odd_input(self):
        self.assertEqual(parse_ref("", "component").canonical(), "component:default/")
        self.assertEqual(parse_ref("api:", "component").name, "")
        self.assertEqual(parse_ref("prod/", "component").name, "")
        # Only the first delimiter splits.
        self.assertEqual(parse_ref("a:b:c/d/e", "x").canonical(), "a:b:c/d/e")

    def test_structural_vs_canonical_equality(self):
        inferred = parse_ref("svc", "component")
        explicit = parse_ref("component:default/svc", "api")
        self.assertNotEqual(inferred, explicit)
        self.assertEqual(inferred.canonical(), explicit.canonical())
        self.assertEqual(inferred, EntityRef("component", DEFAULT_NAMESPACE, "svc", True, True))

    def test_canonical_is_stable_under_reparse(self):
        for raw in ("svc", "api:x", "prod/db", "Group:team/a", ""):
            key = parse_ref(raw, "component").canonical()
            for other in ("api", "group", "system"):
                self.assertEqual(canonical_key(key, other), key)

    def test_known_kind(self):
        self.assertTrue(parse_ref("location:x", "component").is_known_kind())
        self.assertFalse(parse_ref("template:x", "component").is_known_kind())
        self.assertEqual(str(parse_ref("svc", "component")), "component:default/svc")


if __name__ == "__main__":
    unittest.main()
