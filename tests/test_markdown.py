import unittest

from catalogview.ingest.markdown import split_sections


class TestSplitSections(unittest.TestCase):
    def test_heading_paths(self):
        text = "intro\n# Guide\nhello\n## Install\nrun it\n### Linux\n## Usage\nuse it\n"
        sections = split_sections(text)
        self.assertEqual(
            [(s.heading_path, s.level, s.start_line) for s in sections],
            [
                ("", 0, 1),
                ("Guide", 1, 2),
                ("Guide > Install", 2, 4),
                ("Guide > Install > Linux", 3, 6),
                ("Guide > Usage", 2, 7),
            ],
        )
        self.assertEqual(sections[2].text, "run it")
        self.assertEqual(sections[3].text, "")

    def test_fenced_headings_are_ignored(self):
        text = "# Real\n```\n# not a heading\n```\n"
        sections = split_sections(text)
        self.assertEqual([s.heading_path for s in sections], ["Real"])
        self.assertIn("# not a heading", sections[0].text)

    def test_skipped_levels_and_closing_hashes(self):
        sections = split_sections("# A #\n### C\n")
        self.assertEqual([s.heading_path for s in sections], ["A", "A > C"])

    def test_empty(self):
        self.assertEqual(split_sections(""), [])


if __name__ == "__main__":
    unittest.main()
