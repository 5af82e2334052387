# tests/test_main.py

"""Tests for the command-line argument parser."""

import unittest

from main import _build_parser


class TestArgumentParser(unittest.TestCase):
    """CLI flags and defaults."""

    def test_defaults(self) -> None:
        """Only the query is required for a search."""
        args = _build_parser().parse_args(["laptop for work"])
        self.assertEqual(args.query, "laptop for work")
        self.assertEqual(args.limit, 10)
        self.assertIsNone(args.override_term)
        self.assertEqual(args.output_format, "json")
        self.assertIsNone(args.max_workers)
        self.assertFalse(args.health)

    def test_all_flags(self) -> None:
        """Short flags map onto their destinations."""
        args = _build_parser().parse_args(
            ["گوشی", "-n", "5", "-t", "galaxy a54", "-f", "table", "-w", "3"]
        )
        self.assertEqual(args.limit, 5)
        self.assertEqual(args.override_term, "galaxy a54")
        self.assertEqual(args.output_format, "table")
        self.assertEqual(args.max_workers, 3)

    def test_health_without_query(self) -> None:
        """--health needs no query."""
        args = _build_parser().parse_args(["--health"])
        self.assertTrue(args.health)
        self.assertIsNone(args.query)

    def test_non_positive_limit_rejected(self) -> None:
        """A zero limit is a usage error."""
        with self.assertRaises(SystemExit):
            _build_parser().parse_args(["laptop", "-n", "0"])

    def test_unknown_format_rejected(self) -> None:
        """Only json and table are accepted formats."""
        with self.assertRaises(SystemExit):
            _build_parser().parse_args(["laptop", "-f", "csv"])


if __name__ == "__main__":
    unittest.main()
