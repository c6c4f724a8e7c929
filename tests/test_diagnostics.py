import io
import unittest
from unittest import mock

from duck import ontology
from duck.front_end import parse_text
from duck.diagnostics import Report, TooManyIssues, explain, plain_message, rate_code, rating_box, refusal
from duck.tree_walker.executive import ExecutionStats

def _stats(authorized=0, unauthorized=0, functions=0, structs=0, loops=0) -> ExecutionStats:
	stats = ExecutionStats()
	stats.authorized, stats.unauthorized = authorized, unauthorized
	stats.functions_defined, stats.structs_defined, stats.loops_executed = functions, structs, loops
	return stats

EVERY_KIND = [
	ontology.WrongType("number", "string"),
	ontology.UnknownVariable("x"),
	ontology.UnknownFunction("f"),
	ontology.DivisionByZero(),
	ontology.IndexOutOfBounds(5, 3),
	ontology.InvalidFieldAccess("Point", "z"),
	ontology.ArgumentMismatch(2, 1, "f"),
	ontology.BadSyntax("unexpected ]"),
	ontology.InvalidOperation("cannot negate string"),
	ontology.AssertionFailed("nope"),
	ontology.InstructionLimit(100),
	ontology.MigrationFailed("@geese", "no such thing"),
]

class RatingTests(unittest.TestCase):

	def test_scores(self):
		for expected, stats in [
			(10, _stats(authorized=10, functions=3, structs=1, loops=1)),
			(1, _stats(unauthorized=10)),
			(7, _stats(authorized=10)),
			(7, _stats()),
			(5, _stats(authorized=6, unauthorized=2, functions=1)),
		]:
			with self.subTest(expected=expected):
				score, quip = rate_code(stats)
				self.assertEqual(expected, score)
				self.assertTrue(quip)

	def test_box(self):
		box = rating_box(_stats(authorized=3, unauthorized=1))
		self.assertIn("Goose rated your code: 5/10", box)
		self.assertIn("3 of 4 blocks quacked", box)
		widths = set(map(len, box.splitlines()))
		self.assertEqual(1, len(widths))

class WordingTests(unittest.TestCase):

	def test_every_kind_can_be_explained(self):
		for kind in EVERY_KIND:
			with self.subTest(type(kind).__name__):
				for _ in range(10):
					text = explain(kind, 12)
					self.assertNotIn("{", text)
				self.assertTrue(plain_message(kind))

	def test_unknown_line(self):
		self.assertNotIn("None", explain(ontology.DivisionByZero(), None))

	def test_plain_messages(self):
		self.assertEqual("division by zero", plain_message(ontology.DivisionByZero()))
		self.assertEqual("f expects 2 argument(s) but got 1", plain_message(ontology.ArgumentMismatch(2, 1, "f")))
		self.assertEqual("index 5 out of bounds for length 3", plain_message(ontology.IndexOutOfBounds(5, 3)))

	def test_refusal_names_the_line(self):
		for _ in range(10):
			self.assertIn("42", refusal(42))

	def test_error_text(self):
		error = ontology.DuckRuntimeError(ontology.UnknownVariable("x"))
		error.locate(3)
		error.locate(9)
		self.assertEqual(3, error.line)
		self.assertIn("line 3", str(error))

class ReportTests(unittest.TestCase):

	def test_too_many_issues(self):
		report = Report(max_issues=3)
		report.issue("one")
		report.issue("two")
		with self.assertRaises(TooManyIssues):
			report.issue("three")
		self.assertTrue(report.sick())
		report.reset()
		self.assertTrue(report.ok())

	def test_skipped_blocks_are_noted(self):
		report = Report()
		with mock.patch("sys.stderr", new_callable=io.StringIO) as err:
			report.skipped_block(7)
		self.assertEqual([7], report.notices)
		self.assertIn("7", err.getvalue())
		self.assertTrue(report.ok())

	def test_info_only_when_verbose(self):
		for verbose, expected in [(0, ""), (1, "loading x\n")]:
			with mock.patch("sys.stderr", new_callable=io.StringIO) as err:
				Report(verbose=verbose).info("loading", "x")
			self.assertEqual(expected, err.getvalue())

	def test_parse_errors_illustrate_the_source(self):
		report = Report()
		self.assertIsNone(parse_text("quack [print 1]\nquack [let x 5]", None, report))
		with mock.patch("sys.stderr", new_callable=io.StringIO) as err:
			report.complain_to_console()
		text = err.getvalue()
		self.assertIn("<input>", text)
		self.assertIn("let x 5", text)

	def test_assert_no_issues(self):
		report = Report()
		report.assert_no_issues("fine")
		report.no_such_file("nowhere.duck")
		with mock.patch("sys.stderr", new_callable=io.StringIO):
			with self.assertRaises(AssertionError):
				report.assert_no_issues("not fine")

if __name__ == '__main__':
	unittest.main()
