from pathlib import Path
import io
import unittest
from unittest.mock import patch

from duck import diagnostics
from duck.front_end import parse_text
from duck.modularity import default_package_roots
from duck.tree_walker import executive

base_folder = Path(__file__).parent.parent
examples = base_folder/"examples"
zoo_ok = base_folder/"zoo/ok"

def _run(folder, which):
	report = diagnostics.Report(verbose=False)
	path = folder / (which + ".duck")
	program = parse_text(path.read_text(encoding="utf-8"), path, report)
	report.assert_no_issues("Ostensibly-good example failed to parse.")
	with patch.object(diagnostics.Report, "_announce"):
		with patch("sys.stdout", new_callable=io.StringIO) as out:
			interpreter = executive.run_program(program, report, package_roots=default_package_roots())
	return out.getvalue().splitlines(), interpreter

class ExampleSmokeTests(unittest.TestCase):
	""" Run all the examples; Test for no smoke. """

	def test_examples(self):
		for name in [
			"hello",
			"fizzbuzz",
			"closures",
			"structs",
			"patterns",
			"higher_order",
			"migration",
			"rescue",
			"loops",
		]:
			with self.subTest(name):
				_run(examples, name)

	def test_closures(self):
		lines, _ = _run(examples, "closures")
		self.assertEqual(["15", "2", "18"], lines)

	def test_structs(self):
		lines, _ = _run(examples, "structs")
		self.assertEqual("Point { x: 3, y: 4 }", lines[0])
		self.assertIn("<struct Point { x, y }>", lines)

	def test_rescue(self):
		lines, _ = _run(examples, "rescue")
		self.assertIn("rescued: division by zero", lines)

	def test_loops(self):
		lines, interpreter = _run(examples, "loops")
		self.assertEqual(["10", "5", "A", "B", "C"], lines)
		self.assertEqual(1, interpreter.stats.unauthorized)

	def test_zoo_of_ok(self):
		lines, interpreter = _run(zoo_ok, "nested_authorization")
		self.assertEqual(["first", "second", "first", "second"], lines)
		self.assertEqual(2, len(interpreter.report.notices))
		lines, _ = _run(zoo_ok, "cycle_main")
		self.assertEqual(["ab"], lines)

if __name__ == '__main__':
	unittest.main()
