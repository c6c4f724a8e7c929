import unittest
from unittest import mock

from duck import syntax
from duck.diagnostics import Report
from duck.front_end import Parser, ParseFailure, parse_text
from duck.lexer import tokenize, DuckLexError

class Silence(Report):
	def __init__(self):
		super().__init__(verbose=False, max_issues=30)
		self.complain_to_console = mock.Mock()
		self._announce = mock.Mock()

def _kinds(text):
	return [t.kind for t in tokenize(text)]

def _parse(text) -> syntax.Program:
	return Parser(tokenize(text)).parse()

def _bodies(statement):
	for attr in ("body", "then_body", "else_body", "rescue"):
		body = getattr(statement, attr, None)
		if body:
			yield body
	for arm in getattr(statement, "arms", ()):
		if arm.body:
			yield arm.body

def _flags(body):
	""" Authorization of every block, in the order the blocks open. """
	for block in body:
		yield block.authorized
		for inner in _bodies(block.statement):
			yield from _flags(inner)

def _statement(text) -> syntax.Statement:
	return _parse(text).blocks[0].statement

class LexerTests(unittest.TestCase):

	def test_reserved_words_and_names(self):
		self.assertEqual(["QUACK", "[", "LET", "name", "BE", "number", "]", "<END>"], _kinds("quack [let x be 5]"))

	def test_hyphenated_names(self):
		tokens = tokenize("type-of x-1 a - b")
		self.assertEqual(["type-of", "x-1", "a", "-", "b", ""], [t.text for t in tokens])
		self.assertEqual(["name", "name", "name", "-", "name", "<END>"], [t.kind for t in tokens])

	def test_comments_run_to_end_of_line(self):
		tokens = tokenize("-- nothing to see\nquack")
		self.assertEqual(["QUACK", "<END>"], [t.kind for t in tokens])
		self.assertEqual(2, tokens[0].line)

	def test_operators(self):
		self.assertEqual(
			["**", "++", "->", "==", "!=", "<=", ">=", "AND", "OR", "@", "<END>"],
			_kinds("** ++ -> == != <= >= && || @"),
		)

	def test_underscore_alone_is_a_wildcard(self):
		self.assertEqual(["_", "name", "<END>"], _kinds("_ _x"))

	def test_string_escapes(self):
		token = tokenize(r'"a\"b\\c\nd\te"')[0]
		self.assertEqual("string", token.kind)
		self.assertEqual('a"b\\c\nd\te', token.text)

	def test_lone_equals_is_an_error(self):
		with self.assertRaises(DuckLexError) as cm:
			tokenize("let x = 1")
		self.assertEqual(1, cm.exception.line)
		self.assertEqual(7, cm.exception.column)
		self.assertIn("becomes", cm.exception.detail)

	def test_lone_bang_is_an_error(self):
		with self.assertRaises(DuckLexError):
			tokenize("not !x")

	def test_bad_escape(self):
		with self.assertRaises(DuckLexError):
			tokenize(r'"\q"')

	def test_unterminated_string(self):
		with self.assertRaises(DuckLexError):
			tokenize('"oops')

	def test_interpolation(self):
		self.assertEqual([
			"string_start", "interp_start", "name", "interp_end",
			"string_middle", "interp_start", "name", "+", "number", "interp_end",
			"string_end", "<END>",
		], _kinds('f"a {x} b {y + 1}"'))

	def test_fstring_without_interpolation_is_a_plain_string(self):
		self.assertEqual(["string", "<END>"], _kinds('f"plain"'))

	def test_positions(self):
		tokens = tokenize("quack\n  [print 1]")
		self.assertEqual((2, 3), (tokens[1].line, tokens[1].column))
		self.assertEqual(8, tokens[1].offset)

	def test_braces_in_strings(self):
		self.assertEqual("{x}", tokenize('"{x}"')[0].text)
		tokens = tokenize(r'f"\{a\} {b}"')
		self.assertEqual(["string_start", "interp_start", "name", "interp_end", "string_end", "<END>"], [t.kind for t in tokens])
		self.assertEqual("{a} ", tokens[0].text)

	def test_nested_interpolation(self):
		self.assertEqual([
			"string_start", "interp_start",
			"string_start", "interp_start", "name", "interp_end", "string_end",
			"interp_end", "string_end", "<END>",
		], _kinds('f"a {f"b {c} d"} e"'))

	def test_braces_inside_an_interpolation_stay_balanced(self):
		self.assertEqual(
			["string_start", "interp_start", "{", "}", "interp_end", "string_end", "<END>"],
			_kinds('f"{{}}!"'),
		)

	def test_lines_inside_strings_are_counted(self):
		tokens = tokenize('"one\ntwo" x')
		self.assertEqual((1, 1), (tokens[0].line, tokens[0].column))
		self.assertEqual((2, 6), (tokens[1].line, tokens[1].column))

	def test_unterminated_interpolation(self):
		with self.assertRaises(DuckLexError) as cm:
			tokenize('f"ab {1 + 2')
		self.assertEqual(6, cm.exception.column)

	def test_stuck_scanner_reports_the_offending_character(self):
		with self.assertRaises(DuckLexError) as cm:
			tokenize("quack\n[print 1 # 2]")
		self.assertEqual((2, 10, 15), (cm.exception.line, cm.exception.column, cm.exception.offset))
		self.assertIn("'#'", cm.exception.detail)

	def test_backslash_at_end_of_input(self):
		with self.assertRaises(DuckLexError) as cm:
			tokenize('x "abc\\')
		self.assertEqual("Unterminated string", cm.exception.detail)
		self.assertEqual(3, cm.exception.column)

class AuthorizationTests(unittest.TestCase):

	def test_one_marker_one_block(self):
		self.assertEqual([True, False], list(_flags(_parse("quack [print 1] [print 2]").blocks)))

	def test_markers_accumulate(self):
		program = _parse("quack quack [print 1] [print 2] [print 3]")
		self.assertEqual([True, True, False], list(_flags(program.blocks)))

	def test_trailing_marker_is_harmless(self):
		program = _parse("[print 1] quack")
		self.assertEqual([False], list(_flags(program.blocks)))

	def test_nested_blocks_share_the_counter(self):
		program = _parse("quack quack [repeat 3 times [print 1] [print 2]]")
		self.assertEqual([True, True, False], list(_flags(program.blocks)))

	def test_k_markers_authorize_the_first_k_blocks_at_any_depth(self):
		for k in range(7):
			with self.subTest(k=k):
				text = "quack " * k + "[repeat 1 times [print 1] [if true then [print 2] otherwise [print 3]]] [print 4]"
				flags = list(_flags(_parse(text).blocks))
				self.assertEqual(6, len(flags))
				self.assertEqual([i < k for i in range(6)], flags)

	def test_brackets_that_are_not_blocks_spend_nothing(self):
		cases = [
			"quack [define f taking [a, b] as quack [return a]]",
			"quack [for each [x] in [1, 2] do quack [print x]]",
			"quack [struct Point with [x, y]] quack [print 1]",
			"quack [let xs be [1, 2]] quack [print xs]",
			"quack [attempt quack [print 1] rescue [e] quack [print e]]",
			"quack [match x with [when [a, b] then quack [print a]]]",
		]
		for text in cases:
			with self.subTest(text):
				flags = list(_flags(_parse(text).blocks))
				self.assertTrue(all(flags), flags)

	def test_quack_inside_body_authorizes_next_nested_block(self):
		program = _parse("quack [if true then [print 1] quack [print 2]]")
		self.assertEqual([True, False, True], list(_flags(program.blocks)))

class StatementTests(unittest.TestCase):

	def test_bare_name_is_a_reference_not_a_call(self):
		statement = _statement("quack [greet]")
		self.assertIsInstance(statement, syntax.ExpressionStatement)
		self.assertIsInstance(statement.expr, syntax.Lookup)

	def test_juxtaposition_call(self):
		statement = _statement('quack [greet "goose" 2]')
		self.assertIsInstance(statement.expr, syntax.Call)
		self.assertEqual(2, len(statement.expr.args))

	def test_juxtaposition_with_a_negative_argument(self):
		expr = _statement("quack [f -1]").expr
		self.assertIsInstance(expr, syntax.Call)
		self.assertEqual("f", expr.fn_exp.name)
		self.assertEqual(1, len(expr.args))
		self.assertIsInstance(expr.args[0], syntax.UnaryExp)
		expr = _statement("quack [f -1 x - 2]").expr
		self.assertEqual(2, len(expr.args))
		self.assertEqual("-", expr.args[1].glyph)

	def test_name_led_operators_still_make_expressions(self):
		expr = _statement("quack [x + 5 * 2]").expr
		self.assertEqual("+", expr.glyph)
		self.assertIsInstance(expr.lhs, syntax.Lookup)
		self.assertEqual("*", expr.rhs.glyph)
		expr = _statement("quack [p.x == xs at 0 and ok]").expr
		self.assertEqual("and", expr.glyph)
		self.assertIsInstance(expr.lhs.lhs, syntax.FieldReference)
		self.assertIsInstance(_statement("quack [f(1) + 2]").expr.lhs, syntax.Call)

	def test_assignment_targets(self):
		self.assertIsInstance(_statement("quack [x becomes 1]").target, syntax.Lookup)
		self.assertIsInstance(_statement("quack [p.x becomes 1]").target, syntax.FieldReference)
		target = _statement("quack [xs at -1 becomes 2]").target
		self.assertIsInstance(target, syntax.Index)
		self.assertIsInstance(target.index, syntax.UnaryExp)

	def test_push(self):
		statement = _statement("quack [xs push 4]")
		self.assertIsInstance(statement, syntax.Push)

	def test_precedence(self):
		expr = _statement("quack [print 1 + 2 * 3 == 7 and not false]").expr
		self.assertEqual("and", expr.glyph)
		self.assertEqual("==", expr.lhs.glyph)
		self.assertEqual("+", expr.lhs.lhs.glyph)
		self.assertEqual("*", expr.lhs.lhs.rhs.glyph)
		self.assertIsInstance(expr.rhs, syntax.UnaryExp)

	def test_index_binds_tighter_than_arithmetic(self):
		expr = _statement("quack [print xs at 0 + 1]").expr
		self.assertEqual("+", expr.glyph)
		self.assertIsInstance(expr.lhs, syntax.Index)

	def test_lambdas(self):
		one = _statement("quack [let f be x -> x * 2]").expr
		self.assertEqual(("x",), one.params)
		two = _statement("quack [let f be [a, b] -> a + b]").expr
		self.assertEqual(("a", "b"), two.params)
		with self.assertRaises(ParseFailure):
			_parse("quack [let f be 3 -> 4]")

	def test_define_and_if(self):
		fn = _statement("quack [define f taking [a] as quack [return a]]")
		self.assertEqual(("a",), fn.params)
		self.assertEqual(1, len(fn.body))
		branch = _statement("quack [if x then quack [print 1] otherwise quack [print 2]]")
		self.assertEqual(1, len(branch.then_body))
		self.assertEqual(1, len(branch.else_body))

	def test_match_statement_and_expression(self):
		statement = _statement('quack [match v with [when 0 then quack [print "z"]] [when Point { x, y: 0 } then quack [print x]] [when _ then 5]]')
		self.assertEqual(3, len(statement.arms))
		self.assertIsInstance(statement.arms[1].pattern, syntax.StructPattern)
		self.assertEqual("y", statement.arms[1].pattern.fields[1][0])
		self.assertIsNotNone(statement.arms[2].expr)
		expr = _statement('quack [let r be match v with [when -1 then "neg"] [when list(a, _) then a]]').expr
		self.assertIsInstance(expr, syntax.MatchExpr)
		self.assertEqual(-1.0, expr.arms[0].pattern.value)
		self.assertIsInstance(expr.arms[1].pattern, syntax.ListPattern)

	def test_interpolation(self):
		expr = _statement('quack [print f"{n} ducks and {n + 1} geese"]').expr
		self.assertIsInstance(expr, syntax.Interpolation)
		self.assertEqual(" ducks and ", expr.parts[1])
		self.assertEqual(" geese", expr.parts[3])

	def test_attempt(self):
		statement = _statement("quack [attempt quack [print 1] rescue [trouble] quack [print trouble]]")
		self.assertEqual("trouble", statement.error_name)
		anonymous = _statement("quack [attempt quack [print 1] rescue quack [print 2]]")
		self.assertIsNone(anonymous.error_name)

	def test_migrate(self):
		statement = _statement('quack [migrate "@math" as m]')
		self.assertEqual(("@math", "m"), (statement.target, statement.alias))
		self.assertIsNone(_statement('quack [migrate "other"]').alias)

	def test_honk_and_return(self):
		self.assertIsNone(_statement("quack [honk x]").message)
		self.assertIsNotNone(_statement('quack [honk x "why"]').message)
		self.assertIsNone(_statement("quack [return]").expr)

	def test_explicit_nested_block(self):
		statement = _statement("quack [quack [print 1] [print 2]]")
		self.assertIsInstance(statement, syntax.Nested)
		self.assertEqual(2, len(statement.body))

class ParseErrorTests(unittest.TestCase):

	def test_errors_accumulate(self):
		with self.assertRaises(ParseFailure) as cm:
			_parse("quack [let x 5] quack [print 1] quack [print ]")
		self.assertEqual(2, len(cm.exception.issues))

	def test_stray_top_level_tokens(self):
		with self.assertRaises(ParseFailure) as cm:
			_parse("print 5")
		self.assertEqual(2, len(cm.exception.issues))
		self.assertIn("Unexpected token", cm.exception.issues[0].detail)

	def test_recovery_resumes_at_next_quack(self):
		with self.assertRaises(ParseFailure) as cm:
			_parse("quack [print 1\nquack [print (]\nquack [print 3]")
		lines = [issue.token.line for issue in cm.exception.issues]
		self.assertEqual([2, 2], lines)

	def test_parse_text_reports_instead_of_raising(self):
		report = Silence()
		self.assertIsNone(parse_text("quack [let x 5]", None, report))
		self.assertTrue(report.sick())
		report = Silence()
		self.assertIsNone(parse_text("quack [let x = 5]", None, report))
		self.assertTrue(report.sick())

	def test_very_deep_nesting_is_a_syntax_error(self):
		text = "quack [print " + "(" * 3000 + "1" + ")" * 3000 + "]"
		with self.assertRaises(ParseFailure) as cm:
			_parse(text)
		self.assertIn("too deeply", cm.exception.issues[-1].detail)
		report = Silence()
		self.assertIsNone(parse_text(text, None, report))
		self.assertTrue(report.sick())

	def test_parse_text_success(self):
		report = Silence()
		program = parse_text("quack [print 1]", None, report)
		self.assertTrue(report.ok())
		self.assertEqual(1, len(program.blocks))

if __name__ == '__main__':
	unittest.main()
