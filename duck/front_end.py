"""
A hand-written recursive-descent parser for Duck.

The interesting part is authorization: every quack bumps a single pending counter,
and every block that opens (top-level or nested, no difference) spends one if it can.
Brackets that are not blocks (parameter lists, loop variables, list literals,
match arms and so on) never touch the counter.
"""
from pathlib import Path
from typing import NamedTuple, Optional, Sequence

from . import syntax
from .diagnostics import Report
from .lexer import Token, tokenize, DuckLexError

class ParseIssue(NamedTuple):
	token: Token
	detail: str
	hint: str

class DuckParseError(Exception):
	""" Raised within the parser; caught at the nearest resynchronization point. """
	def __init__(self, token:Token, detail:str, hint:str=""):
		super().__init__(token, detail)
		self.token, self.detail, self.hint = token, detail, hint

class ParseFailure(Exception):
	""" Carries every issue found, so none get lost. """
	def __init__(self, issues:Sequence[ParseIssue]):
		super().__init__(issues)
		self.issues = list(issues)

# Words that end a body without being part of it:
_BODY_STOPPERS = frozenset(["]", "OTHERWISE", "RESCUE", "<END>"])
# Words that end the arguments of a juxtaposition call:
_ARG_STOPPERS = frozenset(["]", ")", ",", "THEN", "OTHERWISE", "DO", "TIMES", "WITH", "AS", "IN", "PUSH", "BECOMES", "<END>"])

_LITERAL_WORDS = {"TRUE": True, "FALSE": False, "NIL": None}

_PRECEDENCE = [
	("OR",),
	("AND",),
	("==", "!="),
	("<", "<=", ">", ">="),
	("+", "-", "++"),
	("*", "/", "%", "**"),
]
_GLYPH = {"OR": "or", "AND": "and"}
_BINARY_OPERATORS = frozenset(kind for level in _PRECEDENCE for kind in level)

class Parser:
	def __init__(self, tokens:Sequence[Token]):
		self._tokens = tokens
		self._pos = 0
		self.pending = 0
		self.issues = []

	# Token-stream plumbing

	def _peek(self, ahead=0) -> Token:
		index = min(self._pos + ahead, len(self._tokens) - 1)
		return self._tokens[index]

	def _check(self, *kinds) -> bool:
		return self._peek().kind in kinds

	def _advance(self) -> Token:
		token = self._peek()
		if token.kind != "<END>":
			self._pos += 1
		return token

	def _accept(self, kind) -> Optional[Token]:
		if self._check(kind): return self._advance()

	def _expect(self, kind:str, what:str=None) -> Token:
		if self._check(kind): return self._advance()
		found = self._peek()
		raise DuckParseError(found, "Expected %s but found %s"%(what or _describe(kind), _found(found)), _best_hint(kind, found.kind))

	def _name(self, what:str) -> str:
		return self._expect("name", what).text

	# Authorization

	def _count_quacks(self):
		while self._accept("QUACK"):
			self.pending += 1

	def _authorize(self) -> bool:
		if self.pending > 0:
			self.pending -= 1
			return True
		return False

	# Blocks and bodies

	def parse(self) -> syntax.Program:
		blocks = []
		while True:
			self._count_quacks()
			if self._check("<END>"):
				break
			if self._check("["):
				try: blocks.append(self.parse_block())
				except DuckParseError as ex:
					self.issues.append(ParseIssue(ex.token, ex.detail, ex.hint))
					self._synchronize()
				except RecursionError:
					hint = "Try naming some of the inner parts with let."
					self.issues.append(ParseIssue(self._peek(), "Nested too deeply to follow", hint))
					break
			else:
				token = self._advance()
				hint = "Statements live inside [square brackets], usually with a quack in front."
				self.issues.append(ParseIssue(token, "Unexpected token %s"%_found(token), hint))
		if self.issues:
			raise ParseFailure(self.issues)
		return syntax.Program(blocks)

	def _synchronize(self):
		""" Skip to a place where a fresh block might plausibly begin. """
		while not self._check("<END>", "QUACK", "["):
			if self._advance().kind == "]":
				return

	def parse_block(self) -> syntax.Block:
		opener = self._expect("[")
		authorized = self._authorize()
		statement = self.parse_statement()
		self._expect("]", "']' to close the block opened on line %d"%opener.line)
		return syntax.Block(statement, authorized, opener.line)

	def parse_body(self) -> syntax.BODY:
		body = []
		while True:
			self._count_quacks()
			if self._check("["):
				body.append(self.parse_block())
			elif self._peek().kind in _BODY_STOPPERS:
				return tuple(body)
			else:
				found = self._peek()
				raise DuckParseError(found, "Expected a [block] but found %s"%_found(found), "Bodies are made of blocks, like: quack [print x]")

	# Statements

	def parse_statement(self) -> syntax.Statement:
		kind = self._peek().kind
		if kind in ("QUACK", "["):
			return syntax.Nested(self.parse_body())
		method = _STATEMENT.get(kind)
		if method:
			self._advance()
			return method(self)
		if kind == "]":
			raise DuckParseError(self._peek(), "Empty block", "A block needs something inside, like [print 1]")
		return self.parse_simple_statement()

	def parse_let(self):
		name = self._name("a name after 'let'")
		self._expect("BE")
		return syntax.Let(name, self.parse_expression())

	def parse_define(self):
		name = self._name("a function name after 'define'")
		params = []
		if self._accept("TAKING"):
			params = self._bracketed_names("parameter")
		self._expect("AS")
		return syntax.FunctionDef(name, params, self.parse_body())

	def parse_if(self):
		condition = self.parse_expression()
		self._expect("THEN")
		then_body = self.parse_body()
		else_body = self.parse_body() if self._accept("OTHERWISE") else None
		return syntax.If(condition, then_body, else_body)

	def parse_match(self):
		subject = self.parse_expression()
		self._expect("WITH")
		return syntax.Match(subject, self._match_arms(statement=True))

	def parse_repeat(self):
		count = self.parse_expression()
		self._expect("TIMES")
		return syntax.Repeat(count, self.parse_body())

	def parse_while(self):
		condition = self.parse_expression()
		self._expect("DO")
		return syntax.While(condition, self.parse_body())

	def parse_for(self):
		self._expect("EACH")
		self._expect("[")
		variable = self._name("a loop variable")
		self._expect("]")
		self._expect("IN")
		iterable = self.parse_expression()
		self._expect("DO")
		return syntax.ForEach(variable, iterable, self.parse_body())

	def parse_struct(self):
		name = self._name("a struct name")
		self._expect("WITH")
		return syntax.StructDef(name, self._bracketed_names("field"))

	def parse_return(self):
		if self._check("]"): return syntax.Return(None)
		return syntax.Return(self.parse_expression())

	def parse_break(self): return syntax.Break()

	def parse_continue(self): return syntax.Continue()

	def parse_print(self): return syntax.Print(self.parse_expression())

	def parse_honk(self):
		condition = self.parse_expression()
		message = None if self._check("]") else self.parse_expression()
		return syntax.Honk(condition, message)

	def parse_attempt(self):
		body = self.parse_body()
		self._expect("RESCUE")
		error_name = None
		if self._check("[") and self._peek(1).kind == "name" and self._peek(2).kind == "]":
			self._advance()
			error_name = self._advance().text
			self._advance()
		return syntax.Attempt(body, error_name, self.parse_body())

	def parse_migrate(self):
		target = self._expect("string", "a quoted path after 'migrate'").text
		alias = self._name("a name after 'as'") if self._accept("AS") else None
		return syntax.Migrate(target, alias)

	def parse_simple_statement(self):
		"""
		A statement led by a name reads its postfix chain first. If what follows
		could begin an argument, it is a juxtaposition call, so [show -1] passes -1.
		Otherwise any binary operator carries on from there, as in [x + 5].
		"""
		if self._check("name"):
			head = self.parse_postfix()
			if isinstance(head, syntax.Lookup) and self._begins_argument():
				args = []
				while self._peek().kind not in _ARG_STOPPERS:
					args.append(self.parse_expression())
				return syntax.ExpressionStatement(syntax.Call(head, args))
			head = self._binary(0, head)
		else:
			head = self.parse_expression()
		if self._accept("BECOMES"):
			if not isinstance(head, (syntax.Lookup, syntax.FieldReference, syntax.Index)):
				raise DuckParseError(self._peek(), "Cannot assign to that", "Only a name, a field or an indexed element can 'become' something.")
			return syntax.Assign(head, self.parse_expression())
		if self._accept("PUSH"):
			return syntax.Push(head, self.parse_expression())
		return syntax.ExpressionStatement(head)

	def _begins_argument(self) -> bool:
		kind = self._peek().kind
		return kind not in _ARG_STOPPERS and (kind == "-" or kind not in _BINARY_OPERATORS)

	def _bracketed_names(self, what) -> list[str]:
		self._expect("[")
		names = []
		if not self._check("]"):
			names.append(self._name("a %s name"%what))
			while self._accept(","):
				names.append(self._name("a %s name"%what))
		self._expect("]")
		return names

	def _match_arms(self, statement:bool) -> list[syntax.MatchArm]:
		arms = []
		while self._check("["):
			self._advance()
			self._expect("WHEN")
			pattern = self.parse_pattern()
			self._expect("THEN")
			if statement and self._check("QUACK", "["):
				arm = syntax.MatchArm(pattern, self.parse_body(), None)
			elif self._check("QUACK"):
				raise DuckParseError(self._peek(), "A match expression needs a value after 'then'", "Use the statement form of match for blocks of code.")
			else:
				arm = syntax.MatchArm(pattern, None, self.parse_expression())
			self._expect("]", "']' to close the match arm")
			arms.append(arm)
		return arms

	# Patterns

	def parse_pattern(self) -> syntax.Pattern:
		token = self._advance()
		kind = token.kind
		if kind == "_": return syntax.WildcardPattern()
		if kind == "number": return syntax.LiteralPattern(float(token.text))
		if kind == "-" and self._check("number"): return syntax.LiteralPattern(-float(self._advance().text))
		if kind == "string": return syntax.LiteralPattern(token.text)
		if kind in _LITERAL_WORDS: return syntax.LiteralPattern(_LITERAL_WORDS[kind])
		if kind == "[": return syntax.ListPattern(self._pattern_items("]"))
		if kind == "LIST":
			self._expect("(")
			return syntax.ListPattern(self._pattern_items(")"))
		if kind == "name":
			if self._accept("{"):
				return syntax.StructPattern(token.text, self._field_patterns())
			return syntax.VariablePattern(token.text)
		raise DuckParseError(token, "Expected a pattern but found %s"%_found(token), "Patterns look like _, x, 42, \"text\", [a, b] or Point { x: 0 }")

	def _pattern_items(self, closer) -> list[syntax.Pattern]:
		items = []
		if not self._check(closer):
			items.append(self.parse_pattern())
			while self._accept(","):
				items.append(self.parse_pattern())
		self._expect(closer)
		return items

	def _field_patterns(self):
		fields = []
		while not self._check("}"):
			name = self._name("a field name")
			pattern = self.parse_pattern() if self._accept(":") else syntax.VariablePattern(name)
			fields.append((name, pattern))
			if not self._accept(","):
				break
		self._expect("}")
		return fields

	# Expressions

	def parse_expression(self) -> syntax.ValueExpression:
		return self._binary(0)

	def _binary(self, level:int, first=None) -> syntax.ValueExpression:
		""" If the leftmost operand was already parsed, pass it as first. """
		if level == len(_PRECEDENCE):
			return self.parse_unary() if first is None else first
		lhs = self._binary(level + 1, first)
		while self._check(*_PRECEDENCE[level]):
			kind = self._advance().kind
			rhs = self._binary(level + 1)
			lhs = syntax.BinExp(lhs, _GLYPH.get(kind, kind), rhs)
		return lhs

	def parse_unary(self) -> syntax.ValueExpression:
		if self._accept("NOT"): return syntax.UnaryExp("not", self.parse_unary())
		if self._accept("-"): return syntax.UnaryExp("-", self.parse_unary())
		return self.parse_postfix()

	def parse_postfix(self) -> syntax.ValueExpression:
		expr = self.parse_primary()
		while True:
			if self._accept("."):
				expr = syntax.FieldReference(expr, self._name("a field name after '.'"))
			elif self._check("AT", "@"):
				self._advance()
				expr = syntax.Index(expr, self._index_operand())
			elif self._accept("("):
				expr = syntax.Call(expr, self._arguments(")"))
			elif self._check("->"):
				arrow = self._advance()
				expr = syntax.LambdaForm(self._lambda_params(expr, arrow), self.parse_expression())
			else:
				return expr

	def _index_operand(self):
		if self._accept("-"): return syntax.UnaryExp("-", self._index_operand())
		return self.parse_primary()

	def _lambda_params(self, expr, arrow:Token) -> list[str]:
		if isinstance(expr, syntax.Lookup):
			return [expr.name]
		if isinstance(expr, syntax.ExplicitList) and all(isinstance(e, syntax.Lookup) for e in expr.elts):
			return [e.name for e in expr.elts]
		raise DuckParseError(arrow, "Lambda parameters must be a name or a list of names", "Try x -> x * 2 or [a, b] -> a + b")

	def _arguments(self, closer) -> list[syntax.ValueExpression]:
		args = []
		if not self._check(closer):
			args.append(self.parse_expression())
			while self._accept(","):
				args.append(self.parse_expression())
		self._expect(closer)
		return args

	def parse_primary(self) -> syntax.ValueExpression:
		token = self._advance()
		kind = token.kind
		if kind == "number": return syntax.Literal(float(token.text))
		if kind == "string": return syntax.Literal(token.text)
		if kind in _LITERAL_WORDS: return syntax.Literal(_LITERAL_WORDS[kind])
		if kind == "name": return syntax.Lookup(token.text)
		if kind == "string_start": return self._interpolation(token)
		if kind == "[": return syntax.ExplicitList(self._arguments("]"))
		if kind == "LIST":
			self._expect("(")
			return syntax.ExplicitList(self._arguments(")"))
		if kind == "(":
			expr = self.parse_expression()
			self._expect(")")
			return expr
		if kind == "MATCH":
			subject = self.parse_expression()
			self._expect("WITH")
			return syntax.MatchExpr(subject, self._match_arms(statement=False))
		raise DuckParseError(token, "Expected an expression but found %s"%_found(token), _best_hint("expression", kind))

	def _interpolation(self, first:Token) -> syntax.Interpolation:
		parts = [first.text] if first.text else []
		while True:
			self._expect("interp_start")
			parts.append(self.parse_expression())
			self._expect("interp_end", "'}' to close the interpolation")
			piece = self._advance()
			if piece.kind not in ("string_middle", "string_end"):
				raise DuckParseError(piece, "Malformed interpolated string")
			if piece.text: parts.append(piece.text)
			if piece.kind == "string_end":
				return syntax.Interpolation(parts)

_STATEMENT = {
	"LET": Parser.parse_let,
	"DEFINE": Parser.parse_define,
	"IF": Parser.parse_if,
	"MATCH": Parser.parse_match,
	"REPEAT": Parser.parse_repeat,
	"WHILE": Parser.parse_while,
	"FOR": Parser.parse_for,
	"STRUCT": Parser.parse_struct,
	"RETURN": Parser.parse_return,
	"BREAK": Parser.parse_break,
	"CONTINUE": Parser.parse_continue,
	"PRINT": Parser.parse_print,
	"HONK": Parser.parse_honk,
	"ATTEMPT": Parser.parse_attempt,
	"MIGRATE": Parser.parse_migrate,
}

def _describe(kind:str) -> str:
	if kind == "name": return "a name"
	if kind == "<END>": return "the end of the file"
	return "'%s'"%kind.lower()

def _found(token:Token) -> str:
	if token.kind == "<END>": return "the end of the file"
	if token.kind == "string": return "a string"
	return "'%s'"%token.text

def parse_text(text:str, path:Optional[Path], report:Report) -> Optional[syntax.Program]:
	""" Submit text to the parser. Problems go to the report, and the result is None. """
	try:
		program = Parser(tokenize(text)).parse()
	except DuckLexError as ex:
		report.lex_error(text, path, ex)
	except ParseFailure as ex:
		for issue in ex.issues:
			report.generic_parse_error(text, path, issue)
	else:
		program.path = path
		return program

##########################
#
#  Hints for the more common ways to go wrong.
#  Keyed on what the parser wanted and what it found instead.
#

_advice = {}

def _hint(expected, found, text):
	_advice[expected, found] = text

def _best_hint(expected, found):
	return _advice.get((expected, found)) or _advice.get((expected, None)) or ""

_hint("BE", None, "Variables are introduced like: let x be 5")
_hint("]", "name", "Probably a missing operator, or the block wasn't closed.")
_hint("]", "[", "I suspect a missing ']' before this bracket.")
_hint("]", "<END>", "The file ends inside a block. Count your brackets.")
_hint("THEN", None, "if needs then, as in: if x > 1 then quack [print x]")
_hint("DO", None, "Loops need do, as in: while x < 3 do quack [x becomes x + 1]")
_hint("TIMES", None, "repeat needs times, as in: repeat 3 times quack [print 1]")
_hint("AS", "[", "Functions read: define name taking [a, b] as quack [...]")
_hint("WITH", None, "match and struct both need 'with'.")
_hint("expression", "]", "Something is missing just before this bracket.")
_hint("expression", "<END>", "The file ends in the middle of an expression.")
_hint("expression", "QUACK", "A quack authorizes blocks; it isn't a value.")
_hint(")", None, "I suspect a missing ')' closing parentheses.")
