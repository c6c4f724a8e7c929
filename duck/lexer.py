"""
Turn Duck source text into a list of tokens.

A token's kind is a plain string: reserved words in upper case,
punctuation as its own glyph, and a few lower-case kinds
("name", "number", "string" and the interpolated-string pieces).
The list always ends with an "<END>" token.

The scanner is a booze-tools miniscan definition. Strings are read in their
own start-conditions; an interpolation inside an f-string pushes back to
the ordinary condition until its closing brace.
"""
import sys
from typing import NamedTuple
from boozetools.scanning import miniscan
from boozetools.scanning.engine import IterableScanner
from boozetools.scanning.interface import ScannerBlocked

class Token(NamedTuple):
	kind: str
	text: str
	line: int
	column: int
	offset: int

class DuckLexError(Exception):
	def __init__(self, detail:str, line:int, column:int, offset:int):
		super().__init__(detail, line, column)
		self.detail, self.line, self.column, self.offset = detail, line, column, offset

RESERVED = frozenset("""
	quack let be becomes define taking as if then otherwise match with when
	repeat times while do for each in struct return and or not list push at
	print break continue honk attempt rescue migrate true false nil
""".split())

# Alternate spellings of a few operators.
_SYNONYM = {"&&": "AND", "||": "OR"}

_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t"}
_MISTAKES = {
	"=": "Did you mean '==' for comparison, or 'becomes' for assignment?",
	"!": "Did you mean '!=' for comparison, or 'not' for negation?",
}

class Where(NamedTuple):
	line: int
	column: int
	offset: int

class DuckScanner(IterableScanner):
	"""
	Single-use. Besides the usual scanner state, this keeps the line count,
	the literal text of the string being read, and the brace depth
	of each interpolation still open.
	"""
	def __init__(self, text:str):
		super().__init__(text, LEX.get_dfa(), LEX, start=None)
		self.line = 1
		self.line_start = 0
		self.parts, self.part_kind, self.part_at = [], None, None
		self.braces, self.openers = [], []

	def where(self, offset:int) -> Where:
		return Where(self.line, offset - self.line_start + 1, offset)

	def fail(self, detail:str, where:Where):
		raise DuckLexError(detail, *where)

	def emit(self, kind:str, text:str, where:Where=None):
		self.token(kind, Token(kind, text, *(where or self.where(self.left))))

	def newline(self):
		self.line += 1
		self.line_start = self.right

	def begin_string(self, kind:str, where:Where):
		self.parts, self.part_kind, self.part_at = [], kind, where

	def emit_string(self, kind:str):
		self.emit(kind, "".join(self.parts), self.part_at)

LEX = miniscan.Definition("Duck")

@LEX.on(r"\n")
def scan_newline(yy: DuckScanner): yy.newline()

LEX.ignore(r"[\t\r\x20]+")
LEX.ignore(r"--[^\n]*")

@LEX.on(r'f"')
def scan_fstring(yy: DuckScanner):
	"""
	f"a {b} c" becomes string_start, interp_start, <tokens for b>, interp_end, string_end.
	Further literal runs between interpolations are string_middle.
	"""
	yy.begin_string("string_start", yy.where(yy.right))
	yy.push("fstring")

@LEX.on(r'"')
def scan_string(yy: DuckScanner):
	yy.begin_string("string", yy.where(yy.left))
	yy.push("string")

@LEX.on(r"\d+(\.\d+)?")
def scan_number(yy: DuckScanner): yy.emit("number", yy.match())

@LEX.on(r"_")
def scan_underscore(yy: DuckScanner): yy.emit("_", yy.match())

@LEX.on(r"[A-Za-z_][A-Za-z0-9_]*(-[A-Za-z0-9][A-Za-z0-9_]*)*")
def scan_word(yy: DuckScanner):
	text = yy.match()
	if text in RESERVED: yy.emit(text.upper(), text)
	else: yy.emit("name", sys.intern(text))

@LEX.on(r"\*\*|\+\+|->|==|!=|<=|>=|&&|\|\||[\-+*\/%<>\[\]\(\),.:@]")
def scan_punctuation(yy: DuckScanner):
	text = yy.match()
	yy.emit(_SYNONYM.get(text, text), text)

@LEX.on(r"\{")
def scan_open_brace(yy: DuckScanner):
	if yy.braces: yy.braces[-1] += 1
	yy.emit("{", "{")

@LEX.on(r"\}")
def scan_close_brace(yy: DuckScanner):
	if yy.braces and yy.braces[-1] == 0:
		yy.braces.pop()
		yy.openers.pop()
		yy.emit("interp_end", "}")
		yy.pop()
		yy.begin_string("string_middle", yy.where(yy.right))
		return
	if yy.braces: yy.braces[-1] -= 1
	yy.emit("}", "}")

with LEX.condition("string", "fstring") as inside:

	@inside.on(r'[^"\\\n\{\}]+|\}')
	def scan_literal_text(yy: DuckScanner): yy.parts.append(yy.match())

	@inside.on(r"\n")
	def scan_embedded_newline(yy: DuckScanner):
		yy.parts.append("\n")
		yy.newline()

	@inside.on(r'\\["\\nt]')
	def scan_escape(yy: DuckScanner): yy.parts.append(_ESCAPES[yy.match()[1]])

with LEX.condition("fstring") as inside:

	@inside.on(r"\\[\{\}]")
	def scan_escaped_brace(yy: DuckScanner): yy.parts.append(yy.match()[1])

	@inside.on(r"\{")
	def scan_interpolation(yy: DuckScanner):
		yy.emit_string(yy.part_kind)
		yy.emit("interp_start", "{")
		yy.braces.append(0)
		yy.openers.append(yy.where(yy.left))
		yy.push(None)

with LEX.condition("string") as inside:

	@inside.on(r"\{")
	def scan_plain_brace(yy: DuckScanner): yy.parts.append("{")

with LEX.condition("string", "fstring") as inside:

	@inside.on(r"\\{ANY}")
	def scan_bad_escape(yy: DuckScanner):
		yy.fail("Unknown escape sequence %s"%yy.match(), yy.where(yy.left))

	@inside.on(r'"')
	def scan_end_quote(yy: DuckScanner):
		kind = {"string_start": "string", "string_middle": "string_end"}.get(yy.part_kind, yy.part_kind)
		yy.emit_string(kind)
		yy.pop()

def tokenize(text:str) -> list[Token]:
	yy = DuckScanner(text)
	try:
		tokens = [token for kind, token in yy]
	except ScannerBlocked as ex:
		offset, condition = ex.args
		if condition is not None:
			# Only a backslash at the very end can leave a string stuck.
			yy.fail("Unterminated string", yy.part_at)
		char = text[offset]
		hint = _MISTAKES.get(char, "")
		yy.fail(("Unexpected character %r. "%char + hint).strip(), yy.where(offset))
	if yy.condition is not None:
		yy.fail("Unterminated string", yy.part_at)
	if yy.openers:
		yy.fail("Unterminated interpolation in string", yy.openers[-1])
	tokens.append(Token("<END>", "", *yy.where(len(text))))
	return tokens
