"""
Everything the goose has to say, and the machinery for saying it.

The interpreter raises and records classifications (see ontology);
the wording lives here, and most of it is chosen at random.
"""
import sys, random
from pathlib import Path
from typing import Any, Optional
from boozetools.support.failureprone import SourceText, illustration

from .ontology import (
	WrongType, UnknownVariable, UnknownFunction, DivisionByZero, IndexOutOfBounds,
	InvalidFieldAccess, ArgumentMismatch, BadSyntax, InvalidOperation,
	AssertionFailed, InstructionLimit, MigrationFailed,
)

class TooManyIssues(Exception):
	pass

def _outburst():
	particle = ["Oh, ", "Well, ", "Ugh, ", "", ""]

	minced_oaths = [
		'HONK', 'HONK HONK', 'Feathers', 'Flapping Feathers', 'Goose Grease',
		'Waddle Me Sideways', 'Great Gaggles', 'Plucking Nonsense', 'Bread Crumbs',
		'Quackery', 'Pond Scum', 'Wet Socks', 'Molting Mayhem',
	]

	resignations = [
		'The goose is not impressed.',
		'The goose refuses to continue.',
		'The goose has seen enough.',
		'The goose demands better.',
		'The goose is going back to the pond.',
	]

	return "%s%s! %s"%tuple(map(random.choice, (particle, minced_oaths, resignations)))

class Report:
	""" Collects the issues found before a program can run, and the notices while it does. """
	_issues : list["Pic"]

	def __init__(self, *, verbose:int=0, max_issues=10):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues
		self.notices = []

	def ok(self): return not self._issues
	def sick(self): return bool(self._issues)

	def issue(self, it:Any):
		self._issues.append(it)
		if len(self._issues) == self._max_issues:
			raise TooManyIssues(self)

	def reset(self):
		self._issues.clear()
		self.notices.clear()

	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self._issues)

	def assert_no_issues(self, message):
		""" Does what it says on the tin """
		if self._issues:
			self.complain_to_console()
			raise AssertionError(_outburst()+" "+message)

	# Methods the front-end calls:
	def lex_error(self, text:str, path:Optional[Path], ex):
		intro = explain(BadSyntax(ex.detail), ex.line)
		problem = [Annotation(_source(text, path), _where(path), ex.offset, 1, ex.detail)]
		self.issue(Pic(intro, problem))

	def generic_parse_error(self, text:str, path:Optional[Path], parse_issue):
		token = parse_issue.token
		intro = explain(BadSyntax(parse_issue.detail), token.line)
		problem = [Annotation(_source(text, path), _where(path), token.offset, max(1, len(token.text)), "The goose got confused here")]
		footer = ["Hint: "+parse_issue.hint] if parse_issue.hint else []
		self.issue(Pic(intro, problem, footer))

	# Methods the command line invokes when the main file won't load:

	def no_such_file(self, path:Path):
		self.issue(Pic("I see no file called "+str(path), []))

	def broken_file(self, path:Path):
		self.issue(Pic("Something went pear-shaped while trying to read "+str(path), []))

	# Methods the interpreter calls:

	def skipped_block(self, line:int):
		""" Unauthorized blocks are not errors, but they don't pass unremarked. """
		self.notices.append(line)
		self._announce(refusal(line))

	@staticmethod
	def _announce(text:str):
		print(text, file=sys.stderr)

class Annotation:
	source: SourceText
	path: str
	offset: int
	width: int
	caption: str
	def __init__(self, source:SourceText, path:str, offset:int, width:int=1, caption:str=""):
		self.source = source
		self.path = path
		self.offset = offset
		self.width = width
		self.caption = caption
	def illustrate(self):
		row, col = self.source.find_row_col(self.offset)
		single_line = self.source.line_of_text(row)
		return illustration(single_line, col, self.width, prefix='% 6d |' % row, caption=self.caption)

class Pic:
	def __init__(self, intro:str, anns:list[Annotation], footer=()):
		self._intro, self._anns, self._footer = intro, anns, footer
	def as_text(self):
		lines = [self._intro, ""]
		path = None
		for ann in self._anns:
			if ann.path != path:
				path = ann.path
				lines.append(str(path))
			lines.append(ann.illustrate())
		lines.extend(self._footer)
		return '\n'.join(lines)

def _where(path:Optional[Path]) -> str:
	return str(path) if path else "<input>"

def _source(text:str, path:Optional[Path]) -> SourceText:
	return SourceText(text, filename=_where(path))

def _bemoan(issues):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=sys.stderr)
		print(_outburst(), file=sys.stderr)
	for i in issues:
		print("  -"*20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()

###############################################################################
#
#  The goose's vocabulary. Each template may use {line} and the fields of the classification.
#

_EXPLAIN = {
	WrongType: [
		"HONK! Line {line}: I wanted a {expected} and you gave me a {got}. Do I look like I eat {got}s?",
		"Line {line}: that's a {got}. I asked for a {expected}. The goose is disappointed.",
		"The goose squints at line {line}. A {got}? Where a {expected} belongs? Disgraceful.",
	],
	UnknownVariable: [
		"HONK! Line {line}: who is '{name}'? I have never met '{name}'. Define your variables.",
		"Line {line}: '{name}' does not exist. You can't just make up names and expect the goose to play along.",
		"The goose searched the whole pond for '{name}' (line {line}). Nothing.",
	],
	UnknownFunction: [
		"HONK! Line {line}: there is no function called '{name}'. Did you forget to define it?",
		"Line {line}: you called '{name}', but '{name}' never answered. Because it doesn't exist.",
	],
	DivisionByZero: [
		"HONK HONK! Line {line}: division by zero. Even geese know better.",
		"Line {line}: you tried to divide by zero. The goose has summoned the math police.",
		"The goose watched you divide by zero on line {line} and is now questioning everything.",
	],
	IndexOutOfBounds: [
		"HONK! Line {line}: index {index} is out of bounds for a list of length {length}.",
		"Line {line}: there's no element {index}. There are only {length}. Count better.",
	],
	InvalidFieldAccess: [
		"HONK! Line {line}: a {type_name} has no field '{field}'.",
		"Line {line}: you went looking for '{field}' on a {type_name}. It isn't there. It never was.",
	],
	ArgumentMismatch: [
		"HONK! Line {line}: {callee} wants {expected} argument(s) and you gave it {got}.",
		"Line {line}: {expected} argument(s) expected, {got} received. The goose does not negotiate.",
	],
	BadSyntax: [
		"HONK! Line {line}: {detail}. Is that supposed to be code?",
		"The goose tried to read line {line} and got a headache: {detail}.",
		"Line {line}: {detail}. The goose has seen better syntax scratched in mud.",
	],
	InvalidOperation: [
		"HONK! Line {line}: {detail}. That's not a thing you can do.",
		"Line {line}: {detail}. The goose refuses to participate in this.",
	],
	AssertionFailed: [
		"HONK! Line {line}: a honk failed. {message}",
		"Line {line}: you promised, and you lied. {message}",
	],
	InstructionLimit: [
		"HONK! The goose stopped your program after {limit} steps. Infinite loop, much?",
		"That's {limit} steps. The goose has better things to do. Program halted.",
	],
	MigrationFailed: [
		"HONK! Line {line}: could not migrate '{target}': {reason}.",
		"Line {line}: the goose tried to fly to '{target}' and crashed: {reason}.",
	],
}

def explain(kind, line:Optional[int]) -> str:
	template = random.choice(_EXPLAIN[type(kind)])
	return template.format(line="?" if line is None else line, **kind._asdict())

_PLAIN = {
	WrongType: "expected {expected} but got {got}",
	UnknownVariable: "unknown variable '{name}'",
	UnknownFunction: "unknown function '{name}'",
	DivisionByZero: "division by zero",
	IndexOutOfBounds: "index {index} out of bounds for length {length}",
	InvalidFieldAccess: "{type_name} has no field '{field}'",
	ArgumentMismatch: "{callee} expects {expected} argument(s) but got {got}",
	BadSyntax: "{detail}",
	InvalidOperation: "{detail}",
	AssertionFailed: "{message}",
	InstructionLimit: "instruction limit of {limit} exceeded",
	MigrationFailed: "could not migrate '{target}': {reason}",
}

def plain_message(kind) -> str:
	""" The sober version. This is what a rescue clause gets to see. """
	return _PLAIN[type(kind)].format(**kind._asdict())

def refusal(line:int) -> str:
	return random.choice([
		"HONK! Block at line {0} was not quacked. The goose refuses to run it.",
		"Line {0}: no quack, no service.",
		"The goose ignores your unquacked block at line {0}. Manners matter.",
		"Line {0} didn't say quack. The goose pretends it doesn't exist.",
		"Unauthorized block at line {0}. The goose has filed a complaint.",
	]).format(line)

def startup() -> str:
	return random.choice([
		"The goose is watching. Quack wisely.",
		"The goose has arrived. Your code will be judged.",
		"HONK. Let's see what you've got.",
	])

def success() -> str:
	return random.choice([
		"The goose grudgingly admits that worked.",
		"Program finished. The goose is mildly less annoyed.",
		"It ran. The goose is not impressed, but it ran.",
	])

def repl_comment() -> str:
	return random.choice(["Hm.", "The goose nods.", "Noted.", "If you say so.", "HONK."])

def goodbye() -> str:
	return random.choice([
		"The goose waddles off. Goodbye.",
		"Finally, some peace and quiet. HONK.",
		"Leaving already? The goose won't miss you.",
	])

###############################################################################
#
#  Rating the program after a run.
#

_QUIPS = {
	1: "The goose weeps for the pond.",
	2: "Barely code. Mostly honking.",
	3: "The goose has seen worse. Not often.",
	4: "Meh. The goose shrugs its wings.",
	5: "Perfectly mediocre.",
	6: "Not bad. The goose is almost interested.",
	7: "Decent. The goose may return.",
	8: "Good work. The goose approves, quietly.",
	9: "Excellent. The goose is impressed, which is rare.",
	10: "Flawless. The goose bows.",
}

def rate_code(stats) -> tuple[int, str]:
	"""
	Mostly about how much of the program was properly quacked,
	with a little credit for structure and a penalty for ignored blocks.
	"""
	ratio = stats.authorized / stats.total_blocks if stats.total_blocks else 1.0
	score = ratio * 7.0
	if stats.functions_defined > 0: score += 1.0
	if stats.functions_defined >= 3: score += 0.5
	if stats.structs_defined > 0: score += 1.0
	if stats.loops_executed > 0: score += 0.5
	score -= min(stats.unauthorized * 0.5, 3.0)
	score = max(1, min(10, int(score + 0.5)))
	return score, _QUIPS[score]

def rating_box(stats) -> str:
	score, quip = rate_code(stats)
	lines = [
		"Goose rated your code: %d/10"%score,
		quip,
		"%d of %d blocks quacked"%(stats.authorized, stats.total_blocks),
	]
	width = max(map(len, lines)) + 2
	border = "+" + "-"*width + "+"
	return "\n".join([border] + ["| %s |"%line.ljust(width - 2) for line in lines] + [border])
