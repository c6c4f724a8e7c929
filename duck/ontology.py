"""
These most-fundamental classes are separate from the rest
to avoid various circular-import scenarios.

The interpreter never composes the words a user sees when something goes wrong.
It raises one of the exceptions below carrying a *classification*,
and the diagnostics module decides how to say it.
"""
from typing import NamedTuple, Optional

class WrongType(NamedTuple):
	expected: str
	got: str

class UnknownVariable(NamedTuple):
	name: str

class UnknownFunction(NamedTuple):
	name: str

class DivisionByZero(NamedTuple):
	pass

class IndexOutOfBounds(NamedTuple):
	index: int
	length: int

class InvalidFieldAccess(NamedTuple):
	type_name: str
	field: str

class ArgumentMismatch(NamedTuple):
	expected: int
	got: int
	callee: str

class BadSyntax(NamedTuple):
	detail: str

class InvalidOperation(NamedTuple):
	detail: str

class AssertionFailed(NamedTuple):
	message: str

class InstructionLimit(NamedTuple):
	limit: int

class MigrationFailed(NamedTuple):
	target: str
	reason: str


class DuckError(Exception):
	""" Something went wrong while running a Duck program. """
	def __init__(self, kind, line:Optional[int]=None):
		super().__init__(kind)
		self.kind = kind
		self.line = line

	def locate(self, line:int):
		""" The innermost block gets to say where it happened. """
		if self.line is None:
			self.line = line

	def __str__(self):
		return "%s at line %s"%(self.kind, self.line)

class DuckRuntimeError(DuckError):
	""" The sort of failure an attempt-block can rescue. """

class RunawayProgram(DuckError):
	""" The instruction governor pulled the plug. Nothing rescues this. """
