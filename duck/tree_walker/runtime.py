"""
Operators and the other primitive operations on values.
Each one either returns a value or raises DuckRuntimeError with a classification.
"""
import math
import operator
from ..ontology import (
	DuckRuntimeError, WrongType, DivisionByZero, IndexOutOfBounds,
	InvalidFieldAccess, InvalidOperation,
)
from .values import Struct, is_number, type_name, truthy, equal

def _refuse(a, glyph, b):
	raise DuckRuntimeError(InvalidOperation("cannot apply %s to %s and %s"%(glyph, type_name(a), type_name(b))))

def truncate(n) -> int:
	""" Toward zero, saturating the way a float-to-integer cast does. NaN is zero. """
	if n != n: return 0
	if math.isinf(n): return -(2**63) if n < 0 else 2**63 - 1
	return int(n)

def _add(a, b):
	if is_number(a) and is_number(b): return float(a + b)
	if isinstance(a, str) and isinstance(b, str): return a + b
	_refuse(a, "+", b)

def _repeat(text:str, count):
	if math.isinf(count):
		raise DuckRuntimeError(InvalidOperation("cannot repeat a string infinitely many times"))
	return text * max(0, truncate(count))

def _mul(a, b):
	if is_number(a) and is_number(b): return float(a * b)
	if isinstance(a, str) and is_number(b): return _repeat(a, b)
	if is_number(a) and isinstance(b, str): return _repeat(b, a)
	_refuse(a, "*", b)

def _numeric(fn, glyph):
	def op(a, b):
		if is_number(a) and is_number(b): return fn(a, b)
		_refuse(a, glyph, b)
	return op

def _div(a, b):
	if b == 0: raise DuckRuntimeError(DivisionByZero())
	return a / b

def _mod(a, b):
	if b == 0: raise DuckRuntimeError(DivisionByZero())
	return math.fmod(a, b)

def _pow(a, b):
	try: return math.pow(a, b)
	except OverflowError: return math.inf
	except ValueError:
		if a == 0: return math.inf
		return math.nan

def _order(fn, glyph):
	def op(a, b):
		if is_number(a) and is_number(b): return fn(a, b)
		if isinstance(a, str) and isinstance(b, str): return fn(a, b)
		_refuse(a, glyph, b)
	return op

def _concat(a, b):
	if isinstance(a, str) and isinstance(b, str): return a + b
	if isinstance(a, list) and isinstance(b, list): return a + b
	_refuse(a, "++", b)

BINARY = {
	"+": _add,
	"-": _numeric(operator.sub, "-"),
	"*": _mul,
	"/": _numeric(_div, "/"),
	"%": _numeric(_mod, "%"),
	"**": _numeric(_pow, "**"),
	"<": _order(operator.lt, "<"),
	"<=": _order(operator.le, "<="),
	">": _order(operator.gt, ">"),
	">=": _order(operator.ge, ">="),
	"==": equal,
	"!=": lambda a, b: not equal(a, b),
	"and": lambda a, b: truthy(a) and truthy(b),
	"or": lambda a, b: truthy(a) or truthy(b),
	"++": _concat,
}

def _negate(a):
	if is_number(a): return -float(a)
	raise DuckRuntimeError(InvalidOperation("cannot negate %s"%type_name(a)))

UNARY = {
	"-": _negate,
	"not": lambda a: not truthy(a),
}

def _position(index, length:int) -> int:
	if not is_number(index):
		raise DuckRuntimeError(WrongType("number", type_name(index)))
	i = truncate(index)
	actual = i + length if i < 0 else i
	if actual < 0 or actual >= length:
		raise DuckRuntimeError(IndexOutOfBounds(i, length))
	return actual

def fetch_item(subject, index):
	if isinstance(subject, list):
		return subject[_position(index, len(subject))]
	if isinstance(subject, str):
		return subject[_position(index, len(subject))]
	raise DuckRuntimeError(WrongType("list or string", type_name(subject)))

def store_item(subject, index, value):
	if not isinstance(subject, list):
		raise DuckRuntimeError(WrongType("list", type_name(subject)))
	subject[_position(index, len(subject))] = value

def fetch_field(subject, field:str):
	if isinstance(subject, Struct):
		try: return subject.fields[field]
		except KeyError: pass
	raise DuckRuntimeError(InvalidFieldAccess(type_name(subject), field))

def store_field(subject, field:str, value):
	if not isinstance(subject, Struct):
		raise DuckRuntimeError(InvalidFieldAccess(type_name(subject), field))
	subject.fields[field] = value
