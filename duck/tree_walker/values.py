"""
Runtime values.

Numbers, strings, booleans and null are plain Python float, str, bool and None.
Lists are Python lists, so every alias shares the same storage.
The rest get small classes here.
"""
from typing import Mapping, Sequence
from .. import syntax

class Struct:
	""" An instance. The field map is shared by every alias, like a list. """
	def __init__(self, name:str, fields:dict):
		self.name = name
		self.fields = fields

class StructType:
	def __init__(self, name:str, fields:Sequence[str]):
		self.name = name
		self.fields = tuple(fields)

	def construct(self, args:Sequence) -> Struct:
		return Struct(self.name, dict(zip(self.fields, args)))

class Function:
	"""
	A named user-defined function.
	The home is the scope its call frames hang from:
	the top level of whatever program or module defined it.
	"""
	def __init__(self, name:str, params:Sequence[str], body:syntax.BODY, closure:Mapping, home):
		self.name = name
		self.params = tuple(params)
		self.body = body
		self.closure = closure
		self.home = home

class Lambda:
	def __init__(self, params:Sequence[str], body:syntax.ValueExpression, closure:Mapping, home):
		self.params = tuple(params)
		self.body = body
		self.closure = closure
		self.home = home

class Builtin:
	""" A reference to something in the built-in library, by name. """
	def __init__(self, name:str):
		self.name = name

def is_number(x) -> bool:
	return isinstance(x, (int, float)) and not isinstance(x, bool)

def type_name(x) -> str:
	if x is None: return "null"
	if isinstance(x, bool): return "boolean"
	if is_number(x): return "number"
	if isinstance(x, str): return "string"
	if isinstance(x, list): return "list"
	if isinstance(x, Struct): return x.name
	if isinstance(x, Function): return "function"
	if isinstance(x, Lambda): return "lambda"
	if isinstance(x, Builtin): return "builtin"
	if isinstance(x, StructType): return x.name
	raise TypeError(x)

def truthy(x) -> bool:
	if x is None or x is False: return False
	if is_number(x): return x != 0
	if isinstance(x, (str, list)): return len(x) > 0
	return True

def number_text(n) -> str:
	n = float(n)
	if n.is_integer() and abs(n) < 1e15:
		return str(int(n))
	if n != n: return "NaN"
	return repr(n)

def display(x, showing=frozenset()) -> str:
	"""
	How print shows a value. Strings come out bare, except inside lists.
	A list or struct that turns up inside itself is shown as an ellipsis.
	"""
	if x is None: return "null"
	if isinstance(x, bool): return "true" if x else "false"
	if is_number(x): return number_text(x)
	if isinstance(x, str): return x
	if isinstance(x, list):
		if id(x) in showing: return "[...]"
		showing = showing | {id(x)}
		return "[%s]" % ", ".join(_element(e, showing) for e in x)
	if isinstance(x, Struct):
		if id(x) in showing: return "%s { ... }" % x.name
		showing = showing | {id(x)}
		return "%s { %s }" % (x.name, ", ".join("%s: %s"%(k, display(v, showing)) for k, v in x.fields.items()))
	if isinstance(x, Function): return "<function %s(%s)>" % (x.name, ", ".join(x.params))
	if isinstance(x, Lambda): return "<lambda (%s)>" % ", ".join(x.params)
	if isinstance(x, Builtin): return "<builtin %s>" % x.name
	if isinstance(x, StructType): return "<struct %s { %s }>" % (x.name, ", ".join(x.fields))
	raise TypeError(x)

def _element(x, showing) -> str:
	if isinstance(x, str): return '"%s"' % x
	return display(x, showing)

def equal(a, b, comparing=frozenset()) -> bool:
	"""
	Structural equality. Values of different kinds are merely unequal, never an error.
	A pair of containers met again while still comparing them counts as equal.
	"""
	if isinstance(a, bool) or isinstance(b, bool):
		return isinstance(a, bool) and isinstance(b, bool) and a == b
	if is_number(a) and is_number(b):
		return a == b or (a != a and b != b)
	if a is None or b is None: return a is b
	if isinstance(a, str) and isinstance(b, str): return a == b
	if isinstance(a, list) and isinstance(b, list):
		if (id(a), id(b)) in comparing: return True
		comparing = comparing | {(id(a), id(b))}
		return len(a) == len(b) and all(equal(x, y, comparing) for x, y in zip(a, b))
	if isinstance(a, Struct) and isinstance(b, Struct):
		if (id(a), id(b)) in comparing: return True
		comparing = comparing | {(id(a), id(b))}
		return (
			a.name == b.name
			and a.fields.keys() == b.fields.keys()
			and all(equal(v, b.fields[k], comparing) for k, v in a.fields.items())
		)
	if isinstance(a, Function) and isinstance(b, Function): return a.name == b.name and a.params == b.params
	if isinstance(a, Lambda) and isinstance(b, Lambda): return a.params == b.params
	if isinstance(a, Builtin) and isinstance(b, Builtin): return a.name == b.name
	if isinstance(a, StructType) and isinstance(b, StructType): return a.name == b.name and a.fields == b.fields
	return False

def deep_copy(x, making=None):
	"""
	Fresh storage all the way down. Callables are shared; they never change anyway.
	A container found inside itself refers to its own copy, so cycles survive.
	"""
	if not isinstance(x, (list, Struct)): return x
	if making is None: making = {}
	if id(x) in making: return making[id(x)]
	if isinstance(x, list):
		copy = making[id(x)] = []
		copy.extend(deep_copy(e, making) for e in x)
	else:
		copy = making[id(x)] = Struct(x.name, {})
		copy.fields.update((k, deep_copy(v, making)) for k, v in x.fields.items())
	del making[id(x)]
	return copy
