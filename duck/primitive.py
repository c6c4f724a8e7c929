"""
Build the built-in library: every function a Duck program can call without defining it.

Each entry takes positional Duck values and returns a Duck value.
Trouble is reported by raising PrimitiveFailure with a description;
the interpreter turns that into an ordinary runtime error.
The higher-order functions (map, filter and friends) need to call back
into Duck code, so they live with the interpreter instead.
"""
import math
from typing import Callable, NamedTuple, Optional

from .adapters.teletype_adapter import console
from .adapters.fs_adapter import filesystem
from .tree_walker.values import Struct, is_number, type_name, display, deep_copy, equal
from .tree_walker.runtime import truncate

class PrimitiveFailure(Exception):
	pass

class Primitive(NamedTuple):
	fn: Callable
	arity: Optional[int]   # None means "any number"

BUILTINS: dict[str, Primitive] = {}

def _built_in(name:str, arity:Optional[int]=1):
	def register(fn):
		BUILTINS[name] = Primitive(fn, arity)
		return fn
	return register

def _number(x, who:str) -> float:
	if not is_number(x): raise PrimitiveFailure("%s needs a number, not %s"%(who, type_name(x)))
	return float(x)

def _text(x, who:str) -> str:
	if not isinstance(x, str): raise PrimitiveFailure("%s needs a string, not %s"%(who, type_name(x)))
	return x

def _list(x, who:str) -> list:
	if not isinstance(x, list): raise PrimitiveFailure("%s needs a list, not %s"%(who, type_name(x)))
	return x

# Console

@_built_in("input", None)
def _input(*args):
	if len(args) > 1: raise PrimitiveFailure("input takes at most one prompt")
	return console.read(display(args[0]) if args else "")

@_built_in("random", 0)
def _random(): return console.random()

@_built_in("sleep")
def _sleep(seconds):
	console.sleep(_number(seconds, "sleep"))

# Arithmetic

@_built_in("floor")
def _floor(x):
	x = _number(x, "floor")
	return float(math.floor(x)) if math.isfinite(x) else x

@_built_in("ceil")
def _ceil(x):
	x = _number(x, "ceil")
	return float(math.ceil(x)) if math.isfinite(x) else x

@_built_in("abs")
def _abs(x): return abs(_number(x, "abs"))

@_built_in("sqrt")
def _sqrt(x):
	x = _number(x, "sqrt")
	if x < 0: raise PrimitiveFailure("cannot take the square root of a negative number")
	return math.sqrt(x)

@_built_in("pow", 2)
def _pow(base, exponent):
	try: return math.pow(_number(base, "pow"), _number(exponent, "pow"))
	except (ValueError, OverflowError) as ex: raise PrimitiveFailure("pow: %s"%ex)

@_built_in("min", None)
def _min(*args):
	if not args: raise PrimitiveFailure("min needs at least one number")
	return min(_number(a, "min") for a in args)

@_built_in("max", None)
def _max(*args):
	if not args: raise PrimitiveFailure("max needs at least one number")
	return max(_number(a, "max") for a in args)

@_built_in("range", 2)
def _range(start, end):
	start, end = truncate(_number(start, "range")), truncate(_number(end, "range"))
	return [float(i) for i in range(start, end)]

# Types and conversions

@_built_in("type-of")
def _type_of(x): return type_name(x)

@_built_in("string")
def _string(x): return display(x)

@_built_in("number")
def _to_number(x):
	if isinstance(x, bool): return 1.0 if x else 0.0
	if is_number(x): return float(x)
	if isinstance(x, str):
		try: return float(x.strip())
		except ValueError: raise PrimitiveFailure("cannot turn %r into a number"%x)
	raise PrimitiveFailure("cannot turn %s into a number"%type_name(x))

@_built_in("copy")
def _copy(x): return deep_copy(x)

# Lists and strings

@_built_in("len")
def _len(x):
	if isinstance(x, (list, str)): return float(len(x))
	raise PrimitiveFailure("len needs a list or string, not %s"%type_name(x))

@_built_in("pop")
def _pop(xs):
	xs = _list(xs, "pop")
	if not xs: raise PrimitiveFailure("cannot pop from an empty list")
	return xs.pop()

@_built_in("reverse")
def _reverse(x):
	if isinstance(x, (list, str)): return x[::-1]
	raise PrimitiveFailure("reverse needs a list or string, not %s"%type_name(x))

@_built_in("contains", 2)
def _contains(haystack, needle):
	if isinstance(haystack, str): return _text(needle, "contains") in haystack
	if isinstance(haystack, list): return any(equal(x, needle) for x in haystack)
	raise PrimitiveFailure("contains needs a list or string, not %s"%type_name(haystack))

@_built_in("upper")
def _upper(s): return _text(s, "upper").upper()

@_built_in("lower")
def _lower(s): return _text(s, "lower").lower()

@_built_in("trim")
def _trim(s): return _text(s, "trim").strip()

@_built_in("split", 2)
def _split(s, sep):
	s, sep = _text(s, "split"), _text(sep, "split")
	return list(s) if sep == "" else s.split(sep)

@_built_in("join", 2)
def _join(xs, sep):
	return _text(sep, "join").join(display(x) for x in _list(xs, "join"))

@_built_in("keys")
def _keys(x):
	if isinstance(x, Struct): return list(x.fields)
	raise PrimitiveFailure("keys needs a struct, not %s"%type_name(x))

# Files

def _file_trouble(verb, path, ex:OSError):
	return PrimitiveFailure("could not %s %s: %s"%(verb, path, ex.strerror or ex))

@_built_in("read-file")
def _read_file(path):
	try: return filesystem.read_file(_text(path, "read-file"))
	except OSError as ex: raise _file_trouble("read", path, ex)

@_built_in("read-lines")
def _read_lines(path):
	try: return filesystem.read_lines(_text(path, "read-lines"))
	except OSError as ex: raise _file_trouble("read", path, ex)

@_built_in("write-file", 2)
def _write_file(path, text):
	try: filesystem.write_file(_text(path, "write-file"), display(text))
	except OSError as ex: raise _file_trouble("write", path, ex)

@_built_in("append-file", 2)
def _append_file(path, text):
	try: filesystem.append_file(_text(path, "append-file"), display(text))
	except OSError as ex: raise _file_trouble("append to", path, ex)

@_built_in("file-exists")
def _file_exists(path): return filesystem.exists(_text(path, "file-exists"))
