"""
Structural pattern matching. Pure: a match either fails (None)
or produces the bindings it would introduce.
"""
from typing import Optional
from .. import syntax
from .values import Struct, is_number, equal

def match_pattern(pattern:syntax.Pattern, value) -> Optional[dict]:
	bindings = {}
	return bindings if _match(pattern, value, bindings) else None

def _same_kind(a, b) -> bool:
	if isinstance(a, bool) or isinstance(b, bool):
		return isinstance(a, bool) and isinstance(b, bool)
	if is_number(a): return is_number(b)
	return type(a) is type(b)

def _match(pattern, value, bindings:dict) -> bool:
	if isinstance(pattern, syntax.WildcardPattern):
		return True
	if isinstance(pattern, syntax.VariablePattern):
		bindings[pattern.name] = value
		return True
	if isinstance(pattern, syntax.LiteralPattern):
		return _same_kind(pattern.value, value) and equal(pattern.value, value)
	if isinstance(pattern, syntax.ListPattern):
		if not isinstance(value, list) or len(value) != len(pattern.items):
			return False
		return all(_match(p, v, bindings) for p, v in zip(pattern.items, value))
	if isinstance(pattern, syntax.StructPattern):
		if not isinstance(value, Struct) or value.name != pattern.name:
			return False
		for field, sub in pattern.fields:
			if field not in value.fields or not _match(sub, value.fields[field], bindings):
				return False
		return True
	raise NotImplementedError(type(pattern))
