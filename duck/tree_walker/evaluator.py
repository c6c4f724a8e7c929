"""
Expression evaluation: one _eval_* function per kind of expression,
gathered into the EVALUATE table by the type annotation on "expr".

Statements are the interpreter's business (see executive);
expressions only need it to look up names and call things.
"""
from .. import syntax
from ..ontology import DuckRuntimeError, UnknownFunction
from ..environment import ABSENT
from . import runtime, patterns
from .values import Lambda, Builtin, display

def evaluate(expr:syntax.ValueExpression, interp):
	try: fn = EVALUATE[type(expr)]
	except KeyError: raise NotImplementedError(type(expr), expr)
	return fn(expr, interp)

EVALUATE = {}

def attach_evaluation_methods(python_scope):
	for _k, _v in list(python_scope.items()):
		if _k.startswith("_eval_"):
			_t = _v.__annotations__["expr"]
			assert isinstance(_t, type), (_k, _t)
			EVALUATE[_t] = _v

###############################################################################

def _eval_literal(expr:syntax.Literal, interp):
	return expr.value

def _eval_lookup(expr:syntax.Lookup, interp):
	return interp.lookup(expr.name)

def _eval_bin_exp(expr:syntax.BinExp, interp):
	# Both sides, always. Duck has no short-circuit.
	lhs = evaluate(expr.lhs, interp)
	rhs = evaluate(expr.rhs, interp)
	return runtime.BINARY[expr.glyph](lhs, rhs)

def _eval_unary_exp(expr:syntax.UnaryExp, interp):
	return runtime.UNARY[expr.glyph](evaluate(expr.arg, interp))

def _eval_call(expr:syntax.Call, interp):
	if isinstance(expr.fn_exp, syntax.Lookup):
		name = expr.fn_exp.name
		callee = interp.env.get(name)
		if callee is ABSENT:
			if not interp.is_builtin(name):
				raise DuckRuntimeError(UnknownFunction(name))
			callee = Builtin(name)
	else:
		callee = evaluate(expr.fn_exp, interp)
	args = [evaluate(a, interp) for a in expr.args]
	return interp.call(callee, args)

def _eval_field_reference(expr:syntax.FieldReference, interp):
	return runtime.fetch_field(evaluate(expr.lhs, interp), expr.field_name)

def _eval_index(expr:syntax.Index, interp):
	subject = evaluate(expr.lhs, interp)
	return runtime.fetch_item(subject, evaluate(expr.index, interp))

def _eval_explicit_list(expr:syntax.ExplicitList, interp):
	return [evaluate(e, interp) for e in expr.elts]

def _eval_lambda_form(expr:syntax.LambdaForm, interp):
	return Lambda(expr.params, expr.body, interp.env.capture(), interp.home)

def _eval_interpolation(expr:syntax.Interpolation, interp):
	return "".join(p if isinstance(p, str) else display(evaluate(p, interp)) for p in expr.parts)

def _eval_match_expr(expr:syntax.MatchExpr, interp):
	subject = evaluate(expr.subject, interp)
	for arm in expr.arms:
		bindings = patterns.match_pattern(arm.pattern, subject)
		if bindings is not None:
			with interp.inside(interp.env.child()):
				for name, value in bindings.items():
					interp.env.define(name, value)
				return evaluate(arm.expr, interp)
	return None

attach_evaluation_methods(globals())
