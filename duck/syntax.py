"""
The abstract syntax of Duck.

Nodes are built once by the parser and never changed afterwards,
so loops and recursive calls share them freely.
Bodies of compound statements are tuples of Block, each with its own authorization.
"""
from typing import Optional, Sequence, Union

class Phrase:
	""" Base class for all the syntax. """
	def __repr__(self):
		return "<%s %s>"%(type(self).__name__, ", ".join("%s=%r"%kv for kv in vars(self).items()))

class ValueExpression(Phrase):
	pass

class Statement(Phrase):
	pass

class Pattern(Phrase):
	pass

class Block(Phrase):
	""" A bracketed statement, and whether a quack authorized it. """
	def __init__(self, statement:Statement, authorized:bool, line:int):
		self.statement = statement
		self.authorized = authorized
		self.line = line

BODY = tuple[Block, ...]

class Program(Phrase):
	def __init__(self, blocks:Sequence[Block], path=None):
		self.blocks = tuple(blocks)
		self.path = path

###############################################################################
#  Expressions

class Literal(ValueExpression):
	def __init__(self, value):
		self.value = value

class Lookup(ValueExpression):
	def __init__(self, name:str):
		self.name = name

class BinExp(ValueExpression):
	def __init__(self, lhs:ValueExpression, glyph:str, rhs:ValueExpression):
		self.lhs, self.glyph, self.rhs = lhs, glyph, rhs

class UnaryExp(ValueExpression):
	def __init__(self, glyph:str, arg:ValueExpression):
		self.glyph, self.arg = glyph, arg

class Call(ValueExpression):
	def __init__(self, fn_exp:ValueExpression, args:Sequence[ValueExpression]):
		self.fn_exp = fn_exp
		self.args = tuple(args)

class FieldReference(ValueExpression):
	def __init__(self, lhs:ValueExpression, field_name:str):
		self.lhs, self.field_name = lhs, field_name

class Index(ValueExpression):
	def __init__(self, lhs:ValueExpression, index:ValueExpression):
		self.lhs, self.index = lhs, index

class ExplicitList(ValueExpression):
	def __init__(self, elts:Sequence[ValueExpression]):
		self.elts = tuple(elts)

class LambdaForm(ValueExpression):
	def __init__(self, params:Sequence[str], body:ValueExpression):
		self.params = tuple(params)
		self.body = body

class Interpolation(ValueExpression):
	""" Parts are either plain strings or expressions to be displayed. """
	def __init__(self, parts:Sequence[Union[str, ValueExpression]]):
		self.parts = tuple(parts)

class MatchArm(Phrase):
	""" Exactly one of body or expr is present. """
	def __init__(self, pattern:Pattern, body:Optional[BODY], expr:Optional[ValueExpression]):
		self.pattern, self.body, self.expr = pattern, body, expr

class MatchExpr(ValueExpression):
	def __init__(self, subject:ValueExpression, arms:Sequence[MatchArm]):
		self.subject = subject
		self.arms = tuple(arms)

###############################################################################
#  Statements

class Let(Statement):
	def __init__(self, name:str, expr:ValueExpression):
		self.name, self.expr = name, expr

class Assign(Statement):
	""" The target is a Lookup, FieldReference or Index. """
	def __init__(self, target:ValueExpression, expr:ValueExpression):
		self.target, self.expr = target, expr

class ExpressionStatement(Statement):
	def __init__(self, expr:ValueExpression):
		self.expr = expr

class Print(Statement):
	def __init__(self, expr:ValueExpression):
		self.expr = expr

class FunctionDef(Statement):
	def __init__(self, name:str, params:Sequence[str], body:BODY):
		self.name = name
		self.params = tuple(params)
		self.body = body

class If(Statement):
	def __init__(self, condition:ValueExpression, then_body:BODY, else_body:Optional[BODY]):
		self.condition, self.then_body, self.else_body = condition, then_body, else_body

class Match(Statement):
	def __init__(self, subject:ValueExpression, arms:Sequence[MatchArm]):
		self.subject = subject
		self.arms = tuple(arms)

class Repeat(Statement):
	def __init__(self, count:ValueExpression, body:BODY):
		self.count, self.body = count, body

class While(Statement):
	def __init__(self, condition:ValueExpression, body:BODY):
		self.condition, self.body = condition, body

class ForEach(Statement):
	def __init__(self, variable:str, iterable:ValueExpression, body:BODY):
		self.variable, self.iterable, self.body = variable, iterable, body

class StructDef(Statement):
	def __init__(self, name:str, fields:Sequence[str]):
		self.name = name
		self.fields = tuple(fields)

class Return(Statement):
	def __init__(self, expr:Optional[ValueExpression]):
		self.expr = expr

class Break(Statement):
	pass

class Continue(Statement):
	pass

class Honk(Statement):
	""" An assertion. The message is optional. """
	def __init__(self, condition:ValueExpression, message:Optional[ValueExpression]):
		self.condition, self.message = condition, message

class Push(Statement):
	def __init__(self, target:ValueExpression, expr:ValueExpression):
		self.target, self.expr = target, expr

class Attempt(Statement):
	def __init__(self, body:BODY, error_name:Optional[str], rescue:BODY):
		self.body, self.error_name, self.rescue = body, error_name, rescue

class Migrate(Statement):
	def __init__(self, target:str, alias:Optional[str]):
		self.target, self.alias = target, alias

class Nested(Statement):
	""" An explicit nested group of blocks, run in its own scope. """
	def __init__(self, body:BODY):
		self.body = body

###############################################################################
#  Patterns

class WildcardPattern(Pattern):
	pass

class VariablePattern(Pattern):
	def __init__(self, name:str):
		self.name = name

class LiteralPattern(Pattern):
	def __init__(self, value):
		self.value = value

class ListPattern(Pattern):
	def __init__(self, items:Sequence[Pattern]):
		self.items = tuple(items)

class StructPattern(Pattern):
	def __init__(self, name:str, fields:Sequence[tuple[str, Pattern]]):
		self.name = name
		self.fields = tuple(fields)
