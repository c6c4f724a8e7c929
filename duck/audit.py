"""
Find every block the goose would refuse, without running anything.
Nested bodies count too, however deep.
"""
from boozetools.support.foundation import Visitor
from . import syntax

class AuthorizationAudit(Visitor):
	"""
	Walk every block in the program, top-down.
	Statements without bodies have nothing further to visit.
	"""
	def __init__(self):
		self.unauthorized = []
		self.total = 0

	def visit_Program(self, program:syntax.Program):
		self.visit_body(program.blocks)

	def visit_body(self, body:syntax.BODY):
		for block in body:
			self.visit_Block(block)

	def visit_Block(self, block:syntax.Block):
		self.total += 1
		if not block.authorized:
			self.unauthorized.append(block.line)
		self.visit(block.statement)

	def visit_FunctionDef(self, it:syntax.FunctionDef): self.visit_body(it.body)
	def visit_Repeat(self, it:syntax.Repeat): self.visit_body(it.body)
	def visit_While(self, it:syntax.While): self.visit_body(it.body)
	def visit_ForEach(self, it:syntax.ForEach): self.visit_body(it.body)
	def visit_Nested(self, it:syntax.Nested): self.visit_body(it.body)

	def visit_If(self, it:syntax.If):
		self.visit_body(it.then_body)
		if it.else_body is not None:
			self.visit_body(it.else_body)

	def visit_Match(self, it:syntax.Match):
		for arm in it.arms:
			if arm.body is not None:
				self.visit_body(arm.body)

	def visit_Attempt(self, it:syntax.Attempt):
		self.visit_body(it.body)
		self.visit_body(it.rescue)

	def visit_Let(self, it): pass
	def visit_Assign(self, it): pass
	def visit_ExpressionStatement(self, it): pass
	def visit_Print(self, it): pass
	def visit_StructDef(self, it): pass
	def visit_Return(self, it): pass
	def visit_Break(self, it): pass
	def visit_Continue(self, it): pass
	def visit_Honk(self, it): pass
	def visit_Push(self, it): pass
	def visit_Migrate(self, it): pass

def unauthorized_lines(program:syntax.Program) -> list[int]:
	audit = AuthorizationAudit()
	audit.visit(program)
	return audit.unauthorized
