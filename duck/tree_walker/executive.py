"""
This is the overall control for the run-time:
statements, calls, scopes, the instruction governor and migration.

Statement execution produces a signal. Bodies stop at the first signal
that isn't PROCEED and hand it outward; loops absorb BREAK and CONTINUE,
and function calls absorb Return.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import NamedTuple, Optional, Sequence

from boozetools.support.foundation import Visitor

from .. import syntax, primitive
from ..diagnostics import Report, plain_message
from ..environment import Environment, ABSENT
from ..modularity import resolve_target, load_program, default_package_roots, MigrationError
from ..ontology import (
	DuckError, DuckRuntimeError, RunawayProgram,
	WrongType, UnknownVariable, ArgumentMismatch, InvalidOperation,
	AssertionFailed, InstructionLimit, MigrationFailed,
)
from .evaluator import evaluate
from .patterns import match_pattern
from .runtime import truncate, store_field, store_item
from .values import Struct, StructType, Function, Lambda, Builtin, type_name, truthy, display, is_number

DEFAULT_MAX_INSTRUCTIONS = 10_000_000

class _Signal:
	def __init__(self, name): self.name = name
	def __repr__(self): return self.name

PROCEED = _Signal("PROCEED")
BREAK = _Signal("BREAK")
CONTINUE = _Signal("CONTINUE")

class Return(NamedTuple):
	value: object

class ExecutionStats:
	def __init__(self):
		self.authorized = 0
		self.unauthorized = 0
		self.functions_defined = 0
		self.structs_defined = 0
		self.loops_executed = 0
		self.instructions = 0

	@property
	def total_blocks(self): return self.authorized + self.unauthorized

# Built-ins that call back into Duck code, and how many arguments each takes.
HIGHER_ORDER = {"map": 2, "filter": 2, "fold": 3, "find": 2, "any": 2, "all": 2}

class Interpreter(Visitor):
	def __init__(self, report:Report, *, max_instructions:Optional[int]=DEFAULT_MAX_INSTRUCTIONS, package_roots:Sequence[Path]=None):
		self.report = report
		self.max_instructions = max_instructions or None
		self.package_roots = default_package_roots() if package_roots is None else list(package_roots)
		self.globals = Environment()
		self.env = self.globals
		self.home = self.globals
		self.here = Path.cwd()
		self.imported = set()
		self.stats = ExecutionStats()

	@contextmanager
	def inside(self, env:Environment):
		outer = self.env
		self.env = env
		try: yield
		finally: self.env = outer

	@contextmanager
	def _module(self, scope:Environment, directory:Path):
		""" Top-level code of a program or migrated file runs here; its functions call home to here. """
		saved = self.env, self.home, self.here
		self.env, self.home, self.here = scope, scope, directory
		try: yield
		finally: self.env, self.home, self.here = saved

	# Entry points

	def run(self, program:syntax.Program):
		if program.path is None:
			self._top_level(program.blocks)
		else:
			path = Path(program.path).resolve()
			self.imported.add(path)
			with self._module(self.globals, path.parent):
				self._top_level(program.blocks)

	def run_block(self, block:syntax.Block):
		""" For the REPL: run one top-level block, giving back the value of a bare expression (or ABSENT). """
		if block.authorized and isinstance(block.statement, syntax.ExpressionStatement):
			self.stats.authorized += 1
			try:
				self._tick()
				return evaluate(block.statement.expr, self)
			except DuckError as ex:
				ex.locate(block.line)
				raise
		self.execute_block(block)
		return ABSENT

	def _top_level(self, blocks:Sequence[syntax.Block]):
		# Stray break, continue and return signals at the top level go nowhere.
		for block in blocks:
			self.execute_block(block)

	# Blocks, bodies and the governor

	def _tick(self):
		self.stats.instructions += 1
		if self.max_instructions and self.stats.instructions > self.max_instructions:
			raise RunawayProgram(InstructionLimit(self.max_instructions))

	def execute_block(self, block:syntax.Block):
		if not block.authorized:
			self.stats.unauthorized += 1
			self.report.skipped_block(block.line)
			return PROCEED
		self.stats.authorized += 1
		try:
			self._tick()
			return self.visit(block.statement)
		except DuckError as ex:
			ex.locate(block.line)
			raise
		except RecursionError:
			raise DuckRuntimeError(InvalidOperation("call stack too deep"), block.line)

	def execute_body(self, body:syntax.BODY, env:Environment=None):
		with self.inside(env or self.env.child()):
			for block in body:
				signal = self.execute_block(block)
				if signal is not PROCEED:
					return signal
		return PROCEED

	# Names and calls

	@staticmethod
	def is_builtin(name:str) -> bool:
		return name in primitive.BUILTINS or name in HIGHER_ORDER

	def lookup(self, name:str):
		value = self.env.get(name)
		if value is ABSENT:
			if self.is_builtin(name):
				return Builtin(name)
			raise DuckRuntimeError(UnknownVariable(name))
		return value

	def call(self, callee, args:list):
		try:
			if isinstance(callee, Function):
				_check_arity(callee.name, len(callee.params), args)
				frame = self._call_frame(callee, args)
				if frame.get(callee.name) is ABSENT:
					frame.define(callee.name, callee)
				signal = self.execute_body(callee.body, frame)
				if isinstance(signal, Return):
					return signal.value
				if signal is not PROCEED:
					raise DuckRuntimeError(InvalidOperation("%s outside of a loop"%signal.name.lower()))
				return None
			if isinstance(callee, Lambda):
				_check_arity("lambda", len(callee.params), args)
				with self.inside(self._call_frame(callee, args)):
					return evaluate(callee.body, self)
			if isinstance(callee, Builtin):
				return self._call_builtin(callee.name, args)
			if isinstance(callee, StructType):
				_check_arity(callee.name, len(callee.fields), args)
				return callee.construct(args)
		except RecursionError:
			raise DuckRuntimeError(InvalidOperation("call stack too deep"))
		raise DuckRuntimeError(InvalidOperation("cannot call %s"%type_name(callee)))

	@staticmethod
	def _call_frame(callee, args:list) -> Environment:
		"""
		Parameters first, then whatever the closure captured (unless a parameter shadows it).
		The frame hangs from the callee's home, never from the caller.
		"""
		frame = Environment(callee.home)
		for name, value in zip(callee.params, args):
			frame.define(name, value)
		for name, value in callee.closure.items():
			if name not in callee.params:
				frame.define(name, value)
		return frame

	def _call_builtin(self, name:str, args:list):
		if name in HIGHER_ORDER:
			_check_arity(name, HIGHER_ORDER[name], args)
			return getattr(self, "_ho_"+name)(*args)
		fn, arity = primitive.BUILTINS[name]
		if arity is not None:
			_check_arity(name, arity, args)
		try: return fn(*args)
		except primitive.PrimitiveFailure as ex:
			raise DuckRuntimeError(InvalidOperation(str(ex)))

	@staticmethod
	def _items(xs) -> list:
		if not isinstance(xs, list):
			raise DuckRuntimeError(WrongType("list", type_name(xs)))
		return list(xs)

	def _ho_map(self, xs, fn):
		return [self.call(fn, [x]) for x in self._items(xs)]

	def _ho_filter(self, xs, fn):
		return [x for x in self._items(xs) if truthy(self.call(fn, [x]))]

	def _ho_fold(self, xs, initial, fn):
		accumulator = initial
		for x in self._items(xs):
			accumulator = self.call(fn, [accumulator, x])
		return accumulator

	def _ho_find(self, xs, fn):
		for x in self._items(xs):
			if truthy(self.call(fn, [x])): return x
		return None

	def _ho_any(self, xs, fn):
		return any(truthy(self.call(fn, [x])) for x in self._items(xs))

	def _ho_all(self, xs, fn):
		return all(truthy(self.call(fn, [x])) for x in self._items(xs))

	# Statements

	def visit_Let(self, stmt:syntax.Let):
		self.env.define(stmt.name, evaluate(stmt.expr, self))
		return PROCEED

	def visit_Assign(self, stmt:syntax.Assign):
		value = evaluate(stmt.expr, self)
		target = stmt.target
		if isinstance(target, syntax.Lookup):
			# Assigning to a name nobody has defined quietly defines it right here.
			if not self.env.assign(target.name, value):
				self.env.define(target.name, value)
		elif isinstance(target, syntax.FieldReference):
			store_field(evaluate(target.lhs, self), target.field_name, value)
		else:
			store_item(evaluate(target.lhs, self), evaluate(target.index, self), value)
		return PROCEED

	def visit_ExpressionStatement(self, stmt:syntax.ExpressionStatement):
		evaluate(stmt.expr, self)
		return PROCEED

	def visit_Print(self, stmt:syntax.Print):
		print(display(evaluate(stmt.expr, self)))
		return PROCEED

	def visit_FunctionDef(self, stmt:syntax.FunctionDef):
		fn = Function(stmt.name, stmt.params, stmt.body, self.env.capture(), self.home)
		self.env.define(stmt.name, fn)
		self.stats.functions_defined += 1
		return PROCEED

	def visit_StructDef(self, stmt:syntax.StructDef):
		self.env.define(stmt.name, StructType(stmt.name, stmt.fields))
		self.stats.structs_defined += 1
		return PROCEED

	def visit_If(self, stmt:syntax.If):
		if truthy(evaluate(stmt.condition, self)):
			return self.execute_body(stmt.then_body)
		if stmt.else_body is not None:
			return self.execute_body(stmt.else_body)
		return PROCEED

	def visit_Match(self, stmt:syntax.Match):
		subject = evaluate(stmt.subject, self)
		for arm in stmt.arms:
			bindings = match_pattern(arm.pattern, subject)
			if bindings is None:
				continue
			frame = self.env.child()
			for name, value in bindings.items():
				frame.define(name, value)
			if arm.body is not None:
				return self.execute_body(arm.body, frame)
			with self.inside(frame):
				evaluate(arm.expr, self)
			return PROCEED
		return PROCEED

	def visit_Repeat(self, stmt:syntax.Repeat):
		count = evaluate(stmt.count, self)
		if not is_number(count):
			raise DuckRuntimeError(WrongType("number", type_name(count)))
		self.stats.loops_executed += 1
		for _ in range(max(0, truncate(count))):
			self._tick()
			signal = self.execute_body(stmt.body)
			if signal is BREAK: break
			if isinstance(signal, Return): return signal
		return PROCEED

	def visit_While(self, stmt:syntax.While):
		self.stats.loops_executed += 1
		while truthy(evaluate(stmt.condition, self)):
			self._tick()
			signal = self.execute_body(stmt.body)
			if signal is BREAK: break
			if isinstance(signal, Return): return signal
		return PROCEED

	def visit_ForEach(self, stmt:syntax.ForEach):
		iterable = evaluate(stmt.iterable, self)
		if isinstance(iterable, (list, str)):
			items = list(iterable)   # A snapshot: pushing inside the loop won't extend it.
		else:
			raise DuckRuntimeError(WrongType("list or string", type_name(iterable)))
		self.stats.loops_executed += 1
		for item in items:
			self._tick()
			frame = self.env.child()
			frame.define(stmt.variable, item)
			signal = self.execute_body(stmt.body, frame)
			if signal is BREAK: break
			if isinstance(signal, Return): return signal
		return PROCEED

	def visit_Return(self, stmt:syntax.Return):
		return Return(None if stmt.expr is None else evaluate(stmt.expr, self))

	def visit_Break(self, stmt:syntax.Break): return BREAK

	def visit_Continue(self, stmt:syntax.Continue): return CONTINUE

	def visit_Honk(self, stmt:syntax.Honk):
		if not truthy(evaluate(stmt.condition, self)):
			message = "" if stmt.message is None else display(evaluate(stmt.message, self))
			raise DuckRuntimeError(AssertionFailed(message))
		return PROCEED

	def visit_Push(self, stmt:syntax.Push):
		target = evaluate(stmt.target, self)
		if not isinstance(target, list):
			raise DuckRuntimeError(WrongType("list", type_name(target)))
		target.append(evaluate(stmt.expr, self))
		return PROCEED

	def visit_Attempt(self, stmt:syntax.Attempt):
		try:
			return self.execute_body(stmt.body)
		except DuckRuntimeError as ex:
			self.report.info("Rescued:", ex)
			frame = self.env.child()
			if stmt.error_name is not None:
				frame.define(stmt.error_name, plain_message(ex.kind))
			return self.execute_body(stmt.rescue, frame)

	def visit_Nested(self, stmt:syntax.Nested):
		return self.execute_body(stmt.body)

	def visit_Migrate(self, stmt:syntax.Migrate):
		path = resolve_target(stmt.target, self.here, self.package_roots)
		if path in self.imported:
			self.report.info("Already migrated:", path)
			return PROCEED
		try: program = load_program(path, self.report)
		except MigrationError as ex:
			raise DuckRuntimeError(MigrationFailed(stmt.target, str(ex)))
		self.imported.add(path)
		scope = self.env.child() if stmt.alias else self.env
		try:
			with self._module(scope, path.parent):
				self._top_level(program.blocks)
		except DuckRuntimeError as ex:
			reason = "%s at line %s of %s"%(plain_message(ex.kind), ex.line, path.name)
			raise DuckRuntimeError(MigrationFailed(stmt.target, reason))
		if stmt.alias:
			self.env.define(stmt.alias, Struct(stmt.alias, scope.bindings()))
		return PROCEED

def _check_arity(callee:str, expected:int, args:list):
	if len(args) != expected:
		raise DuckRuntimeError(ArgumentMismatch(expected, len(args), callee))

def run_program(program:syntax.Program, report:Report, **kwargs) -> Interpreter:
	interpreter = Interpreter(report, **kwargs)
	interpreter.run(program)
	return interpreter
