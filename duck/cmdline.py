"""
This is an interpreter for the Duck programming language,
where nothing runs unless you quack first.

{0}

For example:

    goose program.duck

will run program.duck if the goose allows it, or else explain why not.

    goose -c program.duck

will list every block that is missing its quack, without running anything.

    goose

with no program starts an interactive session.
"""
import sys, argparse
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

parser = argparse.ArgumentParser(
	prog="goose",
	description="Interpreter for the Duck programming language.",
)
parser.add_argument("program", nargs="?", help="try examples/hello.duck for example. Leave it out for an interactive session.")
parser.add_argument('-c', "--check", action="store_true", help="Parse the program and list unauthorized blocks, but do not run it.")
parser.add_argument('-v', "--verbose", action="count", help="Say more about what's going on.")
parser.add_argument("--max-steps", type=int, default=None, help="Stop a program after this many steps. Zero means no limit.")
parser.add_argument("--packages", action="append", type=Path, help="Another place to look for @package migrations. May repeat.")

def _interpreter(args, report):
	from .modularity import default_package_roots
	from .tree_walker.executive import Interpreter, DEFAULT_MAX_INSTRUCTIONS
	steps = DEFAULT_MAX_INSTRUCTIONS if args.max_steps is None else args.max_steps
	roots = (args.packages or []) + default_package_roots()
	return Interpreter(report, max_instructions=steps, package_roots=roots)

def run(args):
	from .diagnostics import Report, TooManyIssues, explain, startup, success, rating_box
	from .front_end import parse_text
	from .ontology import DuckError
	report = Report(verbose=args.verbose)
	path = Path.cwd() / args.program
	try:
		try:
			with open(path, "r", encoding="utf-8") as fh:
				text = fh.read()
		except FileNotFoundError:
			report.no_such_file(path)
		except OSError:
			report.broken_file(path)
		else:
			program = parse_text(text, path, report)
		if report.sick():
			report.complain_to_console()
			return 1
	except TooManyIssues:
		report.complain_to_console()
		print(" *"*35, file=sys.stderr)
		print("Giving up after a few issues. One crisis at a time, eh?", file=sys.stderr)
		return 1
	if args.check:
		return check(program)
	interpreter = _interpreter(args, report)
	print(startup(), file=sys.stderr)
	status = 0
	try:
		interpreter.run(program)
	except DuckError as ex:
		print(explain(ex.kind, ex.line), file=sys.stderr)
		status = 1
	else:
		print(success(), file=sys.stderr)
	print(rating_box(interpreter.stats), file=sys.stderr)
	return status

def check(program):
	from .audit import AuthorizationAudit
	audit = AuthorizationAudit()
	audit.visit(program)
	if audit.unauthorized:
		for line in audit.unauthorized:
			print("Line %d: block is not quacked."%line)
		print("%d of %d blocks lack a quack."%(len(audit.unauthorized), audit.total), file=sys.stderr)
		return 1
	print("Every block is quacked. The goose is almost satisfied.", file=sys.stderr)

def repl(args):
	from .diagnostics import Report, TooManyIssues, explain, startup, repl_comment, goodbye
	from .environment import ABSENT
	from .front_end import parse_text
	from .ontology import DuckError
	from .tree_walker.values import display
	report = Report(verbose=args.verbose)
	interpreter = _interpreter(args, report)
	print(startup())
	print("Type 'exit' to leave. Remember to quack.")
	while True:
		try: line = input("duck> ")
		except EOFError: break
		if line.strip() in ("exit", "quit"): break
		if not line.strip(): continue
		report.reset()
		try: program = parse_text(line, None, report)
		except TooManyIssues: program = None
		if program is None:
			report.complain_to_console()
			continue
		for block in program.blocks:
			try: value = interpreter.run_block(block)
			except DuckError as ex:
				print(explain(ex.kind, ex.line))
				break
			if value is not ABSENT:
				print("=> "+display(value))
		if not program.blocks:
			print(repl_comment())
	print(goodbye())

def main():
	args = parser.parse_args()
	sys.setrecursionlimit(max(sys.getrecursionlimit(), 5000))
	if args.program:
		exit(run(args))
	elif args.check:
		print(__doc__.strip().format(parser.format_usage()))
	else:
		repl(args)
