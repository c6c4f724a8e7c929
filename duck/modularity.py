"""
Here find the module system -- such as it is.

A migrate target is either a path (relative to the file doing the migrating)
or a package reference like "@math", which is looked for in the package roots
before falling back to being a path after all.
Loading a module means reading, tokenizing and parsing it with a fresh parser;
running it is the interpreter's job.
"""
import os
from pathlib import Path
from typing import Optional, Sequence

from .front_end import Parser, ParseFailure
from .lexer import tokenize, DuckLexError
from .syntax import Program

SUFFIX = ".duck"

PACKAGE_ROOT = {
	"sys" : Path(__file__).parent/"sys",
}

def package_cache() -> Path:
	return Path(os.environ.get("DUCK_HOME", Path.home()/".duck")) / "packages"

def default_package_roots() -> list[Path]:
	return [package_cache(), PACKAGE_ROOT["sys"]]

class MigrationError(Exception):
	""" As distinct from a Python import error. The argument says what went wrong. """

def resolve_target(target:str, base:Path, package_roots:Sequence[Path]) -> Path:
	if target.startswith("@"):
		found = _find_package(target[1:], package_roots)
		if found is not None:
			return found.resolve()
		target = target[1:]
	path = base / target
	if not path.exists() and path.suffix != SUFFIX:
		path = path.with_name(path.name + SUFFIX)
	return path.resolve()

def _find_package(name:str, package_roots:Sequence[Path]) -> Optional[Path]:
	for root in package_roots:
		for candidate in (root / (name + SUFFIX), root / name / ("main" + SUFFIX)):
			if candidate.is_file():
				return candidate
	return None

def load_program(path:Path, report=None) -> Program:
	""" This function raises MigrationError on failure. """
	if report is not None:
		report.info("Loading", path)
	try:
		with open(path, "r", encoding="utf-8") as fh:
			text = fh.read()
	except FileNotFoundError:
		raise MigrationError("there is no file called %s"%path)
	except OSError as ex:
		raise MigrationError("something went pear-shaped while reading %s (%s)"%(path, ex.strerror or ex))
	try:
		program = Parser(tokenize(text)).parse()
	except DuckLexError as ex:
		raise MigrationError("%s at line %d of %s"%(ex.detail, ex.line, path.name))
	except ParseFailure as ex:
		first = ex.issues[0]
		raise MigrationError("%d syntax error(s) in %s, starting at line %d: %s"%(len(ex.issues), path.name, first.token.line, first.detail))
	program.path = path
	return program
