"""
Scopes: a frame of bindings plus an optional parent.

Null is a perfectly good Duck value (it's None), so lookups
report a missing name with the ABSENT sentinel instead.
"""
from types import MappingProxyType
from typing import Mapping, Optional

ABSENT = object()

class Environment:
	def __init__(self, parent:Optional["Environment"]=None):
		self._bindings = {}
		self.parent = parent

	def define(self, name:str, value):
		""" Bind in this frame only, shadowing any outer binding. """
		self._bindings[name] = value

	def get(self, name:str):
		env = self
		while env is not None:
			if name in env._bindings:
				return env._bindings[name]
			env = env.parent
		return ABSENT

	def assign(self, name:str, value) -> bool:
		""" Update the nearest frame that knows the name. False if none does. """
		env = self
		while env is not None:
			if name in env._bindings:
				env._bindings[name] = value
				return True
			env = env.parent
		return False

	def child(self) -> "Environment":
		return Environment(self)

	def bindings(self) -> dict:
		return dict(self._bindings)

	def capture(self) -> Mapping:
		"""
		A closure sees what the immediately-enclosing frame held at this moment.
		Later rebinding out here won't show through, but list and struct contents are shared.
		"""
		return MappingProxyType(dict(self._bindings))
