import sys
import random
import time

class Console:
	@staticmethod
	def echo(text):
		sys.stdout.write(text)
		sys.stdout.flush()

	@staticmethod
	def read(prompt=""):
		if prompt: Console.echo(prompt)
		try: return input()
		except EOFError: return None

	@staticmethod
	def random():
		return random.random()

	@staticmethod
	def sleep(seconds):
		time.sleep(max(0.0, seconds))

console = Console()
