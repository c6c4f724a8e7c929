from pathlib import Path

class FileSystem:
	@staticmethod
	def read_lines(path):
		with open(path, "r", encoding="utf-8") as fh: return [line.rstrip("\n") for line in fh]

	@staticmethod
	def read_file(path):
		with open(path, "r", encoding="utf-8") as fh: return fh.read()

	@staticmethod
	def write_file(path, text):
		with open(path, "w", encoding="utf-8") as fh: fh.write(text)

	@staticmethod
	def append_file(path, text):
		with open(path, "a", encoding="utf-8") as fh: fh.write(text)

	@staticmethod
	def exists(path):
		return Path(path).exists()

filesystem = FileSystem()
