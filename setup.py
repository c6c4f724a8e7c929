"""
Packaging script for PyPI.
"""
import os, setuptools

setuptools.setup(
	name='duck-lang',
	version='0.1.0',
	packages=['duck', "duck.tree_walker", "duck.adapters", ],
	package_data={
		'duck': ["sys/"+f for f in os.listdir("duck/sys")],
	},
	entry_points={
		'console_scripts': ["goose = duck.cmdline:main"],
	},
	license='MIT',
	description='A small interpreted language where nothing runs unless you quack first, supervised by a goose',
	long_description=open('README.md').read(),
	long_description_content_type="text/markdown",
	classifiers=[
		"Programming Language :: Python :: 3.9",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Developers",
		"Intended Audience :: Education",
		"Topic :: Software Development :: Interpreters",
		"Topic :: Education",
		"Environment :: Console",
    ],
	python_requires='>=3.9',
	install_requires=[
		"booze-tools>=0.6.2.1",
	]
)
