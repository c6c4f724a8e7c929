"""
Lets you run the interpreter as:

    py -m duck program.duck

See cmdline.py for all the arguments.
"""
from duck.cmdline import main

main()
