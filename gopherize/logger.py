# gopherize/logger.py
import os

from rich import pretty
from rich.console import Console
from rich.traceback import install

# Pretty tracebacks; locals only when GOPHERIZE_DEBUG=1
install(show_locals=os.getenv("GOPHERIZE_DEBUG", "") == "1")
pretty.install()

# Shared console for the whole service. Request logs are read per line,
# so the caller's file:line column is dropped.
console = Console(log_path=False)
