"""modserve: path/version resolution for a module documentation site.

Given a requested import path and version, modserve decides from previously
recorded fetch results whether to render, redirect, show a fetch prompt or
show an error page.
"""

__version__ = "0.1.0"
