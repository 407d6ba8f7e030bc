"""runbook: run named recipes from a Runbook (or Justfile) declaration file.

Layout:

- runbook.recipes   recipe models, table and declaration parser
- runbook.env       environment file overlay
- runbook.dispatch  recipe lookup, argument binding and substitution
- runbook.process   child process spawning and exit status
- runbook.config    effective settings resolution
"""

__version__ = "0.3.0"
