"""CLI handlers facade.

Thin wrapper that re-exports concrete handler implementations from
cli.core_handlers so wiring depends on one stable module.
"""
from __future__ import annotations
from .core_handlers import handle_init, handle_list, handle_run, handle_show
from .core_handlers_common import _err
__all__ = ['handle_init', 'handle_list', 'handle_run', 'handle_show', '_err']
