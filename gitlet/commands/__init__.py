"""Gitlet subcommands.

Each module exposes a testable ``_<name>_async(*, root, session, ...)`` core
and a synchronous ``run_<name>(operands)`` entry point that ``gitlet.app``
registers on the Typer application.
"""
