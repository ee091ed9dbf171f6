"""Command-line interface for cost-katana.

The Typer application lives in ``cost_katana.cli.app``; this package keeps
its console, output and configuration helpers importable without building
the command tree.
"""
