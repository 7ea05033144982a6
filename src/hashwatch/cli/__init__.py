"""
hashwatch CLI Package.

Typer application, Rich theme and command implementations.
The app itself lives in hashwatch.cli.main.
"""
