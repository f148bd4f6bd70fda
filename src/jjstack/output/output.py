"""User-facing output helpers.

Human-readable messages go to stderr via user_output(); data meant for
scripts goes to stdout via machine_output().
"""

import click


def user_output(message: str = "", *, nl: bool = True) -> None:
    """Write a human-readable message to stderr."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", *, nl: bool = True) -> None:
    """Write machine-readable output to stdout."""
    click.echo(message, nl=nl)
