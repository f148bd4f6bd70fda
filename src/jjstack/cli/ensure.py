"""CLI error handling for precondition checks and expected failures.

Every expected failure ends the same way: a red "Error: " line on stderr
and exit code 1.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import NoReturn

import click

from jjstack.core.context import NoRepoSentinel, RepoContext, StackContext
from jjstack.core.errors import JjStackError
from jjstack.output.output import user_output


def fail(message: str) -> NoReturn:
    """Print a user-facing error and exit with code 1."""
    user_output(click.style("Error: ", fg="red") + message)
    raise SystemExit(1)


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Turn any JjStackError raised in the block into an error exit."""
    try:
        yield
    except JjStackError as e:
        fail(str(e))


class Ensure:
    """Helper class for CLI precondition checks."""

    @staticmethod
    def repo(ctx: StackContext) -> RepoContext:
        """Ensure the command runs inside a jj workspace.

        Raises:
            SystemExit: If there is no repository (with exit code 1)
        """
        if isinstance(ctx.repo, NoRepoSentinel):
            fail(ctx.repo.message)
        return ctx.repo
