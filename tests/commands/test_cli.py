from click.testing import CliRunner

from jjstack.cli.cli import cli
from jjstack.core.context import context_for_test


def test_help_lists_commands() -> None:
    result = CliRunner().invoke(cli, ["-h"], obj=context_for_test())

    assert result.exit_code == 0
    for name in ("submit", "sync", "merge", "track", "untrack"):
        assert name in result.output


def test_commands_need_a_repository() -> None:
    ctx = context_for_test(in_repo=False)

    for args in (["sync"], ["merge"], ["track", "a"], ["untrack", "a"]):
        result = CliRunner().invoke(cli, args, obj=ctx)

        assert result.exit_code == 1
        assert "Not in a jj repository" in result.output
