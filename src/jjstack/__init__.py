"""jjstack CLI entry point.

This package provides a Click-based CLI for submitting and merging stacks of
jj bookmarks as GitHub pull requests or GitLab merge requests. See
`jjstack --help` for details.
"""
