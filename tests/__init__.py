"""mcp-hack unit tests.

No child processes are spawned: the invocation pipeline and the command line
are driven through ``tests.helpers.FakeServer``.

Usage:
    pytest tests/ -v
    pytest tests/ -m cli -v
    pytest tests/ -k "fuzz" -v
"""
