"""Tests for the --debug dump."""

import io
import json
from unittest.mock import patch

from agentpanel.backends.kitty import KittyBackend
from agentpanel.diagnostic import run_debug
from agentpanel.models.config import AppConfig

LS_OUTPUT = json.dumps(
    [
        {
            "id": 1,
            "tabs": [
                {
                    "id": 10,
                    "title": "work",
                    "windows": [
                        {
                            "id": 100,
                            "title": "api",
                            "cwd": "/src/api",
                            "foreground_processes": [{"pid": 7, "cmdline": ["claude"]}],
                        },
                        {"id": 101, "title": "zsh", "foreground_processes": [{"cmdline": ["zsh"]}]},
                    ],
                }
            ],
        }
    ]
)


def fake_kitty(*args, timeout=None):
    if args[0] == "ls":
        return (0, LS_OUTPUT, "")
    if args[0] == "get-text":
        return (0, "> \n", "")
    return (1, "", "unexpected")


class TestRunDebug:
    """Tests for run_debug output."""

    @patch("agentpanel.backends.kitty._run_kitty", side_effect=fake_kitty)
    def test_dumps_tree_and_sessions(self, mock_run):  # noqa: ARG002
        """The dump lists every window and the detected sessions."""
        out = io.StringIO()
        assert run_debug(AppConfig(), KittyBackend(), out=out) == 0

        text = out.getvalue()
        assert "prefixes: ['codex', 'claude', 'gemini']" in text
        assert "kitty socket: (controlling terminal)" in text
        assert "Window 0 (id=100, title='api'):" in text
        assert "identify result: ai='claude' found=True" in text
        assert "identify result: ai='' found=False" in text
        assert "=== detected sessions: 1 ===" in text
        assert "AI=claude Title='api' Status=IDLE WindowID=100" in text

    @patch("agentpanel.backends.kitty._run_kitty")
    def test_ls_failure(self, mock_run):
        """A failed listing is reported with exit status 1."""
        mock_run.return_value = (1, "", "remote control disabled")
        out = io.StringIO()
        assert run_debug(AppConfig(), KittyBackend(), out=out) == 1
        assert "kitty @ ls error" in out.getvalue()
