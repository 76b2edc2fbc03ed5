"""Tests for bmm_shell.tui.repl.

Coverage:
  - suggestions(): command-name prefixes and resource names after get/delete
  - match_command(): exact names, longest-prefix dispatch, quoting
  - execute(): unknown commands
  - run_repl(): banner, error recovery, history, exit words, Ctrl-D
  - split_scope_flags() / run_command(): one-shot mode
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from conftest import output, serve

from bmm_shell.exceptions import BmmShellError, ResolutionError, UpstreamError
from bmm_shell.tui.repl import (
    command_names,
    execute,
    match_command,
    run_command,
    run_repl,
    split_scope_flags,
    suggestions,
)
from bmm_shell.tui.session import Session

VPCS = [
    {"id": "v-1", "name": "prod-vpc", "siteId": "s-1"},
    {"id": "v-2", "name": "dev-vpc", "siteId": "s-1"},
]


def _editor(*lines: str | BaseException) -> MagicMock:
    editor = MagicMock()
    editor.read_line.side_effect = list(lines)
    return editor


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


class TestSuggestions:
    def test_command_prefix(self, session: Session) -> None:
        found = suggestions(session, "vpc", command_names())
        assert "vpc list" in found and "vpc get" in found and "vpc-prefix list" in found
        assert all(name.startswith("vpc") for name in found)

    def test_case_insensitive(self, session: Session) -> None:
        assert "scope clear" in suggestions(session, "SCOPE C", command_names())

    def test_empty_text(self, session: Session) -> None:
        assert suggestions(session, "", command_names()) == []

    def test_exit_words_included(self, session: Session) -> None:
        assert suggestions(session, "qu", command_names()) == ["quit"]

    def test_resource_names_after_get(self, session: Session, client: MagicMock) -> None:
        serve(client, {"vpc": VPCS})
        assert suggestions(session, "vpc get pr", command_names()) == ["vpc get prod-vpc"]
        assert suggestions(session, "vpc get ", command_names()) == [
            "vpc get prod-vpc",
            "vpc get dev-vpc",
        ]

    def test_accepted_suggestion_with_space_dispatches(
        self, session: Session, client: MagicMock
    ) -> None:
        serve(client, {"vpc": [{"id": "v-3", "name": "prod vpc"}, *VPCS]})
        client.request.return_value = MagicMock(json=MagicMock(return_value={"id": "v-3"}))

        found = suggestions(session, "vpc get prod v", command_names())
        assert found == ["vpc get 'prod vpc'"]

        execute(session, found[0])
        assert client.request.call_args.kwargs["path_params"] == {"id": "v-3"}

    @pytest.mark.parametrize("typed", ["vpc get 'prod v", "vpc get 'prod vpc'", 'vpc get "prod'])
    def test_quoted_filter_still_matches(
        self, session: Session, client: MagicMock, typed: str
    ) -> None:
        serve(client, {"vpc": [{"id": "v-3", "name": "prod vpc"}, *VPCS]})
        assert "vpc get 'prod vpc'" in suggestions(session, typed, command_names())

    def test_resource_fetch_failure_gives_nothing(
        self, session: Session, client: MagicMock
    ) -> None:
        serve(client, {"vpc": UpstreamError("down")})
        assert suggestions(session, "vpc delete x", command_names()) == []


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class TestMatchCommand:
    @pytest.mark.parametrize(
        ("line", "name", "args"),
        [
            ("vpc list", "vpc list", []),
            ("vpc get prod", "vpc get", ["prod"]),
            ("vpc-prefix get p1", "vpc-prefix get", ["p1"]),
            ("org", "org", []),
            ("org set globex", "org set", ["globex"]),
            ("scope vpc prod", "scope vpc", ["prod"]),
            ("vpc create --name 'my vpc'", "vpc create", ["--name", "my vpc"]),
        ],
    )
    def test_matches(self, line: str, name: str, args: list[str]) -> None:
        matched = match_command(line)
        assert matched is not None
        assert (matched[0].name, matched[1]) == (name, args)

    @pytest.mark.parametrize("line", ["vpc", "vpc listx", "orgs", "frobnicate"])
    def test_no_match(self, line: str) -> None:
        assert match_command(line) is None

    def test_unbalanced_quote(self) -> None:
        with pytest.raises(BmmShellError, match="cannot parse arguments"):
            match_command("vpc get 'prod")

    def test_unknown_command(self, session: Session) -> None:
        with pytest.raises(ResolutionError, match="unknown command: frobnicate") as exc_info:
            execute(session, "frobnicate")
        assert "help" in (exc_info.value.hint or "")


# ---------------------------------------------------------------------------
# Interactive loop
# ---------------------------------------------------------------------------


class TestRunRepl:
    def test_errors_do_not_end_loop(self, session: Session, client: MagicMock) -> None:
        serve(client, {"vpc": VPCS})
        editor = _editor("frobnicate", "vpc get nothere", "org", "exit")

        run_repl(session, editor=editor)

        err = output(session.err_console)
        assert "Error: unknown command: frobnicate" in err
        assert "Hint: Type 'help'" in err
        assert "Error: no vpc matching 'nothere' found" in err
        assert "Current org: acme" in output(session.console)
        assert output(session.console).rstrip().endswith("Goodbye.")
        assert list(session.history) == ["frobnicate", "vpc get nothere", "org", "exit"]

    def test_blank_lines_skipped(self, session: Session) -> None:
        run_repl(session, editor=_editor("", "   ", "quit"))
        assert list(session.history) == ["quit"]

    def test_ctrl_d_ends_loop(self, session: Session) -> None:
        run_repl(session, editor=_editor(EOFError()))
        assert "Goodbye." in output(session.console)

    def test_interrupted_handler(self, session: Session) -> None:
        session.login_fn = MagicMock(side_effect=KeyboardInterrupt)
        run_repl(session, editor=_editor("login", "exit"))
        assert "Interrupted." in output(session.err_console)

    def test_prompt_reflects_scope(self, session: Session) -> None:
        editor = _editor("exit")
        run_repl(session, editor=editor)
        assert "bmm:acme" in editor.read_line.call_args.args[0]

    def test_banner_and_token_warning(self, session: Session) -> None:
        session.config_path = "/etc/bmm.yaml"
        run_repl(session, editor=_editor("exit"))
        text = output(session.console)
        assert "BMM Interactive Mode" in text
        assert "Org: acme" in text
        assert "Config: /etc/bmm.yaml" in text
        assert "No auth token found" in output(session.err_console)

    def test_no_warning_with_token(self, session: Session) -> None:
        session.token = "tok"
        run_repl(session, editor=_editor("exit"))
        assert "No auth token" not in output(session.err_console)


# ---------------------------------------------------------------------------
# One-shot mode
# ---------------------------------------------------------------------------


class TestOneShot:
    @pytest.mark.parametrize(
        ("words", "expected"),
        [
            (["vpc", "list"], (["vpc", "list"], "", "")),
            (["subnet", "list", "--site-id", "s-1", "--vpc-id=v-1"], (["subnet", "list"], "s-1", "v-1")),
            (["vpc", "get", "prod", "--site-id"], (["vpc", "get", "prod"], "", "")),
        ],
    )
    def test_split_scope_flags(self, words: list[str], expected: tuple) -> None:
        assert split_scope_flags(words) == expected

    def test_run_command_applies_scope(self, session: Session, client: MagicMock) -> None:
        serve(client, {"vpc": VPCS, "site": []})
        run_command(session, ["vpc", "list", "--site-id", "s-1"])
        assert session.scope.site_id == "s-1"
        assert client.fetch_all.call_args_list[-1].args[1] == {"siteId": "s-1"}
        assert "INFO: bmm-shell vpc list --site-id s-1" in output(session.err_console)

    def test_run_command_quotes_arguments(self, session: Session, client: MagicMock) -> None:
        serve(client, {"vpc": [{"id": "v-3", "name": "my vpc"}]})
        client.request.return_value = MagicMock(json=MagicMock(return_value={"id": "v-3"}))
        run_command(session, ["vpc", "get", "my vpc"])
        assert client.request.call_args.kwargs["path_params"] == {"id": "v-3"}

    def test_run_command_requires_command(self, session: Session) -> None:
        with pytest.raises(ResolutionError, match="no command given"):
            run_command(session, ["--site-id", "s-1"])
