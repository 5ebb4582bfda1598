"""Tests for the interactive prompt engine (cli/prompts.py).

Every test drives :class:`PromptEngine` through the scripted terminal
from ``conftest.py``; no real keyboard or TTY is involved.
"""

from __future__ import annotations

import pytest

from conftest import BACKSPACE, CANCEL, DOWN, ENTER, UP, ScriptedTerminal, typed

from cli_maker.cli.prompts import (
    PromptEngine,
    as_raw,
    hidden_prompt,
    option_lines,
    prompt,
)
from cli_maker.core.models import ParamSpec, ParamType
from cli_maker.core.protocols import Key, KeyPress
from cli_maker.exceptions import ParameterValidationError, PromptCancelledError
from cli_maker.infra import crypto


ENVS = ("dev", "staging", "prod")


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_option_lines_marks_cursor(self) -> None:
        lines = option_lines(ENVS, 1)
        assert len(lines) == len(ENVS) + 1
        assert "❯ staging" in lines[1]
        assert lines[0] == "  dev"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, ""), (True, "true"), (False, "false"), (3, "3"), ([1], "[1]"), ("x", "x")],
    )
    def test_as_raw(self, value: object, expected: str) -> None:
        assert as_raw(value) == expected


# ---------------------------------------------------------------------------
# List selector
# ---------------------------------------------------------------------------

class TestSelectOption:
    def test_enter_picks_first(self) -> None:
        engine = PromptEngine(ScriptedTerminal([ENTER]))
        assert engine.select_option("env", ENVS) == "dev"

    def test_down_moves(self) -> None:
        engine = PromptEngine(ScriptedTerminal([DOWN, DOWN, ENTER]))
        assert engine.select_option("env", ENVS) == "prod"

    def test_up_wraps_to_last(self) -> None:
        engine = PromptEngine(ScriptedTerminal([UP, ENTER]))
        assert engine.select_option("env", ENVS) == "prod"

    def test_down_wraps_to_first(self) -> None:
        engine = PromptEngine(ScriptedTerminal([DOWN, DOWN, DOWN, ENTER]))
        assert engine.select_option("env", ENVS) == "dev"

    def test_initial_index(self) -> None:
        engine = PromptEngine(ScriptedTerminal([ENTER]))
        assert engine.select_option("env", ENVS, initial=2) == "prod"

    def test_other_keys_ignored(self) -> None:
        keys = [KeyPress(Key.CHAR, "x"), KeyPress(Key.OTHER), DOWN, ENTER]
        engine = PromptEngine(ScriptedTerminal(keys))
        assert engine.select_option("env", ENVS) == "staging"

    def test_cancel_raises(self) -> None:
        engine = PromptEngine(ScriptedTerminal([DOWN, CANCEL]))
        with pytest.raises(PromptCancelledError):
            engine.select_option("env", ENVS)

    def test_redraw_moves_cursor_up(self) -> None:
        terminal = ScriptedTerminal([DOWN, ENTER])
        PromptEngine(terminal).select_option("env", ENVS)
        assert f"\x1b[{len(ENVS) + 1}A" in terminal.output

    def test_empty_options_rejected(self) -> None:
        with pytest.raises(ParameterValidationError):
            PromptEngine(ScriptedTerminal()).select_option("env", ())


# ---------------------------------------------------------------------------
# Masked input
# ---------------------------------------------------------------------------

class TestReadMasked:
    def test_echoes_placeholder_only(self) -> None:
        terminal = ScriptedTerminal(typed("s3cret"))
        assert PromptEngine(terminal).read_masked("Key: ") == "s3cret"
        assert "s3cret" not in terminal.text
        assert terminal.text == "Key: ******\n"

    def test_backspace_deletes_one(self) -> None:
        keys = typed("abc", enter=False) + [BACKSPACE, ENTER]
        terminal = ScriptedTerminal(keys)
        assert PromptEngine(terminal).read_masked("") == "ab"
        assert "\b \b" in terminal.output

    def test_backspace_on_empty_is_noop(self) -> None:
        terminal = ScriptedTerminal([BACKSPACE, ENTER])
        assert PromptEngine(terminal).read_masked("") == ""
        assert "\b \b" not in terminal.output

    def test_custom_placeholder(self) -> None:
        terminal = ScriptedTerminal(typed("ab"))
        PromptEngine(terminal, placeholder="•").read_masked("")
        assert terminal.text == "••\n"

    def test_cancel_raises(self) -> None:
        keys = typed("ab", enter=False) + [CANCEL]
        with pytest.raises(PromptCancelledError):
            PromptEngine(ScriptedTerminal(keys)).read_masked("")


# ---------------------------------------------------------------------------
# collect()
# ---------------------------------------------------------------------------

class TestCollect:
    def test_declared_order_and_coercion(self) -> None:
        params = [
            ParamSpec("name", required=True),
            ParamSpec("env", type=ParamType.LIST, options=ENVS, required=True),
            ParamSpec("port", type=ParamType.NUMBER),
        ]
        terminal = ScriptedTerminal(keys=[DOWN, ENTER], lines=["svc", "8080"])
        result = PromptEngine(terminal).collect(params, {})
        assert result == {"name": "svc", "env": "staging", "port": 8080}
        assert list(result) == ["name", "env", "port"]

    def test_only_absent_params_prompted(self) -> None:
        params = [ParamSpec("a", required=True), ParamSpec("b", required=True)]
        terminal = ScriptedTerminal(lines=["B"])
        result = PromptEngine(terminal).collect(params, {"a": "A"})
        assert result == {"a": "A", "b": "B"}
        assert len(terminal.prompts) == 1

    def test_nothing_pending_skips_session(self) -> None:
        terminal = ScriptedTerminal()
        PromptEngine(terminal).collect([ParamSpec("a")], {"a": 1})
        assert terminal.sessions == 0

    def test_retries_until_valid(self) -> None:
        params = [ParamSpec("port", type=ParamType.NUMBER, required=True)]
        terminal = ScriptedTerminal(lines=["abc", "", "42"])
        assert PromptEngine(terminal).collect(params)["port"] == 42
        assert len(terminal.prompts) == 3

    def test_optional_empty_is_skipped(self) -> None:
        params = [ParamSpec("note")]
        terminal = ScriptedTerminal(lines=[""])
        assert PromptEngine(terminal).collect(params) == {"note": None}

    def test_password_uses_masked_input(self) -> None:
        params = [ParamSpec("token", type=ParamType.PASSWORD, required=True)]
        terminal = ScriptedTerminal(keys=typed("tk"))
        assert PromptEngine(terminal).collect(params) == {"token": "tk"}
        assert terminal.prompts == []

    def test_cancel_releases_session(self) -> None:
        params = [ParamSpec("env", type=ParamType.LIST, options=ENVS, required=True)]
        terminal = ScriptedTerminal(keys=[CANCEL])
        with pytest.raises(PromptCancelledError):
            PromptEngine(terminal).collect(params)
        assert terminal.sessions == 1
        assert terminal.in_session is False

    def test_required_list_without_options_rejected(self) -> None:
        params = [ParamSpec("env", type=ParamType.LIST, required=True)]
        with pytest.raises(ParameterValidationError):
            PromptEngine(ScriptedTerminal()).collect(params)


# ---------------------------------------------------------------------------
# ask_step()
# ---------------------------------------------------------------------------

class TestAskStep:
    def test_typed_value(self) -> None:
        step = ParamSpec("retries", type=ParamType.NUMBER)
        assert PromptEngine(ScriptedTerminal(lines=["5"])).ask_step(step) == 5

    def test_enter_keeps_existing(self) -> None:
        step = ParamSpec("retries", type=ParamType.NUMBER, default_value=1)
        assert PromptEngine(ScriptedTerminal(lines=[""])).ask_step(step, 3) == 3

    def test_enter_falls_back_to_default(self) -> None:
        step = ParamSpec("verbose", type=ParamType.BOOLEAN, default_value=True)
        assert PromptEngine(ScriptedTerminal(lines=[""])).ask_step(step) is True

    def test_enter_without_anything_is_none(self) -> None:
        step = ParamSpec("note")
        assert PromptEngine(ScriptedTerminal(lines=[""])).ask_step(step) is None

    def test_invalid_then_valid(self) -> None:
        step = ParamSpec("mail", type=ParamType.EMAIL, required=True)
        terminal = ScriptedTerminal(lines=["nope", "a@b.co"])
        assert PromptEngine(terminal).ask_step(step) == "a@b.co"

    def test_list_starts_on_existing(self) -> None:
        step = ParamSpec("env", type=ParamType.LIST, options=ENVS)
        terminal = ScriptedTerminal(keys=[ENTER])
        assert PromptEngine(terminal).ask_step(step, "prod") == "prod"

    def test_secret_keeps_sealed_envelope(self) -> None:
        step = ParamSpec("api_key", type=ParamType.PASSWORD)
        sealed = crypto.encode_secret("x")
        terminal = ScriptedTerminal(keys=[ENTER])
        assert PromptEngine(terminal).ask_step(step, sealed) is sealed

    def test_secret_replaced_when_typed(self) -> None:
        step = ParamSpec("api_key", type=ParamType.PASSWORD)
        terminal = ScriptedTerminal(keys=typed("new"))
        assert PromptEngine(terminal).ask_step(step, "old") == "new"


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------

class TestModuleHelpers:
    def test_prompt(self) -> None:
        terminal = ScriptedTerminal(lines=["yes"])
        assert prompt("Continue? ", terminal) == "yes"
        assert terminal.prompts == ["Continue? "]

    def test_hidden_prompt(self) -> None:
        terminal = ScriptedTerminal(keys=typed("pw"))
        assert hidden_prompt("Passphrase: ", terminal) == "pw"
        assert terminal.sessions == 1
