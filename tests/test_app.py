"""Tests for service wiring and the command-line entry point."""

import io
from unittest.mock import patch

import pytest

from inkpolish.__main__ import build_parser, main, run
from inkpolish.core.settings import SettingsKeys
from inkpolish.core.transcript_processor import EMAIL_PROMPT_ID


class TestBuildServices:
    def test_wiring(self, services, store):
        assert services.engine.session is services.session
        assert services.engine.prompts is services.prompts
        assert services.session.selected_kind == "ollama"
        assert len(services.prompts.all_prompts()) == 4
        assert len(store.get(SettingsKeys.CUSTOM_PROMPTS)) == 4

    @pytest.mark.asyncio
    async def test_start_probes_local_provider(self, services):
        await services.start()

        assert services.session.is_connected is True
        assert services.session.available_models() == ["mistral", "llama3"]


def parse(*argv):
    return build_parser().parse_args(list(argv))


class TestRun:
    @pytest.mark.asyncio
    async def test_enhances_argument_text(self, services, capsys):
        assert await run(parse("hello there"), services) == 0

        out = capsys.readouterr()
        assert out.out.strip() == "enhanced text"
        assert "ollama/mistral" in out.err

    @pytest.mark.asyncio
    async def test_reads_stdin_when_no_text(self, services, fake_clients, capsys):
        with patch("sys.stdin", io.StringIO("  from stdin \n")):
            assert await run(parse(), services) == 0

        assert "from stdin" in fake_clients["ollama"].calls[0][1]

    @pytest.mark.asyncio
    async def test_unknown_provider(self, services, capsys):
        assert await run(parse("--provider", "nope", "text"), services) == 2
        assert "Unknown provider: nope" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_unknown_prompt(self, services, capsys):
        assert await run(parse("--prompt", "Haiku", "text"), services) == 2
        assert "No prompt titled 'Haiku'" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_prompt_selected_by_title(self, services):
        assert await run(parse("--prompt", "email", "text"), services) == 0
        assert services.prompts.active_prompt_id == EMAIL_PROMPT_ID

    @pytest.mark.asyncio
    async def test_cloud_provider_without_key_fails(self, services, capsys):
        assert await run(parse("--provider", "openai", "text"), services) == 1
        assert "not configured" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_rejected_api_key(self, services, capsys):
        argv = parse("--provider", "openai", "--api-key", "bad-key", "text")

        assert await run(argv, services) == 1
        assert "rejected" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_accepted_api_key_and_model(self, services, fake_clients):
        argv = parse(
            "--provider", "openai", "--api-key", "good-key", "--model", "gpt-4o", "text"
        )

        assert await run(argv, services) == 0

        target = fake_clients["openai"].calls[0][0]
        assert target.api_key == "good-key"
        assert target.model == "gpt-4o"

    @pytest.mark.asyncio
    async def test_clipboard_flag_applies_to_one_run(
        self, services, store, context_text, fake_clients
    ):
        context_text["clipboard"] = "clipboard words"

        assert await run(parse("--clipboard", "first"), services) == 0
        assert await run(parse("second"), services) == 0

        first_system, second_system = (call[2] for call in fake_clients["ollama"].calls)
        assert "clipboard words" in first_system
        assert "clipboard words" not in second_system
        assert services.engine.use_clipboard_context is False
        assert store.get(SettingsKeys.USE_CLIPBOARD_CONTEXT) is None

    @pytest.mark.asyncio
    async def test_saved_clipboard_setting_is_honored(self, services, context_text, fake_clients):
        context_text["clipboard"] = "clipboard words"
        services.engine.use_clipboard_context = True

        assert await run(parse("text"), services) == 0

        assert "clipboard words" in fake_clients["ollama"].calls[0][2]

    @pytest.mark.asyncio
    async def test_check(self, services, fake_clients, capsys):
        assert await run(parse("--check"), services) == 0
        assert "connected" in capsys.readouterr().out

        fake_clients["ollama"].connected = False
        assert await run(parse("--check"), services) == 1

    @pytest.mark.asyncio
    async def test_list_models_marks_current(self, services, capsys):
        assert await run(parse("--list-models"), services) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines == ["* mistral", "  llama3"]

    @pytest.mark.asyncio
    async def test_saved_local_provider_is_refreshed_on_start(self, services, fake_clients):
        fake_clients["ollama"].models = ["llama3"]
        services.session.select_model("phi3")

        assert await run(parse("text"), services) == 0

        assert services.session.is_connected is True
        assert services.session.available_models() == ["llama3"]
        assert fake_clients["ollama"].calls[0][0].model == "mistral"


class TestMain:
    def test_main_uses_built_services(self, services, capsys):
        with patch("inkpolish.__main__.build_services", return_value=services):
            assert main(["make this better"]) == 0

        assert capsys.readouterr().out.strip() == "enhanced text"

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "InkPolish" in capsys.readouterr().out
