"""Tests for AgentTools - the operations callers see, errors as ERROR: text."""

import dataclasses
import json

import openai
import pytest

from agents_mcp.cli import build_tools
from agents_mcp.invoker import AgentInvoker
from agents_mcp.tools import AgentTools


# ---------------------------------------------------------------------------
# End-to-end: save, list, run by name
# ---------------------------------------------------------------------------

class TestSummarizerScenario:
    @pytest.mark.asyncio
    async def test_save_list_run(self, tools, fake_completions):
        saved = await tools.save_preset("summarizer", "Summarize input.")
        assert saved.startswith("Saved preset 'summarizer'")

        listing = json.loads(await tools.list_presets())
        assert listing == [{"name": "summarizer", "display_name": "summarizer", "description": ""}]

        fake_completions.content = "A fox jumps."
        result = await tools.run_preset("The quick brown fox...", "summarizer")
        assert result == "A fox jumps."
        call = fake_completions.calls[0]
        assert call["messages"] == [
            {"role": "system", "content": "Summarize input."},
            {"role": "user", "content": "The quick brown fox..."},
        ]
        assert call["model"] == "default-model"

    @pytest.mark.asyncio
    async def test_save_list_run_after_startup_seeding(self, settings, client_factory, fake_completions, monkeypatch):
        monkeypatch.setattr("agents_mcp.invoker._default_client_factory", client_factory)
        tools = build_tools(settings)
        seeded = tools.store.available()
        assert "summarizer" not in seeded

        saved = await tools.save_preset("summarizer", "Summarize input.")
        assert saved.startswith("Saved preset 'summarizer'")

        listing = json.loads(await tools.list_presets())
        assert [e["name"] for e in listing] == sorted(seeded + ["summarizer"])
        entries = [e for e in listing if e["name"] == "summarizer"]
        assert entries == [{"name": "summarizer", "display_name": "summarizer", "description": ""}]

        fake_completions.content = "A fox jumps."
        assert await tools.run_preset("The quick brown fox...", "summarizer") == "A fox jumps."
        assert fake_completions.calls[0]["messages"] == [
            {"role": "system", "content": "Summarize input."},
            {"role": "user", "content": "The quick brown fox..."},
        ]


# ---------------------------------------------------------------------------
# run_agent / run_preset
# ---------------------------------------------------------------------------

class TestRun:
    @pytest.mark.asyncio
    async def test_run_agent_inline(self, tools, fake_completions):
        result = await tools.run_agent("hi", "Be brief.", model="m9", effort="low")
        assert result == "agent reply"
        call = fake_completions.calls[0]
        assert call["model"] == "m9"
        assert call["reasoning_effort"] == "low"

    @pytest.mark.asyncio
    async def test_run_preset_call_args_override_preset(self, tools, fake_completions):
        await tools.save_preset("oracle", "Think hard.", model="preset-model", effort="xhigh")
        await tools.run_preset("q", "oracle", effort="low")
        call = fake_completions.calls[0]
        assert call["model"] == "preset-model"
        assert call["reasoning_effort"] == "low"

    @pytest.mark.asyncio
    async def test_run_preset_name_is_slugified(self, tools, fake_completions):
        await tools.save_preset("Code Reviewer", "Review it.")
        assert await tools.run_preset("diff", "code reviewer") == "agent reply"

    @pytest.mark.asyncio
    async def test_run_preset_not_found_lists_available(self, tools):
        await tools.save_preset("alpha", "a")
        result = await tools.run_preset("q", "ghost")
        assert result == "ERROR: Preset 'ghost' not found. Available: alpha"

    @pytest.mark.asyncio
    async def test_run_preset_not_found_empty_store(self, tools):
        result = await tools.run_preset("q", "ghost")
        assert result.startswith("ERROR: Preset 'ghost' not found. No presets yet.")

    @pytest.mark.asyncio
    async def test_policy_denied(self, settings, store, invoker, fake_completions):
        locked = AgentTools(dataclasses.replace(settings, allow_custom_base_url=False), store, invoker)
        result = await locked.run_agent("q", "p", base_url="http://evil.example/v1")
        assert result.startswith("ERROR: Custom base_url is disabled")
        assert fake_completions.calls == []

    @pytest.mark.asyncio
    async def test_invalid_endpoint(self, tools):
        result = await tools.run_agent("q", "p", base_url="ftp://host/v1")
        assert result == "ERROR: base_url must use http or https"

    @pytest.mark.asyncio
    async def test_upstream_error(self, tools, fake_completions):
        fake_completions.error = openai.OpenAIError("connection refused")
        assert await tools.run_agent("q", "p") == "ERROR: connection refused"

    @pytest.mark.asyncio
    async def test_timeout(self, settings, store, client_factory, fake_completions):
        invoker = AgentInvoker(dataclasses.replace(settings, timeout_ms=20), client_factory=client_factory)
        fake_completions.hang = True
        result = await AgentTools(settings, store, invoker).run_agent("q", "p")
        assert result == "ERROR: Agent call timed out after 20 ms"

    @pytest.mark.asyncio
    async def test_bad_effort(self, tools, fake_completions):
        result = await tools.run_agent("q", "p", effort="maximum")
        assert result.startswith("ERROR: effort must be one of")
        assert fake_completions.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query, prompt, field", [("", "p", "query"), ("q", "  ", "system_prompt")])
    async def test_missing_required(self, tools, query, prompt, field):
        assert await tools.run_agent(query, prompt) == f"ERROR: {field} is required"

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_error_text(self, tools, fake_completions):
        fake_completions.error = RuntimeError("surprise")
        assert await tools.run_agent("q", "p") == "ERROR: surprise"


# ---------------------------------------------------------------------------
# save / list / delete
# ---------------------------------------------------------------------------

class TestPresetManagement:
    @pytest.mark.asyncio
    async def test_save_twice_without_overwrite(self, tools, store):
        assert (await tools.save_preset("oracle", "v1")).startswith("Saved")
        result = await tools.save_preset("oracle", "v2")
        assert result == "ERROR: Preset 'oracle' already exists. Pass overwrite=true to update it."
        assert store.read("oracle").system_prompt == "v1"

    @pytest.mark.asyncio
    async def test_save_with_overwrite(self, tools, store):
        await tools.save_preset("oracle", "v1")
        result = await tools.save_preset("oracle", "v2", overwrite=True)
        assert result.startswith("Updated preset 'oracle' -> ")
        assert store.read("oracle").system_prompt == "v2"

    @pytest.mark.asyncio
    async def test_save_truthy_non_bool_overwrite_does_not_replace(self, tools, store):
        await tools.save_preset("oracle", "v1")
        result = await tools.save_preset("oracle", "v2", overwrite="false")
        assert result.startswith("ERROR: Preset 'oracle' already exists")
        assert store.read("oracle").system_prompt == "v1"

    @pytest.mark.asyncio
    async def test_save_all_fields(self, tools):
        await tools.save_preset(
            "Full Preset",
            "body",
            description="desc",
            model="m",
            effort="medium",
            inputs_required="query",
            inputs_optional="model",
            outputs="text",
        )
        listing = json.loads(await tools.list_presets())
        assert listing == [{
            "name": "full_preset",
            "display_name": "Full Preset",
            "description": "desc",
            "model": "m",
            "effort": "medium",
            "inputs_required": "query",
            "inputs_optional": "model",
            "outputs": "text",
        }]

    @pytest.mark.asyncio
    async def test_save_rejects_bad_effort(self, tools, store):
        result = await tools.save_preset("p", "body", effort="turbo")
        assert result.startswith("ERROR: effort must be one of")
        assert not store.exists("p")

    @pytest.mark.asyncio
    async def test_save_requires_name(self, tools):
        assert await tools.save_preset("   ", "body") == "ERROR: name is required"

    @pytest.mark.asyncio
    async def test_list_skips_malformed(self, tools, store):
        await tools.save_preset("good", "body")
        (store.root / "broken.md").write_text("# broken\n")
        assert [p["name"] for p in json.loads(await tools.list_presets())] == ["good"]

    @pytest.mark.asyncio
    async def test_delete(self, tools, store):
        await tools.save_preset("oracle", "v1")
        assert await tools.delete_preset("oracle") == "Deleted preset 'oracle'."
        assert not store.exists("oracle")

    @pytest.mark.asyncio
    async def test_delete_missing(self, tools):
        result = await tools.delete_preset("ghost")
        assert result.startswith("ERROR: Preset 'ghost' not found.")


class TestPresetContent:
    @pytest.mark.asyncio
    async def test_returns_raw_text(self, tools, store):
        await tools.save_preset("oracle", "Think.", effort="high")
        assert tools.preset_content("oracle") == store.path_for("oracle").read_text()

    def test_missing_returns_none(self, tools):
        assert tools.preset_content("ghost") is None
