"""Tests for preset import and export."""

import json

import pytest

from tavern_engine.errors import PresetParseError
from tavern_engine.models import DEFAULT_CONTEXT_TEMPLATE
from tavern_engine.services.presets import export_preset, import_preset


class TestImportPreset:
    """Defaults and key handling."""

    def test_defaults(self):
        preset = import_preset("{}")
        assert preset.context_template == DEFAULT_CONTEXT_TEMPLATE
        assert preset.post_history_instructions == ""
        assert preset.stop_sequences == []
        assert preset.max_context_tokens == 4096
        assert preset.id.startswith("preset_")

    def test_camel_case_fields(self):
        preset = import_preset(json.dumps({
            "name": "Story",
            "contextTemplate": "{{char}} and {{user}}",
            "postHistoryInstructions": "Stay in scene.",
            "stopSequences": ["\nUser:"],
            "maxContextTokens": 8192,
        }))
        assert preset.name == "Story"
        assert preset.context_template == "{{char}} and {{user}}"
        assert preset.post_history_instructions == "Stay in scene."
        assert preset.stop_sequences == ["\nUser:"]
        assert preset.max_context_tokens == 8192

    def test_snake_case_fields(self):
        preset = import_preset(json.dumps({"context_template": "T", "max_context_tokens": 2048}))
        assert preset.context_template == "T"
        assert preset.max_context_tokens == 2048

    def test_non_list_stop_sequences_ignored(self):
        assert import_preset(json.dumps({"stopSequences": "###"})).stop_sequences == []

    def test_name_from_filename(self):
        assert import_preset("{}", "roleplay.json").name == "roleplay"

    def test_invalid_json(self):
        with pytest.raises(PresetParseError):
            import_preset("nope")

    def test_bad_token_ceiling(self):
        with pytest.raises(PresetParseError):
            import_preset(json.dumps({"maxContextTokens": "lots"}))


class TestExportPreset:
    """Export re-imports to the same settings."""

    def test_round_trip(self):
        original = import_preset(json.dumps({
            "name": "Story",
            "contextTemplate": "{{description}}",
            "stopSequences": ["###"],
            "maxContextTokens": 1000,
        }))
        again = import_preset(export_preset(original))
        assert again.model_dump(exclude={"id"}) == original.model_dump(exclude={"id"})
