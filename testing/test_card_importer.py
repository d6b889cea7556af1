"""
Tests for character card import.

Tests cover:
- JSON cards (valid, missing name, defaults, lossless raw card)
- PNG cards via chara/character chunks (tEXt, zTXt, iTXt)
- Base64 normalization (URL-safe alphabet, missing padding, data URLs)
- Fallback scan over all chunks
- File type rejection
"""

import base64
import json
from io import BytesIO

import pytest
from PIL import Image, PngImagePlugin

from tavern_engine.errors import (
    CardDecodeError,
    CardImportError,
    CardValidationError,
    PNGFormatError,
    UnsupportedFileTypeError,
)
from tavern_engine.services.character_cards import (
    CharacterCardImporter,
    FileKind,
    decode_base64_payload,
    detect_file_kind,
)

from pngutil import build_png, encode_card, itxt_chunk, make_card, text_chunk, ztxt_chunk


@pytest.fixture
def importer():
    return CharacterCardImporter()


class TestFileKind:
    """Container detection from filenames."""

    def test_extensions(self):
        assert detect_file_kind("card.json") == FileKind.JSON
        assert detect_file_kind("CARD.PNG") == FileKind.PNG
        assert detect_file_kind(".png") == FileKind.PNG

    def test_txt_rejected_without_parsing(self, importer):
        """Unsupported types fail before the bytes are looked at."""
        with pytest.raises(UnsupportedFileTypeError):
            importer.import_file(b"\xff\xfe not even text", "notes.txt")

    def test_unsupported_is_an_import_error(self, importer):
        with pytest.raises(CardImportError):
            importer.import_file(b"{}", "card.webp")


class TestJsonImport:
    """JSON card path."""

    def test_valid_card(self, importer):
        card = make_card(
            "Seraphina",
            description="A guardian of the forest.",
            personality="kind",
            scenario="A glade at dusk.",
            first_mes="Welcome, traveler.",
            mes_example="<START>",
            system_prompt="Stay in character.",
            post_history_instructions="Keep replies short.",
        )
        profile = importer.import_file(json.dumps(card).encode("utf-8"), "seraphina.json")

        assert profile.name == "Seraphina"
        assert profile.description == "A guardian of the forest."
        assert profile.personality == "kind"
        assert profile.scenario == "A glade at dusk."
        assert profile.first_message == "Welcome, traveler."
        assert profile.examples == "<START>"
        assert profile.system_prompt == "Stay in character."
        assert profile.post_history_instructions == "Keep replies short."
        assert profile.id.startswith("char_")

    def test_missing_fields_default_to_empty(self, importer):
        profile = importer.import_file(json.dumps(make_card("Bare")).encode(), "bare.json")
        assert profile.description == ""
        assert profile.system_prompt == ""
        assert profile.post_history_instructions == ""

    def test_null_fields_default_to_empty(self, importer):
        card = make_card("Nully", description=None, scenario=None)
        profile = importer.import_file(json.dumps(card).encode(), "nully.json")
        assert profile.description == ""
        assert profile.scenario == ""

    def test_missing_name_rejected(self, importer):
        card = {"spec": "chara_card_v2", "data": {"description": "no name"}}
        with pytest.raises(CardValidationError, match="Invalid character card"):
            importer.import_file(json.dumps(card).encode(), "card.json")

    def test_missing_data_rejected(self, importer):
        with pytest.raises(CardValidationError):
            importer.import_file(b'{"name": "v1 style"}', "card.json")

    def test_blank_name_accepted(self, importer):
        """A present-but-blank name is kept as-is rather than rejected."""
        profile = importer.import_file(json.dumps(make_card("")).encode(), "card.json")
        assert profile.name == ""

    def test_invalid_json(self, importer):
        with pytest.raises(CardDecodeError):
            importer.import_file(b"{not json", "card.json")

    def test_raw_card_round_trips(self, importer):
        """Fields the profile does not project survive in raw_card."""
        card = make_card(
            "Keeper",
            creator="someone",
            tags=["fantasy"],
            extensions={"depth_prompt": {"depth": 4}},
            character_book={"entries": [{"keys": ["x"], "content": "y"}]},
        )
        card["custom_top_level"] = True
        profile = importer.import_file(json.dumps(card).encode(), "keeper.json")
        assert profile.raw_card == card

    def test_raw_card_is_a_copy(self, importer):
        card = make_card("Copy")
        profile = importer.import_file(json.dumps(card).encode(), "copy.json")
        profile.raw_card["data"]["name"] = "Changed"
        again = importer.import_file(json.dumps(card).encode(), "copy.json")
        assert again.raw_card["data"]["name"] == "Copy"


class TestPngImport:
    """PNG card path."""

    def test_chara_text_chunk(self, importer):
        card = make_card("Seraphina", description="Forest guardian")
        png = build_png(text_chunk("chara", encode_card(card)))
        profile = importer.import_file(png, "seraphina.png")
        assert profile.name == "Seraphina"
        assert profile.description == "Forest guardian"
        assert profile.raw_card == card

    def test_character_keyword_fallback(self, importer):
        png = build_png(text_chunk("character", encode_card(make_card("Fallback"))))
        assert importer.import_file(png, "card.png").name == "Fallback"

    def test_chara_preferred_over_character(self, importer):
        png = build_png(
            text_chunk("character", encode_card(make_card("Second"))),
            text_chunk("chara", encode_card(make_card("First"))),
        )
        assert importer.import_file(png, "card.png").name == "First"

    def test_compressed_chunks(self, importer):
        card = make_card("Zed", personality="✓ unicode")
        for png in (
            build_png(ztxt_chunk("chara", encode_card(card))),
            build_png(itxt_chunk("chara", encode_card(card), compressed=True)),
        ):
            profile = importer.import_file(png, "zed.png")
            assert profile.name == "Zed"
            assert profile.personality == "✓ unicode"

    def test_pillow_itxt_card(self, importer):
        """A card written by Pillow into an iTXt chunk imports."""
        info = PngImagePlugin.PngInfo()
        info.add_itxt("chara", encode_card(make_card("Iris", scenario="Library")))
        output = BytesIO()
        Image.new("RGB", (2, 2)).save(output, format="PNG", pnginfo=info)

        profile = importer.import_file(output.getvalue(), "iris.png")
        assert profile.name == "Iris"
        assert profile.scenario == "Library"

    def test_url_safe_base64_without_padding(self, importer):
        card = make_card("Ünïcode ~~~???", description=">>>???")
        encoded = base64.urlsafe_b64encode(json.dumps(card).encode("utf-8")).decode("ascii").rstrip("=")
        png = build_png(text_chunk("chara", encoded))
        assert importer.import_file(png, "card.png").name == "Ünïcode ~~~???"

    def test_invalid_base64_is_decode_error(self, importer):
        png = build_png(text_chunk("chara", "!!!not base64!!!"))
        with pytest.raises(CardDecodeError):
            importer.import_file(png, "card.png")

    def test_chara_without_name_is_validation_error(self, importer):
        card = {"spec": "chara_card_v2", "data": {"description": "nameless"}}
        png = build_png(text_chunk("chara", encode_card(card)))
        with pytest.raises(CardValidationError):
            importer.import_file(png, "card.png")

    def test_fallback_scan_first_parsable_wins(self, importer):
        """Without chara/character, each chunk is tried as plain JSON in order."""
        png = build_png(
            text_chunk("Software", "paint"),
            itxt_chunk("notes", json.dumps({"data": {"description": "no name"}})),
            itxt_chunk("card1", json.dumps(make_card("Scanned"))),
            itxt_chunk("card2", json.dumps(make_card("Later"))),
        )
        assert importer.import_file(png, "card.png").name == "Scanned"

    def test_no_card_found(self, importer):
        png = build_png(text_chunk("Software", "paint"))
        with pytest.raises(CardImportError, match="No valid character metadata"):
            importer.import_file(png, "plain.png")

    def test_missing_signature(self, importer):
        with pytest.raises(PNGFormatError):
            importer.import_file(b"not a png at all", "card.png")


class TestBase64Payload:
    """Payload normalization."""

    def test_data_url_prefix(self):
        encoded = base64.b64encode(b'{"a": 1}').decode()
        assert decode_base64_payload(f"data:application/json;base64,{encoded}") == '{"a": 1}'

    def test_surrounding_whitespace(self):
        encoded = base64.b64encode(b"hello").decode()
        assert decode_base64_payload(f"  {encoded}\n") == "hello"

    def test_padding_restored(self):
        assert decode_base64_payload("aGVsbG8") == "hello"
