"""
Card Format Detector
===================

Locates and decodes the character card payload: file type from the
filename, card JSON from text, and the base64 card from extracted PNG
metadata.
"""

import base64
import binascii
import json
import logging
import re
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional

from tavern_engine.errors import (
    CardDecodeError,
    CardError,
    CardValidationError,
    UnsupportedFileTypeError,
)

logger = logging.getLogger(__name__)

DATA_URL_PREFIX_RE = re.compile(r"^data:.*?;base64,")
WHITESPACE_RE = re.compile(r"\s+")


class FileKind(Enum):
    """Character file containers the importer accepts."""
    JSON = "json"
    PNG = "png"


class CardFormat(Enum):
    """Supported character card formats."""
    SILLYTAVERN_V1 = "chara_card_v1"
    SILLYTAVERN_V2 = "chara_card_v2"
    SILLYTAVERN_V3 = "chara_card_v3"
    UNKNOWN = "unknown"


def detect_file_kind(filename: str) -> FileKind:
    """
    Determine the container type from a filename or extension hint.

    Raises:
        UnsupportedFileTypeError: For anything but ``.json`` / ``.png``
    """
    lowered = filename.lower()
    if lowered.endswith(".json"):
        return FileKind.JSON
    if lowered.endswith(".png"):
        return FileKind.PNG
    raise UnsupportedFileTypeError(filename)


def decode_base64_payload(raw: str) -> str:
    """
    Decode a base64 card payload to text.

    Accepts data-URL prefixes, the URL-safe alphabet and missing padding.
    Invalid UTF-8 sequences are replaced rather than rejected.

    Raises:
        CardDecodeError: If the payload is not valid base64
    """
    cleaned = DATA_URL_PREFIX_RE.sub("", raw.strip())
    cleaned = WHITESPACE_RE.sub("", cleaned).replace("-", "+").replace("_", "/")
    cleaned += "=" * ((4 - len(cleaned) % 4) % 4)
    try:
        decoded = base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CardDecodeError(f"Invalid base64 card payload: {e}") from e
    return decoded.decode("utf-8", errors="replace")


def parse_card_json(text: str) -> Dict[str, Any]:
    """
    Parse a character card from JSON text.

    Only ``data.name`` is required; a wholly absent (or null) name is
    rejected, a blank one is accepted.

    Returns:
        The parsed card dict, unmodified

    Raises:
        CardDecodeError: If the text is not JSON
        CardValidationError: If ``data.name`` is missing
    """
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise CardDecodeError(f"Character card is not valid JSON: {e}") from e

    data = parsed.get("data") if isinstance(parsed, dict) else None
    if not isinstance(data, dict) or data.get("name") is None:
        raise CardValidationError("Invalid character card.")
    return parsed


def _try_parse_card(text: str) -> Optional[Dict[str, Any]]:
    try:
        return parse_card_json(text)
    except CardError:
        return None


class FormatDetector:
    """Detect and decode character card data from PNG metadata."""

    SILLYTAVERN_KEYWORD = "chara"
    FALLBACK_KEYWORD = "character"

    @classmethod
    def find_card(cls, metadata: Mapping[str, str]) -> Optional[Dict[str, Any]]:
        """
        Find the character card among extracted PNG text chunks.

        The ``chara`` chunk (else ``character``) is treated as base64 card
        JSON and any failure decoding it propagates. Without either
        keyword, every chunk value is tried as plain card JSON in
        extraction order and the first that parses wins.

        Returns:
            Parsed card dict, or None if no chunk holds a card

        Raises:
            CardDecodeError: If the card chunk is not valid base64/JSON
            CardValidationError: If the card chunk lacks ``data.name``
        """
        payload = metadata.get(cls.SILLYTAVERN_KEYWORD)
        if payload is None:
            payload = metadata.get(cls.FALLBACK_KEYWORD)

        if payload:
            logger.debug("Decoding base64 card payload from PNG metadata")
            return parse_card_json(decode_base64_payload(payload))

        return next(cls._scan_values(metadata), None)

    @staticmethod
    def _scan_values(metadata: Mapping[str, str]) -> Iterator[Dict[str, Any]]:
        """Yield every chunk value that parses as a card, in chunk order."""
        for key, value in metadata.items():
            card = _try_parse_card(value)
            if card is not None:
                logger.info(f"Found character card in '{key}' chunk")
                yield card

    @staticmethod
    def detect_format(card: Mapping[str, Any]) -> CardFormat:
        """Classify a parsed card by its ``spec`` field."""
        spec = card.get("spec")
        if spec == CardFormat.SILLYTAVERN_V3.value:
            return CardFormat.SILLYTAVERN_V3
        if spec == CardFormat.SILLYTAVERN_V2.value:
            return CardFormat.SILLYTAVERN_V2
        if spec is None and "data" in card:
            return CardFormat.SILLYTAVERN_V1
        return CardFormat.UNKNOWN

    @classmethod
    def get_format_name(cls, format: CardFormat) -> str:
        """Get human-readable format name."""
        names = {
            CardFormat.SILLYTAVERN_V1: "SillyTavern (no spec)",
            CardFormat.SILLYTAVERN_V2: "SillyTavern V2",
            CardFormat.SILLYTAVERN_V3: "SillyTavern V3",
            CardFormat.UNKNOWN: "Unknown Format"
        }
        return names.get(format, "Unknown")
