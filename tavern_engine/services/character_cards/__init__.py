"""
Character Card System
====================

Character definitions embedded in JSON files or PNG images.

Supports:
- SillyTavern V2/V3 JSON cards
- PNG cards with the card in tEXt, zTXt or iTXt chunks
- Export back to JSON or PNG without losing source fields
"""

from .card_exporter import CharacterCardExporter
from .card_importer import CharacterCardImporter
from .format_detector import (
    CardFormat,
    FileKind,
    FormatDetector,
    decode_base64_payload,
    detect_file_kind,
    parse_card_json,
)
from .metadata_handler import PNGMetadataHandler
from .sillytavern_adapter import SillyTavernAdapter

__all__ = [
    'CharacterCardExporter',
    'CharacterCardImporter',
    'CardFormat',
    'FileKind',
    'FormatDetector',
    'PNGMetadataHandler',
    'SillyTavernAdapter',
    'decode_base64_payload',
    'detect_file_kind',
    'parse_card_json',
]
