"""
Character Card Importer
======================

Import characters from JSON card files and PNG character cards.
"""

import logging

from tavern_engine.errors import CardDecodeError, CardImportError
from tavern_engine.models import CharacterProfile
from .format_detector import FileKind, FormatDetector, detect_file_kind, parse_card_json
from .metadata_handler import PNGMetadataHandler
from .sillytavern_adapter import SillyTavernAdapter

logger = logging.getLogger(__name__)


class CharacterCardImporter:
    """Import character cards from file bytes."""

    def __init__(self, strict_chunks: bool = False):
        """
        Initialize importer.

        Args:
            strict_chunks: Fail the import when any PNG text chunk cannot
                be decoded, instead of skipping that chunk
        """
        self.strict_chunks = strict_chunks

    def import_file(self, data: bytes, filename: str) -> CharacterProfile:
        """
        Import a character from file contents.

        The filename only selects the container type; it is checked before
        any parsing happens.

        Args:
            data: Raw file bytes
            filename: Original filename or extension hint (``.json``/``.png``)

        Returns:
            Normalized CharacterProfile

        Raises:
            UnsupportedFileTypeError: Extension is not .json or .png
            PNGFormatError: PNG signature mismatch
            CardDecodeError: Payload is not valid base64/UTF-8/JSON
            CardValidationError: Card has no ``data.name``
            CardImportError: PNG holds no character card
        """
        kind = detect_file_kind(filename)
        logger.info(f"Importing character card from {filename} ({kind.value})")

        if kind == FileKind.JSON:
            profile = self.import_json(data)
        else:
            profile = self.import_png(data)

        logger.info(f"Successfully imported character card: {profile.name}")
        return profile

    def import_json(self, data: bytes) -> CharacterProfile:
        """Import a character from JSON card bytes."""
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CardDecodeError(f"Character file is not UTF-8: {e}") from e
        card = parse_card_json(text)
        self._log_format(card)
        return SillyTavernAdapter.to_profile(card)

    def import_png(self, data: bytes) -> CharacterProfile:
        """Import a character from a PNG card's text chunks."""
        metadata = PNGMetadataHandler.read_text_chunks(data, strict=self.strict_chunks)
        card = FormatDetector.find_card(metadata)
        if card is None:
            logger.warning("No valid character card metadata found in PNG")
            raise CardImportError("No valid character metadata found in PNG.")
        self._log_format(card)
        return SillyTavernAdapter.to_profile(card)

    @staticmethod
    def _log_format(card) -> None:
        card_format = FormatDetector.detect_format(card)
        logger.debug(f"Detected format: {FormatDetector.get_format_name(card_format)}")
