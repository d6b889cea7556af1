"""
Character Card Exporter
======================

Export character profiles as SillyTavern JSON cards or PNG character cards.
"""

import json
import logging
from io import BytesIO
from typing import Optional

from PIL import Image

from tavern_engine.models import CharacterProfile
from .format_detector import FormatDetector
from .metadata_handler import PNGMetadataHandler
from .sillytavern_adapter import SillyTavernAdapter

logger = logging.getLogger(__name__)


class CharacterCardExporter:
    """Export character profiles to card files."""

    def __init__(self, keyword: str = FormatDetector.SILLYTAVERN_KEYWORD):
        """
        Initialize exporter.

        Args:
            keyword: PNG text chunk keyword the card is written under
        """
        self.keyword = keyword

    def export_json(self, profile: CharacterProfile) -> str:
        """
        Export a profile as card JSON.

        Imported profiles re-emit their source card unchanged.
        """
        card = SillyTavernAdapter.to_sillytavern_v2(profile)
        return json.dumps(card, ensure_ascii=False, indent=2)

    def export_png(self, profile: CharacterProfile, image: Optional[bytes] = None) -> bytes:
        """
        Export a profile as a PNG character card.

        Args:
            profile: Character to export
            image: PNG to embed the card in; a blank image is used if omitted

        Returns:
            PNG file data with the card in a base64 ``tEXt`` chunk
        """
        logger.info(f"Exporting character card for '{profile.name}'")

        card = SillyTavernAdapter.to_sillytavern_v2(profile)
        card_json = json.dumps(card, ensure_ascii=False)

        if image is None:
            logger.debug(f"No profile image for '{profile.name}', using blank PNG")
            image = self._create_blank_png()

        card_png = PNGMetadataHandler.write_text_chunk(image, self.keyword, card_json)

        logger.info(f"Successfully exported character card for '{profile.name}'")
        return card_png

    @staticmethod
    def _create_blank_png() -> bytes:
        """Create a simple blank PNG as fallback."""
        img = Image.new('RGB', (512, 512), color=(128, 128, 128))
        output = BytesIO()
        img.save(output, format='PNG')
        return output.getvalue()
