"""
SillyTavern Adapter
==================

Converts between SillyTavern card dicts and CharacterProfile records.
"""

import copy
import logging
from typing import Any, Dict, Mapping

from tavern_engine.models import CharacterProfile
from .models import SillyTavernCard, SillyTavernCardData, SillyTavernSpec

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"


def _text(data: Mapping[str, Any], key: str) -> str:
    """Read a text field, treating missing and null as empty."""
    value = data.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class SillyTavernAdapter:
    """Convert between SillyTavern cards and character profiles."""

    @staticmethod
    def to_profile(card: Dict[str, Any]) -> CharacterProfile:
        """
        Project a SillyTavern V2/V3 card onto a CharacterProfile.

        The card itself is deep-copied into ``raw_card`` so later edits to
        the caller's dict cannot change the profile.

        Args:
            card: Parsed card dict (``{spec, spec_version, data: {...}}``)

        Returns:
            Normalized character profile
        """
        data = card.get("data") or {}

        name = _text(data, "name") if data.get("name") is not None else UNKNOWN_NAME

        profile = CharacterProfile(
            name=name,
            description=_text(data, "description"),
            personality=_text(data, "personality"),
            scenario=_text(data, "scenario"),
            first_message=_text(data, "first_mes"),
            examples=_text(data, "mes_example"),
            system_prompt=_text(data, "system_prompt"),
            post_history_instructions=_text(data, "post_history_instructions"),
            raw_card=copy.deepcopy(card),
        )
        logger.debug(f"Projected card '{profile.name}' onto character profile {profile.id}")
        return profile

    @staticmethod
    def to_sillytavern_v2(profile: CharacterProfile) -> Dict[str, Any]:
        """
        Convert a profile back to a SillyTavern V2 card dict.

        Profiles that came from a card return that card unchanged.
        Profiles built by hand get a fresh V2 card from their fields.
        """
        if profile.raw_card:
            return copy.deepcopy(profile.raw_card)

        card = SillyTavernCard(
            spec=SillyTavernSpec.V2.value,
            spec_version="2.0",
            data=SillyTavernCardData(
                name=profile.name,
                description=profile.description,
                personality=profile.personality,
                scenario=profile.scenario,
                first_mes=profile.first_message,
                mes_example=profile.examples,
                creator_notes="",
                system_prompt=profile.system_prompt,
                post_history_instructions=profile.post_history_instructions,
                alternate_greetings=[],
                tags=[],
                creator="",
                character_version="",
                extensions={},
            ),
        )
        logger.info(f"Built SillyTavern V2 card for '{profile.name}'")
        return card.model_dump(mode="json", exclude_none=True)
