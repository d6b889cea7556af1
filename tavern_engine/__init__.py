"""
Tavern Engine - Roleplay Prompt Assembly

Imports character cards (JSON and PNG-embedded), world books and chat
presets, and assembles the system prompt plus token-budgeted history that
is sent to an LLM backend.
"""

__version__ = "0.1.0"
