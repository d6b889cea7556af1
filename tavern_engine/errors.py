"""Exception hierarchy for import and parsing failures."""


class TavernEngineError(Exception):
    """Base exception for all Tavern Engine errors."""
    pass


class CardError(TavernEngineError):
    """Base exception for character card import failures."""
    pass


class PNGFormatError(CardError):
    """File is not a PNG (bad signature) or its chunk stream is unusable."""
    pass


class CardDecodeError(CardError):
    """Base64, UTF-8, DEFLATE or JSON decoding failed on card data."""
    pass


class CardValidationError(CardError):
    """Card decoded but is missing a required field."""
    pass


class CardImportError(CardError):
    """No usable character payload could be found."""
    pass


class UnsupportedFileTypeError(CardImportError):
    """File extension is not one the importer understands."""
    
    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Unsupported character file type: {filename}")


class ParseError(TavernEngineError):
    """Base exception for world book / preset JSON parse failures."""
    pass


class WorldBookParseError(ParseError):
    """World book JSON could not be parsed."""
    pass


class PresetParseError(ParseError):
    """Preset JSON could not be parsed."""
    pass
