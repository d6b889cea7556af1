"""
PNG Metadata Handler
===================

Reads tEXt, zTXt and iTXt chunks from PNG data, and writes tEXt chunks for
character card export.

Reading walks the chunk stream directly and never decodes pixel data.
CRCs are not verified.
"""

import base64
import logging
import struct
import zlib
from io import BytesIO
from typing import Dict, Optional, Tuple

from PIL import Image, PngImagePlugin

from tavern_engine.errors import CardDecodeError, PNGFormatError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# length (4) + type (4)
CHUNK_HEADER_SIZE = 8
CHUNK_CRC_SIZE = 4

COMPRESSION_DEFLATE = 0


def _decode_text_chunk(data: bytes) -> Optional[Tuple[str, str]]:
    """tEXt: Latin-1 keyword, null, Latin-1 text."""
    sep = data.find(b"\x00")
    if sep <= 0:
        return None
    return data[:sep].decode("latin-1"), data[sep + 1:].decode("latin-1")


def _decode_ztxt_chunk(data: bytes) -> Optional[Tuple[str, str]]:
    """zTXt: keyword, null, compression method, deflate stream."""
    sep = data.find(b"\x00")
    if sep <= 0 or sep + 2 > len(data):
        return None
    keyword = data[:sep].decode("latin-1")
    method = data[sep + 1]
    if method != COMPRESSION_DEFLATE:
        logger.debug(f"Skipping zTXt chunk '{keyword}' with compression method {method}")
        return None
    return keyword, zlib.decompress(data[sep + 2:]).decode("utf-8")


def _decode_itxt_chunk(data: bytes) -> Optional[Tuple[str, str]]:
    """
    iTXt: keyword, null, compression flag, compression method,
    language tag, null, translated keyword, null, text.
    """
    keyword_end = data.find(b"\x00")
    if keyword_end <= 0 or keyword_end + 3 > len(data):
        return None

    keyword = data[:keyword_end].decode("latin-1")
    compression_flag = data[keyword_end + 1]
    compression_method = data[keyword_end + 2]

    # Flag and method are fixed single bytes and may themselves be zero
    language_end = data.find(b"\x00", keyword_end + 3)
    if language_end < 0:
        return None
    translated_end = data.find(b"\x00", language_end + 1)
    if translated_end < 0:
        return None
    text = data[translated_end + 1:]

    if compression_flag == 1 and compression_method == COMPRESSION_DEFLATE:
        text = zlib.decompress(text)
    return keyword, text.decode("utf-8")


CHUNK_DECODERS = {
    b"tEXt": _decode_text_chunk,
    b"zTXt": _decode_ztxt_chunk,
    b"iTXt": _decode_itxt_chunk,
}


class PNGMetadataHandler:
    """Handle PNG text chunk operations for character card metadata."""

    @staticmethod
    def read_text_chunks(png_data: bytes, strict: bool = False) -> Dict[str, str]:
        """
        Extract all text chunks from PNG data.

        Later chunks with the same keyword overwrite earlier ones.
        Parsing stops at IEND or when the remaining bytes cannot hold
        another complete chunk.

        Args:
            png_data: PNG file data as bytes
            strict: Raise on the first chunk that fails to decode instead of
                skipping it

        Returns:
            Mapping of chunk keyword to decoded text

        Raises:
            PNGFormatError: If data does not start with the PNG signature
            CardDecodeError: In strict mode, if a text chunk fails to decode
        """
        if png_data[:len(PNG_SIGNATURE)] != PNG_SIGNATURE:
            raise PNGFormatError("Not a PNG file.")

        metadata: Dict[str, str] = {}
        offset = len(PNG_SIGNATURE)
        total = len(png_data)

        while offset + CHUNK_HEADER_SIZE <= total:
            length, chunk_type = struct.unpack_from(">I4s", png_data, offset)
            data_start = offset + CHUNK_HEADER_SIZE
            data_end = data_start + length
            if data_end + CHUNK_CRC_SIZE > total:
                logger.debug(f"Truncated {chunk_type!r} chunk at offset {offset}, stopping")
                break

            decoder = CHUNK_DECODERS.get(chunk_type)
            if decoder is not None:
                try:
                    decoded = decoder(png_data[data_start:data_end])
                except (zlib.error, UnicodeDecodeError) as e:
                    if strict:
                        raise CardDecodeError(
                            f"Failed to decode {chunk_type.decode('latin-1')} chunk: {e}"
                        ) from e
                    logger.warning(f"Skipping undecodable {chunk_type.decode('latin-1')} chunk: {e}")
                    decoded = None
                if decoded is not None:
                    keyword, text = decoded
                    metadata[keyword] = text

            offset = data_end + CHUNK_CRC_SIZE
            if chunk_type == b"IEND":
                break

        logger.debug(f"Extracted {len(metadata)} text chunk(s): {list(metadata)}")
        return metadata

    @classmethod
    def read_text_chunk(cls, png_data: bytes, keyword: str) -> Optional[str]:
        """
        Extract a single text chunk by keyword (case-sensitive).

        Returns:
            Chunk text if found, None otherwise
        """
        return cls.read_text_chunks(png_data).get(keyword)

    @staticmethod
    def write_text_chunk(png_data: bytes, keyword: str, data: str) -> bytes:
        """
        Embed tEXt chunk with data into PNG image.

        Args:
            png_data: Original PNG file data as bytes
            keyword: tEXt chunk keyword (e.g., 'chara')
            data: Text data to embed (will be base64-encoded)

        Returns:
            Modified PNG data with embedded metadata
        """
        try:
            image = Image.open(BytesIO(png_data))

            png_info = PngImagePlugin.PngInfo()

            # Preserve existing metadata except the keyword we're replacing
            if hasattr(image, 'text') and isinstance(image.text, dict):
                for key, value in image.text.items():
                    if key != keyword:
                        png_info.add_text(key, value)

            encoded_data = base64.b64encode(data.encode('utf-8')).decode('ascii')
            png_info.add_text(keyword, encoded_data)

            output = BytesIO()
            image.save(output, format='PNG', pnginfo=png_info)
            return output.getvalue()

        except Exception as e:
            logger.error(f"Error writing PNG metadata: {e}")
            raise
