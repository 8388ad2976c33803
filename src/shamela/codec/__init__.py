# ABOUTME: Byte decoders for the two non-UTF-8 encodings found in Shamela service databases.
# ABOUTME: Exports the legacy substitution decoder and the Windows-1256 helpers.

from shamela.codec.cp1256 import decode_codepage_text, parse_multi_value
from shamela.codec.legacy import (
    METADATA_CHAR_MAP,
    TEXT_CHAR_MAP,
    TextProfile,
    count_unmapped_bytes,
    decode_legacy_text,
    decode_shamela_metadata,
    decode_shamela_text,
    get_unmapped_bytes,
    has_unmapped_bytes,
)

__all__ = [
    "METADATA_CHAR_MAP",
    "TEXT_CHAR_MAP",
    "TextProfile",
    "count_unmapped_bytes",
    "decode_codepage_text",
    "decode_legacy_text",
    "decode_shamela_metadata",
    "decode_shamela_text",
    "get_unmapped_bytes",
    "has_unmapped_bytes",
    "parse_multi_value",
]
