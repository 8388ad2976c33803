# ABOUTME: Decoder for the single-byte substitution encoding used by Shamela narrator databases.
# ABOUTME: Two lookup profiles (text, metadata) plus diagnostics for bytes with no known mapping.

import re
from collections import Counter
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

# Built empirically by comparing encoded narrator names against the published
# Arabic text (e.g. "hEEG" -> الله, "tC" -> بن). Empty strings are control bytes.
_BASE_CHAR_MAP: dict[int, str] = {
    0x14: "",  # control prefix
    0x40: " ",
    0x43: "ن",
    0x45: "ل",
    0x46: "م",
    0x47: "ه",
    0x4A: "",  # section start marker
    0x4B: "",  # diacritic suffix
    0x4D: "(",
    0x4F: '"',
    0x55: "ي",
    0x58: "ى",
    0x59: "ك",  # kaf; 0x6b is structural, not kaf
    0x5A: "\n",  # field end
    0x5B: "[",
    0x5D: ")",
    0x60: "و",
    0x61: "/",  # volume/page separator
    0x62: "آ",
    0x63: "ؤ",
    0x65: "ة",
    0x66: "أ",
    0x67: "إ",
    0x68: "ا",
    0x69: "ر",
    0x6B: "\n",  # paragraph break in text, field label terminator in metadata
    0x70: "\u0651",  # shadda
    0x71: "ة",
    0x72: "ت",
    0x73: "ث",
    0x74: "ب",
    0x75: "ح",
    0x76: "خ",
    0x77: "د",
    0x78: "ج",
    0x79: "ث",
    0x7A: ":",
    0x7F: "",
    0x80: "ط",
    0x81: "",
    0x84: "",
    0x85: "",
    0x86: "",
    0x87: "",
    0x88: "",
    0x8A: "",
    0x8B: "",
    0x94: "و",
    0x95: "",
    0x99: "",
    0x9B: " ",
    0x9C: "و",
    0x9E: "ئ",
    0xA2: "",
    0xA4: "",
    0xA6: "",
    0xA8: "",
    0xAA: "،",
    0xAB: "و",
    0xAC: "ذ",
    0xAD: "ف",
    0xAE: "ق",
    0xC0: "",  # header start
    0xCC: "\u0650",  # kasra
    0xCD: "\u064d",  # tanween kasra
    0xCE: "\u064e",  # fatha
    0xCF: "\u064f",  # damma
    0xD0: "",
    0xDE: "\u0652",  # sukun
    0xE0: "\n",  # entry separator
    0xEB: "ش",
    0xEC: "ض",
    0xED: "ز",
    0xEE: "س",
    0xEF: "ص",
    **{0xF0 + digit: str(digit) for digit in range(10)},
    0xFB: "غ",
    0xFC: "ـ",  # tatweel, as in هـ
    0xFD: "ظ",
    0xFE: "ع",
    0xFF: "غ",
}

# Metadata blobs reuse 0x6b as "label: value" separator and carry 0x94 as header noise.
_METADATA_OVERRIDES: dict[int, str] = {
    0x6B: ":",
    0x94: "",
}

TEXT_CHAR_MAP: Mapping[int, str] = MappingProxyType(dict(_BASE_CHAR_MAP))
METADATA_CHAR_MAP: Mapping[int, str] = MappingProxyType({**_BASE_CHAR_MAP, **_METADATA_OVERRIDES})

_PLACEHOLDER_RE = re.compile(r"\[([0-9a-fA-F]{2})\]")


class TextProfile(Enum):
    """Which lookup table a blob should be decoded with."""

    TEXT = "text"
    METADATA = "metadata"


_PROFILE_MAPS: dict[TextProfile, Mapping[int, str]] = {
    TextProfile.TEXT: TEXT_CHAR_MAP,
    TextProfile.METADATA: METADATA_CHAR_MAP,
}


def decode_bytes(blob: bytes | bytearray | memoryview | None, char_map: Mapping[int, str]) -> str:
    """Decode a blob through an explicit byte -> string table.

    Bytes with no entry are rendered as ``[xx]`` so partially decoded text can
    still be inspected. Surrounding spaces are trimmed; line breaks are kept
    because they carry structure.
    """
    if not blob:
        return ""
    chars = [char_map.get(byte, f"[{byte:02x}]") for byte in bytes(blob)]
    return "".join(chars).strip(" ")


def decode_legacy_text(
    blob: bytes | bytearray | memoryview | None,
    profile: TextProfile = TextProfile.TEXT,
) -> str:
    """Decode a legacy-encoded blob using the table for ``profile``."""
    return decode_bytes(blob, _PROFILE_MAPS[profile])


def decode_shamela_text(blob: bytes | bytearray | memoryview | None) -> str:
    """Decode names and biographies, stripping all surrounding whitespace."""
    return decode_legacy_text(blob, TextProfile.TEXT).strip()


def decode_shamela_metadata(blob: bytes | bytearray | memoryview | None) -> str:
    """Decode a metadata blob into ``label: value`` lines.

    The header bytes decode to a stray leading colon and each section starts
    with one after the newline; both are removed.
    """
    result = decode_legacy_text(blob, TextProfile.METADATA).strip()
    result = re.sub(r"^:\s*", "", result)
    result = re.sub(r"\n:\s*", "\n", result)
    return result


def has_unmapped_bytes(decoded: str) -> bool:
    """Whether decoded text still contains ``[xx]`` placeholders."""
    return _PLACEHOLDER_RE.search(decoded) is not None


def get_unmapped_bytes(decoded: str) -> list[str]:
    """Distinct placeholder codes, lowercased, in order of first appearance."""
    seen: dict[str, None] = {}
    for match in _PLACEHOLDER_RE.finditer(decoded):
        seen.setdefault(match.group(1).lower(), None)
    return list(seen)


def count_unmapped_bytes(decoded: str) -> Counter[str]:
    """Count occurrences of each placeholder code."""
    return Counter(match.group(1).lower() for match in _PLACEHOLDER_RE.finditer(decoded))
