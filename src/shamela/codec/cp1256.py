# ABOUTME: Windows-1256 decoding for the Shamela roots database.
# ABOUTME: Decodes token/root blobs and splits multi-valued root cells.

CODEPAGE = "cp1256"


def decode_codepage_text(blob: bytes | bytearray | memoryview | None) -> str:
    """Decode a Windows-1256 blob. ``None`` and empty input give an empty string."""
    if not blob:
        return ""
    return bytes(blob).decode(CODEPAGE)


def parse_multi_value(cell: str | None) -> list[str]:
    """Split a comma-separated cell such as ``"ءتي,ءتو"`` into trimmed values."""
    if not cell:
        return []
    return [value.strip() for value in cell.split(",") if value.strip()]
