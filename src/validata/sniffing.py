"""Content sniffing for attachment rules.

Detects a file's extension from its leading bytes (magic numbers), never
from its name or declared content type.
"""


# File magic number signatures, longest first within a shared prefix
FILE_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"\xD0\xCF\x11\xE0\xA1\xB1\x1A\xE1", "doc"),
    (b"Rar!\x1a\x07\x00", "rar"),
    (b"\xFF\xD8\xFF", "jpg"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
    (b"II*\x00", "tiff"),
    (b"MM\x00*", "tiff"),
    (b"%PDF", "pdf"),
    (b"PK\x03\x04", "zip"),
    (b"\x1f\x8b", "gz"),
    (b"ID3", "mp3"),
    (b"\xFF\xFB", "mp3"),
    (b"\xFF\xF3", "mp3"),
    (b"\xFF\xF2", "mp3"),
    (b"BM", "bmp"),
)

# RIFF containers carry their format at offset 8
RIFF_FORMATS = {
    b"WEBP": "webp",
    b"AVI ": "avi",
    b"WAVE": "wav",
}

# ISO base media files carry "ftyp" at offset 4
FTYP_BRANDS = {
    b"isom": "mp4",
    b"iso2": "mp4",
    b"mp41": "mp4",
    b"mp42": "mp4",
    b"avc1": "mp4",
    b"M4V ": "m4v",
    b"M4A ": "m4a",
    b"qt  ": "mov",
    b"heic": "heic",
    b"avif": "avif",
}


class SignatureSniffer:
    """ContentSniffer backed by the magic number table.

    Usage:
        SignatureSniffer().detect(b"\\x89PNG\\r\\n\\x1a\\n...")  # "png"
    """

    def detect(self, content: bytes) -> str | None:
        if not content:
            return None

        header = bytes(content[:16])

        if header.startswith(b"RIFF") and len(header) >= 12:
            return RIFF_FORMATS.get(header[8:12])

        if header[4:8] == b"ftyp":
            return FTYP_BRANDS.get(header[8:12], "mp4")

        for signature, extension in FILE_SIGNATURES:
            if header.startswith(signature):
                return extension

        return None
