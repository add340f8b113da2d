"""freedb ingest - Dump text decoding and normalization.

Dumps are decoded once, up front. Bytes that are not valid UTF-8 (and no
fallback codec is configured) survive decoding as surrogate escapes so
that line splitting and key matching still work; text fields then pass
through to_valid_text(), which drops them.
"""

import codecs

UTF8_BOM = codecs.BOM_UTF8.decode("utf-8")


def decode_dump(data: bytes, fallback_encoding: str | None = None) -> str:
    """Decode raw dump bytes to text.

    Args:
        data: Raw dump bytes.
        fallback_encoding: Codec to use when data is not valid UTF-8.
            None keeps undecodable bytes as surrogate escapes.

    Returns:
        Decoded text with any leading byte-order mark removed.

    Raises:
        LookupError: If fallback_encoding names an unknown codec.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        if fallback_encoding is not None:
            text = data.decode(fallback_encoding, errors="surrogateescape")
        else:
            text = data.decode("utf-8", errors="surrogateescape")
    return text.removeprefix(UTF8_BOM)


def to_valid_text(value: str) -> str:
    """Drop invalid encoding units from value.

    Nothing is substituted for the dropped units.
    """
    return value.encode("utf-8", errors="ignore").decode("utf-8")
