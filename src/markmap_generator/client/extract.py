"""Text extraction for uploaded .txt, .md and .docx files.

DOCX files are read with python-docx and the text nodes of
word/document.xml are collected in document order. If python-docx cannot
open the archive, the raw XML is stripped of tags instead.
"""
from __future__ import annotations
import io
import logging
import re
import zipfile
from pathlib import Path

from docx import Document
from lxml import etree

from markmap_generator.common.errors import (
    ExtractionError,
    FileTooLargeError,
    TextTooLongError,
    UnsupportedFormatError,
)
from markmap_generator.common.schema import (
    MAX_CHAR_LIMIT,
    MAX_FILE_BYTES,
    SUPPORTED_EXTENSIONS,
    TextInfo,
)

LOGGER = logging.getLogger("markmap.client.extract")

DOCUMENT_XML = "word/document.xml"

_XML_ENTITIES = {"&lt;": "<", "&gt;": ">", "&amp;": "&", "&apos;": "'", "&quot;": '"'}

def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower()

def check_file_size(size: int, limit: int = MAX_FILE_BYTES) -> None:
    if size > limit:
        raise FileTooLargeError(size, limit)

def check_text_length(text: str, limit: int = MAX_CHAR_LIMIT) -> None:
    if len(text) > limit:
        raise TextTooLongError(
            len(text),
            limit,
            message=(
                f"Text content exceeds API limit ({limit} characters), "
                f"extracted text length: {len(text)} characters"
            ),
        )

def _docx_text_nodes(data: bytes) -> str:
    # python-docx oxml elements repeat text under itertext(); reparse the part XML
    root = etree.fromstring(Document(io.BytesIO(data)).part.blob)
    nodes = [t for t in root.itertext() if t.strip()]
    return re.sub(r"\s+", " ", " ".join(nodes)).strip()

def _docx_raw_xml(data: bytes) -> str:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        content = zf.read(DOCUMENT_XML).decode("utf-8", errors="replace")
    content = re.sub(r"<w:p[^>]*>", "\n", content)
    content = content.replace("</w:p>", "")
    content = re.sub(r"<[^>]*>", "", content)
    for entity, char in _XML_ENTITIES.items():
        content = content.replace(entity, char)
    content = re.sub(r"\n{2,}", "\n\n", content)
    return content.strip()

def extract_docx_text(data: bytes) -> str:
    """
    Extract plain text from an in-memory .docx file.

    Args:
        data: Raw bytes of the .docx archive.

    Returns:
        Text nodes joined by single spaces, or the tag-stripped XML when
        the structured parse fails.

    Raises:
        ExtractionError: neither strategy could read word/document.xml.
    """
    try:
        return _docx_text_nodes(data)
    except Exception as e:
        LOGGER.error("Error parsing DOCX: %s", e)
        try:
            return _docx_raw_xml(data)
        except (zipfile.BadZipFile, KeyError, OSError) as fallback_error:
            LOGGER.error("Fallback method failed: %s", fallback_error)
            raise ExtractionError(f"Unable to parse DOCX file: {e}") from fallback_error

def extract_text(data: bytes, filename: str) -> str:
    """
    Turn file bytes into text according to the file's extension.

    Raises:
        UnsupportedFormatError: extension is not txt, md or docx.
        TextTooLongError: extracted text exceeds MAX_CHAR_LIMIT characters.
    """
    ext = file_extension(filename)
    if ext == "docx":
        text = extract_docx_text(data)
    elif ext in SUPPORTED_EXTENSIONS:
        text = data.decode("utf-8", errors="replace")
    else:
        raise UnsupportedFormatError(ext)

    info = TextInfo.from_text(text)
    LOGGER.info(
        "Extracted text info: length=%d byteLength=%d firstChars=%r",
        info.length,
        info.byte_length,
        info.first_chars,
    )
    check_text_length(text)
    return text

def extract_file(path: str | Path) -> str:
    """Read a file from disk after checking its size, then extract its text."""
    p = Path(path)
    size = p.stat().st_size
    LOGGER.info("File: %s, Size: %d bytes", p.name, size)
    check_file_size(size)
    return extract_text(p.read_bytes(), p.name)
