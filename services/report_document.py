import gzip
import logging
import zlib
from typing import Optional

from services.report_errors import DecompressionError, MalformedReportError

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"


def decompress_document(payload: bytes, compression: Optional[str]) -> bytes:
    """
    Inflate a report document according to its declared compressionAlgorithm.

    Missing or "NONE" compression is a passthrough. A GZIP declaration that
    does not inflate raises DecompressionError instead of silently falling
    back to the raw bytes.
    """
    algorithm = (compression or "NONE").strip().upper()
    if algorithm == "NONE":
        return payload
    if algorithm != "GZIP":
        raise DecompressionError(f"Unsupported compressionAlgorithm: {compression}")
    try:
        content = gzip.decompress(payload)
    except (OSError, EOFError, zlib.error) as exc:
        logger.error("[report_document] GZIP decompress failed: %s", exc)
        raise DecompressionError(f"GZIP decompress failed: {exc}") from exc
    logger.info(
        "[report_document] Inflated %s -> %s bytes",
        len(payload),
        len(content),
    )
    return content


def decode_document_text(payload: bytes) -> str:
    if payload.startswith(UTF8_BOM):
        payload = payload[len(UTF8_BOM):]
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        preview = payload[:300].decode("utf-8", errors="replace")
        raise MalformedReportError(f"Report document is not valid UTF-8: {exc}", preview) from exc
