from __future__ import annotations

import asyncio
import base64
import mimetypes
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from ..core import metrics
from ..core.exceptions import FileTooLarge, InvalidFileType, MissingInput
from ..core.logging import get_logger
from ..schemas.statement import Language

logger = get_logger(name=__name__)

PDF_MEDIA_TYPE = "application/pdf"
MAX_DOCUMENT_BYTES = 20 * 1024 * 1024  # 20 MiB ceiling for statements

_INVALID_TYPE_MESSAGES = {
    Language.EN: "Please upload a PDF file.",
    Language.ZH: "请上传PDF文件。",
    Language.ES: "Por favor sube un archivo PDF.",
}

_TOO_LARGE_MESSAGES = {
    Language.EN: "File must be under 20MB.",
    Language.ZH: "文件大小不能超过20MB。",
    Language.ES: "El archivo no puede superar 20MB.",
}

_UNREADABLE_MESSAGES = {
    Language.EN: "Could not read {filename}.",
    Language.ZH: "无法读取文件 {filename}。",
    Language.ES: "No se pudo leer {filename}.",
}


@dataclass(frozen=True, slots=True)
class EncodedDocument:
    data: str
    filename: str
    size_bytes: int
    media_type: str = PDF_MEDIA_TYPE


def _normalise_media_type(media_type: str | None) -> str:
    return (media_type or "").split(";", 1)[0].strip().lower()


def _require_pdf(filename: str, media_type: str | None, language: Language) -> str:
    declared = _normalise_media_type(media_type)
    if declared != PDF_MEDIA_TYPE:
        logger.info("document_rejected", reason="media_type", filename=filename, media_type=declared or None)
        raise InvalidFileType(
            _INVALID_TYPE_MESSAGES[language],
            details={"filename": filename, "media_type": declared or None},
        )
    return declared


def _require_size(filename: str, size: int, language: Language) -> None:
    if size > MAX_DOCUMENT_BYTES:
        logger.info("document_rejected", reason="size", filename=filename, size_bytes=size)
        raise FileTooLarge(
            _TOO_LARGE_MESSAGES[language],
            details={"size": size, "max_size": MAX_DOCUMENT_BYTES},
        )


def encode_bytes(
    payload: bytes,
    *,
    filename: str,
    media_type: str | None,
    lang: Language | str = Language.EN,
) -> EncodedDocument:
    """Validate a raw statement and return its base64 form."""
    language = Language.coerce(lang)
    declared = _require_pdf(filename, media_type, language)
    _require_size(filename, len(payload), language)
    if not payload:
        raise MissingInput("Uploaded document is empty.", details={"filename": filename})

    encoded = base64.b64encode(payload).decode("ascii")
    metrics.observe_document_size(size_bytes=len(payload))
    return EncodedDocument(data=encoded, filename=filename, size_bytes=len(payload), media_type=declared)


async def encode_document(
    path: str | Path,
    *,
    media_type: str | None = None,
    lang: Language | str = Language.EN,
) -> EncodedDocument:
    """Encode a statement from disk; the media type is guessed when not declared."""
    source = Path(path)
    language = Language.coerce(lang)
    declared = _require_pdf(source.name, media_type or mimetypes.guess_type(source.name)[0], language)
    try:
        size = (await asyncio.to_thread(source.stat)).st_size
        _require_size(source.name, size, language)
        payload = await asyncio.to_thread(source.read_bytes)
    except OSError as exc:
        logger.info("document_rejected", reason="unreadable", filename=source.name, error=str(exc))
        raise MissingInput(
            _UNREADABLE_MESSAGES[language].format(filename=source.name),
            details={"filename": source.name, "error": exc.strerror},
        ) from exc
    return encode_bytes(payload, filename=source.name, media_type=declared, lang=lang)


async def encode_upload(upload: UploadFile, *, lang: Language | str = Language.EN) -> EncodedDocument:
    filename = upload.filename or "statement.pdf"
    _require_pdf(filename, upload.content_type, Language.coerce(lang))
    payload = await upload.read(MAX_DOCUMENT_BYTES + 1)
    await upload.seek(0)
    return encode_bytes(payload, filename=filename, media_type=upload.content_type, lang=lang)


__all__ = [
    "EncodedDocument",
    "MAX_DOCUMENT_BYTES",
    "PDF_MEDIA_TYPE",
    "encode_bytes",
    "encode_document",
    "encode_upload",
]
