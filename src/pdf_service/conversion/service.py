import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Mapping

from .errors import ConversionError, IOFailure, UnsupportedFormat
from .interfaces import ArtifactStore, ConversionStrategy, ConvertedArtifact, OfficeConverterGateway
from .strategies import OfficeDelegate, copy_pdf, embed_image, render_text_pdf

logger = logging.getLogger(__name__)

UPLOAD_CHUNK_SIZE = 1024 * 1024


class InputKind(str, Enum):
    IMAGE = "image"
    TEXT = "text"
    OFFICE = "office"
    PDF = "pdf"
    UNSUPPORTED = "unsupported"


EXTENSION_KINDS: dict[str, InputKind] = {
    ".jpg": InputKind.IMAGE,
    ".jpeg": InputKind.IMAGE,
    ".png": InputKind.IMAGE,
    ".gif": InputKind.IMAGE,
    ".bmp": InputKind.IMAGE,
    ".txt": InputKind.TEXT,
    ".doc": InputKind.OFFICE,
    ".docx": InputKind.OFFICE,
    ".xls": InputKind.OFFICE,
    ".xlsx": InputKind.OFFICE,
    ".ppt": InputKind.OFFICE,
    ".pptx": InputKind.OFFICE,
    ".pdf": InputKind.PDF,
}


def classify(path: str | Path) -> InputKind:
    return EXTENSION_KINDS.get(Path(path).suffix.lower(), InputKind.UNSUPPORTED)


def default_strategies(office: OfficeConverterGateway) -> dict[InputKind, ConversionStrategy]:
    return {
        InputKind.IMAGE: embed_image,
        InputKind.TEXT: render_text_pdf,
        InputKind.OFFICE: OfficeDelegate(office),
        InputKind.PDF: copy_pdf,
    }


@dataclass(frozen=True)
class ConversionResult:
    input_path: Path
    kind: InputKind
    output_path: Path | None = None
    error: ConversionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Path:
        if self.error is not None:
            raise self.error
        assert self.output_path is not None
        return self.output_path


class ConversionDispatcher:
    """Picks exactly one strategy per input kind and enforces the no-partial-output contract.

    Every kind except ``InputKind.UNSUPPORTED`` must have a strategy; a
    missing one raises ValueError at construction.
    """

    def __init__(
        self,
        store: ArtifactStore,
        strategies: Mapping[InputKind, ConversionStrategy],
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        missing = set(InputKind) - {InputKind.UNSUPPORTED} - set(strategies)
        if missing:
            names = ", ".join(sorted(k.value for k in missing))
            raise ValueError(f"no conversion strategy registered for: {names}")
        if InputKind.UNSUPPORTED in strategies:
            raise ValueError("unsupported inputs cannot have a strategy")
        self._store = store
        self._strategies = dict(strategies)
        self._clock = clock

    @property
    def store(self) -> ArtifactStore:
        return self._store

    def convert(self, input_path: str | Path, original_name: str | None = None) -> ConversionResult:
        input_path = Path(input_path)
        name = original_name or input_path.name
        suffix = Path(name).suffix.lower()
        kind = classify(name)
        if kind is InputKind.UNSUPPORTED:
            ext = suffix or "(none)"
            logger.warning("Unsupported file type: %s", ext)
            return ConversionResult(input_path, kind, error=UnsupportedFormat(f"Unsupported file type: {ext}"))

        self._store.ensure_dirs()
        now_ms = int(self._clock() * 1000)
        output_path = self._store.output_path_for(name, now_ms)
        logger.info("Converting: %s -> %s", name, output_path.name)

        strategy = self._strategies[kind]
        try:
            strategy(input_path, output_path, source_suffix=suffix)
        except ConversionError as e:
            error = e
        except OSError as e:
            error = IOFailure("file system error during conversion")
            error.__cause__ = e
        except Exception as e:
            logger.exception("Unexpected error converting %s", name)
            error = IOFailure("unexpected error during conversion")
            error.__cause__ = e
        else:
            return ConversionResult(input_path, kind, output_path=output_path)

        logger.warning("Conversion of %s failed (%s): %s", input_path.name, error.kind.value, error.message)
        self._discard_partial(output_path)
        return ConversionResult(input_path, kind, error=error)

    def _discard_partial(self, output_path: Path) -> None:
        try:
            output_path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Could not remove partial output %s: %s", output_path, e)


class ConversionService:
    """Reference conversion flow used by front-ends (HTTP or others).

    Stages uploads into the staging directory, runs the dispatcher off the
    event loop and always discards the original once conversion ends.
    """

    def __init__(self, dispatcher: ConversionDispatcher, *, clock: Callable[[], float] = time.time) -> None:
        self._dispatcher = dispatcher
        self._store = dispatcher.store
        self._clock = clock

    @property
    def store(self) -> ArtifactStore:
        return self._store

    async def stage_upload(
        self,
        filename: str,
        reader: Callable[[int], Awaitable[bytes]],
    ) -> Path:
        """Stream an upload into the staging directory and return its path."""
        self._store.ensure_dirs()
        now_ms = int(self._clock() * 1000)
        input_path = self._store.staging_path_for(filename or "upload", now_ms)
        try:
            with input_path.open("wb") as f_out:
                while True:
                    chunk = await reader(UPLOAD_CHUNK_SIZE)
                    if not chunk:
                        break
                    f_out.write(chunk)
        except BaseException:
            self._store.discard(input_path)
            raise
        return input_path

    def convert_upload(self, input_path: Path, original_name: str) -> ConvertedArtifact:
        """Convert a staged original, discarding it on every outcome.

        ``size_bytes`` is the size of the uploaded original.
        Raises the classified ConversionError on failure.
        """
        try:
            size_bytes = input_path.stat().st_size
            output_path = self._dispatcher.convert(input_path, original_name).unwrap()
        except OSError as e:
            raise IOFailure("could not read the uploaded file") from e
        finally:
            self._store.discard(input_path)

        converted_at = datetime.fromtimestamp(self._clock(), timezone.utc)
        return ConvertedArtifact(
            id=output_path.name.split("-", 1)[0],
            original_name=original_name,
            converted_name=output_path.name,
            size_bytes=size_bytes,
            converted_at=converted_at.isoformat().replace("+00:00", "Z"),
        )

    async def convert_upload_async(self, input_path: Path, original_name: str) -> ConvertedArtifact:
        return await asyncio.to_thread(self.convert_upload, input_path, original_name)
