from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class OfficeConverterGateway(Protocol):
    def convert(self, data: bytes, target_format: str, *, source_suffix: str = "") -> bytes:
        """Convert raw office document bytes into ``target_format`` bytes.
        This is a blocking call; callers should offload to threads if needed.
        """


class ArtifactStore(Protocol):
    @property
    def staging_dir(self) -> Path:
        ...

    @property
    def output_dir(self) -> Path:
        ...

    def ensure_dirs(self) -> None:
        ...

    def output_path_for(self, original_name: str, now_ms: int) -> Path:
        ...

    def staging_path_for(self, original_name: str, now_ms: int) -> Path:
        ...

    def resolve_output(self, name: str) -> Path | None:
        ...

    def discard(self, path: Path) -> bool:
        ...


class ConversionStrategy(Protocol):
    def __call__(self, input_path: Path, output_path: Path, *, source_suffix: str = "") -> None:
        """Write a complete PDF to ``output_path`` or raise a ConversionError."""


@dataclass(frozen=True)
class ConvertedArtifact:
    """Metadata handed to the ownership collaborator after a conversion."""

    id: str
    original_name: str
    converted_name: str
    size_bytes: int
    converted_at: str

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "original_name": self.original_name,
            "converted_name": self.converted_name,
            "size_bytes": self.size_bytes,
            "converted_at": self.converted_at,
        }
