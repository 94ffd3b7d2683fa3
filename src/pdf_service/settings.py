import os
from dataclasses import dataclass
from pathlib import Path


def _int_env(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class ServiceConfig:
    """Explicit configuration handed to every component at construction."""

    staging_dir: Path
    output_dir: Path
    retention_minutes: int = 30
    sweep_interval_minutes: int = 10
    office_timeout_sec: int = 120
    soffice_binary: str = "soffice"

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        return cls(
            staging_dir=Path(os.getenv("UPLOAD_DIR", "./uploads")).resolve(),
            output_dir=Path(os.getenv("CONVERTED_DIR", "./converted")).resolve(),
            retention_minutes=_int_env("FILE_RETENTION_MINUTES", 30),
            sweep_interval_minutes=_int_env("CLEANUP_INTERVAL_MINUTES", 10, minimum=1),
            office_timeout_sec=_int_env("OFFICE_TIMEOUT_SEC", 120),
            soffice_binary=os.getenv("SOFFICE_BIN", "soffice"),
        )

    def managed_dirs(self) -> tuple[Path, Path]:
        # staging first, then converted output
        return (self.staging_dir, self.output_dir)
