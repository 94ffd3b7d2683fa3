import logging
import secrets
import subprocess
import tempfile
from pathlib import Path

from .interfaces import ArtifactStore, OfficeConverterGateway

logger = logging.getLogger(__name__)


class LocalArtifactStore(ArtifactStore):
    """Directory-based persistence shared by the dispatcher and the sweeper.

    Originals land in the staging directory, converted PDFs in the output
    directory. Both are created on demand.
    """

    def __init__(self, staging_dir: str | Path, output_dir: str | Path) -> None:
        self._staging = Path(staging_dir).resolve()
        self._output = Path(output_dir).resolve()
        if self._staging == self._output:
            raise ValueError("staging and output directories must differ")

    @property
    def staging_dir(self) -> Path:
        return self._staging

    @property
    def output_dir(self) -> Path:
        return self._output

    def ensure_dirs(self) -> None:
        for d in (self._staging, self._output):
            d.mkdir(parents=True, exist_ok=True)

    def output_path_for(self, original_name: str, now_ms: int) -> Path:
        stem = Path(original_name).stem or "document"
        return self._output / f"{now_ms}-{stem}.pdf"

    def staging_path_for(self, original_name: str, now_ms: int) -> Path:
        name = Path(original_name).name or "upload"
        return self._staging / f"{now_ms}-{secrets.randbelow(10**9)}-{name}"

    def resolve_output(self, name: str) -> Path | None:
        """Return the converted file path for ``name``, or None if it escapes the output directory."""
        candidate = (self._output / name).resolve()
        if candidate == self._output or not candidate.is_relative_to(self._output):
            return None
        return candidate

    def discard(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Could not delete %s: %s", path, e)
            return False
        logger.info("Deleted file: %s", path.name)
        return True


class LibreOfficeConverter(OfficeConverterGateway):
    """Runs a headless LibreOffice (`soffice`) per call in a private work directory.

    Every call gets its own user profile directory, so calls may run
    concurrently. ``timeout_sec`` of 0 disables the subprocess timeout.
    """

    def __init__(self, binary: str = "soffice", timeout_sec: int = 120) -> None:
        self._binary = binary
        self._timeout = timeout_sec or None

    def convert(self, data: bytes, target_format: str, *, source_suffix: str = "") -> bytes:
        with tempfile.TemporaryDirectory(prefix="pdf_service_office_") as tmp:
            work = Path(tmp)
            source = work / f"source{source_suffix}"
            source.write_bytes(data)
            cmd = [
                self._binary,
                f"-env:UserInstallation={(work / 'profile').as_uri()}",
                "--headless",
                "--convert-to", target_format,
                "--outdir", str(work),
                str(source),
            ]
            try:
                proc = subprocess.run(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    stdin=subprocess.DEVNULL,
                    timeout=self._timeout,
                )
            except FileNotFoundError:
                raise RuntimeError(f"office converter {self._binary!r} is not installed or not on PATH") from None
            except subprocess.TimeoutExpired:
                raise RuntimeError(f"office conversion timed out after {self._timeout} seconds") from None

            if proc.returncode != 0:
                stderr = proc.stderr.decode("utf-8", errors="ignore").strip()
                raise RuntimeError(f"office converter exited with code {proc.returncode}: {stderr}")

            # "pdf:writer_pdf_Export" style filters still produce a .pdf file
            produced = work / f"source.{target_format.split(':', 1)[0]}"
            if not produced.exists():
                raise RuntimeError("office converter reported success but produced no output")
            return produced.read_bytes()
