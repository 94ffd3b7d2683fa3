from pathlib import Path

from PIL import Image

FIXED_NOW = 1_700_000_000.0


class FakeOfficeConverter:
    """Stands in for LibreOffice: returns canned bytes or raises."""

    def __init__(self, result: bytes = b"%PDF-1.4\n% fake office output\n%%EOF\n", error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[tuple[int, str, str]] = []

    def convert(self, data: bytes, target_format: str, *, source_suffix: str = "") -> bytes:
        self.calls.append((len(data), target_format, source_suffix))
        if self.error is not None:
            raise self.error
        return self.result


def make_image(path: Path, size=(200, 100), fmt: str | None = None) -> Path:
    Image.new("RGB", size, color=(10, 120, 200)).save(path, format=fmt)
    return path
