"""
Domain layer for document conversion.
Provides the format-specific strategies, the dispatcher that selects one per
input kind, and the gateways (artifact store, office converter) so front-ends
(HTTP or others) can use the same core logic.
"""

from .adapters import LibreOfficeConverter, LocalArtifactStore
from .errors import (
    ConversionError,
    DecodeFailure,
    ErrorKind,
    IOFailure,
    OfficeConversionUnavailable,
    UnsupportedFormat,
    UnsupportedImageFormat,
)
from .interfaces import ArtifactStore, ConversionStrategy, ConvertedArtifact, OfficeConverterGateway
from .service import (
    ConversionDispatcher,
    ConversionResult,
    ConversionService,
    InputKind,
    classify,
    default_strategies,
)
