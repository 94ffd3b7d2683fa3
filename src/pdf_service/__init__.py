"""
PDF Conversion Service package.

Normalizes uploaded documents (images, plain text, office documents and PDFs)
into PDF artifacts and reclaims disk space with a scheduled retention sweep.
The FastAPI host lives in `pdf_service.webapi`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
