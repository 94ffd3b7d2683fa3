"""Shared fixtures for conversion and retention tests."""
import pytest

from pdf_service.conversion import ConversionDispatcher, LocalArtifactStore, default_strategies

from .helpers import FIXED_NOW, FakeOfficeConverter


@pytest.fixture
def store(tmp_path):
    return LocalArtifactStore(tmp_path / "uploads", tmp_path / "converted")


@pytest.fixture
def office():
    return FakeOfficeConverter()


@pytest.fixture
def dispatcher(store, office):
    return ConversionDispatcher(store, default_strategies(office), clock=lambda: FIXED_NOW)


@pytest.fixture
def inbox(tmp_path):
    """Directory outside the managed ones where test inputs are written."""
    d = tmp_path / "inbox"
    d.mkdir()
    return d
