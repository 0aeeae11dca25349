"""Shared pytest fixtures for all tests."""

import pytest

from code_hints.analyzer import CodeAnalyzer
from code_hints.locator import CodeLocator, build_unit


@pytest.fixture
def analyzer():
    """Analyzer with default configuration."""
    return CodeAnalyzer()


@pytest.fixture
def locator():
    return CodeLocator()


@pytest.fixture
def java_unit():
    """Build a Java unit from a bare method or field snippet."""

    def _build(source: str, name: str = ""):
        return build_unit(source, "java", declared_name=name)

    return _build


@pytest.fixture
def python_unit():
    def _build(source: str, name: str = ""):
        return build_unit(source, "python", declared_name=name)

    return _build


@pytest.fixture
def kotlin_unit():
    """Kotlin has no front end, so these units are analysed in text mode."""

    def _build(source: str, name: str = ""):
        return build_unit(source, "kotlin", declared_name=name)

    return _build
