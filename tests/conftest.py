from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from graph2code.llm import schema
from graph2code.shared.settings import _ENV_KEYS


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for env_names in _ENV_KEYS.values():
        for env_name in env_names:
            monkeypatch.delenv(env_name, raising=False)
    schema._cached_translation_schema.cache_clear()
    yield
    schema._cached_translation_schema.cache_clear()
    package_logger = logging.getLogger("graph2code")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
