from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from liquid_tags.config import RenderConfig
from liquid_tags.registry import TagRegistry
from liquid_tags.tags import standard_registry
from liquid_tags.template import parse_template


@pytest.fixture
def registry() -> TagRegistry:
    return standard_registry()


@pytest.fixture
def render(registry: TagRegistry) -> Callable[..., str]:
    def _render(source: str, variables: dict[str, Any] | None = None, **config: Any) -> str:
        template = parse_template(
            source, registry=registry, config=RenderConfig(**config)
        )
        return template.render(variables or {})

    return _render
