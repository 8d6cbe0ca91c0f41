from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from ...core.config import Settings
from ...core.errors import ResourceNotFound


@dataclass(frozen=True)
class TemplateDef:
    name: str
    path: str
    threshold: Optional[float] = None


class TemplateRegistry:
    def __init__(self) -> None:
        self._templates: Dict[str, TemplateDef] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "TemplateRegistry":
        reg = cls()
        for name in settings.templates:
            reg.register(TemplateDef(name=name, path=settings.template_path(name)))
        return reg

    def register(self, tpl: TemplateDef) -> None:
        self._templates[tpl.name] = tpl

    def get(self, name: str) -> TemplateDef:
        try:
            return self._templates[name]
        except KeyError:
            raise KeyError(f"Template not registered: {name}") from None

    def names(self) -> List[str]:
        return list(self._templates.keys())

    def verify(self) -> None:
        """Fail fast before touching the device if any template file is missing."""
        missing = [t.path for t in self._templates.values() if not os.path.isfile(t.path)]
        if missing:
            raise ResourceNotFound(missing)


__all__ = ["TemplateDef", "TemplateRegistry"]
