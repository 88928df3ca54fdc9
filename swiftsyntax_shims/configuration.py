"""swiftsyntax_shims/configuration.py — lint configuration.

Reads the JSON ``.swift-format`` style configuration file::

    {
        "builderAttributeNames": ["ViewBuilder", "SceneBuilder"],
        "rules": {
            "ForbidsImplicitReturnOutsideResultBuilder": true
        }
    }

``functionBuilders`` is accepted as the older spelling of
``builderAttributeNames``.  Unknown keys are ignored with a warning so a
full swift-format configuration can be pointed at directly.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Union

from swiftsyntax_shims.errors import ConfigurationError, SourceSpan

_log = logging.getLogger(__name__)

BUILDER_NAMES_KEY = "builderAttributeNames"
LEGACY_BUILDER_NAMES_KEY = "functionBuilders"
RULES_KEY = "rules"

_KNOWN_KEYS = frozenset({BUILDER_NAMES_KEY, LEGACY_BUILDER_NAMES_KEY, RULES_KEY, "version"})


@dataclass(frozen=True)
class Configuration:
    """Options shared by every rule in a lint run."""
    builder_attribute_names: FrozenSet[str] = frozenset()
    rules: Mapping[str, bool] = field(default_factory=dict)

    def is_rule_enabled(self, name: str) -> bool:
        # Rules absent from the map run by default.
        return self.rules.get(name, True)

    def with_builders(self, names: Iterable[str]) -> "Configuration":
        """Copy with *names* added to the builder attribute names."""
        return Configuration(
            builder_attribute_names=self.builder_attribute_names | frozenset(names),
            rules=dict(self.rules),
        )

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        for name in sorted(self.builder_attribute_names):
            if name.startswith("@"):
                warnings.append(f"builder attribute name {name!r} should omit '@'")
            elif not name.isidentifier():
                warnings.append(f"builder attribute name {name!r} is not an identifier")
        return warnings

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: str = "") -> "Configuration":
        span = SourceSpan(file=source)
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"configuration must be a JSON object, got {type(data).__name__}",
                span=span,
            )

        for key in data:
            if key not in _KNOWN_KEYS:
                _log.warning("Ignoring unknown configuration key: %s", key)

        names: List[str] = []
        for key in (BUILDER_NAMES_KEY, LEGACY_BUILDER_NAMES_KEY):
            raw = data.get(key, [])
            if not isinstance(raw, list) or not all(isinstance(n, str) for n in raw):
                raise ConfigurationError(
                    f"'{key}' must be a list of strings",
                    span=span,
                )
            names.extend(raw)

        rules = data.get(RULES_KEY, {})
        if not isinstance(rules, Mapping) or not all(
            isinstance(v, bool) for v in rules.values()
        ):
            raise ConfigurationError(
                f"'{RULES_KEY}' must map rule names to true/false",
                span=span,
            )

        return cls(builder_attribute_names=frozenset(names), rules=dict(rules))


def load_configuration(path: Union[str, Path]) -> Configuration:
    """Load a JSON configuration file."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(
            f"cannot read configuration: {exc}",
            span=SourceSpan(file=str(p)),
            cause=exc,
        ) from exc
    try:
        data: Dict[str, Any] = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"invalid JSON: {exc.msg}",
            span=SourceSpan(file=str(p), line=exc.lineno, column=exc.colno),
            cause=exc,
        ) from exc

    config = Configuration.from_dict(data, source=str(p))
    for warning in config.validate():
        _log.warning("%s: %s", p, warning)
    _log.info("Loaded configuration %s (%d builder name(s))",
              p, len(config.builder_attribute_names))
    return config


__all__ = [
    "Configuration",
    "load_configuration",
    "BUILDER_NAMES_KEY",
    "LEGACY_BUILDER_NAMES_KEY",
]
