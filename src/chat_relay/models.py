"""Logical model names and the provider/model string each one maps to.

Provider model strings are dated snapshots that expire upstream, so the
defaults below can be overridden from the ``models`` section of the config::

    models:
      claude-3-7-sonnet:
        model: claude-3-7-sonnet-latest
      gpt-4o-mini:            # new entries are allowed too
        provider: openai
        model: gpt-4o-mini
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional

from .errors import ConfigurationError, UnsupportedModelError

ANTHROPIC = "anthropic"
OPENAI = "openai"
TOGETHER = "together"
PROVIDERS = (ANTHROPIC, OPENAI, TOGETHER)


@dataclass(frozen=True)
class ModelRoute:
    name: str
    provider: str
    model: str
    # Role used for the instructions turn on chat-completion providers.
    system_role: str = "system"


DEFAULT_MODELS: Dict[str, ModelRoute] = {
    r.name: r
    for r in (
        ModelRoute("claude-3-5-sonnet", ANTHROPIC, "claude-3-5-sonnet-20241022"),
        ModelRoute("claude-3-7-sonnet", ANTHROPIC, "claude-3-7-sonnet-20250219"),
        ModelRoute("chatgpt-4o", OPENAI, "chatgpt-4o-latest"),
        ModelRoute("o3-mini", OPENAI, "o3-mini-2025-01-31", system_role="developer"),
        ModelRoute("deepseek-r1", TOGETHER, "deepseek-ai/DeepSeek-R1"),
        ModelRoute("deepseek-v3", TOGETHER, "deepseek-ai/DeepSeek-V3"),
    )
}


def _normalize_name(name: str, table: Mapping[str, ModelRoute]) -> str:
    name = str(name).strip()
    if name in table:
        return name
    # Env overrides can't carry dashes, so CHAT_RELAY__MODELS__O3_MINI addresses o3-mini.
    dashed = name.lower().replace("_", "-")
    return dashed if dashed in table else name


def build_model_table(overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, ModelRoute]:
    """Merge config overrides into :data:`DEFAULT_MODELS`.

    Parameters
    ----------
    overrides : Mapping[str, Any] | None
        ``{logical_name: {provider?, model?, system_role?}}``. Partial entries
        update an existing route; new names need both ``provider`` and ``model``.
    """
    table = dict(DEFAULT_MODELS)
    for raw_name, entry in (overrides or {}).items():
        name = _normalize_name(raw_name, table)
        if not isinstance(entry, Mapping):
            raise ConfigurationError(f"Model override for {name!r} must be a mapping")

        base = table.get(name)
        provider = entry.get("provider", base.provider if base else None)
        model = entry.get("model", base.model if base else None)
        if provider not in PROVIDERS:
            raise ConfigurationError(
                f"Model {name!r} has unknown provider {provider!r}; "
                f"expected one of {', '.join(PROVIDERS)}"
            )
        if not model:
            raise ConfigurationError(f"Model {name!r} has no provider model string")

        if base is None:
            base = ModelRoute(name, provider, str(model))
        table[name] = replace(
            base,
            provider=provider,
            model=str(model),
            system_role=str(entry.get("system_role", base.system_role)),
        )
    return table


def resolve_model(name: str, table: Optional[Mapping[str, ModelRoute]] = None) -> ModelRoute:
    """Return the route for ``name`` or raise :class:`UnsupportedModelError`."""
    routes = DEFAULT_MODELS if table is None else table
    try:
        return routes[name]
    except KeyError:
        raise UnsupportedModelError(name) from None


def supported_models(table: Optional[Mapping[str, ModelRoute]] = None) -> List[str]:
    return list(DEFAULT_MODELS if table is None else table)
