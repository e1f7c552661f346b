"""YAML configuration file loader for game setup."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml  # type: ignore[import-untyped]

from .cards import DEFAULT_THEME, CardTemplate, CardTheme
from .config import GameConfig
from .enums import ActionKind, CardKind, PlayerType
from .exceptions import ConfigurationError
from .players import PlayerRegistration


@dataclass(frozen=True, slots=True)
class GameSetupConfig:
    """Complete game setup loaded from configuration file."""

    game_config: GameConfig
    registrations: tuple[PlayerRegistration, ...]
    theme: CardTheme = DEFAULT_THEME
    enhanced_logging: bool = False

    @property
    def agent_count(self) -> int:
        return sum(1 for reg in self.registrations if reg.player_type is PlayerType.AGENT)


def load_config_file(config_path: str | Path) -> GameSetupConfig:
    """Load game configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        GameSetupConfig containing game configuration, player registrations and theme.

    Raises:
        ConfigurationError: If the file is invalid or missing required fields.
        FileNotFoundError: If the config file doesn't exist.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with path.open("r") as f:
        try:
            data: dict[str, Any] = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML file: {exc}") from exc

    return parse_setup(data)


def parse_setup(data: Any) -> GameSetupConfig:
    """Validate an already-parsed YAML document."""

    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a YAML mapping")

    registrations = _parse_players(data.get("players"))

    game_data = data.get("game", {})
    if not isinstance(game_data, dict):
        raise ConfigurationError("'game' must be a mapping")
    game_config = GameConfig.from_mapping(game_data)

    if not game_config.min_players <= len(registrations) <= game_config.max_players:
        raise ConfigurationError(
            f"Player count {len(registrations)} outside "
            f"{game_config.min_players}-{game_config.max_players}"
        )

    enhanced_logging = data.get("enhanced_logging", False)
    if not isinstance(enhanced_logging, bool):
        raise ConfigurationError("'enhanced_logging' must be true or false")

    return GameSetupConfig(
        game_config=game_config,
        registrations=registrations,
        theme=_parse_theme(data.get("theme")),
        enhanced_logging=enhanced_logging,
    )


def _parse_players(player_data: Any) -> tuple[PlayerRegistration, ...]:
    if not player_data:
        raise ConfigurationError("Config file must specify 'players' list")
    if not isinstance(player_data, list):
        raise ConfigurationError("'players' must be a list")

    # Entries are either a bare name (human) or {name, type, id}
    registrations: list[PlayerRegistration] = []
    for idx, player_entry in enumerate(player_data):
        if isinstance(player_entry, str):
            registrations.append(PlayerRegistration(display_name=player_entry))
        elif isinstance(player_entry, dict):
            name = player_entry.get("name")
            if not name:
                raise ConfigurationError(f"Player entry {idx + 1} missing 'name' field")

            type_str = player_entry.get("type", "human")
            if not isinstance(type_str, str):
                raise ConfigurationError(f"Player {name}: 'type' must be a string")
            try:
                player_type = PlayerType(type_str.lower().strip())
            except ValueError:
                raise ConfigurationError(
                    f"Player {name}: invalid type '{type_str}'. Must be 'human' or 'agent'"
                ) from None

            player_id = player_entry.get("id")
            registrations.append(
                PlayerRegistration(
                    display_name=str(name),
                    player_type=player_type,
                    player_id=str(player_id) if player_id is not None else None,
                )
            )
        else:
            raise ConfigurationError(
                f"Player entry {idx + 1} must be a string or dict with 'name' field"
            )

    ids = [reg.resolved_id(seat) for seat, reg in enumerate(registrations)]
    if len(set(ids)) != len(ids):
        raise ConfigurationError("Player ids must be unique")
    return tuple(registrations)


def _parse_theme(theme_data: Any) -> CardTheme:
    if theme_data is None:
        return DEFAULT_THEME
    if not isinstance(theme_data, dict):
        raise ConfigurationError("'theme' must be a mapping")

    cards_raw = theme_data.get("cards", [])
    if not isinstance(cards_raw, list):
        raise ConfigurationError("'theme.cards' must be a list")
    templates: list[CardTemplate] = []
    for entry in cards_raw:
        if not isinstance(entry, dict):
            raise ConfigurationError("Each theme card must be a mapping")
        kind = _enum_value(CardKind, entry.get("kind"), "card kind")
        templates.append(
            CardTemplate(
                kind=kind,
                name=str(entry.get("name") or kind.value.title()),
                description=str(entry.get("description", "")),
                ability=str(entry.get("ability", "")),
                image_url=entry.get("image_url"),
                historical_context=entry.get("historical_context"),
            )
        )

    names_raw = theme_data.get("action_names", {})
    if not isinstance(names_raw, Mapping):
        raise ConfigurationError("'theme.action_names' must be a mapping")
    action_names = {
        _enum_value(ActionKind, key, "action"): str(value) for key, value in names_raw.items()
    }

    return CardTheme(
        period=str(theme_data.get("period", DEFAULT_THEME.period)),
        character=str(theme_data.get("character", DEFAULT_THEME.character)),
        templates=tuple(templates) or DEFAULT_THEME.templates,
        action_names=action_names or dict(DEFAULT_THEME.action_names),
    )


def _enum_value(enum_cls: Any, raw: Any, label: str) -> Any:
    try:
        return enum_cls(str(raw).lower().strip())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"Unknown {label}: {raw}. Available: {allowed}") from None


__all__ = ["GameSetupConfig", "load_config_file", "parse_setup"]
