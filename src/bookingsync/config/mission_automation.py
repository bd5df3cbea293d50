"""Mission automation endpoint configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, optional_env_var


@dataclass(frozen=True, slots=True)
class MissionAutomationConfig:
    """Where mission automation hooks are delivered; ``base_url=None`` disables delivery."""

    base_url: str | None = None
    timeout_seconds: float = 10.0


def get_mission_automation_config() -> MissionAutomationConfig:
    return MissionAutomationConfig(
        base_url=optional_env_var("MISSION_AUTOMATION_URL"),
        timeout_seconds=env_float("MISSION_AUTOMATION_TIMEOUT_SECONDS", 10.0, minimum=0.001),
    )
