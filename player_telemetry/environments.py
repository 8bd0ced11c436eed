"""Named delivery environments loaded from a YAML file.

Example::

    default: production
    environments:
      - id: production
        label: Production
        collector_host: metrics.example.net
        collector_port: 8094
      - id: staging
        collector_host: metrics.staging.example.net
"""

import logging
from dataclasses import dataclass, field

import yaml

logger = logging.getLogger(__name__)

DEFAULT_COLLECTOR_PORT = 8094


@dataclass(frozen=True)
class TelemetryEnvironment:
    id: str
    collector_host: str
    collector_port: int = DEFAULT_COLLECTOR_PORT
    label: str = ""


@dataclass(frozen=True)
class EnvironmentList:
    environments: list[TelemetryEnvironment] = field(default_factory=list)
    default_id: str = ""

    @property
    def default(self) -> TelemetryEnvironment | None:
        """The entry named by ``default``, or None if the file names none."""
        for env in self.environments:
            if env.id == self.default_id:
                return env
        return None

    def get(self, env_id: str) -> TelemetryEnvironment | None:
        """Look up an environment by id, falling back to the default one."""
        for env in self.environments:
            if env.id == env_id:
                return env
        fallback = self.default
        if fallback is None:
            logger.warning("Unknown environment %r and no default, collector host unset", env_id)
        else:
            logger.warning("Unknown environment %r, using %r", env_id, fallback.id)
        return fallback


def _parse_environment(raw: dict) -> TelemetryEnvironment:
    try:
        env_id = str(raw["id"])
        host = str(raw["collector_host"])
    except (KeyError, TypeError) as e:
        raise ValueError(f"Environment entry missing field {e}: {raw!r}") from e
    return TelemetryEnvironment(
        id=env_id,
        collector_host=host,
        collector_port=int(raw.get("collector_port", DEFAULT_COLLECTOR_PORT)),
        label=str(raw.get("label", env_id)),
    )


def load_environments(path: str | None) -> EnvironmentList:
    """Load the environments file. Returns an empty list if no path or file."""
    if not path:
        return EnvironmentList()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Environments file %s not found", path)
        return EnvironmentList()

    environments = [_parse_environment(raw) for raw in data.get("environments", [])]
    logger.info("Loaded %d environment(s) from %s", len(environments), path)
    return EnvironmentList(
        environments=environments,
        default_id=str(data.get("default", "")),
    )
