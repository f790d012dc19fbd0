"""Stitch run configuration management."""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path

PROJECT_NAME = "Five Second Games Redux"

PINNED_VERSIONS = {
    "branch": "v1.12.30",
    "tag": "v1.12.30",
    "commits": "https://github.com/microsoft/pxt-arcade/commits/33228b1cc7e1bea3f728c26a6047bdef35fd2c09",
    "target": "1.12.30",
    "pxt": "8.5.41",
}


@dataclass
class StitchConfig:
    project_name: str = PROJECT_NAME
    description: str = "The combined games from the five-second mini game jam!"
    games_path: str = "games.json"
    share_prefix: str = "https://arcade.makecode.com/"
    backend_endpoint: str = "https://makecode.com/api"
    api_root: str = "https://arcade.makecode.com"
    target: str = "arcade"
    target_version: str = "1.12.30"
    editor: str = "tsprj"
    versions: dict[str, str] = field(default_factory=lambda: dict(PINNED_VERSIONS))
    injected_dependencies: dict[str, str] = field(
        default_factory=lambda: {"Color Fading": "github:jwunderl/pxt-color#v0.2.3"}
    )
    excluded_dependencies: list[str] = field(
        default_factory=lambda: ["arcade-five-second-game-lib"]
    )
    runtime_library: str | None = None
    request_timeout: float = 30.0
    max_workers: int = 8
    parallel_assembly: bool = True
    max_scan_steps: int = 1_000_000

    CONFIG_DIR = ".jamstitch"
    CONFIG_FILE = "config.json"

    @classmethod
    def load(cls, project_path: Path) -> "StitchConfig":
        config_path = project_path / cls.CONFIG_DIR / cls.CONFIG_FILE
        if config_path.exists():
            data = json.loads(config_path.read_text(encoding="utf-8"))
            return cls._from_dict(data)
        return cls._default()

    @classmethod
    def _default(cls) -> "StitchConfig":
        return cls()

    @classmethod
    def _from_dict(cls, data: dict) -> "StitchConfig":
        known = {name for name in cls.__dataclass_fields__}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    def save(self, project_path: Path) -> None:
        config_dir = project_path / self.CONFIG_DIR
        config_dir.mkdir(exist_ok=True)
        config_path = config_dir / self.CONFIG_FILE
        config_path.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")

    def games_file(self, project_path: Path) -> Path:
        path = Path(self.games_path)
        return path if path.is_absolute() else project_path / path

    def runtime_library_path(self, project_path: Path) -> Path:
        """Configured runtime library, or the copy shipped with the package."""
        if self.runtime_library:
            path = Path(self.runtime_library)
            return path if path.is_absolute() else project_path / path
        return Path(__file__).parent / "assets" / "lib.ts"
