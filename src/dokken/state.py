"""Per-instance state files."""

import io
import json
import logging
from pathlib import Path
from typing import Any, Dict

from ruamel.yaml import YAML


logger = logging.getLogger(__name__)

DEFAULT_STATE_DIR = ".kitchen"


class StateStore:
    """Keeps one YAML state file per instance under ``state_dir``."""

    def __init__(self, state_dir: Path = Path(DEFAULT_STATE_DIR)):
        """Initialize state store."""
        self.state_dir = Path(state_dir)
        self.yaml = YAML(typ="safe")
        self.yaml.default_flow_style = False

    def path_for(self, name: str) -> Path:
        return self.state_dir / f"{name}.yml"

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def load(self, name: str) -> Dict[str, Any]:
        """Load an instance's state; a missing file is an empty state."""
        path = self.path_for(name)
        if not path.exists():
            return {}
        data = self.yaml.load(path.read_text())
        return dict(data or {})

    def save(self, name: str, state: Dict[str, Any]) -> None:
        """Write an instance's state."""
        self.state_dir.mkdir(parents=True, exist_ok=True)
        # Engine metadata may hold values YAML cannot represent; round-trip
        # through JSON to keep only plain types.
        plain = json.loads(json.dumps(dict(state), default=str))
        stream = io.StringIO()
        self.yaml.dump(plain, stream)
        self.path_for(name).write_text(stream.getvalue())
        logger.debug(f"Saved state for {name} to {self.path_for(name)}")

    def delete(self, name: str) -> None:
        """Remove an instance's state file."""
        path = self.path_for(name)
        if path.exists():
            path.unlink()
            logger.debug(f"Removed state file {path}")
