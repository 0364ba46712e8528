# FlexiSync Run State
# Mutable key-value bag shared by every hook invocation of a single run

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass
class RunState:
    """
    Hook state for one run.

    A new instance is created per run and passed by reference to every
    hook, so a pre-object hook can store a value (for example a restore
    callback) that a later hook retrieves.
    """

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    started: str = field(default_factory=lambda: datetime.now().isoformat())
    values: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Get a stored value."""
        return self.values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a value."""
        self.values[key] = value

    def remove(self, key: str) -> bool:
        """Remove a stored value."""
        if key in self.values:
            del self.values[key]
            return True
        return False

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.values[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "run_id": self.run_id,
            "started": self.started,
            "values": dict(self.values),
        }
