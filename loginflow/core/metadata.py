from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class StepRecord:
    test_name: str
    step: str
    status: str
    duration_seconds: float
    url: str = ""
    error_type: str = ""
    error: str = ""
    artifact_paths: dict[str, str] = field(default_factory=dict)
