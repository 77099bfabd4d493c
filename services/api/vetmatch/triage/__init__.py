from vetmatch.triage.state_machine import (
    FALLBACK_QUESTIONS,
    NEXT_STEP,
    TriageEngine,
    capture_answer,
    parse_severity_level,
)

__all__ = ["TriageEngine", "NEXT_STEP", "FALLBACK_QUESTIONS", "capture_answer", "parse_severity_level"]
