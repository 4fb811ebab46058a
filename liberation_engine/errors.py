from typing import Any, Optional


class LiberationEngineError(Exception):
    """Base for every error the engine raises on purpose."""


class UnknownTransitionError(LiberationEngineError):
    """No progression rule exists for the requested stage pair."""

    def __init__(self, from_stage: Any, to_stage: Any) -> None:
        self.from_stage = getattr(from_stage, "value", from_stage)
        self.to_stage = getattr(to_stage, "value", to_stage)
        super().__init__(
            f"No liberation journey progression rule found: {self.from_stage} -> {self.to_stage}"
        )


class UnknownOperationError(LiberationEngineError):
    def __init__(self, operation: Optional[str]) -> None:
        self.operation = operation
        super().__init__(f"Unknown business logic operation: {operation}")
