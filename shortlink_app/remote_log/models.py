"""
Data models for remote log events.
"""

from typing import FrozenSet

from pydantic import BaseModel, Field, field_validator, model_validator

VALID_STACKS: FrozenSet[str] = frozenset({"frontend", "backend"})
VALID_LEVELS: FrozenSet[str] = frozenset({"debug", "info", "warn", "error", "fatal"})

FRONTEND_PACKAGES: FrozenSet[str] = frozenset({"component", "hook", "page", "state", "style"})
BACKEND_PACKAGES: FrozenSet[str] = frozenset({
    "cache", "controller", "cron_job", "db", "domain",
    "handler", "repository", "route", "service",
})
SHARED_PACKAGES: FrozenSet[str] = frozenset({"auth", "config", "middleware", "utils"})


def packages_for(stack: str) -> FrozenSet[str]:
    """Packages a given stack is allowed to log from"""
    if stack == "frontend":
        return FRONTEND_PACKAGES | SHARED_PACKAGES
    if stack == "backend":
        return BACKEND_PACKAGES | SHARED_PACKAGES
    return SHARED_PACKAGES


class LogEntry(BaseModel):
    """
    Structured log event sent to the remote log service.

    Values are lower-cased before validation; anything outside the
    allow-lists makes the model invalid and the event is never sent.
    """

    stack: str = Field(..., description="frontend or backend")
    level: str = Field(..., description="debug, info, warn, error or fatal")
    package: str = Field(..., description="Origin of the event, checked per stack")
    message: str = Field(..., description="Free-form message")

    @field_validator("stack", "level", "package", mode="before")
    @classmethod
    def _lowercase(cls, value):
        return value.lower() if isinstance(value, str) else value

    @field_validator("stack")
    @classmethod
    def _check_stack(cls, value: str) -> str:
        if value not in VALID_STACKS:
            raise ValueError(f"Invalid stack: {value}. Must be one of: {', '.join(sorted(VALID_STACKS))}")
        return value

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        if value not in VALID_LEVELS:
            raise ValueError(f"Invalid level: {value}. Must be one of: {', '.join(sorted(VALID_LEVELS))}")
        return value

    @model_validator(mode="after")
    def _check_package(self):
        allowed = packages_for(self.stack)
        if self.package not in allowed:
            raise ValueError(
                f"Invalid package: {self.package} for stack: {self.stack}. "
                f"Must be one of: {', '.join(sorted(allowed))}"
            )
        return self

    model_config = {
        "json_schema_extra": {
            "example": {
                "stack": "backend",
                "level": "info",
                "package": "service",
                "message": "Shortened https://example.com to aB3dE9",
            }
        }
    }
