"""
Wait and apply option models.

These are constructed per invocation from caller input and discarded once
the operation completes.
"""

from enum import StrEnum

from pydantic import BaseModel, Field

from crd_apply_engine.constants import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_WAIT_TIMEOUT,
    ERROR_INVALID_PROPAGATION,
    PROPAGATION_BACKGROUND,
    PROPAGATION_FOREGROUND,
    PROPAGATION_ORPHAN,
)
from crd_apply_engine.errors import ConfigurationError


class DeletionPropagation(StrEnum):
    """How the garbage collector treats dependents of a deleted object."""

    ORPHAN = PROPAGATION_ORPHAN
    BACKGROUND = PROPAGATION_BACKGROUND
    FOREGROUND = PROPAGATION_FOREGROUND

    @classmethod
    def parse(cls, value: "str | DeletionPropagation") -> "DeletionPropagation":
        """Map a case-insensitive policy name onto a member.

        Raises:
            ConfigurationError: If the value names no known policy
        """
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ConfigurationError(
            ERROR_INVALID_PROPAGATION.format(
                value, ", ".join(member.value for member in cls)
            )
        )


class WaitPolicy(BaseModel):
    """How long and how often a condition is re-checked."""

    model_config = {"frozen": True}

    timeout: float = Field(
        DEFAULT_WAIT_TIMEOUT,
        ge=0,
        description="Seconds to wait before giving up; zero means check once",
    )
    poll_interval: float = Field(
        DEFAULT_POLL_INTERVAL,
        ge=0,
        description="Seconds to wait before checking again",
    )

    @property
    def one_shot(self) -> bool:
        """A zero timeout performs exactly one check and never sleeps."""
        return self.timeout == 0


class WaitSpecification(BaseModel):
    """A post-apply condition on the remote object."""

    model_config = {"frozen": True}

    jsonpath: str = Field(
        ..., min_length=1, description="Relaxed JSONPath expression to evaluate"
    )
    expected_value: str | None = Field(
        None,
        description=(
            "Value to wait for; when unset any non-empty value satisfies the wait"
        ),
    )
    timeout: float = Field(DEFAULT_WAIT_TIMEOUT, ge=0)
    poll_interval: float = Field(DEFAULT_POLL_INTERVAL, ge=0)

    @property
    def policy(self) -> WaitPolicy:
        return WaitPolicy(timeout=self.timeout, poll_interval=self.poll_interval)


class ApplyOptions(BaseModel):
    """Server-side apply options forwarded verbatim to the client."""

    model_config = {"frozen": True}

    field_manager: str = Field(
        ..., min_length=1, description="Manager name used to track field ownership"
    )
    force_conflicts: bool = Field(
        False, description="Force the apply against conflicting field managers"
    )
