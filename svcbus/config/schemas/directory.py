"""Directory schemas: module name registry and deferred invocation engine."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RegistryConfig(BaseModel):
    # Placeholder names: <name_prefix><epoch-ms><counter>
    name_prefix: str = "TMPMODULE"
    name_counter_wrap: int = 100

    model_config = ConfigDict(extra="forbid")


class DeferConfig(BaseModel):
    scheduler: str = Field("queue", pattern="^(queue|asyncio)$")
    # run: continuations registered after completion are scheduled
    # drop: they are queued nowhere and never run
    late_registration: str = Field("run", pattern="^(run|drop)$")

    model_config = ConfigDict(extra="forbid")
