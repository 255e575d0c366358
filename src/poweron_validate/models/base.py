# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for validate-poweron."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PowerOnBaseModel(BaseModel):
    """Base model with shared config for validate-poweron records."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )


class FrozenModel(PowerOnBaseModel):
    """Immutable record."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )


class CamelModel(PowerOnBaseModel):
    """Record exchanged as camelCase JSON (Symitar API, reports)."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
