"""
Pydantic models for the upstream records consumed during context resolution.

Entity records come from the identity framework of the root-cause backend:
every attribute is a list of strings, and most consumers only need the
first value.
"""

import re
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class EntityRecord(BaseModel):
    """Raw entity as returned by the identity framework"""
    urn: str = ""
    start: Optional[int] = None
    end: Optional[int] = None
    attributes: Dict[str, List[str]] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @field_validator("attributes", mode="before")
    @classmethod
    def wrap_scalar_attributes(cls, v):
        if v is None:
            return {}
        wrapped = {}
        for key, value in dict(v).items():
            if value is None:
                wrapped[key] = []
            elif isinstance(value, (list, tuple)):
                wrapped[key] = [str(item) for item in value]
            else:
                wrapped[key] = [str(value)]
        return wrapped

    def first(self, name: str, default: Optional[str] = None) -> Optional[str]:
        values = self.attributes.get(name) or []
        return values[0] if values else default

    def values(self, name: str) -> List[str]:
        return list(self.attributes.get(name) or [])


class MetricRecord(EntityRecord):
    """Metric metadata entity"""

    @property
    def granularity(self) -> Optional[str]:
        return self.first("granularity")

    @property
    def max_time(self) -> Optional[int]:
        """Leading integer of the maxTime attribute ("1508457600000.0" -> 1508457600000), None if absent"""
        match = _LEADING_INT.match(self.first("maxTime", ""))
        return int(match.group(1)) if match else None


class AnomalyRecord(EntityRecord):
    """Anomaly event entity"""
    start: int
    end: int

    @property
    def metric_granularity(self) -> Optional[str]:
        return self.first("metricGranularity")

    @property
    def metric_id(self) -> Optional[str]:
        return self.first("metricId")

    @property
    def function_id(self) -> Optional[str]:
        return self.first("functionId")

    @property
    def dimension_names(self) -> List[str]:
        return self.values("dimensions")

    @property
    def comment(self) -> str:
        return self.first("comment", "")


class SessionRecord(BaseModel):
    """Saved investigation session"""
    id: str
    name: str = ""
    text: str = ""
    owner: str = ""
    permissions: str = ""
    updated_by: str = ""
    updated: int = 0
    context_urns: List[str] = Field(default_factory=list)
    selected_urns: List[str] = Field(default_factory=list)
    anomaly_range_start: int
    anomaly_range_end: int
    analysis_range_start: int
    analysis_range_end: int
    granularity: str
    compare_mode: str
    anomaly_urns: Optional[List[str]] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore"
    )

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("name", "text", "owner", "permissions", "updated_by", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("updated", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("context_urns", "selected_urns", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v
