"""
Monitoring job records.

Two shapes of the same object live here: the typed job record exchanged with
the NS1 monitoring API, and the flat, string-typed record an operator
declares. The translator module maps between them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

# The only region scope this resource manages; dynamic region selection
# is never requested.
REGION_SCOPE_FIXED = "fixed"

DEFAULT_POLICY = "quorum"
POLICIES = ("all", "one", "quorum")

RuleValue = Union[int, str]
ConfigValue = Union[bool, int, float, str]


@dataclass
class JobRule:
    """A single alerting rule on a monitoring job."""

    key: str
    comparison: str
    value: RuleValue

    def to_api(self) -> Dict[str, Any]:
        return {"key": self.key, "comparison": self.comparison, "value": self.value}

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "JobRule":
        return cls(
            key=data.get("key", ""),
            comparison=data.get("comparison", ""),
            value=data.get("value", ""),
        )


@dataclass
class MonitoringJob:
    """Monitoring job as understood by the NS1 API."""

    id: str = ""
    name: str = ""
    job_type: str = ""
    active: bool = False
    mute: bool = False
    regions: List[str] = field(default_factory=list)
    region_scope: str = ""
    frequency: int = 0
    rapid_recheck: bool = False
    policy: str = ""
    notes: str = ""
    config: Dict[str, ConfigValue] = field(default_factory=dict)
    rules: List[JobRule] = field(default_factory=list)
    notify_delay: int = 0
    notify_repeat: int = 0
    notify_failback: bool = False
    notify_regional: bool = False
    notify_list: str = ""

    def to_api(self) -> Dict[str, Any]:
        """Serialize to the JSON body accepted by the monitoring endpoints."""
        body: Dict[str, Any] = {
            "name": self.name,
            "job_type": self.job_type,
            "active": self.active,
            "mute": self.mute,
            "regions": list(self.regions),
            "region_scope": self.region_scope,
            "frequency": self.frequency,
            "rapid_recheck": self.rapid_recheck,
            "policy": self.policy,
            "notes": self.notes,
            "config": dict(self.config),
            "rules": [rule.to_api() for rule in self.rules],
            "notify_delay": self.notify_delay,
            "notify_repeat": self.notify_repeat,
            "notify_failback": self.notify_failback,
            "notify_regional": self.notify_regional,
            "notify_list": self.notify_list,
        }
        # The server assigns identifiers on create
        if self.id:
            body["id"] = self.id
        return body

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "MonitoringJob":
        """
        Build a job from an API response body.

        Fields the server adds that this resource does not track (status,
        notifications) are ignored. Null values fall back to zero values.
        """
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            job_type=data.get("job_type") or "",
            active=bool(data.get("active", False)),
            mute=bool(data.get("mute", False)),
            regions=list(data.get("regions") or []),
            region_scope=data.get("region_scope") or "",
            frequency=data.get("frequency") or 0,
            rapid_recheck=bool(data.get("rapid_recheck", False)),
            policy=data.get("policy") or "",
            notes=data.get("notes") or "",
            config=dict(data.get("config") or {}),
            rules=[JobRule.from_api(r) for r in data.get("rules") or []],
            notify_delay=data.get("notify_delay") or 0,
            notify_repeat=data.get("notify_repeat") or 0,
            notify_failback=bool(data.get("notify_failback", False)),
            notify_regional=bool(data.get("notify_regional", False)),
            notify_list=data.get("notify_list") or "",
        )


def _config_text(value: Any) -> str:
    """Flat text for a declared config scalar; booleans are written lowercase."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class DeclaredRule:
    """Rule as declared by an operator; the value is always text."""

    key: str
    comparison: str
    value: str


@dataclass
class DeclaredState:
    """
    Flat desired/observed state record for a monitoring job.

    Optional fields holding None were not declared. The translator only
    copies them into the job record when they are present, so an absent
    field is never confused with an explicit false or zero.
    """

    name: str
    job_type: str
    regions: List[str]
    frequency: int
    config: Dict[str, str]
    id: str = ""
    active: bool = True
    rapid_recheck: bool = False
    mute: bool = False
    policy: Optional[str] = DEFAULT_POLICY
    notes: Optional[str] = None
    notify_delay: Optional[int] = None
    notify_repeat: Optional[int] = None
    notify_failback: Optional[bool] = True
    notify_regional: Optional[bool] = None
    notify_list: Optional[str] = None
    rules: List[DeclaredRule] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeclaredState":
        """
        Build a state record from an already validated mapping.

        Schema defaults are applied for fields the operator left out.
        """
        rules = [
            DeclaredRule(
                key=rule["key"],
                comparison=rule["comparison"],
                value=str(rule["value"]),
            )
            for rule in data.get("rules") or []
        ]
        return cls(
            id=data.get("id") or "",
            name=data["name"],
            job_type=data["job_type"],
            regions=list(data["regions"]),
            frequency=data["frequency"],
            config={k: _config_text(v) for k, v in data["config"].items()},
            active=data.get("active", True),
            rapid_recheck=data.get("rapid_recheck", False),
            mute=data.get("mute", False),
            policy=data.get("policy", DEFAULT_POLICY),
            notes=data.get("notes"),
            notify_delay=data.get("notify_delay"),
            notify_repeat=data.get("notify_repeat"),
            notify_failback=data.get("notify_failback", True),
            notify_regional=data.get("notify_regional"),
            notify_list=data.get("notify_list"),
            rules=rules,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain mapping, leaving out undeclared fields."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "job_type": self.job_type,
            "regions": list(self.regions),
            "frequency": self.frequency,
            "config": dict(self.config),
            "active": self.active,
            "rapid_recheck": self.rapid_recheck,
            "mute": self.mute,
        }
        optional = {
            "policy": self.policy,
            "notes": self.notes,
            "notify_delay": self.notify_delay,
            "notify_repeat": self.notify_repeat,
            "notify_failback": self.notify_failback,
            "notify_regional": self.notify_regional,
            "notify_list": self.notify_list,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.rules:
            data["rules"] = [
                {"key": r.key, "comparison": r.comparison, "value": r.value}
                for r in self.rules
            ]
        return data
