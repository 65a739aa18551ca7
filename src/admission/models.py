from typing import Optional, Union, Dict, Any, Tuple
from dataclasses import dataclass, field
from enum import Enum

# The Kind the request-validity check expects. The API server sends the plural
# "SecurityContextConstraints" for this resource; kept as-is pending confirmation.
EXPECTED_KIND = "SecurityContextConstraint"

DEFAULT_SCC_NAMES: Tuple[str, ...] = (
    "anyuid",
    "hostaccess",
    "hostmount-anyuid",
    "hostnetwork",
    "node-exporter",
    "nonroot",
    "privileged",
    "restricted",
    "pipelines-scc",
)

# Priority of the anyuid SCC
ANYUID_PRIORITY = 10

RawPayload = Union[bytes, str, Dict[str, Any], None]


class Operation(Enum):
    """Admission operations"""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CONNECT = "CONNECT"


@dataclass(frozen=True)
class PolicyConfig:
    """Static policy enforced by the SCC webhook"""
    default_names: Tuple[str, ...] = DEFAULT_SCC_NAMES
    priority_ceiling: int = ANYUID_PRIORITY
    _name_set: frozenset = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Normalise to a tuple so the config stays hashable and immutable
        object.__setattr__(self, "default_names", tuple(self.default_names))
        object.__setattr__(self, "_name_set", frozenset(self.default_names))

    def is_default_name(self, name: str) -> bool:
        return name in self._name_set


DEFAULT_POLICY = PolicyConfig()


@dataclass
class AdmissionRequest:
    """The parts of an admission request the SCC webhook looks at"""
    uid: str
    operation: Optional[Operation]
    username: str = ""
    kind: str = ""
    object: RawPayload = None
    old_object: RawPayload = None
    resource_name: str = ""
    namespace: str = ""


@dataclass(frozen=True)
class SCCRecord:
    """Security Context Constraint reduced to the fields the policy inspects"""
    name: str = ""
    priority: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.name == "" and self.priority is None


@dataclass(frozen=True)
class Decision:
    """Outcome of evaluating one admission request"""
    uid: str
    allowed: bool
    reason: str = ""
    code: int = 200

    @classmethod
    def allow(cls, uid: str, reason: str = "Request is allowed") -> "Decision":
        return cls(uid=uid, allowed=True, reason=reason, code=200)

    @classmethod
    def deny(cls, uid: str, reason: str) -> "Decision":
        return cls(uid=uid, allowed=False, reason=reason, code=403)

    @classmethod
    def errored(cls, uid: str, message: str, code: int = 400) -> "Decision":
        return cls(uid=uid, allowed=False, reason=message, code=code)

    @property
    def is_error(self) -> bool:
        return not self.allowed and self.code != 403
