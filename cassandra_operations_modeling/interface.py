from __future__ import annotations

from enum import Enum
from typing import Any
from typing import Dict
from typing import FrozenSet
from typing import List
from typing import Mapping
from typing import Optional
from typing import Protocol
from typing import Sequence
from typing import Tuple

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic import model_validator

SECONDS_IN_HOUR = 60 * 60

# Keyspaces owned by Cassandra, DSE and common sidecars rather than by
# the application
SYSTEM_KEYSPACES: FrozenSet[str] = frozenset(
    {
        "OpsCenter",
        "system",
        "system_schema",
        "system_traces",
        "system_distributed",
        "system_auth",
        "system_views",
        "system_virtual_schema",
        "dse_insights",
        "dse_insights_local",
        "dse_security",
        "dse_leases",
        "dse_system",
        "dse_system_local",
        "dse_perf",
        "dse_analytics",
        "dsefs",
        "solr_admin",
        "reaper_db",
        "spark_system",
        "HiveMetaStore",
        "cfs",
        "cfs_archive",
    }
)


class ExcludeUnsetModel(BaseModel):
    def model_dump(self, *args, **kwargs):
        if "exclude_unset" not in kwargs:
            kwargs["exclude_unset"] = True
        return super().model_dump(*args, **kwargs)

    def model_dump_json(self, *args, **kwargs):
        if "exclude_unset" not in kwargs:
            kwargs["exclude_unset"] = True
        return super().model_dump_json(*args, **kwargs)


def strip_quotes(name: str) -> str:
    """Quoted CQL identifiers show up with their quotes in some artifacts"""
    return name.replace('"', "")


###############################################################################
#              Models (structs) for how we describe the cluster               #
###############################################################################


class ReplicationStrategy(str, Enum):
    """How a keyspace places replicas across the ring

    Strategy names are accepted in their short (``SimpleStrategy``) and
    fully qualified (``org.apache.cassandra.locator.SimpleStrategy``) forms.
    Anything we do not model explicitly (e.g. ``EverywhereStrategy``) is
    treated as ``other`` and resolved through its per datacenter options.
    """

    def __str__(self):
        return str(self.value)

    simple = "SimpleStrategy"
    network_topology = "NetworkTopologyStrategy"
    local = "LocalStrategy"
    other = "other"

    @classmethod
    def parse(cls, value: Any) -> "ReplicationStrategy":
        if isinstance(value, ReplicationStrategy):
            return value
        short_name = str(value).rsplit(".", 1)[-1]
        for strategy in cls:
            if strategy.value == short_name:
                return strategy
        return cls.other


class Node(ExcludeUnsetModel):
    name: str
    datacenter: str
    # nodetool info may not have been collected for every node
    uptime_seconds: Optional[int] = None

    @property
    def uptime_hours(self) -> Optional[float]:
        if self.uptime_seconds is None:
            return None
        return self.uptime_seconds / SECONDS_IN_HOUR


class Keyspace(ExcludeUnsetModel):
    name: str
    strategy: ReplicationStrategy = ReplicationStrategy.network_topology
    # Ordered (datacenter, replicas) pairs. SimpleStrategy uses the pseudo
    # datacenter "replication_factor"
    replication: List[Tuple[str, int]] = []

    @field_validator("strategy", mode="before")
    @classmethod
    def _parse_strategy(cls, value: Any) -> ReplicationStrategy:
        return ReplicationStrategy.parse(value)

    def datacenter_replicas(self, datacenter: str) -> int:
        for dc, replicas in self.replication:
            if dc == datacenter:
                return replicas
        return 0


class TableMetrics(ExcludeUnsetModel):
    """Raw per replica counters for a single table

    Every counter is keyed by node name. Counters are cumulative since the
    node started, which is why they are normalized by node uptime.
    """

    name: str
    keyspace: str = ""
    read_count: Dict[str, float] = {}
    write_count: Dict[str, float] = {}
    cas_prepare_count: Dict[str, float] = {}
    live_disk_space_used: Dict[str, float] = {}
    # -1.0 marks a node which did not report a ratio
    compression_ratios: Dict[str, float] = {}
    # Straight from the schema so may be missing or garbage
    read_repair_chance: Optional[str] = None
    dc_local_read_repair_chance: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _keyspace_from_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("keyspace"):
            name = data.get("name", "")
            if "." in name:
                data = dict(data)
                data["keyspace"] = strip_quotes(name.split(".", 1)[0])
        return data

    @property
    def compression_ratio_samples(self) -> List[float]:
        return list(self.compression_ratios.values())


class ClientRequestMetric(ExcludeUnsetModel):
    """Coordinator level read count for a table on one node"""

    node: str
    keyspace: str
    table: str
    read_count: float

    @property
    def qualified_name(self) -> str:
        return f"{self.keyspace}.{self.table}"


###############################################################################
#       Narrow read-only views the estimators depend on (collaborators)       #
###############################################################################


class ClusterView(Protocol):
    @property
    def nodes(self) -> Sequence[Node]: ...

    @property
    def keyspaces(self) -> Sequence[Keyspace]: ...

    @property
    def is_multi_dc(self) -> bool: ...

    def node(self, name: str) -> Optional[Node]: ...


class TableMetricsAccessor(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def keyspace(self) -> str: ...

    @property
    def read_count(self) -> Mapping[str, float]: ...

    @property
    def write_count(self) -> Mapping[str, float]: ...

    @property
    def cas_prepare_count(self) -> Mapping[str, float]: ...

    @property
    def live_disk_space_used(self) -> Mapping[str, float]: ...

    @property
    def compression_ratio_samples(self) -> Sequence[float]: ...

    @property
    def read_repair_chance(self) -> Optional[str]: ...

    @property
    def dc_local_read_repair_chance(self) -> Optional[str]: ...


class RowCountProvider(Protocol):
    def row_counts(self, table_name: str) -> Mapping[str, int]: ...


class ClusterSnapshot(ExcludeUnsetModel):
    """Point in time view of the cluster topology and schema"""

    nodes: List[Node] = []
    keyspaces: List[Keyspace] = []

    def node(self, name: str) -> Optional[Node]:
        for node in self.nodes:
            if node.name == name:
                return node
        return None

    def keyspace(self, name: str) -> Optional[Keyspace]:
        for keyspace in self.keyspaces:
            if keyspace.name == name:
                return keyspace
        return None

    @property
    def datacenters(self) -> List[str]:
        return sorted({node.datacenter for node in self.nodes})

    @property
    def is_multi_dc(self) -> bool:
        return len(self.datacenters) > 1


class RowCounts(ExcludeUnsetModel):
    """Partition row counts per table per node from sstable statistics"""

    counts: Dict[str, Dict[str, int]] = {}

    def row_counts(self, table_name: str) -> Mapping[str, int]:
        wanted = strip_quotes(table_name)
        for name, per_node in self.counts.items():
            if strip_quotes(name) == wanted:
                return per_node
        return {}


###############################################################################
#              Models (structs) for what the estimators produce               #
###############################################################################


class EstimateStatus(str, Enum):
    def __str__(self):
        return str(self.value)

    resolved = "resolved"
    unresolved_keyspace = "unresolved_keyspace"
    uptime_unavailable = "uptime_unavailable"


# Kept for output compatibility with reports that print the raw numbers
UNRESOLVED = -1


class ConsistencyLevelResult(ExcludeUnsetModel):
    """Estimated client read operations per hour at each consistency level"""

    one: int
    local_quorum: int
    quorum: int
    all: int
    status: EstimateStatus = EstimateStatus.resolved
    model_config = ConfigDict(frozen=True)

    @classmethod
    def unresolved(cls) -> "ConsistencyLevelResult":
        return cls(
            one=UNRESOLVED,
            local_quorum=UNRESOLVED,
            quorum=UNRESOLVED,
            all=UNRESOLVED,
            status=EstimateStatus.unresolved_keyspace,
        )

    @property
    def is_resolved(self) -> bool:
        return self.status == EstimateStatus.resolved


class WriteOperationResult(ExcludeUnsetModel):
    """Estimated client writes per hour and the storage footprint behind them"""

    writes: int
    # Summed across every replica
    total_space_used_uncompressed: float
    # Normalized to a single copy of the data
    non_rf_space_used_compressed: float
    non_rf_space_used_uncompressed: float
    status: EstimateStatus = EstimateStatus.resolved
    model_config = ConfigDict(frozen=True)

    @classmethod
    def unresolved(cls) -> "WriteOperationResult":
        return cls(
            writes=UNRESOLVED,
            total_space_used_uncompressed=float(UNRESOLVED),
            non_rf_space_used_compressed=float(UNRESOLVED),
            non_rf_space_used_uncompressed=float(UNRESOLVED),
            status=EstimateStatus.unresolved_keyspace,
        )

    @property
    def is_resolved(self) -> bool:
        return self.status == EstimateStatus.resolved


class OperationsEstimate(ExcludeUnsetModel):
    status: EstimateStatus = EstimateStatus.resolved
    reads: Dict[str, ConsistencyLevelResult] = {}
    writes: Dict[str, WriteOperationResult] = {}
    row_sizes: Dict[str, int] = {}
    total_rows: Dict[str, int] = {}
    coordinator_reads: Dict[str, int] = {}

    @property
    def is_available(self) -> bool:
        return self.status != EstimateStatus.uptime_unavailable


class EstimationArguments(BaseModel):
    paxos_extra_reads_per_cas: int = Field(
        default=2,
        description="How many of the read path samples recorded per CAS "
        "operation are overhead (prepare and propose) rather than a read the "
        "client asked for",
    )
    exclude_system_keyspaces: bool = Field(
        default=True,
        description="If tables in system keyspaces should be skipped",
    )
    system_keyspaces: FrozenSet[str] = Field(
        default=SYSTEM_KEYSPACES,
        description="Keyspaces which belong to the database rather than the "
        "application",
    )
    unknown_datacenter: str = Field(
        default="UNKNOWN",
        description="Datacenter reported for nodes missing from the topology",
    )
