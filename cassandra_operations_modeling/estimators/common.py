import logging
import math
from typing import List
from typing import Optional
from typing import Sequence

import numpy as np
from pydantic import BaseModel
from pydantic import ConfigDict

from cassandra_operations_modeling.estimators.utils import finite_or_zero
from cassandra_operations_modeling.estimators.utils import parse_chance
from cassandra_operations_modeling.interface import ClusterView
from cassandra_operations_modeling.interface import EstimationArguments
from cassandra_operations_modeling.interface import Keyspace
from cassandra_operations_modeling.interface import ReplicationStrategy
from cassandra_operations_modeling.interface import TableMetricsAccessor


logger = logging.getLogger(__name__)

UNKNOWN_DATACENTER = "UNKNOWN"
# Reported by the metrics exporter when a node has no compression ratio
NO_COMPRESSION_SAMPLE = -1.0


###############################################################################
#                                  Topology                                   #
###############################################################################


def datacenter_of(
    cluster: ClusterView, node_name: str, unknown: str = UNKNOWN_DATACENTER
) -> str:
    node = cluster.node(node_name)
    if node is None:
        return unknown
    return node.datacenter


def replication_factor(keyspace: Keyspace, datacenter: str) -> int:
    """Replicas of the keyspace held in one datacenter, 0 if not replicated"""
    return max(0, keyspace.datacenter_replicas(datacenter))


def total_replication_factor(keyspace: Keyspace) -> int:
    # LocalStrategy keyspaces live on a single node whatever they claim
    if keyspace.strategy == ReplicationStrategy.local:
        return 1
    return sum(max(0, replicas) for _, replicas in keyspace.replication)


def write_replication_factor(keyspace: Keyspace, datacenter: str) -> int:
    """Replicas a write lands on within `datacenter`

    SimpleStrategy ignores datacenters entirely so every node receives the
    whole replica set. Reads use the plain per datacenter lookup instead.
    """
    if keyspace.strategy == ReplicationStrategy.simple:
        return total_replication_factor(keyspace)
    return replication_factor(keyspace, datacenter)


def quorum(rf: int) -> int:
    # ceil(rf / 2) is wrong for even RF: RF=4 needs 3 replicas, not 2.
    # rf=0 gives 1 which callers must have already excluded
    return int(math.floor(rf / 2.0)) + 1


###############################################################################
#                                 Read repair                                 #
###############################################################################


def effective_global_read_repair(
    table: TableMetricsAccessor, is_multi_dc: bool
) -> float:
    """Probability that a read also read repairs every other datacenter

    With a single datacenter there is nothing cross-DC to repair so the
    configured chance has no effect on read volume.
    """
    if not is_multi_dc:
        return 0.0
    return parse_chance(table.read_repair_chance)


def effective_local_read_repair(
    table: TableMetricsAccessor, effective_global_rr: float
) -> float:
    """Probability that a read repairs only its own datacenter

    Reads that would trigger both a local and a global repair are promoted to
    the global one, so that share is removed from the local chance.
    """
    return parse_chance(table.dc_local_read_repair_chance) * (
        1.0 - effective_global_rr
    )


###############################################################################
#                                   Uptime                                    #
###############################################################################


def hours_since(cluster: ClusterView, node_name: str) -> float:
    """Uptime of the node in hours

    Unknown uptime comes back as -1.0 which turns any rate computed with it
    negative, making the problem visible in the report.
    """
    node = cluster.node(node_name)
    if node is None or node.uptime_hours is None:
        return -1.0
    return node.uptime_hours


def per_hour(count: float, hours: float) -> float:
    if hours == 0:
        return 0.0
    return count / hours


def nodes_missing_uptime(cluster: ClusterView) -> List[str]:
    return [node.name for node in cluster.nodes if node.uptime_hours is None]


###############################################################################
#                                 Compression                                 #
###############################################################################


def effective_compression_ratio(samples: Sequence[float]) -> float:
    if len(samples) == 0:
        return 1.0
    values = np.asarray(samples, dtype=float)
    if values.mean() == NO_COMPRESSION_SAMPLE:
        # Nothing was sampled anywhere, assume uncompressed
        return 1.0
    reported = values[values != NO_COMPRESSION_SAMPLE]
    return float(reported.mean())


def decompress(compressed_size: float, ratio: float) -> float:
    """Estimate the original size of data stored at the given ratio

    A positive ratio is the compressed size as a fraction of the original.
    A negative ratio means the data grew when compressed, by abs(ratio).
    """
    if ratio == 0 or math.isnan(ratio):
        logger.warning("Unusable compression ratio %s, size treated as 0", ratio)
        return 0.0
    if ratio < 0:
        return compressed_size / (1.0 + abs(ratio))
    return compressed_size / ratio


###############################################################################
#                     Per table values shared by estimators                   #
###############################################################################


class TableContext(BaseModel):
    """Scalars which only depend on the table, computed once per table"""

    keyspace: Keyspace
    total_rf: int
    global_rr: float
    local_rr: float
    compression_ratio: float
    model_config = ConfigDict(frozen=True)

    @staticmethod
    def resolve(
        cluster: ClusterView,
        table: TableMetricsAccessor,
        keyspaces: Sequence[Keyspace],
    ) -> Optional["TableContext"]:
        keyspace = next((ks for ks in keyspaces if ks.name == table.keyspace), None)
        if keyspace is None:
            logger.warning(
                "Could not find keyspace %s for table %s", table.keyspace, table.name
            )
            return None

        global_rr = effective_global_read_repair(table, cluster.is_multi_dc)
        context = TableContext(
            keyspace=keyspace,
            total_rf=total_replication_factor(keyspace),
            global_rr=global_rr,
            local_rr=effective_local_read_repair(table, global_rr),
            compression_ratio=finite_or_zero(
                effective_compression_ratio(table.compression_ratio_samples)
            ),
        )
        logger.debug(
            "table=%s rf=%d global_rr=%f local_rr=%f ratio=%f",
            table.name,
            context.total_rf,
            context.global_rr,
            context.local_rr,
            context.compression_ratio,
        )
        return context

    def datacenter_rf(
        self, cluster: ClusterView, node_name: str, arguments: EstimationArguments
    ) -> int:
        return replication_factor(
            self.keyspace,
            datacenter_of(cluster, node_name, unknown=arguments.unknown_datacenter),
        )

    def write_datacenter_rf(
        self, cluster: ClusterView, node_name: str, arguments: EstimationArguments
    ) -> int:
        return write_replication_factor(
            self.keyspace,
            datacenter_of(cluster, node_name, unknown=arguments.unknown_datacenter),
        )
