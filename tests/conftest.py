from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence
from typing import Tuple

import pytest

from cassandra_operations_modeling.estimators import EstimationInputs
from cassandra_operations_modeling.interface import ClusterSnapshot
from cassandra_operations_modeling.interface import Keyspace
from cassandra_operations_modeling.interface import Node
from cassandra_operations_modeling.interface import TableMetrics

ONE_HOUR = 3600


def _nodes(
    datacenters: Sequence[Tuple[str, int]], uptime_seconds: Optional[int]
) -> List[Node]:
    nodes = []
    for dc, count in datacenters:
        for _ in range(count):
            nodes.append(
                Node(
                    name=f"node{len(nodes) + 1}",
                    datacenter=dc,
                    uptime_seconds=uptime_seconds,
                )
            )
    return nodes


@pytest.fixture
def make_cluster():
    """Builds a cluster with nodes named node1..nodeN, datacenters in order"""

    def _make(
        datacenters: Sequence[Tuple[str, int]] = (("dc1", 3),),
        replication: Sequence[Tuple[str, int]] = (("dc1", 3),),
        strategy: str = "NetworkTopologyStrategy",
        uptime_seconds: Optional[int] = ONE_HOUR,
    ) -> ClusterSnapshot:
        return ClusterSnapshot(
            nodes=_nodes(datacenters, uptime_seconds),
            keyspaces=[
                Keyspace(name="test", strategy=strategy, replication=list(replication))
            ],
        )

    return _make


@pytest.fixture
def make_table():
    """Builds test.foo with the same counters on each of `nodes` nodes"""

    def _make(  # pylint: disable=too-many-positional-arguments
        nodes: int = 3,
        reads: float = 1_000_000.0,
        writes: float = 1_000_000.0,
        cas: float = 0.0,
        read_repair: Optional[str] = "0.0",
        dc_local_read_repair: Optional[str] = "0.0",
        **kwargs,
    ) -> TableMetrics:
        names = [f"node{i + 1}" for i in range(nodes)]
        counters: Dict[str, Dict[str, float]] = {
            "read_count": {n: reads for n in names},
            "write_count": {n: writes for n in names},
            "cas_prepare_count": {n: cas for n in names} if cas else {},
        }
        counters.update(kwargs)
        return TableMetrics(
            name="test.foo",
            read_repair_chance=read_repair,
            dc_local_read_repair_chance=dc_local_read_repair,
            **counters,
        )

    return _make


@pytest.fixture
def inputs_for():
    def _inputs(cluster: ClusterSnapshot, **kwargs) -> EstimationInputs:
        return EstimationInputs(cluster=cluster, keyspaces=cluster.keyspaces, **kwargs)

    return _inputs
