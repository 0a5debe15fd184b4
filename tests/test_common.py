import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from cassandra_operations_modeling.estimators.common import datacenter_of
from cassandra_operations_modeling.estimators.common import decompress
from cassandra_operations_modeling.estimators.common import effective_compression_ratio
from cassandra_operations_modeling.estimators.common import (
    effective_global_read_repair,
)
from cassandra_operations_modeling.estimators.common import effective_local_read_repair
from cassandra_operations_modeling.estimators.common import hours_since
from cassandra_operations_modeling.estimators.common import nodes_missing_uptime
from cassandra_operations_modeling.estimators.common import per_hour
from cassandra_operations_modeling.estimators.common import quorum
from cassandra_operations_modeling.estimators.common import replication_factor
from cassandra_operations_modeling.estimators.common import TableContext
from cassandra_operations_modeling.estimators.common import (
    total_replication_factor,
)
from cassandra_operations_modeling.estimators.common import write_replication_factor
from cassandra_operations_modeling.interface import ClusterSnapshot
from cassandra_operations_modeling.interface import Keyspace
from cassandra_operations_modeling.interface import Node
from cassandra_operations_modeling.interface import ReplicationStrategy
from cassandra_operations_modeling.interface import TableMetrics


cluster = ClusterSnapshot(
    nodes=[
        Node(name="a", datacenter="us-east", uptime_seconds=7200),
        Node(name="b", datacenter="us-west", uptime_seconds=None),
    ]
)


def test_datacenter_of():
    assert datacenter_of(cluster, "a") == "us-east"
    assert datacenter_of(cluster, "b") == "us-west"
    assert datacenter_of(cluster, "nope") == "UNKNOWN"
    assert datacenter_of(cluster, "nope", unknown="?") == "?"


def test_replication_factor():
    ks = Keyspace(name="ks", replication=[("us-east", 3), ("us-west", 2)])

    assert replication_factor(ks, "us-east") == 3
    assert replication_factor(ks, "us-west") == 2
    assert replication_factor(ks, "eu-west") == 0
    assert total_replication_factor(ks) == 5


def test_replication_factor_duplicates_first_wins():
    ks = Keyspace(name="ks", replication=[("dc1", 3), ("dc1", 5)])

    assert replication_factor(ks, "dc1") == 3


def test_local_strategy_is_single_copy():
    ks = Keyspace(
        name="system",
        strategy="org.apache.cassandra.locator.LocalStrategy",
        replication=[("dc1", 3)],
    )

    assert ks.strategy == ReplicationStrategy.local
    assert total_replication_factor(ks) == 1
    # only the total is forced, per datacenter lookups are unchanged
    assert replication_factor(ks, "dc1") == 3
    assert write_replication_factor(ks, "dc1") == 3

    empty = Keyspace(name="system", strategy="LocalStrategy")
    assert total_replication_factor(empty) == 1
    assert write_replication_factor(empty, "dc1") == 0


def test_simple_strategy():
    ks = Keyspace(
        name="ks", strategy="SimpleStrategy", replication=[("replication_factor", 3)]
    )

    assert ks.strategy == ReplicationStrategy.simple
    assert total_replication_factor(ks) == 3
    # the pseudo datacenter is not a real one
    assert replication_factor(ks, "dc1") == 0
    # writes reach every node whatever its datacenter
    assert write_replication_factor(ks, "dc1") == 3


def test_unknown_strategy():
    ks = Keyspace(name="ks", strategy="EverywhereStrategy", replication=[("dc1", 2)])

    assert ks.strategy == ReplicationStrategy.other
    assert replication_factor(ks, "dc1") == 2
    assert write_replication_factor(ks, "dc1") == 2


@pytest.mark.parametrize(
    "rf,expected", [(1, 1), (2, 2), (3, 2), (4, 3), (5, 3), (6, 4), (9, 5)]
)
def test_quorum(rf, expected):
    assert quorum(rf) == expected


@given(st.integers(min_value=1, max_value=1000))
def test_quorum_is_majority(rf):
    q = quorum(rf)
    assert q == rf // 2 + 1
    assert q <= rf
    # two quorums always overlap
    assert 2 * q > rf


@given(
    st.sampled_from(["0.0", "0.1", "0.5", "1.0", "", "junk", None]),
    st.sampled_from(["0.0", "0.1", "0.5", "1.0", "", "junk", None]),
)
def test_single_dc_global_read_repair_is_zero(rr, local_rr):
    table = TableMetrics(
        name="ks.t", read_repair_chance=rr, dc_local_read_repair_chance=local_rr
    )

    assert effective_global_read_repair(table, is_multi_dc=False) == 0.0


def test_read_repair_multi_dc():
    table = TableMetrics(
        name="ks.t", read_repair_chance="0.1", dc_local_read_repair_chance="0.1"
    )

    global_rr = effective_global_read_repair(table, is_multi_dc=True)

    assert global_rr == pytest.approx(0.1)
    assert effective_local_read_repair(table, global_rr) == pytest.approx(0.09)


def test_read_repair_unparsable():
    table = TableMetrics(
        name="ks.t", read_repair_chance="NONE", dc_local_read_repair_chance="nan"
    )

    assert effective_global_read_repair(table, is_multi_dc=True) == 0.0
    assert effective_local_read_repair(table, 0.0) == 0.0


def test_uptime():
    assert hours_since(cluster, "a") == pytest.approx(2.0)
    assert hours_since(cluster, "b") == -1.0
    assert hours_since(cluster, "nope") == -1.0
    assert nodes_missing_uptime(cluster) == ["b"]


def test_per_hour():
    assert per_hour(100, 2.0) == pytest.approx(50.0)
    assert per_hour(100, -1.0) == pytest.approx(-100.0)
    assert per_hour(100, 0.0) == 0.0


def test_effective_compression_ratio():
    assert effective_compression_ratio([-1.0, -1.0]) == 1.0
    assert effective_compression_ratio([]) == 1.0
    assert effective_compression_ratio([0.5, -1.0]) == pytest.approx(0.5)
    assert effective_compression_ratio([0.4, 0.6, -1.0]) == pytest.approx(0.5)
    # only the average decides if anything was sampled
    assert effective_compression_ratio([-1.5, -0.5]) == 1.0
    assert effective_compression_ratio([-0.25, -1.0]) == pytest.approx(-0.25)


def test_decompress():
    assert decompress(50, 0.5) == pytest.approx(100.0)
    assert decompress(100, -0.25) == pytest.approx(80.0)
    assert decompress(100, 1.0) == pytest.approx(100.0)
    assert decompress(100, 0.0) == 0.0
    assert decompress(100, math.nan) == 0.0


@given(
    st.floats(min_value=0, max_value=1e15),
    st.floats(min_value=0.01, max_value=1.0),
)
def test_decompress_never_shrinks_compressed_data(size, ratio):
    assert decompress(size, ratio) >= size * 0.999999


def test_table_context_resolves_once():
    topo = ClusterSnapshot(
        nodes=[
            Node(name="a", datacenter="dc1", uptime_seconds=3600),
            Node(name="b", datacenter="dc2", uptime_seconds=3600),
        ],
        keyspaces=[Keyspace(name="ks", replication=[("dc1", 3), ("dc2", 3)])],
    )
    table = TableMetrics(
        name="ks.t",
        read_repair_chance="0.1",
        dc_local_read_repair_chance="0.1",
        compression_ratios={"a": 0.25, "b": 0.75},
    )

    context = TableContext.resolve(topo, table, topo.keyspaces)

    assert context is not None
    assert context.total_rf == 6
    assert context.global_rr == pytest.approx(0.1)
    assert context.local_rr == pytest.approx(0.09)
    assert context.compression_ratio == pytest.approx(0.5)
    assert TableContext.resolve(topo, table, []) is None
