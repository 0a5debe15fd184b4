import logging
from typing import Callable

from cassandra_operations_modeling.estimators import EstimationInputs
from cassandra_operations_modeling.estimators import OperationsEstimator
from cassandra_operations_modeling.estimators.common import hours_since
from cassandra_operations_modeling.estimators.common import per_hour
from cassandra_operations_modeling.estimators.common import quorum
from cassandra_operations_modeling.estimators.common import TableContext
from cassandra_operations_modeling.estimators.utils import round_half_up
from cassandra_operations_modeling.interface import ConsistencyLevelResult
from cassandra_operations_modeling.interface import TableMetricsAccessor

logger = logging.getLogger(__name__)


def _physical_reads_per_client_read(
    context: TableContext, local_rf: int, replicas_per_read: int
) -> float:
    """Average replica reads caused by one client read

    With 10% read repair at CL ONE and RF=3, 100 client reads cause
    90 * 1 + 10 * 3 = 120 replica reads, so the raw count has to be divided
    by 1.2 rather than 1.
    """
    global_rr, local_rr = context.global_rr, context.local_rr
    if replicas_per_read <= local_rf:
        normal_reads = 1.0 - (global_rr + local_rr)
        return (
            global_rr * context.total_rf
            + local_rr * local_rf
            + normal_reads * replicas_per_read
        )

    # The read already spans datacenters, so the local replicas a local read
    # repair would touch are most likely already part of it. Counting local
    # read repair here would under count the ordinary reads.
    normal_reads = 1.0 - global_rr
    return global_rr * context.total_rf + normal_reads * replicas_per_read


def _client_reads_per_hour(  # pylint: disable=too-many-positional-arguments
    context: TableContext,
    local_rf: int,
    replicas_per_read: int,
    reads: float,
    paxos_reads: int,
    hours: float,
    paxos_extra_reads: int,
) -> float:
    if local_rf <= 0:
        # keyspace is not replicated in this node's datacenter
        return 0.0

    denominator = _physical_reads_per_client_read(context, local_rf, replicas_per_read)
    if denominator <= 0:
        return 0.0

    # Paxos overhead is not subject to read repair so it comes off the raw
    # count before dividing
    return per_hour((reads - paxos_reads * paxos_extra_reads) / denominator, hours)


def _sum_over_nodes(
    table: TableMetricsAccessor,
    inputs: EstimationInputs,
    context: TableContext,
    replicas_per_read: Callable[[int], int],
) -> int:
    total = 0.0
    for node_name, reads in table.read_count.items():
        local_rf = context.datacenter_rf(inputs.cluster, node_name, inputs.arguments)
        total += _client_reads_per_hour(
            context=context,
            local_rf=local_rf,
            replicas_per_read=replicas_per_read(local_rf),
            reads=reads,
            paxos_reads=round_half_up(table.cas_prepare_count.get(node_name, 0.0)),
            hours=hours_since(inputs.cluster, node_name),
            paxos_extra_reads=inputs.arguments.paxos_extra_reads_per_cas,
        )
    return round_half_up(total)


def _sum_all_over_nodes(
    table: TableMetricsAccessor, inputs: EstimationInputs, context: TableContext
) -> int:
    # Every replica answers a CL ALL read so read repair has nothing to add,
    # e.g. 6 nodes with 1m reads each at RF=3 are 2m client reads
    if context.total_rf <= 0:
        return 0

    total = 0.0
    for node_name, reads in table.read_count.items():
        local_rf = context.datacenter_rf(inputs.cluster, node_name, inputs.arguments)
        if local_rf <= 0:
            continue
        paxos_reads = round_half_up(table.cas_prepare_count.get(node_name, 0.0))
        client_reads = reads - paxos_reads * inputs.arguments.paxos_extra_reads_per_cas
        total += (
            per_hour(client_reads, hours_since(inputs.cluster, node_name))
            / context.total_rf
        )
    return round_half_up(total)


def estimate_table_reads(
    table: TableMetricsAccessor, inputs: EstimationInputs
) -> ConsistencyLevelResult:
    """Estimate client reads per hour for each consistency level

    The raw read latency count is per replica, so a single client read
    shows up once per replica it touched. Which replicas it touched depends
    on the consistency level the application used, which we cannot see, so
    we compute an answer for each plausible level.
    """
    context = TableContext.resolve(inputs.cluster, table, inputs.keyspaces)
    if context is None:
        return ConsistencyLevelResult.unresolved()

    total_quorum = quorum(context.total_rf)
    result = ConsistencyLevelResult(
        one=_sum_over_nodes(table, inputs, context, lambda _: 1),
        # LOCAL_QUORUM is evaluated inside each node's own datacenter
        local_quorum=_sum_over_nodes(table, inputs, context, quorum),
        quorum=_sum_over_nodes(table, inputs, context, lambda _: total_quorum),
        all=_sum_all_over_nodes(table, inputs, context),
    )
    logger.debug("Estimated reads for %s: %s", table.name, result)
    return result


class ReadOperationsEstimator(OperationsEstimator):
    @staticmethod
    def estimate(
        table: TableMetricsAccessor, inputs: EstimationInputs
    ) -> ConsistencyLevelResult:
        return estimate_table_reads(table, inputs)

    @staticmethod
    def description():
        return "Client reads per hour at ONE, LOCAL_QUORUM, QUORUM and ALL"


read_operations_estimator = ReadOperationsEstimator()
