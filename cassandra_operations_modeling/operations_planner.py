import logging
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence

from cassandra_operations_modeling.estimators import EstimationInputs
from cassandra_operations_modeling.estimators import OperationsEstimator
from cassandra_operations_modeling.estimators import standard
from cassandra_operations_modeling.estimators.common import nodes_missing_uptime
from cassandra_operations_modeling.interface import ClientRequestMetric
from cassandra_operations_modeling.interface import ClusterView
from cassandra_operations_modeling.interface import EstimateStatus
from cassandra_operations_modeling.interface import EstimationArguments
from cassandra_operations_modeling.interface import Keyspace
from cassandra_operations_modeling.interface import OperationsEstimate
from cassandra_operations_modeling.interface import RowCountProvider
from cassandra_operations_modeling.interface import TableMetricsAccessor

logger = logging.getLogger(__name__)

# OperationsEstimate field -> estimator that fills it in
ESTIMATE_FIELDS: Dict[str, str] = {
    "reads": "reads",
    "writes": "writes",
    "row_sizes": "row-size",
    "total_rows": "total-rows",
    "coordinator_reads": "coordinator-reads",
}


def user_keyspaces(
    keyspaces: Sequence[Keyspace], arguments: EstimationArguments
) -> List[Keyspace]:
    if not arguments.exclude_system_keyspaces:
        return list(keyspaces)
    return [ks for ks in keyspaces if ks.name not in arguments.system_keyspaces]


def user_tables(
    tables: Sequence[TableMetricsAccessor], arguments: EstimationArguments
) -> List[TableMetricsAccessor]:
    if not arguments.exclude_system_keyspaces:
        return list(tables)
    return [t for t in tables if t.keyspace not in arguments.system_keyspaces]


class OperationsPlanner:
    def __init__(self):
        self._estimators: Dict[str, OperationsEstimator] = {}

    def register_group(self, group: Callable[[], Dict[str, OperationsEstimator]]):
        for name, estimator in group().items():
            self.register_estimator(name, estimator)

    def register_estimator(self, name: str, estimator: OperationsEstimator):
        self._estimators[name] = estimator

    @property
    def estimators(self) -> Dict[str, OperationsEstimator]:
        return self._estimators

    def _estimator(self, name: str) -> OperationsEstimator:
        if name not in self._estimators:
            raise ValueError(
                f"estimator={name} does not exist. "
                f"Try {sorted(list(self._estimators.keys()))}"
            )
        return self._estimators[name]

    def estimate_table(
        self,
        estimator_name: str,
        table: TableMetricsAccessor,
        inputs: EstimationInputs,
    ) -> Any:
        return self._estimator(estimator_name).estimate(table, inputs)

    def estimate(  # pylint: disable=too-many-positional-arguments
        self,
        cluster: ClusterView,
        tables: Sequence[TableMetricsAccessor],
        row_counts: Optional[RowCountProvider] = None,
        client_requests: Sequence[ClientRequestMetric] = (),
        extra_model_arguments: Optional[Dict[str, Any]] = None,
    ) -> OperationsEstimate:
        """Estimate what the application is doing to every table

        Tables are independent of each other; a table whose keyspace is not
        in the schema gets an unresolved result and the rest carry on.
        If any node is missing its uptime no per hour rate is produced for
        any table, only the figures that do not depend on time.
        """
        arguments = EstimationArguments.model_validate(extra_model_arguments or {})
        inputs = EstimationInputs(
            cluster=cluster,
            keyspaces=user_keyspaces(cluster.keyspaces, arguments),
            arguments=arguments,
            row_counts=row_counts,
            client_requests=tuple(client_requests),
        )
        tables = user_tables(tables, arguments)

        missing_uptime = nodes_missing_uptime(cluster)
        status = EstimateStatus.resolved
        if missing_uptime:
            logger.error(
                "Operations cannot be calculated due to missing uptime values "
                "on nodes %s",
                missing_uptime,
            )
            status = EstimateStatus.uptime_unavailable

        results: Dict[str, Dict[str, Any]] = {}
        for field, estimator_name in ESTIMATE_FIELDS.items():
            estimator = self._estimator(estimator_name)
            if estimator.requires_uptime and missing_uptime:
                results[field] = {}
                continue
            results[field] = {
                table.name: estimator.estimate(table, inputs) for table in tables
            }

        logger.info(
            "Estimated operations for %d tables on %d nodes (status=%s)",
            len(tables),
            len(cluster.nodes),
            status,
        )
        return OperationsEstimate(status=status, **results)


planner = OperationsPlanner()
planner.register_group(standard.estimators)
