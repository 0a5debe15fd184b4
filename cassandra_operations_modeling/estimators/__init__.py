from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Dict
from typing import Optional
from typing import Sequence

from cassandra_operations_modeling.interface import ClientRequestMetric
from cassandra_operations_modeling.interface import ClusterView
from cassandra_operations_modeling.interface import EstimationArguments
from cassandra_operations_modeling.interface import Keyspace
from cassandra_operations_modeling.interface import RowCountProvider
from cassandra_operations_modeling.interface import TableMetricsAccessor


@dataclass(frozen=True)
class EstimationInputs:
    """Everything collected from the cluster that estimators may consult"""

    cluster: ClusterView
    keyspaces: Sequence[Keyspace]
    arguments: EstimationArguments = field(default_factory=EstimationArguments)
    row_counts: Optional[RowCountProvider] = None
    client_requests: Sequence[ClientRequestMetric] = ()


class OperationsEstimator:
    """Stateless interface for estimating one per table figure

    Estimators turn raw per replica counters into a per table number the
    application owner would recognize (operations per hour, bytes per row).
    `estimate` must be a pure function of its inputs: it never raises on bad
    or missing data, instead it returns a documented sentinel or zero.

    `requires_uptime` estimators produce per hour rates. The planner does not
    call them at all when any node in the cluster has an unknown uptime since
    a rate computed over part of the cluster is misleading.
    """

    requires_uptime: bool = True

    def __init__(self):
        pass

    @staticmethod
    def estimate(table: TableMetricsAccessor, inputs: EstimationInputs) -> Any:
        """Given one table's metrics and the cluster snapshot return an estimate"""
        # quiet pylint
        (_, _) = (table, inputs)
        return None

    @staticmethod
    def description() -> str:
        """ Optional description of the estimator """
        return "No description"

    @staticmethod
    def extra_model_arguments_schema() -> Dict[str, Any]:
        """Optional JSON schema of the arguments this estimator understands"""
        return EstimationArguments.model_json_schema()
