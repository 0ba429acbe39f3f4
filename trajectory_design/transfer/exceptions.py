class TransferTrajectoryError(Exception):
    """Base class for errors raised while building or evaluating a transfer trajectory."""
    pass


class ConfigurationError(TransferTrajectoryError):
    """Unsupported or inconsistent leg/node settings."""
    pass


class MissingEnvironmentData(TransferTrajectoryError, LookupError):
    """A body, ephemeris or gravitational parameter required by a leg or node is unavailable."""
    pass


class StructuralMismatchError(TransferTrajectoryError, ValueError):
    """Node, leg and body-name counts are inconsistent."""
    pass


class ParameterDimensionError(TransferTrajectoryError, ValueError):
    """Wrong number of node times or free-parameter vectors, or wrong vector length."""
    pass


class InvalidParameterValueError(TransferTrajectoryError, ValueError):
    """Free parameters or node times outside their admissible range."""
    pass


class InfeasibleNodeError(TransferTrajectoryError):
    """
    A node constraint cannot be met, e.g. a swingby needing a periapsis below its minimum.

    Attributes:
        node_index (int): Index of the offending node in the body order.
    """
    def __init__(self, node_index: int, message: str):
        super().__init__(f"Node {node_index}: {message}")
        self.node_index = node_index


class NotYetEvaluatedError(TransferTrajectoryError):
    """A result reader was called before the first successful evaluation."""
    pass


class InfeasibleLegError(TransferTrajectoryError):
    """
    A leg has no two-body solution for the given epochs and parameters,
    e.g. a Lambert arc with a 0 or 180 degree transfer angle.

    Attributes:
        leg_index (int): Index of the offending leg.
    """
    def __init__(self, leg_index: int, message: str):
        super().__init__(f"Leg {leg_index}: {message}")
        self.leg_index = leg_index
