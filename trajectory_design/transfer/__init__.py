"""
Transfer trajectory design: leg/node settings, trajectory assembly, evaluation and state sampling.
"""
from trajectory_design.constants import DEFAULT_MINIMUM_PERICENTERS
from trajectory_design.transfer.exceptions import (
    ConfigurationError,
    InfeasibleLegError,
    InfeasibleNodeError,
    InvalidParameterValueError,
    MissingEnvironmentData,
    NotYetEvaluatedError,
    ParameterDimensionError,
    StructuralMismatchError,
    TransferTrajectoryError,
)
from trajectory_design.transfer.settings import (
    TransferLegSettings,
    TransferLegTypes,
    TransferNodeSettings,
    TransferNodeTypes,
    capture_node,
    departure_node,
    dsm_position_based_leg,
    dsm_velocity_based_leg,
    mga_settings_dsm_position_based_legs,
    mga_settings_dsm_velocity_based_legs,
    mga_settings_unpowered_unperturbed_legs,
    mga_transfer_settings,
    parameter_definitions,
    print_parameter_definitions,
    swingby_node,
    unpowered_leg,
)
from trajectory_design.transfer.trajectory import TransferTrajectory, create_transfer_trajectory
