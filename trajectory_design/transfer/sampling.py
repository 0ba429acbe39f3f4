"""
State sampling along an evaluated transfer.
"""
from typing import List, Sequence, Tuple

import numpy as np

from trajectory_design.trajectory.kepler import propagate_kepler
from trajectory_design.transfer.evaluation import LegSolution
from trajectory_design.transfer.factory import TransferLeg


def leg_sample_epochs(departure_epoch: float, arrival_epoch: float, samples: int, include_departure: bool) -> np.ndarray:
    """
    Uniformly spaced epochs inside a leg, always ending on the arrival epoch.
    With include_departure the grid starts on the departure epoch; otherwise it starts one step after it.
    """
    if include_departure:
        return np.linspace(departure_epoch, arrival_epoch, samples)
    return np.linspace(departure_epoch, arrival_epoch, samples + 1)[1:]


def leg_state(leg: TransferLeg, solution: LegSolution, epoch: float) -> np.ndarray:
    """
    Spacecraft state on a leg: a single conic for unpowered legs, two conics joined at the DSM otherwise.
    """
    mu = leg.central_body_gravitational_parameter
    if solution.dsm_epoch is None or epoch < solution.dsm_epoch:
        return propagate_kepler(solution.departure_state, mu, epoch - solution.departure_epoch)
    return propagate_kepler(solution.dsm_state, mu, epoch - solution.dsm_epoch)


def sample_states(legs: Sequence[TransferLeg], solutions: Sequence[LegSolution],
                  samples_per_leg: int) -> List[Tuple[float, np.ndarray]]:
    """
    Samples samples_per_leg states on every leg.

    The first leg's grid includes both of its end epochs; later legs skip their departure epoch,
    which was already sampled as the previous leg's arrival. Epochs are therefore strictly increasing.

    Returns:
        list[tuple[float, np.ndarray]]: (epoch [s], state [km, km/s]) pairs relative to the central body.
    """
    if samples_per_leg < 1:
        raise ValueError(f"samples_per_leg must be at least 1, got {samples_per_leg}.")

    samples = []
    for i, (leg, solution) in enumerate(zip(legs, solutions)):
        epochs = leg_sample_epochs(solution.departure_epoch, solution.arrival_epoch, samples_per_leg,
                                   include_departure=(i == 0))
        for epoch in epochs:
            samples.append((float(epoch), leg_state(leg, solution, epoch)))
    return samples
