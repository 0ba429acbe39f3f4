import numpy as np
import matplotlib.pyplot as plt

import os
import sys
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from trajectory_design.environment import create_spice_bodies
from trajectory_design.spice.manager import SpiceLookupError, spice_manager
from trajectory_design.transfer import (
    InfeasibleNodeError,
    create_transfer_trajectory,
    mga_settings_unpowered_unperturbed_legs,
    print_parameter_definitions,
)


def main():
    print("====================================")
    print("  Unpowered MGA Transfer (E-V-E-J)  ")
    print("====================================")

    # 1. Load kernels
    if not spice_manager.kernels_loaded:
        if spice_manager.load_standard_kernels() == 0:
            print("Ensure 'data/' folder exists with SPICE kernels (de432s.bsp, gm_de431.tpc, naif0012.tls).")
            return

    body_order = ['EARTH BARYCENTER', 'VENUS BARYCENTER', 'EARTH BARYCENTER', 'JUPITER BARYCENTER']
    try:
        bodies = create_spice_bodies(body_order, central_body='SUN')
    except SpiceLookupError as e:
        print(f"Error setting up bodies: {e}")
        return

    # 2. Transfer settings: escape into a 300 km parking orbit, capture into a highly elliptic orbit
    leg_settings, node_settings = mga_settings_unpowered_unperturbed_legs(
        body_order,
        departure_orbit=(6678.0, 0.0),
        arrival_orbit=(1.0e6, 0.95))

    trajectory = create_transfer_trajectory(bodies, leg_settings, node_settings, body_order, 'SUN')
    print_parameter_definitions(leg_settings, node_settings)

    # 3. Node epochs (days after launch); unpowered legs take no free parameters
    launch = spice_manager.utc2et("2025-10-01")
    days = np.array([0.0, 160.0, 450.0, 1450.0])
    node_times = launch + days * 86400.0

    try:
        trajectory.evaluate(node_times, [[]] * trajectory.number_of_legs, [[]] * trajectory.number_of_nodes)
    except InfeasibleNodeError as e:
        print(f"Swingby at node {e.node_index} ({body_order[e.node_index]}) is infeasible: {e}")
        return

    print("\n--- Results ---")
    for i, body in enumerate(body_order):
        print(f"Node {i} {body:20s} {spice_manager.et2utc(node_times[i])}  dV = {trajectory.single_node_delta_v(i):.3f} km/s")
    print(f"Total dV: {trajectory.delta_v:.3f} km/s")
    print(f"Time of flight: {trajectory.time_of_flight / 86400.0:.1f} days")

    # 4. Plot
    states = np.array([state for _, state in trajectory.states_along_trajectory(200)])
    au = 1.495978707e8

    fig, ax = plt.subplots(figsize=(8, 8))
    ax.plot(states[:, 0] / au, states[:, 1] / au, 'b-', label='Spacecraft')
    for i, body in enumerate(body_order):
        r = bodies.get_state(body, node_times[i])[0:3] / au
        ax.plot(r[0], r[1], 'o', label=f"{body} (node {i})")
    ax.plot(0, 0, 'y*', markersize=15, label='Sun')
    ax.set_xlabel('X [AU]')
    ax.set_ylabel('Y [AU]')
    ax.set_title('Earth-Venus-Earth-Jupiter transfer')
    ax.axis('equal')
    ax.grid(True)
    ax.legend()

    filename = "mga_transfer.png"
    plt.savefig(filename)
    print(f"Saved {filename}")


if __name__ == "__main__":
    main()
