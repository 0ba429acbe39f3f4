import numpy as np
import matplotlib.pyplot as plt
from scipy.optimize import minimize

import os
import sys
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from trajectory_design.environment import CelestialBody, ConstantEphemeris, KeplerEphemeris, SystemOfBodies
from trajectory_design.trajectory.kepler import state_to_orbital_elements
from trajectory_design.transfer import (
    TransferTrajectoryError,
    create_transfer_trajectory,
    mga_settings_dsm_position_based_legs,
    print_parameter_definitions,
)

MU_SUN = 132712440041.9394
AU = 1.495978707e8


def circular_solar_system():
    # Coplanar circular planets, no kernels required
    planets = {
        'EARTH': (1.0, 0.0, 398600.4418),
        'MARS': (1.523679, 0.6, 42828.37),
        'JUPITER': (5.2044, 3.83, 126686534.0),
    }
    bodies = [CelestialBody('SUN', MU_SUN, 695700.0, ConstantEphemeris())]
    for name, (a_au, m0, mu) in planets.items():
        bodies.append(CelestialBody(name, mu, ephemeris=KeplerEphemeris(a_au * AU, 0.0, MU_SUN, mean_anomaly_at_epoch=m0)))
    return SystemOfBodies(bodies)


def main():
    print("====================================")
    print("   DSM Transfer Demo (E-M-J)        ")
    print("====================================")

    bodies = circular_solar_system()
    body_order = ['EARTH', 'MARS', 'JUPITER']
    leg_settings, node_settings = mga_settings_dsm_position_based_legs(body_order, arrival_orbit=(5.0e6, 0.9))
    trajectory = create_transfer_trajectory(bodies, leg_settings, node_settings, body_order, 'SUN')
    print_parameter_definitions(leg_settings, node_settings)

    node_times = np.array([0.0, 250.0, 1150.0]) * 86400.0

    def cost(x):
        leg_parameters = [x[0:4], x[4:8]]
        try:
            trajectory.evaluate(node_times, leg_parameters, [[], [], []])
        except TransferTrajectoryError:
            return 1.0e3
        return trajectory.delta_v

    # Initial guess: DSM halfway, near the departure body's orbit
    x0 = np.array([0.5, 1.1, 0.5, 0.0, 0.5, 1.5, 0.8, 0.0])
    print(f"\nInitial dV: {cost(x0):.3f} km/s")

    result = minimize(cost, x0, method='Nelder-Mead', options={'maxiter': 2000, 'xatol': 1e-6, 'fatol': 1e-6})
    print(f"Optimized dV: {result.fun:.3f} km/s ({result.nit} iterations)")

    cost(result.x)
    print("\n--- Breakdown ---")
    for i, body in enumerate(body_order):
        print(f"Node {i} {body:8s} dV = {trajectory.single_node_delta_v(i):.3f} km/s")
    for i in range(trajectory.number_of_legs):
        print(f"Leg  {i} DSM      dV = {trajectory.single_leg_delta_v(i):.3f} km/s")

    print("\n--- Spacecraft orbit at the node epochs ---")
    for epoch, state in trajectory.states_along_trajectory(2):
        elements = state_to_orbital_elements(state[0:3], state[3:6], MU_SUN)
        print(f"t = {epoch / 86400.0:7.1f} d  a = {elements['a'] / AU:.3f} AU  e = {elements['e']:.3f}  "
              f"i = {elements['i_deg']:.2f} deg")

    history = trajectory.state_history(300)
    states = np.array(list(history.values()))

    plt.figure(figsize=(8, 8))
    plt.plot(states[:, 0] / AU, states[:, 1] / AU, 'b-', label='Spacecraft')
    plt.plot(0, 0, 'y*', markersize=15, label='Sun')
    for i, body in enumerate(body_order):
        r = bodies.get_state(body, node_times[i])[0:3] / AU
        plt.plot(r[0], r[1], 'o', label=body)
    plt.xlabel('X [AU]')
    plt.ylabel('Y [AU]')
    plt.title('Earth-Mars-Jupiter transfer with deep-space maneuvers')
    plt.axis('equal')
    plt.grid(True)
    plt.legend()

    filename = "mga_dsm_transfer.png"
    plt.savefig(filename)
    print(f"Saved {filename}")


if __name__ == "__main__":
    main()
