import glob
import os
import warnings

import numpy as np
import spiceypy as spice

from trajectory_design.constants import DEFAULT_FRAME, DEFAULT_KERNEL_DIRECTORY, KERNEL_PATTERNS


class SpiceLookupError(RuntimeError):
    """Raised when SPICE cannot provide a requested quantity."""
    pass


class SpiceManager:
    """
    A singleton-like class that loads SPICE kernels and answers the ephemeris and
    body-constant queries needed to build a system of bodies.
    """
    _instance = None
    _kernels_loaded = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(SpiceManager, cls).__new__(cls)
        return cls._instance

    @property
    def kernels_loaded(self) -> bool:
        return self._kernels_loaded

    def load_standard_kernels(self, base_dir: str = DEFAULT_KERNEL_DIRECTORY) -> int:
        """
        Loads every kernel matching the standard patterns (.bsp, .tpc, .tls, .tf) in a directory.

        Args:
            base_dir (str): Directory holding the kernels.

        Returns:
            int: Number of kernels loaded.
        """
        if self._kernels_loaded:
            spice.kclear()
            self._kernels_loaded = False

        count = 0
        for pattern in KERNEL_PATTERNS:
            for kernel in sorted(glob.glob(os.path.join(base_dir, pattern))):
                spice.furnsh(kernel)
                count += 1

        if count == 0:
            warnings.warn(f"No SPICE kernels found in {os.path.abspath(base_dir)}.")
        else:
            self._kernels_loaded = True
        return count

    def get_body_state(self, target: str, observer: str, et: float, frame: str = DEFAULT_FRAME) -> np.ndarray:
        """
        Get the state vector of a target body relative to an observer.

        Args:
            target (str): Name of target body (e.g., 'MARS BARYCENTER')
            observer (str): Name of observing body (e.g., 'SUN')
            et (float): Ephemeris Time (seconds past J2000)
            frame (str): Reference frame

        Returns:
            np.ndarray: [x, y, z, vx, vy, vz] in km and km/s
        """
        try:
            state, _ = spice.spkezr(target, et, frame, 'NONE', observer)
        except Exception as e:
            raise SpiceLookupError(f"SPICE Error getting state for {target} wrt {observer}: {e}") from e
        return np.asarray(state, dtype=float)

    def get_mu(self, body: str) -> float:
        """
        Get the gravitational parameter (GM) of a body [km^3/s^2].
        Tries the BODYnnn_GM pool variable first, then bodvrd.
        """
        try:
            body_id = spice.bodn2c(body)
            if body_id is not None:
                n, values = spice.gdpool(f"BODY{body_id}_GM", 0, 1)
                if n > 0:
                    return float(values[0])
        except Exception:
            # Not in the pool under its ID; bodvrd below gets the final say.
            pass

        try:
            _, values = spice.bodvrd(body, "GM", 1)
        except Exception as e:
            raise SpiceLookupError(f"Could not determine GM for body '{body}'. Check pck kernel. Error: {e}") from e
        return float(values[0])

    def get_mean_radius(self, body: str) -> float:
        """Mean of the tri-axial RADII constant [km]."""
        try:
            _, values = spice.bodvrd(body, "RADII", 3)
        except Exception as e:
            raise SpiceLookupError(f"Could not find RADII for {body}: {e}") from e
        return float(np.mean(values))

    def utc2et(self, utc_str: str) -> float:
        """Converts UTC string (ISO 8601) to Ephemeris Time."""
        return spice.str2et(utc_str)

    def et2utc(self, et: float, format_str: str = "ISOC", precision: int = 3) -> str:
        """Converts Ephemeris Time to UTC string."""
        return spice.et2utc(et, format_str, precision)


# Global accessibility
spice_manager = SpiceManager()
