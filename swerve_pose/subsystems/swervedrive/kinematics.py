# ------------------------------------------------------------------------ #
#      o-o      o                o                                         #
#     /         |                |                                         #
#    O     o  o O-o  o-o o-o     |  oo o--o o-o o-o                        #
#     \    |  | |  | |-' |   \   o | | |  |  /   /                         #
#      o-o o--O o-o  o-o o    o-o  o-o-o--O o-o o-o                        #
#             |                           |                                #
#          o--o                        o--o                                #
#                        o--o      o         o                             #
#                        |   |     |         |  o                          #
#                        O-Oo  o-o O-o  o-o -o-    o-o o-o                 #
#                        |  \  | | |  | | |  |  | |     \                  #
#                        o   o o-o o-o  o-o  o  |  o-o o-o                 #
#                                                                          #
#    Jemison High School - Huntsville Alabama                              #
# ------------------------------------------------------------------------ #

import logging
import math
from typing import Sequence, Tuple

import numpy as np
from wpimath.geometry import Rotation2d, Translation2d, Twist2d
from wpimath.kinematics import ChassisSpeeds, SwerveModulePosition, SwerveModuleState
from wpimath.units import meters_per_second

logger = logging.getLogger(__name__)

SwerveModuleStates = Tuple[SwerveModuleState, ...]


class KinematicsConfigurationError(ValueError):
    """
    The module geometry cannot be used to recover chassis motion (for example two
    modules at the same location). This is a fatal configuration error.
    """


class SwerveKinematics:
    """
    Converts between chassis motion (vx, vy, omega) and per-module states.

    Each module i at (x_i, y_i) moves with velocity

        vx_i = vx - omega * y_i
        vy_i = vy + omega * x_i

    so the forward mapping is a fixed 2N x 3 matrix. The inverse (odometry) direction
    uses its pseudo-inverse, which is computed once here since the geometry never changes.
    """

    def __init__(self, *module_locations: Translation2d) -> None:
        if len(module_locations) < 2:
            raise KinematicsConfigurationError(f"At least two swerve modules are required, got {len(module_locations)}")

        self._locations: Tuple[Translation2d, ...] = tuple(module_locations)
        self._module_matrix = self._build_matrix(Translation2d())

        if np.linalg.matrix_rank(self._module_matrix) < 3:
            raise KinematicsConfigurationError(f"Degenerate swerve module geometry: "
                                               f"{[(loc.x, loc.y) for loc in self._locations]}")

        self._chassis_matrix = np.linalg.pinv(self._module_matrix)

        # Used to keep wheel headings when the chassis is commanded to stop
        self._module_headings = [Rotation2d() for _ in self._locations]

        logger.debug(f"Swerve kinematics created for {len(self._locations)} modules")

    @property
    def module_count(self) -> int:
        return len(self._locations)

    @property
    def module_locations(self) -> Tuple[Translation2d, ...]:
        return self._locations

    def _build_matrix(self, center_of_rotation: Translation2d) -> np.ndarray:
        rows = []
        for location in self._locations:
            x = location.x - center_of_rotation.x
            y = location.y - center_of_rotation.y
            rows.append([1.0, 0.0, -y])
            rows.append([0.0, 1.0, x])

        return np.array(rows, dtype=float)

    def _check_count(self, count: int) -> None:
        if count != len(self._locations):
            raise ValueError(f"Expected {len(self._locations)} module values, got {count}")

    def reset_headings(self, *headings: Rotation2d) -> None:
        """
        Set the module headings used when a zero chassis speed is requested
        """
        self._check_count(len(headings))
        self._module_headings = list(headings)

    def to_module_commands(self, chassis_speeds: ChassisSpeeds,
                           center_of_rotation: Translation2d = Translation2d()) -> SwerveModuleStates:
        """
        Convert a robot-relative chassis speed into one state per module (in module order).

        If the chassis is commanded to stop, every module keeps its last heading with a
        zero speed so the wheels do not snap back to 0 degrees.

        :param chassis_speeds:      Desired robot-relative motion
        :param center_of_rotation:  Point (robot frame) to rotate around, the robot center by default
        """
        if chassis_speeds.vx == 0.0 and chassis_speeds.vy == 0.0 and chassis_speeds.omega == 0.0:
            return tuple(SwerveModuleState(0.0, heading) for heading in self._module_headings)

        if center_of_rotation.x == 0.0 and center_of_rotation.y == 0.0:
            matrix = self._module_matrix
        else:
            matrix = self._build_matrix(center_of_rotation)

        velocities = matrix @ np.array([chassis_speeds.vx, chassis_speeds.vy, chassis_speeds.omega])

        states = []
        for index in range(len(self._locations)):
            vx, vy = velocities[2 * index], velocities[2 * index + 1]
            speed = math.hypot(vx, vy)

            if speed > 1e-9:
                heading = Rotation2d(math.atan2(vy, vx))
            else:
                heading = self._module_headings[index]

            self._module_headings[index] = heading
            states.append(SwerveModuleState(speed, heading))

        return tuple(states)

    def _solve(self, magnitudes: Sequence[float], angles: Sequence[Rotation2d]) -> np.ndarray:
        vector = np.empty(2 * len(self._locations))
        for index, (magnitude, angle) in enumerate(zip(magnitudes, angles)):
            vector[2 * index] = magnitude * angle.cos()
            vector[2 * index + 1] = magnitude * angle.sin()

        return self._chassis_matrix @ vector

    def to_chassis_speeds(self, module_states: Sequence[SwerveModuleState]) -> ChassisSpeeds:
        """
        Least-squares robot-relative chassis speed from the measured module states
        """
        self._check_count(len(module_states))
        vx, vy, omega = self._solve([state.speed for state in module_states],
                                    [state.angle for state in module_states])
        return ChassisSpeeds(float(vx), float(vy), float(omega))

    def to_chassis_delta(self, module_deltas: Sequence[SwerveModulePosition]) -> Twist2d:
        """
        Recover the robot-relative motion between two odometry samples.

        :param module_deltas: Per-module distance travelled since the last sample, paired
                              with the module angle at the current sample
        """
        self._check_count(len(module_deltas))
        dx, dy, dtheta = self._solve([delta.distance for delta in module_deltas],
                                     [delta.angle for delta in module_deltas])
        return Twist2d(float(dx), float(dy), float(dtheta))

    @staticmethod
    def desaturate_wheel_speeds(module_states: Sequence[SwerveModuleState],
                                max_speed: meters_per_second) -> SwerveModuleStates:
        """
        Scale all module speeds down by the same factor so that none exceeds
        'max_speed'. Preserves the ratio between modules (and so the direction of motion).
        """
        fastest = max((abs(state.speed) for state in module_states), default=0.0)

        if fastest <= max_speed or fastest == 0.0:
            return tuple(SwerveModuleState(state.speed, state.angle) for state in module_states)

        scale = max_speed / fastest
        return tuple(SwerveModuleState(state.speed * scale, state.angle) for state in module_states)
