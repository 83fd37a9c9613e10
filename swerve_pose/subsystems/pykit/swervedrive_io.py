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

import math
from dataclasses import dataclass, field
from typing import List, Tuple

from pykit.autolog import autolog
from wpimath.geometry import Rotation2d
from wpimath.kinematics import SwerveModuleState
from wpimath.units import meters, meters_per_second, radians, seconds

from swerve_pose.constants import ODOMETRY_FREQUENCY

"""
SwerveModuleIO is the hardware boundary for a single swerve module. Inputs are plain
data that pykit can log (and replay in AdvantageScope); commands go out through the
set* / apply* methods.
"""


class SwerveModuleIO:
    @autolog
    @dataclass
    class SwerveModuleIOInputs:
        encoder_connected: bool = False

        drive_position: meters = 0.0  # cumulative wheel distance
        drive_velocity: meters_per_second = 0.0

        turn_position: radians = 0.0
        turn_absolute_position: radians = 0.0

        # Samples buffered by the hardware since the last updateInputs call, oldest first
        odometry_timestamps: List[float] = field(default_factory=list)
        odometry_drive_positions: List[float] = field(default_factory=list)
        odometry_turn_positions: List[float] = field(default_factory=list)

    def __init__(self, name: str) -> None:
        self.name = name

    def updateInputs(self, inputs: SwerveModuleIOInputs) -> None:
        """Update the swerve module I/O inputs.

        Args:
            inputs (SwerveModuleIOInputs): The swerve module I/O inputs to update.
        """
        pass

    def setCommand(self, state: SwerveModuleState) -> None:
        """Set the target wheel velocity and steer angle.

        Args:
            state (SwerveModuleState): Already optimized target state.
        """

    def applyAngleOffset(self, offset: Rotation2d) -> None:
        """Re-seed the steer position from the absolute encoder using a known offset.

        Args:
            offset (Rotation2d): Absolute encoder reading that corresponds to 'straight ahead'.
        """

    def stop(self) -> None:
        """Stop both motors."""


class SwerveModuleIOSim(SwerveModuleIO):
    """
    Ideal module: the wheel instantly reaches the commanded speed and angle. Produces
    high-frequency odometry samples at 'frequency' between calls to updateInputs.
    """

    def __init__(self, name: str, frequency: float = ODOMETRY_FREQUENCY) -> None:
        super().__init__(name)

        self._period: seconds = 1.0 / frequency
        self._timestamp: seconds = 0.0
        self._distance: meters = 0.0
        self._angle: radians = 0.0
        self._speed: meters_per_second = 0.0
        self._offset: radians = 0.0
        self._pending: List[Tuple[seconds, meters, radians]] = []

        self.encoder_connected = True
        self.offsets_applied = 0

    @property
    def timestamp(self) -> seconds:
        return self._timestamp

    def advance(self, dt: seconds) -> None:
        """
        Move simulated time forward, buffering odometry samples as the hardware would
        """
        steps = max(1, round(dt / self._period))
        step = dt / steps

        for _ in range(steps):
            self._timestamp += step
            self._distance += self._speed * step
            self._pending.append((self._timestamp, self._distance, self._angle))

    def updateInputs(self, inputs: SwerveModuleIO.SwerveModuleIOInputs) -> None:
        inputs.encoder_connected = self.encoder_connected

        inputs.drive_position = self._distance
        inputs.drive_velocity = self._speed
        inputs.turn_position = self._angle
        inputs.turn_absolute_position = math.remainder(self._angle + self._offset, 2 * math.pi)

        inputs.odometry_timestamps = [sample[0] for sample in self._pending]
        inputs.odometry_drive_positions = [sample[1] for sample in self._pending]
        inputs.odometry_turn_positions = [sample[2] for sample in self._pending]
        self._pending.clear()

    def setCommand(self, state: SwerveModuleState) -> None:
        self._speed = state.speed
        self._angle = state.angle.radians()

    def applyAngleOffset(self, offset: Rotation2d) -> None:
        self._offset = offset.radians()
        self.offsets_applied += 1

    def stop(self) -> None:
        self._speed = 0.0
