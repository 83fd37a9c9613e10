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
from typing import List, Tuple

from pykit.logger import Logger
from wpimath.geometry import Rotation2d
from wpimath.kinematics import SwerveModulePosition, SwerveModuleState
from wpimath.units import rotationsToRadians, seconds

from swerve_pose.constants import ANGLE_DEADBAND, MIN_SPEED, OFFSET_RECALIBRATION_INTERVAL, SwerveModuleConfig
from swerve_pose.subsystems.pykit.swervedrive_io import SwerveModuleIO
from swerve_pose.subsystems.swervedrive.modulestate import optimize_command

logger = logging.getLogger(__name__)

HighFrequencySample = Tuple[seconds, float, Rotation2d]


class SwerveModule:
    """
    One steerable / drivable wheel. Wraps the hardware IO with command optimization,
    encoder health tracking and periodic re-application of the absolute encoder offset.
    """

    def __init__(self, io: SwerveModuleIO, config: SwerveModuleConfig,
                 recalibration_interval: seconds = OFFSET_RECALIBRATION_INTERVAL):
        self._io = io
        self._config = config
        self._inputs = SwerveModuleIO.SwerveModuleIOInputs()

        self._recalibration_interval = recalibration_interval
        self._since_recalibration: seconds = 0.0
        self._angle_offset = Rotation2d(rotationsToRadians(config.angle_offset))

        self._encoder_healthy: bool | None = None
        self._last_command = SwerveModuleState()

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def inputs(self) -> SwerveModuleIO.SwerveModuleIOInputs:
        return self._inputs

    def update_inputs(self) -> None:
        self._io.updateInputs(self._inputs)
        Logger.processInputs(f"Drive/Module-{self.name}", self._inputs)

    def periodic(self, dt: seconds) -> None:
        """
        Once per control loop, after update_inputs

        :param dt: Time since the last call
        """
        healthy = self._inputs.encoder_connected

        if healthy != self._encoder_healthy:
            if not healthy:
                logger.warning(f"Swerve module {self.name}: absolute encoder disconnected")
            elif self._encoder_healthy is not None:
                logger.info(f"Swerve module {self.name}: absolute encoder reconnected")

            self._encoder_healthy = healthy
            Logger.recordOutput(f"Drive/{self.name}/EncoderHealthy", healthy)

        self._since_recalibration += dt
        if self._since_recalibration >= self._recalibration_interval:
            self.apply_angle_offset(self._angle_offset)
            self._since_recalibration = 0.0

    def get_angle(self) -> Rotation2d:
        return Rotation2d(self._inputs.turn_position)

    def get_state(self) -> SwerveModuleState:
        return SwerveModuleState(self._inputs.drive_velocity, self.get_angle())

    def get_position(self) -> SwerveModulePosition:
        return SwerveModulePosition(self._inputs.drive_position, self.get_angle())

    def get_absolute_angle(self) -> Rotation2d:
        return Rotation2d(self._inputs.turn_absolute_position)

    def get_high_frequency_samples(self) -> List[HighFrequencySample]:
        """
        Samples buffered by the hardware since the previous loop, oldest first
        """
        inputs = self._inputs
        return [(timestamp, distance, Rotation2d(angle))
                for timestamp, distance, angle in zip(inputs.odometry_timestamps,
                                                      inputs.odometry_drive_positions,
                                                      inputs.odometry_turn_positions)]

    def set_command(self, desired: SwerveModuleState) -> SwerveModuleState:
        """
        Optimize and send a desired state to the hardware. Returns what was actually sent.
        """
        state = optimize_command(desired, self.get_angle(), MIN_SPEED, ANGLE_DEADBAND)

        self._io.setCommand(state)
        self._last_command = state

        Logger.recordOutput(f"Drive/{self.name}/Command", state)
        return state

    @property
    def last_command(self) -> SwerveModuleState:
        return self._last_command

    def is_encoder_healthy(self) -> bool:
        return self._inputs.encoder_connected

    def apply_angle_offset(self, offset: Rotation2d) -> None:
        if not self._inputs.encoder_connected:
            logger.debug(f"Swerve module {self.name}: skipping offset update, encoder not connected")
            return

        self._io.applyAngleOffset(offset)

    def stop(self) -> None:
        self._io.stop()
        self._last_command = SwerveModuleState(0.0, self.get_angle())
