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
from typing import Iterable, List, Optional, Sequence, Tuple

from pykit.logger import Logger
from wpimath.geometry import Pose2d, Rotation2d
from wpimath.kinematics import ChassisSpeeds, SwerveModulePosition, SwerveModuleState
from wpimath.units import meters_per_second, radians_per_second, seconds

from swerve_pose.constants import MAX_WHEEL_LINEAR_VELOCITY, MODULE_CONFIGS, SwerveModuleConfig
from swerve_pose.estimation.poseestimator import PoseEstimator, StdDevs
from swerve_pose.subsystems.pykit.gyro_io import GyroIO
from swerve_pose.subsystems.pykit.swervedrive_io import SwerveModuleIO
from swerve_pose.subsystems.pykit.vision_io import VisionIO
from swerve_pose.subsystems.swervedrive.kinematics import SwerveKinematics
from swerve_pose.subsystems.swervedrive.sampler import HighFrequencySampler
from swerve_pose.subsystems.swervedrive.swervemodule import SwerveModule
from swerve_pose.subsystems.vision.visioningest import RawObservation, StdDevSource, VisionIngest, \
    distance_scaled_std_devs
from swerve_pose.util.logtracer import LogTracer

logger = logging.getLogger(__name__)


class SwerveDrive:
    """
    Owns the swerve modules and the pose estimation pipeline. Nothing here registers
    itself anywhere: the robot program constructs it and calls 'tick' once per control
    loop iteration.

    Order inside a tick is fixed: hardware inputs, module housekeeping, odometry
    samples (all of them, in capture order), then vision.
    """

    def __init__(self, module_ios: Sequence[SwerveModuleIO],
                 configs: Sequence[SwerveModuleConfig] = MODULE_CONFIGS,
                 initial_pose: Pose2d = Pose2d(),
                 gyro_io: Optional[GyroIO] = None,
                 vision_io: Optional[VisionIO] = None,
                 vision_std_devs: StdDevSource = distance_scaled_std_devs,
                 max_wheel_speed: meters_per_second = MAX_WHEEL_LINEAR_VELOCITY):

        if len(module_ios) != len(configs):
            raise ValueError(f"{len(module_ios)} module IOs for {len(configs)} module configurations")

        self._modules: Tuple[SwerveModule, ...] = tuple(SwerveModule(io, config)
                                                        for io, config in zip(module_ios, configs))
        self._kinematics = SwerveKinematics(*[config.location for config in configs])
        self._sampler = HighFrequencySampler(len(self._modules))

        self._gyro_io = gyro_io
        self._gyro_inputs = GyroIO.GyroIOInputs()

        self._vision_io = vision_io
        self._vision_inputs = VisionIO.VisionIOInputs()
        self._vision_std_devs = vision_std_devs

        self._max_wheel_speed = max_wheel_speed
        self._commanded_speeds = ChassisSpeeds()

        # Pick up the initial positions so the first odometry delta is relative to them
        for module in self._modules:
            module.update_inputs()

        self._estimator = PoseEstimator(self._kinematics, initial_pose, self.get_module_positions(),
                                        gyro_angle=self._read_gyro())
        self._vision = VisionIngest(self._estimator)

        logger.info(f"SwerveDrive: {len(self._modules)} modules, gyro: {gyro_io is not None}, "
                    f"vision: {vision_io is not None}, initial pose: {initial_pose}")

    @property
    def modules(self) -> Tuple[SwerveModule, ...]:
        return self._modules

    @property
    def kinematics(self) -> SwerveKinematics:
        return self._kinematics

    @property
    def sampler(self) -> HighFrequencySampler:
        return self._sampler

    @property
    def estimator(self) -> PoseEstimator:
        return self._estimator

    @property
    def vision(self) -> VisionIngest:
        return self._vision

    def _read_gyro(self) -> Optional[Rotation2d]:
        if self._gyro_io is None:
            return None

        self._gyro_io.updateInputs(self._gyro_inputs)
        Logger.processInputs("Drive/Gyro", self._gyro_inputs)

        return Rotation2d(self._gyro_inputs.yaw) if self._gyro_inputs.connected else None

    def tick(self, dt: seconds, now: Optional[seconds] = None,
             vision_observations: Optional[Iterable[RawObservation]] = None,
             vision_std_devs: Optional[StdDevSource] = None) -> Pose2d:
        """
        Run one control loop iteration of the odometry / pose estimation pipeline.

        :param dt:                  Time since the previous tick
        :param now:                 Current time (same base as the odometry timestamps), enables
                                    vision staleness checks
        :param vision_observations: Vision output for this tick. Polled from the vision IO if None
        :param vision_std_devs:     Standard deviation policy for this tick's vision output
        :returns:                   The fused pose after this tick
        """
        LogTracer.begin("SwerveDrive")

        for module in self._modules:
            module.update_inputs()

        gyro_angle = self._read_gyro()
        LogTracer.mark("UpdateInputs")

        for module in self._modules:
            module.periodic(dt)

        gyro_yaws = self._gyro_inputs.odometry_yaw_positions if gyro_angle is not None else None
        samples = self._sampler.sample(self._modules, gyro_yaws)
        self._estimator.update_odometry_samples(samples)
        LogTracer.mark("Odometry")

        if vision_observations is None and self._vision_io is not None:
            self._vision_io.updateInputs(self._vision_inputs)
            vision_observations = self._vision_inputs.pose_observations if self._vision_inputs.connected else ()

        if vision_observations is not None:
            self._vision.ingest(vision_observations, vision_std_devs or self._vision_std_devs, now)
        LogTracer.mark("Vision")

        pose = self._estimator.get_estimated_pose()

        Logger.recordOutput("Robot/Pose", pose)
        Logger.recordOutput("Drive/OdometrySamples", len(samples))
        Logger.recordOutput("Drive/UnhealthyModules", self.unhealthy_modules())
        LogTracer.finish()

        return pose

    def drive(self, x_speed: meters_per_second, y_speed: meters_per_second,
              rotation: radians_per_second, field_relative: bool = False) -> List[SwerveModuleState]:
        """
        Drive the robot.

        :param x_speed:        Speed of the robot in the x direction (forward).
        :param y_speed:        Speed of the robot in the y direction (sideways).
        :param rotation:       Angular rate of the robot.
        :param field_relative: Whether the provided x and y speeds are relative to the field.
        :returns:              The states actually sent to the modules
        """
        if field_relative:
            speeds = ChassisSpeeds.fromFieldRelativeSpeeds(x_speed, y_speed, rotation, self.heading)
        else:
            speeds = ChassisSpeeds(x_speed, y_speed, rotation)

        self._commanded_speeds = speeds
        Logger.recordOutput("Drive/CommandedSpeeds", speeds)

        return self.apply_states(self._kinematics.to_module_commands(speeds))

    def apply_states(self, module_states: Sequence[SwerveModuleState]) -> List[SwerveModuleState]:
        states = SwerveKinematics.desaturate_wheel_speeds(module_states, self._max_wheel_speed)
        Logger.recordOutput("Drive/ExpectedStates", list(states))

        return [module.set_command(state) for module, state in zip(self._modules, states)]

    def stop(self) -> None:
        for module in self._modules:
            module.stop()

        self._commanded_speeds = ChassisSpeeds()

    def unhealthy_modules(self) -> List[int]:
        """
        Indices of modules whose absolute encoder is not reporting. A supervisor may
        choose to exclude them or trigger recalibration.
        """
        return [index for index, module in enumerate(self._modules) if not module.is_encoder_healthy()]

    def get_module_positions(self) -> Tuple[SwerveModulePosition, ...]:
        return tuple(module.get_position() for module in self._modules)

    def get_module_states(self) -> Tuple[SwerveModuleState, ...]:
        return tuple(module.get_state() for module in self._modules)

    def chassis_speeds(self) -> ChassisSpeeds:
        """
        Measured robot-relative chassis speed
        """
        return self._kinematics.to_chassis_speeds(self.get_module_states())

    @property
    def commanded_speeds(self) -> ChassisSpeeds:
        return self._commanded_speeds

    @property
    def heading(self) -> Rotation2d:
        return self.pose.rotation()

    @property
    def pose(self) -> Pose2d:
        """
        Returns the currently-estimated pose of the robot.
        """
        return self._estimator.get_estimated_pose()

    @pose.setter
    def pose(self, pose: Pose2d) -> None:
        self.reset_pose(pose)

    def reset_pose(self, pose: Pose2d) -> None:
        self._estimator.reset_pose(pose, self.get_module_positions(), self._read_gyro())
        self._sampler.reset()

    def add_vision_measurement(self, vision_robot_pose: Pose2d, timestamp: seconds,
                               vision_measurement_std_devs: StdDevs | None = None) -> bool:
        """
        Adds a single vision measurement, bypassing the vision IO.

        :param vision_robot_pose:           The pose of the robot as measured by the vision camera.
        :param timestamp:                   The capture time of the measurement in seconds.
        :param vision_measurement_std_devs: Standard deviations [x, y, theta] in meters and radians,
                                            the estimator default if None
        """
        return self._estimator.add_vision_measurement(vision_robot_pose, timestamp, vision_measurement_std_devs)
