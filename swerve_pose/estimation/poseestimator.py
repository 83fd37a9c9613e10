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

import bisect
import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

from pykit.autolog import autolog_output, autologgable_output
from pykit.logger import Logger
from wpimath.geometry import Pose2d, Rotation2d, Transform2d, Translation2d, Twist2d
from wpimath.kinematics import SwerveModulePosition
from wpimath.units import seconds

from swerve_pose.constants import ODOMETRY_STD_DEVS, POSE_HISTORY_DURATION, VISION_STD_DEVS
from swerve_pose.subsystems.swervedrive.kinematics import SwerveKinematics
from swerve_pose.subsystems.swervedrive.modulestate import wrap_angle
from swerve_pose.subsystems.swervedrive.sampler import OdometrySample

logger = logging.getLogger(__name__)

StdDevs = Tuple[float, float, float]


def _valid_std_devs(std_devs: Sequence[float]) -> bool:
    return len(std_devs) == 3 and all(math.isfinite(value) and value > 0.0 for value in std_devs)


class PoseHistory:
    """
    Odometry-only poses over the last 'duration' seconds, keyed by timestamp. Used to
    find where odometry thought the robot was when a (late) vision frame was captured.
    """

    def __init__(self, duration: seconds):
        self._duration = duration
        self._timestamps: List[seconds] = []
        self._poses: List[Pose2d] = []

    def __len__(self) -> int:
        return len(self._timestamps)

    def clear(self) -> None:
        self._timestamps.clear()
        self._poses.clear()

    @property
    def oldest(self) -> Optional[seconds]:
        return self._timestamps[0] if self._timestamps else None

    @property
    def newest(self) -> Optional[seconds]:
        return self._timestamps[-1] if self._timestamps else None

    def add(self, timestamp: seconds, pose: Pose2d) -> None:
        self._timestamps.append(timestamp)
        self._poses.append(pose)

        cutoff = timestamp - self._duration
        while self._timestamps[0] < cutoff:
            self._timestamps.pop(0)
            self._poses.pop(0)

    def sample(self, timestamp: seconds) -> Optional[Pose2d]:
        """
        Pose at 'timestamp', linearly interpolated between the surrounding entries.
        Clamped to the first / last entry outside the retained window.
        """
        if not self._timestamps:
            return None

        if timestamp <= self._timestamps[0]:
            return self._poses[0]

        if timestamp >= self._timestamps[-1]:
            return self._poses[-1]

        upper = bisect.bisect_right(self._timestamps, timestamp)
        t0, t1 = self._timestamps[upper - 1], self._timestamps[upper]
        start, end = self._poses[upper - 1], self._poses[upper]

        if t1 == t0:
            return end

        fraction = (timestamp - t0) / (t1 - t0)
        heading = start.rotation().radians()
        turn = wrap_angle(end.rotation().radians() - heading)

        return Pose2d(start.x + (end.x - start.x) * fraction,
                      start.y + (end.y - start.y) * fraction,
                      Rotation2d(wrap_angle(heading + turn * fraction)))


@autologgable_output
class PoseEstimator:
    """
    Fuses swerve odometry with latency-compensated vision measurements.

    Two trajectories are integrated from the same odometry deltas:

      o the odometry-only pose, which never sees vision and is recorded in a short
        history so a vision frame can be compared against what odometry believed at
        the frame's capture time, and
      o the fused (estimated) pose, which is what everyone else reads.

    A vision measurement corrects the fused pose at its capture time with a per-axis
    gain derived from the odometry and vision standard deviations, then the odometry
    motion since the capture is re-applied on top of the correction.
    """

    def __init__(self, kinematics: SwerveKinematics,
                 initial_pose: Pose2d,
                 module_positions: Sequence[SwerveModulePosition],
                 odometry_std_devs: StdDevs = ODOMETRY_STD_DEVS,
                 vision_std_devs: StdDevs = VISION_STD_DEVS,
                 history_duration: seconds = POSE_HISTORY_DURATION,
                 gyro_angle: Optional[Rotation2d] = None):
        """
        :param kinematics:        Kinematics for the drive, module order must match 'module_positions'
        :param initial_pose:      Starting field pose (and heading)
        :param module_positions:  Module positions at the starting pose
        :param odometry_std_devs: How much odometry is trusted (x, y, heading) in meters and radians
        :param vision_std_devs:   Default vision trust used when a measurement does not supply one
        :param history_duration:  Seconds of odometry history kept for latency compensation
        :param gyro_angle:        Gyro reading at the starting pose, if a gyro is used
        """
        if len(module_positions) != kinematics.module_count:
            raise ValueError(f"Expected {kinematics.module_count} module positions, got {len(module_positions)}")

        if not _valid_std_devs(odometry_std_devs):
            raise ValueError(f"Invalid odometry standard deviations: {odometry_std_devs}")

        if not _valid_std_devs(vision_std_devs):
            raise ValueError(f"Invalid vision standard deviations: {vision_std_devs}")

        self._kinematics = kinematics
        self._odometry_variance = tuple(value * value for value in odometry_std_devs)
        self._vision_std_devs: StdDevs = tuple(vision_std_devs)

        self._estimated_pose: Pose2d = initial_pose
        self._odometry_pose: Pose2d = initial_pose
        self._history = PoseHistory(history_duration)

        self._last_positions: Tuple[SwerveModulePosition, ...] = self._copy_positions(module_positions)
        self._last_gyro_angle: Optional[Rotation2d] = gyro_angle

    @staticmethod
    def _copy_positions(positions: Iterable[SwerveModulePosition]) -> Tuple[SwerveModulePosition, ...]:
        return tuple(SwerveModulePosition(position.distance, position.angle) for position in positions)

    @property
    def history(self) -> PoseHistory:
        return self._history

    def set_vision_measurement_std_devs(self, std_devs: StdDevs) -> None:
        """
        Default standard deviations for vision measurements that do not carry their own
        """
        if not _valid_std_devs(std_devs):
            raise ValueError(f"Invalid vision standard deviations: {std_devs}")

        self._vision_std_devs = tuple(std_devs)

    def gains(self, std_devs: StdDevs) -> Tuple[float, float, float]:
        """
        Per-axis share [0..1] of the vision error that is applied. A vision standard
        deviation equal to the odometry one gives 0.5; the more confident vision is
        relative to odometry, the closer to 1.
        """
        gains = []
        for q, std_dev in zip(self._odometry_variance, std_devs):
            r = std_dev * std_dev
            gain = q / (q + math.sqrt(q * r))
            gains.append(min(1.0, max(0.0, gain)))

        return gains[0], gains[1], gains[2]

    def update(self, timestamp: seconds, module_positions: Sequence[SwerveModulePosition],
               gyro_angle: Optional[Rotation2d] = None) -> Pose2d:
        return self.update_odometry(OdometrySample(timestamp, tuple(module_positions), gyro_angle))

    def update_odometry(self, sample: OdometrySample) -> Pose2d:
        """
        Integrate one odometry sample. Samples must arrive in capture order.

        :returns: The fused pose after the update
        """
        deltas = [SwerveModulePosition(current.distance - previous.distance, current.angle)
                  for current, previous in zip(sample.positions, self._last_positions)]

        twist: Twist2d = self._kinematics.to_chassis_delta(deltas)

        # Gyro heading beats wheel-derived rotation when we have two readings to compare
        dtheta = twist.dtheta
        if sample.gyro_angle is not None and self._last_gyro_angle is not None:
            dtheta = (sample.gyro_angle - self._last_gyro_angle).radians()

        step = Transform2d(Translation2d(twist.dx, twist.dy), Rotation2d(dtheta))

        self._odometry_pose = self._odometry_pose + step
        self._estimated_pose = self._estimated_pose + step

        self._last_positions = self._copy_positions(sample.positions)
        self._last_gyro_angle = sample.gyro_angle
        self._history.add(sample.timestamp, self._odometry_pose)

        return self._estimated_pose

    def update_odometry_samples(self, samples: Iterable[OdometrySample]) -> Pose2d:
        for sample in samples:
            self.update_odometry(sample)

        return self._estimated_pose

    def add_vision_measurement(self, vision_pose: Pose2d, timestamp: seconds,
                               std_devs: Optional[StdDevs] = None) -> bool:
        """
        Correct the fused pose with a vision measurement.

        :param vision_pose: Robot pose as measured by vision
        :param timestamp:   Capture time of the frame (same time base as odometry)
        :param std_devs:    Vision standard deviations (x, y, heading), the current default if None
        :returns:           True if the measurement was applied, False if it was dropped
        """
        std_devs = self._vision_std_devs if std_devs is None else tuple(std_devs)

        if not _valid_std_devs(std_devs):
            logger.debug(f"Vision measurement dropped, invalid standard deviations {std_devs}")
            return False

        heading = vision_pose.rotation().radians()
        if not all(math.isfinite(value) for value in (vision_pose.x, vision_pose.y, heading, timestamp)):
            logger.debug(f"Vision measurement dropped, non-finite pose {vision_pose} @ {timestamp}")
            return False

        oldest = self._history.oldest
        if oldest is None or timestamp < oldest:
            logger.debug(f"Vision measurement dropped, timestamp {timestamp} older than history ({oldest})")
            return False

        # Odometry motion between the capture and now
        odometry_then = self._history.sample(timestamp)
        since_capture: Transform2d = self._odometry_pose - odometry_then

        estimate_then = self._estimated_pose + since_capture.inverse()
        estimate_heading = estimate_then.rotation().radians()

        kx, ky, ktheta = self.gains(std_devs)

        corrected = Pose2d(estimate_then.x + kx * (vision_pose.x - estimate_then.x),
                           estimate_then.y + ky * (vision_pose.y - estimate_then.y),
                           Rotation2d(wrap_angle(estimate_heading +
                                                 ktheta * wrap_angle(heading - estimate_heading))))

        self._estimated_pose = corrected + since_capture

        Logger.recordOutput("PoseEstimator/VisionPose", vision_pose)
        Logger.recordOutput("PoseEstimator/VisionGains", [kx, ky, ktheta])
        return True

    def reset_pose(self, pose: Pose2d,
                   module_positions: Optional[Sequence[SwerveModulePosition]] = None,
                   gyro_angle: Optional[Rotation2d] = None) -> None:
        """
        Hard reset of both trajectories. The history is cleared, so vision measurements
        are ignored until odometry has been updated again.

        :param pose:             New pose
        :param module_positions: New delta reference, the most recent known positions if None
        :param gyro_angle:       New gyro reference, the most recent reading if None
        """
        self._estimated_pose = pose
        self._odometry_pose = pose
        self._history.clear()

        if module_positions is not None:
            if len(module_positions) != self._kinematics.module_count:
                raise ValueError(f"Expected {self._kinematics.module_count} module positions, "
                                 f"got {len(module_positions)}")
            self._last_positions = self._copy_positions(module_positions)

        if gyro_angle is not None:
            self._last_gyro_angle = gyro_angle

        logger.info(f"Pose reset to {pose}")

    @autolog_output(key="Robot/EstimatedPose")
    def get_estimated_pose(self) -> Pose2d:
        return self._estimated_pose

    @autolog_output(key="Robot/OdometryPose")
    def get_odometry_pose(self) -> Pose2d:
        return self._odometry_pose

    def sample_pose_at(self, timestamp: seconds) -> Optional[Pose2d]:
        """
        Fused pose at a past timestamp, or None if it is outside the retained history
        """
        oldest = self._history.oldest
        if oldest is None or timestamp < oldest:
            return None

        since_then = self._odometry_pose - self._history.sample(timestamp)
        return self._estimated_pose + since_then.inverse()
