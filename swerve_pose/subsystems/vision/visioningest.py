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
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple, Union

from pykit.logger import Logger
from wpimath.geometry import Pose2d
from wpimath.units import seconds

from swerve_pose.constants import ANGULAR_STD_DEV_BASELINE, LINEAR_STD_DEV_BASELINE, MAX_VISION_LATENCY
from swerve_pose.estimation.poseestimator import PoseEstimator, StdDevs
from swerve_pose.subsystems.pykit.vision_io import PoseObservation
from swerve_pose.util.statistics import MaxMinCounter

logger = logging.getLogger(__name__)

RawObservation = Union[PoseObservation, Tuple[Pose2d, seconds]]
StdDevSource = Union[StdDevs, Callable[[PoseObservation], StdDevs]]

# Observations from the future (relative to 'now') beyond this are clock errors
_FUTURE_TOLERANCE: seconds = 0.005


@dataclass(frozen=True)
class VisionMeasurement:
    pose: Pose2d
    timestamp: seconds
    std_devs: StdDevs


def distance_scaled_std_devs(observation: PoseObservation) -> StdDevs:
    """
    Trust vision less the further away the tags are, and more with each extra tag seen
    """
    factor = math.pow(observation.avg_tag_distance, 2.0) / max(observation.tag_count, 1)
    linear = max(LINEAR_STD_DEV_BASELINE * factor, LINEAR_STD_DEV_BASELINE)
    angular = max(ANGULAR_STD_DEV_BASELINE * factor, ANGULAR_STD_DEV_BASELINE)
    return linear, linear, angular


class VisionIngest:
    """
    Boundary between the vision collaborator and the pose estimator. Discards samples
    that can never be valid, attaches standard deviations, and feeds the estimator in
    capture order.
    """

    def __init__(self, estimator: PoseEstimator, max_latency: seconds = MAX_VISION_LATENCY,
                 name: str = "Vision"):
        self._estimator = estimator
        self._max_latency = max_latency
        self._name = name

        self.accepted: int = 0
        self.rejected: int = 0
        self.latency = MaxMinCounter(f"{name} latency", "mS", 1000, 3)

    @staticmethod
    def _normalize(raw: RawObservation) -> PoseObservation:
        if isinstance(raw, PoseObservation):
            observation = raw
        else:
            pose, timestamp = raw
            observation = PoseObservation(timestamp, pose)

        # Cameras usually solve in 3D, we only track the floor plane
        if hasattr(observation.pose, "toPose2d"):
            observation = PoseObservation(observation.timestamp, observation.pose.toPose2d(),
                                          observation.tag_count, observation.avg_tag_distance)
        return observation

    def _usable(self, observation: PoseObservation, now: Optional[seconds]) -> bool:
        pose, timestamp = observation.pose, observation.timestamp

        if not all(math.isfinite(value) for value in (pose.x, pose.y, pose.rotation().radians(), timestamp)):
            return False

        if timestamp <= 0.0:
            return False

        if now is not None:
            if timestamp > now + _FUTURE_TOLERANCE or now - timestamp > self._max_latency:
                return False

        return True

    def ingest(self, observations: Iterable[RawObservation], std_devs: StdDevSource,
               now: Optional[seconds] = None) -> int:
        """
        Forward one polling call's worth of vision output to the estimator.

        :param observations: Vision output, in arrival order
        :param std_devs:     Fixed (x, y, heading) standard deviations, or a callable
                             returning them for an observation
        :param now:          Current time, enables the staleness check if given
        :returns:            Number of measurements the estimator applied
        """
        measurements: List[VisionMeasurement] = []

        for raw in observations:
            observation = self._normalize(raw)

            if not self._usable(observation, now):
                logger.debug(f"{self._name}: discarding {observation}")
                self.rejected += 1
                continue

            deviations = std_devs(observation) if callable(std_devs) else std_devs
            measurements.append(VisionMeasurement(observation.pose, observation.timestamp, tuple(deviations)))

        measurements.sort(key=lambda measurement: measurement.timestamp)

        applied = 0
        for measurement in measurements:
            if self._estimator.add_vision_measurement(measurement.pose, measurement.timestamp,
                                                      measurement.std_devs):
                applied += 1
                if now is not None:
                    self.latency.add(now - measurement.timestamp)
            else:
                self.rejected += 1

        self.accepted += applied

        Logger.recordOutput(f"{self._name}/Accepted", self.accepted)
        Logger.recordOutput(f"{self._name}/Rejected", self.rejected)
        return applied
