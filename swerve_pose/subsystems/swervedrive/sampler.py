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
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from wpimath.geometry import Rotation2d
from wpimath.kinematics import SwerveModulePosition
from wpimath.units import meters, radians, seconds

from swerve_pose.subsystems.swervedrive.swervemodule import SwerveModule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OdometrySample:
    """
    Module positions captured at one instant, in module index order. 'gyro_angle' is
    only present when a connected gyro sampled at the same time.
    """
    timestamp: seconds
    positions: Tuple[SwerveModulePosition, ...]
    gyro_angle: Optional[Rotation2d] = None


class HighFrequencySampler:
    """
    Turns the per-module sample buffers collected by the hardware between control loop
    iterations into an ordered list of OdometrySamples.

    Every sample has to be handed to the estimator, not only the latest one, otherwise
    the motion between samples (especially while rotating) is lost. Samples are used in
    the order the hardware captured them and are never re-sorted.
    """

    def __init__(self, module_count: int):
        self._module_count = module_count
        self._last_distance: List[Optional[meters]] = [None] * module_count
        self._deltas: List[List[meters]] = [[] for _ in range(module_count)]

    def reset(self) -> None:
        """
        Forget the previous distances. The next sample of every module has a zero delta.
        """
        self._last_distance = [None] * self._module_count
        self._deltas = [[] for _ in range(self._module_count)]

    def sample(self, modules: Sequence[SwerveModule],
               gyro_yaws: Optional[Sequence[radians]] = None) -> List[OdometrySample]:
        """
        Collect this loop's odometry samples.

        :param modules:   Swerve modules in module index order (inputs already updated)
        :param gyro_yaws: Optional gyro yaw samples captured alongside the module samples
        """
        if len(modules) != self._module_count:
            raise ValueError(f"Expected {self._module_count} modules, got {len(modules)}")

        module_samples = [module.get_high_frequency_samples() for module in modules]
        count = min(len(samples) for samples in module_samples)

        if any(len(samples) != count for samples in module_samples):
            logger.debug(f"Odometry sample count mismatch {[len(s) for s in module_samples]}, using {count}")

        use_gyro = gyro_yaws is not None and len(gyro_yaws) >= count

        self._deltas = [[] for _ in range(self._module_count)]
        results: List[OdometrySample] = []

        for sample_index in range(count):
            positions = []
            for module_index, samples in enumerate(module_samples):
                _timestamp, distance, angle = samples[sample_index]

                last = self._last_distance[module_index]
                self._deltas[module_index].append(0.0 if last is None else distance - last)
                self._last_distance[module_index] = distance

                positions.append(SwerveModulePosition(distance, angle))

            timestamp = module_samples[0][sample_index][0]
            gyro_angle = Rotation2d(gyro_yaws[sample_index]) if use_gyro else None

            results.append(OdometrySample(timestamp, tuple(positions), gyro_angle))

        return results

    def distance_deltas(self, index: int) -> List[meters]:
        """
        Drive distance change for every sample of the latest batch, for one module
        """
        return list(self._deltas[index])

    def all_distance_deltas(self) -> List[List[meters]]:
        return [list(deltas) for deltas in self._deltas]
