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

from dataclasses import dataclass, field
from typing import List, Union

from pykit.autolog import autolog
from wpimath.geometry import Pose2d, Pose3d
from wpimath.units import meters, seconds


class PoseObservation:
    """
    Represents a robot pose sample used for pose estimation
    """

    def __init__(self, timestamp: seconds, pose: Union[Pose2d, Pose3d],
                 tag_count: int = 1, avg_tag_distance: meters = 0.0):
        self.timestamp: seconds = timestamp
        self.pose: Union[Pose2d, Pose3d] = pose
        self.tag_count: int = tag_count
        self.avg_tag_distance: meters = avg_tag_distance

    def __repr__(self) -> str:
        return f"PoseObservation(timestamp={self.timestamp}, pose={self.pose}, tags={self.tag_count})"


class VisionIO:
    @autolog
    @dataclass
    class VisionIOInputs:
        """
        Loggable inputs for a Vision sensor. Observations are in arrival order.
        """
        connected: bool = False
        pose_observations: List[PoseObservation] = field(default_factory=list)

    def updateInputs(self, inputs: VisionIOInputs) -> None:
        pass
