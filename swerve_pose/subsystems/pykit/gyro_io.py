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
from typing import List

from pykit.autolog import autolog
from wpimath.units import radians, radians_per_second


class GyroIO:
    @autolog
    @dataclass
    class GyroIOInputs:
        """
        Loggable inputs for a gyro sensor.

        When connected, the odometry yaw samples line up one-to-one with the swerve
        module odometry samples of the same control loop iteration.
        """
        connected: bool = False
        yaw: radians = 0.0
        yaw_rate: radians_per_second = 0.0

        odometry_yaw_positions: List[float] = field(default_factory=list)

    def updateInputs(self, inputs: GyroIOInputs) -> None:
        pass
