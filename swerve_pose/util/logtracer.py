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

from pykit.logger import Logger
from wpilib import RobotController


class LogTracer:
    """
    Times the stages of one pass through the control loop and publishes them to pykit.

    Call 'begin' with a prefix at the top of the block, 'mark' after each stage
    (stage time since the previous mark), and 'finish' at the end (total time for
    the block). All values are in milliseconds.
    """
    _stage_start: int = 0
    _block_start: int = 0

    _prefix: str = ""

    @classmethod
    def begin(cls, prefix: str) -> None:
        cls._block_start = cls._stage_start = RobotController.getFPGATime()
        cls._prefix = prefix

    @classmethod
    def mark(cls, stage: str) -> None:
        now = RobotController.getFPGATime()
        Logger.recordOutput(f"LogTracer/{cls._prefix}/{stage}MS", (now - cls._stage_start) / 1000.0)
        cls._stage_start = now

    @classmethod
    def finish(cls) -> None:
        now = RobotController.getFPGATime()
        Logger.recordOutput(f"LogTracer/{cls._prefix}/TotalMS", (now - cls._block_start) / 1000.0)
