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

from wpimath import angleModulus
from wpimath.geometry import Rotation2d
from wpimath.kinematics import SwerveModuleState
from wpimath.units import meters_per_second, radians

from swerve_pose.constants import ANGLE_DEADBAND, MIN_SPEED

"""
Module command optimization.

A swerve wheel can spin in either direction, so any requested (speed, angle) has an
equivalent (-speed, angle + 180°) command. We always pick the one that needs the
least steering.
"""


def wrap_angle(angle: radians) -> radians:
    """
    Wrap an angle into (-pi, pi]
    """
    return math.atan2(math.sin(angle), math.cos(angle))


def angle_error(target: Rotation2d, current: Rotation2d) -> radians:
    """
    Signed steering error (target - current) in [-pi, pi]
    """
    return angleModulus(target.radians() - current.radians())


def optimize(desired: SwerveModuleState, current_angle: Rotation2d) -> SwerveModuleState:
    """
    Return a command equivalent to 'desired' that never requires turning the module
    more than 90 degrees from its current angle. The input state is not modified.

    :param desired:       Requested module state
    :param current_angle: Angle the module is currently pointed at
    """
    error = angle_error(desired.angle, current_angle)

    if abs(error) > math.pi / 2:
        flipped = wrap_angle(desired.angle.radians() + math.pi)
        return SwerveModuleState(-desired.speed, Rotation2d(flipped))

    return SwerveModuleState(desired.speed, Rotation2d(wrap_angle(desired.angle.radians())))


def cosine_scale(state: SwerveModuleState, current_angle: Rotation2d) -> SwerveModuleState:
    """
    Scale the speed by the cosine of the remaining steering error. While the module is
    still rotating into position only that share of the drive effort is useful.

    Must be called on an already optimized state, the error is then never more than
    90 degrees and the speed sign is preserved.
    """
    error = angle_error(state.angle, current_angle)
    return SwerveModuleState(state.speed * math.cos(error), state.angle)


def optimize_command(desired: SwerveModuleState, current_angle: Rotation2d,
                     speed_deadband: meters_per_second = MIN_SPEED,
                     angle_deadband: radians = ANGLE_DEADBAND) -> SwerveModuleState:
    """
    Full command pipeline for one module: shortest rotation, hold the current angle
    when stopped or when the change is negligible, then cosine scale the speed.

    :param desired:        Requested module state
    :param current_angle:  Angle the module is currently pointed at
    :param speed_deadband: Speeds below this (absolute) are treated as stopped
    :param angle_deadband: Steering changes below this are ignored
    """
    # A stopped wheel can point anywhere, do not chase floating point noise
    if abs(desired.speed) < speed_deadband:
        return SwerveModuleState(0.0, current_angle)

    state = optimize(desired, current_angle)

    if abs(angle_error(state.angle, current_angle)) < angle_deadband:
        state = SwerveModuleState(state.speed, current_angle)

    return cosine_scale(state, current_angle)
