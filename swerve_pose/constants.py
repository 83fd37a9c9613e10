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
#
# Static configuration for the swerve odometry / pose fusion core. Loaded once.

import math
from dataclasses import dataclass

from wpimath.geometry import Translation2d
from wpimath.units import degreesToRadians, hertz, inchesToMeters, meters, meters_per_second, radians, \
    radians_per_second, rotationsToRadians, seconds


@dataclass(frozen=True)
class SwerveModuleConfig:
    """
    Fixed, per-module configuration. The order modules are listed in is the module
    index used everywhere (kinematics, sampler, estimator).
    """
    name: str
    location: Translation2d  # Offset from robot center, +X forward, +Y left
    angle_offset: float = 0.0  # Absolute encoder offset (rotations)


#################################################################
# Drive geometry
#
# Module locations are measured from the center of the robot to the center of
# the wheel contact patch.
TRACK_HALF_WIDTH: meters = inchesToMeters(11.375)
WHEEL_BASE_HALF_LENGTH: meters = inchesToMeters(11.375)

MODULE_CONFIGS = (
    SwerveModuleConfig("front-left", Translation2d(WHEEL_BASE_HALF_LENGTH, TRACK_HALF_WIDTH), -0.3281),
    SwerveModuleConfig("front-right", Translation2d(WHEEL_BASE_HALF_LENGTH, -TRACK_HALF_WIDTH), 0.1899),
    SwerveModuleConfig("back-left", Translation2d(-WHEEL_BASE_HALF_LENGTH, TRACK_HALF_WIDTH), 0.4387),
    SwerveModuleConfig("back-right", Translation2d(-WHEEL_BASE_HALF_LENGTH, -TRACK_HALF_WIDTH), -0.0662),
)

#################################################################
# Drive limits
#
# Maximum speed of the robot in meters per second. The minimum speed is used to keep
# the modules from steering for what would otherwise not move the robot

MAX_SPEED: meters_per_second = 4.5
MIN_SPEED: meters_per_second = 0.002
MAX_ANGULAR_SPEED: radians_per_second = rotationsToRadians(0.75)  # 3/4 of a rotation per second

MAX_WHEEL_LINEAR_VELOCITY: meters_per_second = MAX_SPEED

# Steering changes smaller than this are not sent to the steer motor
ANGLE_DEADBAND: radians = degreesToRadians(0.5)

#################################################################
# Odometry
#
# The module IO buffers drive/steer positions at this rate between control loop
# iterations. The control loop itself runs at DEFAULT_FREQUENCY.
DEFAULT_FREQUENCY: hertz = 50.0
ODOMETRY_FREQUENCY: hertz = 250.0

# Absolute encoder offsets are re-applied this often (best-effort)
OFFSET_RECALIBRATION_INTERVAL: seconds = 1.0

#################################################################
# Pose estimation
#
# Standard deviations are (x, y, heading) in meters, meters, radians. Increase a
# value to trust that source less.
ODOMETRY_STD_DEVS: tuple[float, float, float] = (0.1, 0.1, 0.1)
VISION_STD_DEVS: tuple[float, float, float] = (0.9, 0.9, 0.9)

# How far back odometry history is retained for latency compensation. Vision
# measurements captured before this window are dropped.
POSE_HISTORY_DURATION: seconds = 1.5

# Vision samples older than this (relative to the current time) are considered stale
MAX_VISION_LATENCY: seconds = POSE_HISTORY_DURATION

# Adjusted automatically based on distance and # of tags
LINEAR_STD_DEV_BASELINE: meters = 0.02
ANGULAR_STD_DEV_BASELINE: radians = 0.06

FULL_ROTATION: radians = 2 * math.pi
