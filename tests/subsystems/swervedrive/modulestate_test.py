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

import pytest
from wpimath.geometry import Rotation2d
from wpimath.kinematics import SwerveModuleState

from swerve_pose.subsystems.swervedrive.modulestate import angle_error, cosine_scale, optimize, \
    optimize_command, wrap_angle


def test_wrap_angle():
    assert wrap_angle(0.0) == pytest.approx(0.0)
    assert wrap_angle(3 * math.pi) == pytest.approx(math.pi)
    assert wrap_angle(-1.5 * math.pi) == pytest.approx(0.5 * math.pi)
    assert wrap_angle(2 * math.pi + 0.25) == pytest.approx(0.25)


def test_angle_error_takes_short_way_around():
    error = angle_error(Rotation2d.fromDegrees(170), Rotation2d.fromDegrees(-170))
    assert math.degrees(error) == pytest.approx(-20.0)


def test_optimize_flips_past_90_degrees():
    """
    Asking for 180 degrees while pointed at 0 is the same as driving backwards at 0
    """
    desired = SwerveModuleState(1.0, Rotation2d.fromDegrees(180))
    state = optimize(desired, Rotation2d())

    assert state.speed == pytest.approx(-1.0)
    assert math.cos(state.angle.radians()) == pytest.approx(1.0)

    # Input left alone
    assert desired.speed == 1.0
    assert desired.angle.degrees() == pytest.approx(180.0)


def test_optimize_keeps_small_turns():
    state = optimize(SwerveModuleState(2.0, Rotation2d.fromDegrees(80)), Rotation2d())

    assert state.speed == pytest.approx(2.0)
    assert state.angle.degrees() == pytest.approx(80.0)


def test_optimized_angle_within_90_degrees():
    current = Rotation2d.fromDegrees(30)

    for degrees in range(-360, 361, 15):
        state = optimize(SwerveModuleState(1.0, Rotation2d.fromDegrees(degrees)), current)
        assert abs(angle_error(state.angle, current)) <= math.pi / 2 + 1e-9, f"failed at {degrees}"


def test_cosine_scale():
    state = cosine_scale(SwerveModuleState(1.0, Rotation2d.fromDegrees(45)), Rotation2d())
    assert state.speed == pytest.approx(math.sqrt(2) / 2)
    assert state.angle.degrees() == pytest.approx(45.0)


def test_optimize_command_stopped_holds_angle():
    current = Rotation2d.fromDegrees(37)
    state = optimize_command(SwerveModuleState(0.0001, Rotation2d.fromDegrees(-120)), current)

    assert state.speed == 0.0
    assert state.angle.degrees() == pytest.approx(37.0)


def test_optimize_command_ignores_tiny_angle_change():
    current = Rotation2d.fromDegrees(10)
    state = optimize_command(SwerveModuleState(1.5, Rotation2d.fromDegrees(10.2)), current,
                             angle_deadband=math.radians(0.5))

    assert state.angle.degrees() == pytest.approx(10.0)
    assert state.speed == pytest.approx(1.5)


def test_optimize_command_reverse_and_scale():
    """
    Flip first, then scale by the error that is left over
    """
    current = Rotation2d()
    state = optimize_command(SwerveModuleState(1.0, Rotation2d.fromDegrees(150)), current)

    assert state.angle.degrees() == pytest.approx(-30.0)
    assert state.speed == pytest.approx(-math.cos(math.radians(30)))
