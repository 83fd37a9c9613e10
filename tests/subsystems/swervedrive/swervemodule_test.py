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

import pytest
from wpimath.geometry import Rotation2d
from wpimath.kinematics import SwerveModuleState

from swerve_pose.constants import MODULE_CONFIGS
from swerve_pose.subsystems.pykit.swervedrive_io import SwerveModuleIOSim
from swerve_pose.subsystems.swervedrive.swervemodule import SwerveModule


def make_module(recalibration_interval: float = 1.0):
    io = SwerveModuleIOSim(MODULE_CONFIGS[0].name)
    module = SwerveModule(io, MODULE_CONFIGS[0], recalibration_interval)
    module.update_inputs()
    return io, module


def test_set_command_reverses_instead_of_turning():
    io, module = make_module()

    sent = module.set_command(SwerveModuleState(1.0, Rotation2d.fromDegrees(180)))
    assert sent.speed == pytest.approx(-1.0)
    assert module.last_command.speed == pytest.approx(-1.0)

    module.update_inputs()
    assert module.get_state().speed == pytest.approx(-1.0)
    assert abs(module.get_angle().degrees()) == pytest.approx(0.0, abs=1e-9)


def test_stopped_command_holds_angle():
    io, module = make_module()

    module.set_command(SwerveModuleState(1.0, Rotation2d.fromDegrees(45)))
    module.update_inputs()

    sent = module.set_command(SwerveModuleState(0.0, Rotation2d()))
    assert sent.speed == 0.0
    assert sent.angle.degrees() == pytest.approx(45.0)


def test_position_tracks_distance():
    io, module = make_module()

    module.set_command(SwerveModuleState(2.0, Rotation2d()))
    io.advance(0.5)
    module.update_inputs()

    assert module.get_position().distance == pytest.approx(1.0)

    samples = module.get_high_frequency_samples()
    assert len(samples) == 125
    assert samples[-1][0] == pytest.approx(0.5)
    assert samples[-1][1] == pytest.approx(1.0)

    # Consumed by the update
    module.update_inputs()
    assert module.get_high_frequency_samples() == []


def test_offset_recalibration_interval():
    io, module = make_module(recalibration_interval=1.0)

    module.periodic(0.5)
    assert io.offsets_applied == 0

    module.periodic(0.5)
    assert io.offsets_applied == 1

    for _ in range(4):
        module.periodic(0.5)
    assert io.offsets_applied == 3


def test_encoder_disconnect(caplog):
    io, module = make_module(recalibration_interval=0.5)
    module.periodic(0.1)
    assert module.is_encoder_healthy()

    io.encoder_connected = False
    module.update_inputs()

    with caplog.at_level(logging.WARNING):
        module.periodic(0.5)

    assert not module.is_encoder_healthy()
    assert "disconnected" in caplog.text

    # No offset update while the encoder is not reporting
    assert io.offsets_applied == 0

    io.encoder_connected = True
    module.update_inputs()
    module.periodic(0.5)

    assert module.is_encoder_healthy()
    assert io.offsets_applied == 1


def test_stop():
    io, module = make_module()

    module.set_command(SwerveModuleState(3.0, Rotation2d()))
    module.stop()
    module.update_inputs()

    assert module.get_state().speed == 0.0
    assert module.last_command.speed == 0.0
