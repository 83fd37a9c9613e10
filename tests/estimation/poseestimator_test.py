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
from wpimath.geometry import Pose2d, Rotation2d, Translation2d
from wpimath.kinematics import SwerveModulePosition

from swerve_pose.estimation.poseestimator import PoseEstimator, PoseHistory
from swerve_pose.subsystems.swervedrive.kinematics import SwerveKinematics
from swerve_pose.subsystems.swervedrive.sampler import OdometrySample

ODOMETRY = (0.1, 0.1, 0.1)


def positions(distance: float, degrees: float = 0.0):
    return [SwerveModulePosition(distance, Rotation2d.fromDegrees(degrees)) for _ in range(4)]


def make_estimator(initial_pose: Pose2d = Pose2d(), **kwargs) -> PoseEstimator:
    kinematics = SwerveKinematics(Translation2d(0.5, 0.5), Translation2d(0.5, -0.5),
                                  Translation2d(-0.5, 0.5), Translation2d(-0.5, -0.5))
    kwargs.setdefault("odometry_std_devs", ODOMETRY)
    return PoseEstimator(kinematics, initial_pose, positions(0.0), **kwargs)


def drive_forward(estimator: PoseEstimator, count: int = 10, step: float = 0.1, period: float = 0.1):
    """
    'count' odometry samples, each 'step' meters forward and 'period' seconds apart
    """
    for index in range(1, count + 1):
        estimator.update(index * period, positions(index * step))


def assert_pose(pose: Pose2d, x: float, y: float, degrees: float, abs_tol: float = 1e-6):
    assert pose.x == pytest.approx(x, abs=abs_tol)
    assert pose.y == pytest.approx(y, abs=abs_tol)
    assert pose.rotation().degrees() == pytest.approx(degrees, abs=abs_tol)


def test_straight_line():
    estimator = make_estimator()
    drive_forward(estimator)

    assert_pose(estimator.get_estimated_pose(), 1.0, 0.0, 0.0)
    assert_pose(estimator.get_odometry_pose(), 1.0, 0.0, 0.0)
    assert len(estimator.history) == 10


def test_motion_is_robot_relative():
    estimator = make_estimator(Pose2d(2.0, 3.0, Rotation2d.fromDegrees(90)))
    drive_forward(estimator, count=5)

    assert_pose(estimator.get_estimated_pose(), 2.0, 3.5, 90.0)


def test_zero_motion():
    estimator = make_estimator(Pose2d(1.0, -1.0, Rotation2d(0.3)))

    for index in range(1, 20):
        estimator.update(index * 0.02, positions(0.0, degrees=index * 5))

    assert_pose(estimator.get_estimated_pose(), 1.0, -1.0, math.degrees(0.3))


def test_samples_in_batch():
    estimator = make_estimator()
    samples = [OdometrySample(index * 0.004, tuple(positions(index * 0.01))) for index in range(1, 6)]

    pose = estimator.update_odometry_samples(samples)
    assert_pose(pose, 0.05, 0.0, 0.0)


def test_gyro_heading():
    estimator = make_estimator(gyro_angle=Rotation2d(1.0))

    # Wheels say nothing happened, the gyro saw a quarter turn
    estimator.update(0.02, positions(0.0), Rotation2d(1.0 + math.pi / 4))
    assert_pose(estimator.get_estimated_pose(), 0.0, 0.0, 45.0)

    # Without a gyro reading the wheels are used
    estimator.update(0.04, positions(0.1))
    assert estimator.get_estimated_pose().rotation().degrees() == pytest.approx(45.0)


def test_gains():
    estimator = make_estimator()

    assert estimator.gains((0.1, 0.1, 0.1)) == pytest.approx((0.5, 0.5, 0.5))

    kx, ky, ktheta = estimator.gains((0.05, 0.1, 0.4))
    assert kx > 0.5
    assert ky == pytest.approx(0.5)
    assert ktheta < 0.5


def test_vision_moves_toward_measurement():
    estimator = make_estimator()
    drive_forward(estimator)

    vision = Pose2d(1.05, 0.02, Rotation2d.fromDegrees(1.0))
    assert estimator.add_vision_measurement(vision, 1.0, (0.1, 0.1, 0.1))

    assert_pose(estimator.get_estimated_pose(), 1.025, 0.01, 0.5)

    # Odometry itself never sees vision
    assert_pose(estimator.get_odometry_pose(), 1.0, 0.0, 0.0)


def test_confident_vision_wins():
    estimator = make_estimator()
    drive_forward(estimator)

    estimator.add_vision_measurement(Pose2d(1.5, -0.5, Rotation2d.fromDegrees(20)), 1.0, (1e-6, 1e-6, 1e-6))
    assert_pose(estimator.get_estimated_pose(), 1.5, -0.5, 20.0, abs_tol=1e-3)


def test_doubtful_vision_ignored():
    estimator = make_estimator()
    drive_forward(estimator)

    estimator.add_vision_measurement(Pose2d(1.5, -0.5, Rotation2d.fromDegrees(20)), 1.0, (1e6, 1e6, 1e6))
    assert_pose(estimator.get_estimated_pose(), 1.0, 0.0, 0.0, abs_tol=1e-4)


def test_latency_compensation():
    """
    A frame from half a second ago corrects the pose at that time, and the motion since
    then is replayed on top of the correction
    """
    estimator = make_estimator()
    drive_forward(estimator)

    assert estimator.add_vision_measurement(Pose2d(0.6, 0.0, Rotation2d()), 0.5, ODOMETRY)
    assert_pose(estimator.get_estimated_pose(), 1.05, 0.0, 0.0)


def test_latency_compensation_interpolates():
    estimator = make_estimator()
    drive_forward(estimator)

    assert estimator.add_vision_measurement(Pose2d(0.55, 0.0, Rotation2d()), 0.45, ODOMETRY)
    assert_pose(estimator.get_estimated_pose(), 1.05, 0.0, 0.0)


def test_default_vision_std_devs():
    estimator = make_estimator(vision_std_devs=(0.1, 0.1, 0.1))
    drive_forward(estimator)

    assert estimator.add_vision_measurement(Pose2d(1.2, 0.0, Rotation2d()), 1.0)
    assert estimator.get_estimated_pose().x == pytest.approx(1.1)

    estimator.set_vision_measurement_std_devs((1e6, 1e6, 1e6))
    assert estimator.add_vision_measurement(Pose2d(2.0, 0.0, Rotation2d()), 1.0)
    assert estimator.get_estimated_pose().x == pytest.approx(1.1, abs=1e-4)


def test_stale_vision_rejected():
    estimator = make_estimator(history_duration=1.5)
    drive_forward(estimator, count=30)

    before = estimator.get_estimated_pose()
    assert not estimator.add_vision_measurement(Pose2d(), 1.0, ODOMETRY)
    assert estimator.get_estimated_pose() == before


def test_vision_before_odometry_rejected():
    estimator = make_estimator()
    assert not estimator.add_vision_measurement(Pose2d(1.0, 1.0, Rotation2d()), 0.1, ODOMETRY)
    assert_pose(estimator.get_estimated_pose(), 0.0, 0.0, 0.0)


def test_invalid_vision_rejected():
    estimator = make_estimator()
    drive_forward(estimator)

    assert not estimator.add_vision_measurement(Pose2d(1.0, 0.0, Rotation2d()), 1.0, (0.1, -1.0, 0.1))
    assert not estimator.add_vision_measurement(Pose2d(1.0, 0.0, Rotation2d()), 1.0, (0.1, 0.1))
    assert not estimator.add_vision_measurement(Pose2d(math.nan, 0.0, Rotation2d()), 1.0, ODOMETRY)
    assert not estimator.add_vision_measurement(Pose2d(1.0, 0.0, Rotation2d()), math.inf, ODOMETRY)

    assert_pose(estimator.get_estimated_pose(), 1.0, 0.0, 0.0)

    with pytest.raises(ValueError):
        estimator.set_vision_measurement_std_devs((0.0, 0.1, 0.1))


def test_constructor_validation():
    kinematics = SwerveKinematics(Translation2d(0.5, 0.5), Translation2d(-0.5, -0.5), Translation2d(0.5, -0.5))

    with pytest.raises(ValueError):
        PoseEstimator(kinematics, Pose2d(), positions(0.0))

    with pytest.raises(ValueError):
        make_estimator(odometry_std_devs=(0.1, math.nan, 0.1))


def test_reset_pose():
    estimator = make_estimator()
    drive_forward(estimator)

    pose = Pose2d(4.0, 2.0, Rotation2d.fromDegrees(-30))
    estimator.reset_pose(pose, positions(1.0))

    assert estimator.get_estimated_pose() == pose
    assert estimator.get_odometry_pose() == pose
    assert len(estimator.history) == 0

    # History is gone until odometry runs again
    assert not estimator.add_vision_measurement(Pose2d(), 1.0, ODOMETRY)

    estimator.update(1.1, positions(1.0))
    assert_pose(estimator.get_estimated_pose(), 4.0, 2.0, -30.0)


def test_sample_pose_at():
    estimator = make_estimator()
    drive_forward(estimator)

    assert_pose(estimator.sample_pose_at(0.5), 0.5, 0.0, 0.0)
    assert estimator.sample_pose_at(0.01) is None


def test_history_trims_old_entries():
    history = PoseHistory(1.0)

    for timestamp in (0.0, 0.5, 1.0, 1.5):
        history.add(timestamp, Pose2d(timestamp, 0.0, Rotation2d()))

    assert len(history) == 3
    assert history.oldest == 0.5
    assert history.newest == 1.5


def test_history_interpolation():
    history = PoseHistory(2.0)
    assert history.sample(0.0) is None

    history.add(1.0, Pose2d(0.0, 0.0, Rotation2d()))
    history.add(2.0, Pose2d(1.0, 2.0, Rotation2d(0.5)))

    assert_pose(history.sample(1.5), 0.5, 1.0, math.degrees(0.25))

    # Clamped outside the window
    assert_pose(history.sample(0.0), 0.0, 0.0, 0.0)
    assert_pose(history.sample(9.0), 1.0, 2.0, math.degrees(0.5))


def test_history_interpolation_wraps_heading():
    history = PoseHistory(2.0)
    history.add(0.0, Pose2d(0.0, 0.0, Rotation2d(3.0)))
    history.add(1.0, Pose2d(0.0, 0.0, Rotation2d(-3.0)))

    heading = history.sample(0.5).rotation()
    assert heading.cos() == pytest.approx(-1.0)
    assert heading.sin() == pytest.approx(0.0, abs=1e-9)
