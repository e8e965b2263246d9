import math

import pytest
from wpimath.geometry import Pose2d, Rotation2d, Translation2d
from wpilib.simulation import DriverStationSim
import hal

from fieldtargets import u, Field, FieldSymmetry
from fieldtargets.field import is_red_alliance


def test_rotational_flip_translation(field):
    flipped = field.flip_translation(Translation2d(1.0, 2.0))
    assert flipped.x == pytest.approx(15.54)
    assert flipped.y == pytest.approx(6.21)


def test_mirrored_flip_translation_keeps_y(mirrored_field):
    flipped = mirrored_field.flip_translation(Translation2d(1.0, 2.0))
    assert flipped.x == pytest.approx(15.54)
    assert flipped.y == pytest.approx(2.0)


def test_corner_flips_to_origin(field):
    flipped = field.flip_translation(Translation2d(16.54, 8.21))
    assert flipped.x == 0
    assert flipped.y == 0


def test_rotational_flip_rotation_adds_half_turn(field):
    assert field.flip_rotation(Rotation2d.fromDegrees(30)).degrees() == pytest.approx(-150)


def test_mirrored_flip_rotation_reflects(mirrored_field):
    assert mirrored_field.flip_rotation(Rotation2d.fromDegrees(30)).degrees() == pytest.approx(150)
    assert mirrored_field.flip_rotation(Rotation2d.fromDegrees(-90)).degrees() == pytest.approx(-90)


@pytest.mark.parametrize("symmetry", list(FieldSymmetry))
def test_flipping_twice_is_identity(symmetry):
    field = Field(54.27 * u.ft, 26.9375 * u.ft, symmetry)
    pose = Pose2d(2.5, 7.1, Rotation2d.fromDegrees(-40))

    twice = field.flip_pose(field.flip_pose(pose))

    assert twice.x == pytest.approx(pose.x)
    assert twice.y == pytest.approx(pose.y)
    assert twice.rotation().radians() == pytest.approx(pose.rotation().radians())


def test_dimensions_accept_any_length_unit():
    field = Field(54.27 * u.ft, 26.9375 * u.ft)
    assert field.length_m == pytest.approx(16.5415, abs=1e-4)
    assert field.width_m == pytest.approx(8.2105, abs=1e-4)
    assert field.symmetry is FieldSymmetry.ROTATIONAL


def test_center(field):
    assert field.center.x == pytest.approx(8.27)
    assert field.center.y == pytest.approx(4.105)


def test_non_positive_dimensions_rejected():
    with pytest.raises(ValueError):
        Field(0 * u.m, 8 * u.m)


def test_contains(field):
    assert field.contains(Translation2d(0, 0))
    assert field.contains(Translation2d(16.54, 8.21))
    assert not field.contains(Translation2d(-0.1, 4))
    assert not field.contains(Translation2d(8, math.inf))


def test_is_red_alliance():
    DriverStationSim.setAllianceStationId(hal.AllianceStationID.kRed2)
    DriverStationSim.notifyNewData()
    assert is_red_alliance()

    DriverStationSim.setAllianceStationId(hal.AllianceStationID.kBlue1)
    DriverStationSim.notifyNewData()
    assert not is_red_alliance()
