"""Field geometry and the transform relating the two alliances' coordinate frames"""

import enum
import math
from dataclasses import dataclass
from functools import cached_property

import wpilib
from pint import Quantity
from wpimath.geometry import Pose2d, Rotation2d, Translation2d

from . import u


class FieldSymmetry(enum.Enum):
    # 180 degree rotation about the field centre: (x, y) -> (L - x, W - y)
    ROTATIONAL = enum.auto()
    # Mirror across the centre line: (x, y) -> (L - x, y)
    MIRRORED = enum.auto()


@dataclass(frozen=True)
class Field:
    """
    A competition field with its dimensions and the symmetry between alliance halves.

    The origin is the blue alliance's driver-station-adjacent corner. +X points down the field toward the red
    alliance wall and +Y points left from the blue driver station's point of view.
    """

    length: Quantity
    width: Quantity
    symmetry: FieldSymmetry = FieldSymmetry.ROTATIONAL

    def __post_init__(self):
        if self.length_m <= 0 or self.width_m <= 0:
            raise ValueError(f"Field dimensions must be positive, got {self.length} x {self.width}")

    @cached_property
    def length_m(self) -> float:
        """Field length along X in metres"""
        return self.length.m_as(u.m)

    @cached_property
    def width_m(self) -> float:
        """Field width along Y in metres"""
        return self.width.m_as(u.m)

    @property
    def center(self) -> Translation2d:
        return Translation2d(self.length_m / 2, self.width_m / 2)

    def flip_translation(self, translation: Translation2d) -> Translation2d:
        """
        Map a field position into the other alliance's frame.
        Applying this twice returns the original position.

        :param translation: Position in metres
        :return: The corresponding position on the opposite half of the field
        """
        x = self.length_m - translation.x
        y = self.width_m - translation.y if self.symmetry is FieldSymmetry.ROTATIONAL else translation.y
        return Translation2d(x, y)

    def flip_rotation(self, rotation: Rotation2d) -> Rotation2d:
        """
        Map a CCW+ heading into the other alliance's frame

        :param rotation: Heading in the current frame
        :return: The heading that faces the same feature on the opposite half of the field
        """
        if self.symmetry is FieldSymmetry.ROTATIONAL:
            return rotation + Rotation2d(math.pi)
        return Rotation2d(math.pi) - rotation

    def flip_pose(self, pose: Pose2d) -> Pose2d:
        return Pose2d(self.flip_translation(pose.translation()), self.flip_rotation(pose.rotation()))

    def contains(self, translation: Translation2d) -> bool:
        """Whether a position lies within the field boundary (inclusive)"""
        return 0 <= translation.x <= self.length_m and 0 <= translation.y <= self.width_m


def is_red_alliance() -> bool:
    """
    Whether the driver station reports the red alliance. Red plays from the mirrored side of the field.
    An unknown alliance (e.g. no driver station connected) is treated as blue.
    """
    alliance = wpilib.DriverStation.getAlliance()
    return alliance == wpilib.DriverStation.Alliance.kRed
