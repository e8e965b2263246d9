"""Scoring targets and the nearest-target resolver"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from wpimath.geometry import Pose2d, Rotation2d, Translation2d

from .field import Field

logger = logging.getLogger(__name__)


class TargetResolutionError(ValueError):
    """A nearest target could not be chosen. Aiming should not proceed."""


class EmptyCatalogError(TargetResolutionError):
    pass


class InvalidQueryPointError(TargetResolutionError):
    pass


@dataclass(frozen=True)
class ScoringTarget:
    """
    A preset scoring position.

    All geometry is authored on the blue alliance side, with X and Y ranging from 0 to about 8.2 metres and rotations
    usually around 0° ± 45°.
    """

    # Position and rotation of the robot to make the shot
    pose: Pose2d
    # Angle to move the arm to, in radians
    arm_angle: float
    # Power to run the launcher at
    launcher_speed: float

    @property
    def translation(self) -> Translation2d:
        return self.pose.translation()

    @property
    def heading(self) -> Rotation2d:
        return self.pose.rotation()

    def flipped(self, field: Field) -> "ScoringTarget":
        """This target as seen from the opposite alliance. Setpoints are unchanged."""
        return ScoringTarget(field.flip_pose(self.pose), self.arm_angle, self.launcher_speed)


def _query_translation(query: Translation2d | Pose2d) -> Translation2d:
    translation = query.translation() if isinstance(query, Pose2d) else query
    if not (math.isfinite(translation.x) and math.isfinite(translation.y)):
        raise InvalidQueryPointError(f"Query point ({translation.x}, {translation.y}) is not finite")
    return translation


def resolve_nearest(
    targets: Sequence[ScoringTarget],
    query: Translation2d | Pose2d,
    on_mirrored_side: bool,
    field: Field,
) -> ScoringTarget:
    """
    Find the target closest to a position on the field.

    :param targets: Candidate targets in blue alliance coordinates
    :param query: The robot's position (or pose) in its own alliance's frame
    :param on_mirrored_side: Whether the query is in the red alliance's frame and must be flipped before comparing
    :param field: The field whose symmetry relates the two frames
    :raises EmptyCatalogError: If there are no targets
    :raises InvalidQueryPointError: If the query has a NaN or infinite coordinate
    :return: The nearest element of targets, unchanged (still in blue alliance coordinates).
             When several are equally near, the earliest one wins.
    """
    if not targets:
        raise EmptyCatalogError("Cannot resolve a nearest target from an empty catalog")

    point = _query_translation(query)
    if on_mirrored_side:
        point = field.flip_translation(point)

    nearest = None
    nearest_distance_sq = math.inf
    for target in targets:
        dx = target.translation.x - point.x
        dy = target.translation.y - point.y
        distance_sq = dx * dx + dy * dy
        # Strictly less than, so a tie keeps the earlier target
        if distance_sq < nearest_distance_sq:
            nearest = target
            nearest_distance_sq = distance_sq

    logger.debug("Nearest target to (%.3f, %.3f) is %s", point.x, point.y, nearest)
    return nearest


class TargetCatalog:
    """
    An immutable, ordered collection of scoring targets on a particular field.

    To reload targets at runtime, build a new catalog and swap it in; never modify one in use.
    """

    def __init__(self, targets: Iterable[ScoringTarget], field: Field):
        self._targets = tuple(targets)
        self._field = field

    @property
    def field(self) -> Field:
        return self._field

    @property
    def targets(self) -> tuple[ScoringTarget, ...]:
        return self._targets

    def __len__(self):
        return len(self._targets)

    def __iter__(self):
        return iter(self._targets)

    def __getitem__(self, index: int) -> ScoringTarget:
        return self._targets[index]

    def __repr__(self):
        return f"TargetCatalog({len(self._targets)} targets)"

    def nearest(self, query: Translation2d | Pose2d, on_mirrored_side: bool) -> ScoringTarget:
        """
        The catalog entry closest to a position. See resolve_nearest().

        The returned target is in blue alliance coordinates even when on_mirrored_side is True.
        Use nearest_in_live_frame() to get geometry for the side the robot is on.
        """
        return resolve_nearest(self._targets, query, on_mirrored_side, self._field)

    def nearest_in_live_frame(self, query: Translation2d | Pose2d, on_mirrored_side: bool) -> ScoringTarget:
        """
        The closest target, flipped into the query's frame when on the mirrored side.
        Suitable for driving to or displaying directly.
        """
        target = self.nearest(query, on_mirrored_side)
        return target.flipped(self._field) if on_mirrored_side else target

    def distance_to(self, target: ScoringTarget, query: Translation2d | Pose2d, on_mirrored_side: bool) -> float:
        """Distance in metres between a (possibly mirrored) query and a target's authored position"""
        point = _query_translation(query)
        if on_mirrored_side:
            point = self._field.flip_translation(point)
        return target.translation.distance(point)
