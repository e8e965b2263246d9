import math

import pytest
import wpilib
from wpimath.geometry import Pose2d, Rotation2d, Translation2d

from fieldtargets import NearestTargetSelector, ScoringTarget, TargetCatalog


class PoseSource:
    def __init__(self, pose: Pose2d):
        self.pose = pose

    def __call__(self) -> Pose2d:
        return self.pose


@pytest.fixture
def targets():
    return (
        ScoringTarget(Pose2d(1.0, 5.5, Rotation2d()), 0.198, 0.5),
        ScoringTarget(Pose2d(1.8, 7.3, Rotation2d.fromDegrees(-90)), 1.38, 0.4),
    )


@pytest.fixture
def catalog(targets, field):
    return TargetCatalog(targets, field)


def test_selects_nearest_on_blue_side(catalog, targets):
    selector = NearestTargetSelector(catalog, PoseSource(Pose2d(1.2, 5.0, Rotation2d())), lambda: False)

    selector.periodic()

    assert selector.has_target
    assert selector.selected is targets[0]
    assert selector.selected_in_live_frame is targets[0]


def test_selects_nearest_on_red_side(catalog, targets, field):
    pose = field.flip_pose(Pose2d(1.7, 7.0, Rotation2d()))
    selector = NearestTargetSelector(catalog, PoseSource(pose), lambda: True)

    selector.periodic()

    assert selector.selected is targets[1]
    live = selector.selected_in_live_frame
    assert live.translation.x == pytest.approx(field.length_m - 1.8)
    assert live.heading.degrees() == pytest.approx(90)


def test_follows_moving_robot(catalog, targets):
    source = PoseSource(Pose2d(1.0, 5.0, Rotation2d()))
    selector = NearestTargetSelector(catalog, source, lambda: False)

    selector.periodic()
    assert selector.selected is targets[0]

    source.pose = Pose2d(2.0, 7.5, Rotation2d())
    selector.periodic()
    assert selector.selected is targets[1]


def test_invalid_pose_clears_selection(catalog):
    source = PoseSource(Pose2d(1.0, 5.0, Rotation2d()))
    selector = NearestTargetSelector(catalog, source, lambda: False)
    selector.periodic()
    assert selector.has_target

    source.pose = Pose2d(math.nan, 5.0, Rotation2d())
    selector.periodic()

    assert not selector.has_target
    assert selector.selected is None
    assert selector.selected_in_live_frame is None


def test_empty_catalog_reports_no_target(field, caplog):
    selector = NearestTargetSelector(TargetCatalog([], field), PoseSource(Pose2d()), lambda: False)

    with caplog.at_level("WARNING", logger="fieldtargets.selector"):
        selector.periodic()
        selector.periodic()

    assert not selector.has_target
    # Repeated identical failures are logged once
    assert len([r for r in caplog.records if r.name == "fieldtargets.selector"]) == 1


def test_catalog_swap_takes_effect_next_loop(catalog, field):
    selector = NearestTargetSelector(catalog, PoseSource(Pose2d(1.0, 5.0, Rotation2d())), lambda: False)
    selector.periodic()
    old_selection = selector.selected

    replacement = ScoringTarget(Pose2d(1.0, 4.9, Rotation2d()), 0.3, 0.9)
    selector.set_catalog(TargetCatalog([replacement], field))
    assert selector.selected is old_selection

    selector.periodic()
    assert selector.selected is replacement
    assert catalog[0] is old_selection


def test_plots_target_on_provided_field(catalog, targets):
    field2d = wpilib.Field2d()
    selector = NearestTargetSelector(catalog, PoseSource(Pose2d(1.2, 5.0, Rotation2d())), lambda: False, field2d)

    selector.periodic()

    plotted = field2d.getObject("Nearest Target").getPose()
    assert plotted.x == pytest.approx(targets[0].pose.x)
    assert plotted.y == pytest.approx(targets[0].pose.y)
