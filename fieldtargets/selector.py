"""A subsystem that tracks the nearest scoring target to the robot"""

import logging
from typing import Callable, Optional

import commands2
import wpilib
from wpimath.geometry import Pose2d
from wpiutil import SendableBuilder

from .field import is_red_alliance
from .targets import ScoringTarget, TargetCatalog, TargetResolutionError

logger = logging.getLogger(__name__)


class NearestTargetSelector(commands2.Subsystem):
    """
    A Subsystem that picks the scoring target nearest to the robot every loop.

    Aiming and alignment routines read ``selected`` (in blue alliance coordinates, ready to index setpoints) or
    ``selected_in_live_frame`` (for driving to the target). When no target can be resolved, both are None and
    ``has_target`` is False, so dependent actions should not proceed.
    """

    def __init__(
        self,
        catalog: TargetCatalog,
        pose_supplier: Callable[[], Pose2d],
        mirrored_side_supplier: Callable[[], bool] = is_red_alliance,
        field: Optional[wpilib.Field2d] = None,
    ):
        """
        Construct a target selector as a Subsystem.

        :param catalog: Targets to choose between
        :param pose_supplier: A method that returns the robot's current field pose, usually from odometry
        :param mirrored_side_supplier: A method that returns whether the robot is on the mirrored (red) side
        :param field: An optional Field2d to plot the selected target on, such as the drivetrain's.
               A new one is published if not provided.
        """
        super().__init__()
        self.setName("Nearest Target Selector")

        self._catalog = catalog
        self._pose_supplier = pose_supplier
        self._mirrored_side_supplier = mirrored_side_supplier

        self.selected: Optional[ScoringTarget] = None
        self.selected_in_live_frame: Optional[ScoringTarget] = None
        self._last_error: Optional[str] = None

        if field is None:
            field = wpilib.Field2d()
            wpilib.SmartDashboard.putData("Target Field", field)
        self._target_object = field.getObject("Nearest Target")

        wpilib.SmartDashboard.putData(self.getName(), self)

    @property
    def catalog(self) -> TargetCatalog:
        return self._catalog

    def set_catalog(self, catalog: TargetCatalog):
        """
        Replace the catalog of targets. Takes effect on the next periodic() call.

        :param catalog: A new catalog. The previous catalog is left untouched for any reader still holding it.
        """
        logger.info("Target catalog replaced: %s -> %s", self._catalog, catalog)
        self._catalog = catalog

    @property
    def has_target(self) -> bool:
        return self.selected is not None

    def periodic(self):
        catalog = self._catalog
        on_mirrored_side = self._mirrored_side_supplier()

        try:
            target = catalog.nearest(self._pose_supplier(), on_mirrored_side)
        except TargetResolutionError as e:
            self._clear(str(e))
            return

        live_target = target.flipped(catalog.field) if on_mirrored_side else target
        if target is not self.selected:
            logger.debug("Selected target %s (mirrored side: %s)", target, on_mirrored_side)

        self.selected = target
        self.selected_in_live_frame = live_target
        self._last_error = None
        self._target_object.setPose(live_target.pose)

    def _clear(self, reason: str):
        # Only log when the failure changes, or the log is flooded every loop
        if reason != self._last_error:
            logger.warning("No scoring target available: %s", reason)
        self._last_error = reason
        self.selected = None
        self.selected_in_live_frame = None
        self._target_object.setPoses([])

    def initSendable(self, builder: SendableBuilder):
        super().initSendable(builder)
        builder.addBooleanProperty("Has Target", lambda: self.has_target, lambda _: None)
        builder.addDoubleProperty("Arm Angle (rad)", lambda: self._setpoint("arm_angle"), lambda _: None)
        builder.addDoubleProperty("Launcher Speed", lambda: self._setpoint("launcher_speed"), lambda _: None)
        builder.addDoubleProperty("Target X (m)", lambda: self._live_pose_value(lambda p: p.x), lambda _: None)
        builder.addDoubleProperty("Target Y (m)", lambda: self._live_pose_value(lambda p: p.y), lambda _: None)
        builder.addDoubleProperty(
            "Target Heading (deg)", lambda: self._live_pose_value(lambda p: p.rotation().degrees()), lambda _: None
        )

    def _setpoint(self, name: str) -> float:
        return getattr(self.selected, name) if self.selected else 0.0

    def _live_pose_value(self, getter: Callable[[Pose2d], float]) -> float:
        return getter(self.selected_in_live_frame.pose) if self.selected_in_live_frame else 0.0
