"""
Immutable configuration records for the robot and its scoring targets.

Records take physical parameters as 'Quantity' objects from the Pint unit system, so lengths and speeds can be
entered in any valid unit (inches, feet, metres). Derived constants such as encoder conversion factors and
kinematics are computed once at construction and stored as plain standard-unit numbers.

Use build_robot_config() to assemble the competition robot's configuration.
"""

import enum
import math
from dataclasses import dataclass, field
from typing import NamedTuple

import wpimath.trajectory
from pint import Quantity
from wpimath.controller import ArmFeedforward
from wpimath.geometry import Pose2d, Rotation2d, Translation2d
from wpimath.kinematics import SwerveDrive4Kinematics

from . import conversions, u
from .field import Field, FieldSymmetry
from .targets import ScoringTarget, TargetCatalog

NEO_FREE_SPEED_RPM = 5676


class ModuleCorner(enum.IntEnum):
    FRONT_LEFT = 0
    FRONT_RIGHT = 1
    BACK_LEFT = 2
    BACK_RIGHT = 3


class NeutralMode(enum.IntEnum):
    COAST = 0
    BRAKE = 1


@dataclass(frozen=True)
class PIDGains:
    p: float
    i: float = 0.0
    d: float = 0.0


class ModulePorts(NamedTuple):
    drive_motor: int
    turning_motor: int
    absolute_encoder: int


class ModuleCalibration(NamedTuple):
    turning_encoder_reversed: bool
    drive_encoder_reversed: bool
    absolute_encoder_reversed: bool
    absolute_encoder_offset_rad: float


def _set_derived(record, **values):
    # Frozen dataclasses can only be populated through object.__setattr__
    for name, value in values.items():
        object.__setattr__(record, name, value)


def _check_corners(name: str, values: tuple):
    if len(values) != len(ModuleCorner):
        raise ValueError(f"{name} needs one entry per module corner ({len(ModuleCorner)}), got {len(values)}")


@dataclass(frozen=True)
class OperatorConfig:
    driver_controller_port: int

    left_x_deadband: float
    left_y_deadband: float
    right_x_deadband: float
    right_y_deadband: float

    arm_manual_deadband: float
    arm_manual_scale: float


@dataclass(frozen=True)
class SwerveModuleConfig:
    wheel_diameter: Quantity
    drive_gear_ratio: float
    turning_gear_ratio: float

    # Free speed of a drive wheel, from the module manufacturer's specifications
    drive_wheel_free_speed: Quantity

    driving_gains: PIDGains
    driving_output_range: tuple[float, float]
    turning_gains: PIDGains
    turning_output_range: tuple[float, float]
    turning_ff: float

    driving_idle_mode: NeutralMode
    turning_idle_mode: NeutralMode

    # Amps
    driving_current_limit: int
    turning_current_limit: int

    # Derived
    drive_encoder_rot_to_metre: float = field(init=False)
    turning_encoder_rot_to_rad: float = field(init=False)
    drive_encoder_rpm_to_metre_per_sec: float = field(init=False)
    turning_encoder_rpm_to_rad_per_sec: float = field(init=False)
    driving_ff: float = field(init=False)

    def __post_init__(self):
        if self.drive_gear_ratio <= 0 or self.turning_gear_ratio <= 0:
            raise ValueError("Gear ratios must be positive")

        free_speed = self.drive_wheel_free_speed.m_as(u.m / u.s)
        if free_speed <= 0:
            raise ValueError("Drive wheel free speed must be positive")

        rot_to_metre = conversions.rotations_to_metres(self.wheel_diameter.m_as(u.m), self.drive_gear_ratio)
        rot_to_rad = conversions.rotations_to_radians(self.turning_gear_ratio)
        _set_derived(
            self,
            drive_encoder_rot_to_metre=rot_to_metre,
            turning_encoder_rot_to_rad=rot_to_rad,
            drive_encoder_rpm_to_metre_per_sec=conversions.per_minute_to_per_second(rot_to_metre),
            turning_encoder_rpm_to_rad_per_sec=conversions.per_minute_to_per_second(rot_to_rad),
            driving_ff=1 / free_speed,
        )


@dataclass(frozen=True)
class SwervePhysicalConfig:
    # Distance between centers of right and left wheels on robot
    track_width: Quantity
    # Distance between front and back wheels on robot
    wheel_base: Quantity

    # Indexed by ModuleCorner
    calibrations: tuple[ModuleCalibration, ...]

    max_speed: Quantity
    max_angular_velocity: Quantity

    # Derived
    track_width_m: float = field(init=False)
    wheel_base_m: float = field(init=False)
    drive_base_radius: float = field(init=False)
    max_speed_mps: float = field(init=False)
    max_angular_velocity_radps: float = field(init=False)
    module_placements: tuple[Translation2d, ...] = field(init=False)
    kinematics: SwerveDrive4Kinematics = field(init=False)

    def __post_init__(self):
        _check_corners("calibrations", self.calibrations)

        track_width = self.track_width.m_as(u.m)
        wheel_base = self.wheel_base.m_as(u.m)

        # +x values represent moving toward the front of the robot, +y values represent moving toward the left
        placements = (
            Translation2d(wheel_base / 2, track_width / 2),
            Translation2d(wheel_base / 2, -track_width / 2),
            Translation2d(-wheel_base / 2, track_width / 2),
            Translation2d(-wheel_base / 2, -track_width / 2),
        )

        _set_derived(
            self,
            track_width_m=track_width,
            wheel_base_m=wheel_base,
            drive_base_radius=math.hypot(track_width / 2, wheel_base / 2),
            max_speed_mps=self.max_speed.m_as(u.m / u.s),
            max_angular_velocity_radps=self.max_angular_velocity.m_as(u.rad / u.s),
            module_placements=placements,
            kinematics=SwerveDrive4Kinematics(*placements),
        )


@dataclass(frozen=True)
class TeleopConfig:
    max_speed_mps: float
    max_angular_velocity_radps: float
    max_acceleration: float
    max_angular_acceleration: float
    theta_gains: PIDGains
    theta_constraints: wpimath.trajectory.TrapezoidProfileRadians.Constraints


@dataclass(frozen=True)
class AutoConfig:
    max_speed_mps: float
    max_angular_velocity_radps: float
    max_acceleration: float
    max_angular_acceleration: float
    translation_gains: PIDGains
    rotation_gains: PIDGains

    theta_constraints: wpimath.trajectory.TrapezoidProfileRadians.Constraints = field(init=False)

    def __post_init__(self):
        _set_derived(
            self,
            theta_constraints=wpimath.trajectory.TrapezoidProfileRadians.Constraints(
                self.max_angular_velocity_radps, self.max_angular_acceleration
            ),
        )


@dataclass(frozen=True)
class SwerveConfig:
    module: SwerveModuleConfig
    # Indexed by ModuleCorner
    ports: tuple[ModulePorts, ...]
    physical: SwervePhysicalConfig
    teleop: TeleopConfig
    auto: AutoConfig

    def __post_init__(self):
        _check_corners("ports", self.ports)
        ids = [port for module in self.ports for port in module]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Swerve CAN IDs must be unique, got {ids}")


@dataclass(frozen=True)
class ArmConfig:
    left_can_id: int
    left_inverted: bool
    right_can_id: int
    right_inverted: bool

    # Limit switch on the front (intake side) of the robot
    front_limit_switch_port: int
    # Limit switch on the back (limelight side) of the robot
    back_limit_switch_port: int

    current_limit: int

    # Soft limits, in radians
    front_limit: float
    back_limit: float
    under_stage_limit: float

    # Position to hold while intaking, in radians
    intake_position: float

    gear_ratio: float
    gravity_gain: float
    position_gains: PIDGains
    max_velocity: float
    max_acceleration: float

    # Derived
    position_factor: float = field(init=False)
    velocity_factor: float = field(init=False)
    free_speed: float = field(init=False)
    feedforward: ArmFeedforward = field(init=False)
    motion_constraints: wpimath.trajectory.TrapezoidProfileRadians.Constraints = field(init=False)

    def __post_init__(self):
        if self.gear_ratio <= 0:
            raise ValueError("Arm gear ratio must be positive")
        if not self.front_limit <= self.under_stage_limit <= self.back_limit:
            raise ValueError(
                f"Arm limits out of order: front {self.front_limit}, under stage {self.under_stage_limit}, "
                f"back {self.back_limit}"
            )

        # Multiply a through-bore reading by position_factor to get arm position in radians
        position_factor = conversions.rotations_to_radians(self.gear_ratio)
        velocity_factor = conversions.per_minute_to_per_second(position_factor)
        free_speed = NEO_FREE_SPEED_RPM * velocity_factor
        _set_derived(
            self,
            position_factor=position_factor,
            velocity_factor=velocity_factor,
            free_speed=free_speed,
            feedforward=ArmFeedforward(0.0, self.gravity_gain, 12.0 / free_speed, 0.0),
            motion_constraints=wpimath.trajectory.TrapezoidProfileRadians.Constraints(
                self.max_velocity, self.max_acceleration
            ),
        )


@dataclass(frozen=True)
class IntakeConfig:
    can_id: int
    motor_inverted: bool
    current_limit: int
    wheel_diameter: Quantity

    breakbeam_port: int
    # If the breakbeam reads true when not blocked
    breakbeam_true_by_default: bool

    position_gains: PIDGains
    position_tolerance: float
    intake_power: float

    # Time after which a note past the breakbeam is clear of the launcher
    clear_launcher_time: Quantity

    position_factor: float = field(init=False)
    clear_launcher_seconds: float = field(init=False)

    def __post_init__(self):
        _set_derived(
            self,
            # Rotations to metres of note travel
            position_factor=conversions.rotations_to_metres(self.wheel_diameter.m_as(u.m), 1),
            clear_launcher_seconds=self.clear_launcher_time.m_as(u.s),
        )


@dataclass(frozen=True)
class LauncherConfig:
    top_can_id: int
    bottom_can_id: int
    top_motor_inverted: bool
    bottom_motor_inverted: bool
    current_limit: int


@dataclass(frozen=True)
class ClimberConfig:
    left_can_id: int
    # To raise the arm, the left motor spins clockwise if False, counterclockwise if True
    left_inverted: bool
    right_can_id: int
    right_inverted: bool

    # Power to release (raise) the arms
    release_speed: float
    # Power to climb (lower) the arms. Must be negative
    climb_speed: float

    # Time to reach the highest point at release_speed
    release_to_top_time: Quantity
    # Time to retract fully from the highest point at climb_speed
    retract_fully_down_time: Quantity

    def __post_init__(self):
        if self.climb_speed >= 0:
            raise ValueError(f"Climb speed must be negative, got {self.climb_speed}")
        if self.release_speed <= 0:
            raise ValueError(f"Release speed must be positive, got {self.release_speed}")


@dataclass(frozen=True)
class FieldConfig:
    field: Field
    blue_stage_center: Translation2d
    red_stage_center: Translation2d
    # Distance from a stage center within which the robot risks hitting the stage
    stage_danger_radius: float


@dataclass(frozen=True)
class ShootingConfig:
    amp_score: ScoringTarget
    # All valid positions for scoring in the speaker during teleop
    speaker_positions: TargetCatalog


@dataclass(frozen=True)
class RobotConfig:
    operator: OperatorConfig
    field: FieldConfig
    swerve: SwerveConfig
    arm: ArmConfig
    intake: IntakeConfig
    launcher: LauncherConfig
    climber: ClimberConfig
    shooting: ShootingConfig


def build_robot_config() -> RobotConfig:
    """Assemble the competition robot's configuration"""

    operator = OperatorConfig(
        driver_controller_port=0,
        left_x_deadband=0.01,
        left_y_deadband=0.01,
        right_x_deadband=0.01,
        right_y_deadband=0.01,
        arm_manual_deadband=0.05,
        arm_manual_scale=0.1,
    )

    module = SwerveModuleConfig(
        wheel_diameter=4 * u.inch,
        drive_gear_ratio=6.75,  # SDS Mk4i L2
        turning_gear_ratio=150 / 7,  # SDS Mk4i
        drive_wheel_free_speed=15.1 * (u.ft / u.s),
        driving_gains=PIDGains(0.04),
        driving_output_range=(-1, 1),
        turning_gains=PIDGains(1),
        turning_output_range=(-1, 1),
        turning_ff=0,
        driving_idle_mode=NeutralMode.BRAKE,
        turning_idle_mode=NeutralMode.BRAKE,
        driving_current_limit=50,
        turning_current_limit=20,
    )

    ports = (
        ModulePorts(drive_motor=6, turning_motor=4, absolute_encoder=5),  # Front left
        ModulePorts(drive_motor=9, turning_motor=7, absolute_encoder=8),  # Front right
        ModulePorts(drive_motor=3, turning_motor=1, absolute_encoder=2),  # Back left
        ModulePorts(drive_motor=12, turning_motor=10, absolute_encoder=11),  # Back right
    )

    physical = SwervePhysicalConfig(
        track_width=23.75 * u.inch,
        wheel_base=23.75 * u.inch,
        calibrations=(
            ModuleCalibration(True, True, False, 3.45145677),  # Front left
            ModuleCalibration(True, True, False, 5.46250558),  # Front right
            ModuleCalibration(True, True, False, 2.61543724),  # Back left
            ModuleCalibration(True, True, False, 4.71699094),  # Back right
        ),
        max_speed=4.8 * (u.m / u.s),
        max_angular_velocity=2 * 2 * math.pi * (u.rad / u.s),
    )

    teleop = TeleopConfig(
        max_speed_mps=physical.max_speed_mps,
        max_angular_velocity_radps=physical.max_angular_velocity_radps / 4,
        max_acceleration=3,
        max_angular_acceleration=3,
        theta_gains=PIDGains(0.4),
        theta_constraints=wpimath.trajectory.TrapezoidProfileRadians.Constraints(
            physical.max_angular_velocity_radps / 5, math.pi
        ),
    )

    auto = AutoConfig(
        max_speed_mps=physical.max_speed_mps / 4,
        max_angular_velocity_radps=physical.max_angular_velocity_radps / 10,
        max_acceleration=3,
        max_angular_acceleration=math.pi / 4,
        translation_gains=PIDGains(5.0),
        rotation_gains=PIDGains(5.0),
    )

    swerve = SwerveConfig(module=module, ports=ports, physical=physical, teleop=teleop, auto=auto)

    field_length = 54.27 * u.ft
    field_width = 26.9375 * u.ft
    competition_field = Field(field_length, field_width, FieldSymmetry.ROTATIONAL)
    field_config = FieldConfig(
        field=competition_field,
        blue_stage_center=Translation2d((156.895 * u.inch).m_as(u.m), competition_field.width_m / 2),
        red_stage_center=Translation2d(
            competition_field.length_m - (157.395 * u.inch).m_as(u.m), competition_field.width_m / 2
        ),
        stage_danger_radius=((85.9 / 2 + 12) * u.inch).m_as(u.m) + physical.drive_base_radius,
    )

    arm = ArmConfig(
        left_can_id=16,
        left_inverted=True,
        right_can_id=17,
        right_inverted=False,
        front_limit_switch_port=2,
        back_limit_switch_port=1,
        current_limit=40,
        front_limit=0.0,
        back_limit=1.58,
        under_stage_limit=0.2,
        intake_position=0.1,
        gear_ratio=256.0,
        gravity_gain=0.47,
        position_gains=PIDGains(0.6),
        max_velocity=2.0,
        max_acceleration=2.0,
    )

    intake = IntakeConfig(
        can_id=13,
        motor_inverted=False,
        current_limit=20,
        wheel_diameter=2 * u.inch,
        breakbeam_port=3,
        breakbeam_true_by_default=True,
        position_gains=PIDGains(1.0),
        position_tolerance=0.5,
        intake_power=0.7,
        clear_launcher_time=0.2 * u.s,
    )

    launcher = LauncherConfig(
        top_can_id=14,
        bottom_can_id=15,
        top_motor_inverted=False,
        bottom_motor_inverted=False,
        current_limit=80,
    )

    climber = ClimberConfig(
        left_can_id=18,
        left_inverted=True,
        right_can_id=19,
        right_inverted=False,
        release_speed=1,
        climb_speed=-0.5,
        release_to_top_time=0.0 * u.s,
        retract_fully_down_time=0.0 * u.s,
    )

    amp_score = ScoringTarget(
        Pose2d(
            # 4' 1.5" from the wall to the amp's edge, plus half its 2' width
            (4.125 * u.ft + 1 * u.ft).m_as(u.m),
            # Against the side wall, backed off by the robot's radius
            field_width.m_as(u.m) - physical.drive_base_radius,
            Rotation2d.fromDegrees(-90),
        ),
        arm_angle=1.38,
        launcher_speed=0.4,
    )
    in_front_of_speaker = ScoringTarget(Pose2d(0, 0, Rotation2d.fromDegrees(0)), arm_angle=0.198, launcher_speed=0.5)

    shooting = ShootingConfig(
        amp_score=amp_score,
        speaker_positions=TargetCatalog([in_front_of_speaker], competition_field),
    )

    return RobotConfig(
        operator=operator,
        field=field_config,
        swerve=swerve,
        arm=arm,
        intake=intake,
        launcher=launcher,
        climber=climber,
        shooting=shooting,
    )
