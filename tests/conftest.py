import commands2
import pytest

from fieldtargets import u, Field, FieldSymmetry


@pytest.fixture(autouse=True)
def scheduler():
    commands2.CommandScheduler.resetInstance()
    return commands2.CommandScheduler.getInstance()


@pytest.fixture
def field():
    return Field(16.54 * u.m, 8.21 * u.m, FieldSymmetry.ROTATIONAL)


@pytest.fixture
def mirrored_field():
    return Field(16.54 * u.m, 8.21 * u.m, FieldSymmetry.MIRRORED)
