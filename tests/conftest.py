import datetime

import pytest

from skywatch.types import Observer


def pytest_addoption(parser):
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run tests marked as integration",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--integration"):
        return

    for item in items:
        if "integration" in item.keywords:
            item.add_marker(
                pytest.mark.skip(
                    reason="need --integration option to run integration tests"
                )
            )


@pytest.fixture
def observer():
    # Adelaide, a southern-hemisphere site well away from the poles.
    return Observer(latitude_deg=-34.93, longitude_deg=138.60, elevation_m=50.0)


@pytest.fixture
def night():
    # 2024-07-01T14:00Z is about 23:30 local time at the observer fixture.
    return datetime.datetime(2024, 7, 1, 14, 0, tzinfo=datetime.timezone.utc)


@pytest.fixture
def noon():
    return datetime.datetime(2024, 7, 1, 2, 30, tzinfo=datetime.timezone.utc)
