"""
Pytest configuration and fixtures.
"""

import os
import tempfile
from datetime import datetime, timezone
from typing import Callable, List

import pytest

from crimemap.config import Config
from crimemap.model import CorrectionKind, CorrectionNote, Crime, create_new_crime


HEADER_FIELDS = [
    "From Jan 13, 2016 to Jan 13, 2017.",
    "Drexel University",
    "Department of Public Safety",
    "Daily Crime Log",
]


def footer_fields(page: int) -> List[str]:
    return [str(page), "Printed on", "Jan 14, 2017", "Page", "of", "Report"]


def build_crime_fields(
    reported: str = "10/14/17 - FRI at 09:00",
    location: str = "123 Main St",
    report_id: str = "2017-001",
    incident: str = "THEFT",
    occurred: str = "10/14/17 - FRI at 08:00 - 10/14/17 - FRI at 08:30",
    synopsis: tuple = ("Wallet taken from unattended bag.",),
    disposition: str = "Closed",
) -> List[str]:
    return [
        "Date Reported:", "Location :", "Report #:",
        reported, location, report_id, incident,
        "Incident(s):", occurred,
        "Date and Time Occurred From - Occurred To:", "Synopsis:",
        *synopsis,
        "Disposition:", disposition,
    ]


@pytest.fixture
def sample_config():
    """Return a sample configuration."""
    return Config()


@pytest.fixture
def crime_fields() -> Callable[..., List[str]]:
    """Return a builder for the fields of one crime."""
    return build_crime_fields


@pytest.fixture
def sample_fields() -> List[str]:
    """Return the fields of a two page report with three crimes."""
    return (
        HEADER_FIELDS
        + build_crime_fields()
        + build_crime_fields(
            reported="10/15/17 - SAT at 14:30",
            location="3141 Chestnut St",
            report_id="2017-002",
            incident="ASSAULT",
            occurred="10/15/17 - SAT at 11:00 - 10/15/17 - SAT at 01:00",
            synopsis=("Complainant reported being pushed.", "Suspect fled on foot."),
            disposition="Referred to Philadelphia Police",
        )
        + footer_fields(1)
        + HEADER_FIELDS
        + build_crime_fields(
            reported="10/16/17 - SUN at 22:15",
            location="123 Main St",
            report_id="2017-003",
            incident="VANDALISM",
            occurred="10/16/17 - SUN at 21:00 - 10/16/17 - SUN at 21:45",
            synopsis=(),
            disposition="Open",
        )
        + ["Incident(s) Listed.", " 3"]
        + footer_fields(2)
    )


@pytest.fixture
def sample_crime() -> Crime:
    """Return a sample completed crime."""
    crime = create_new_crime()
    crime.update({
        "date_reported": datetime(2017, 10, 15, 14, 30, tzinfo=timezone.utc),
        "date_occurred_start": datetime(2017, 10, 15, 11, 0, tzinfo=timezone.utc),
        "date_occurred_end": datetime(2017, 10, 15, 13, 0, tzinfo=timezone.utc),
        "report_super_id": 2017,
        "report_sub_id": 2,
        "location": "3141 Chestnut St",
        "geo_loc_id": "geoloc::abc",
        "incidents": ["ASSAULT"],
        "descriptions": ["Complainant reported being pushed.", "Suspect fled on foot."],
        "remediation": "Referred to Philadelphia Police",
        "parse_errors": [
            CorrectionNote(
                field="date_occurred",
                original="10/15/17 - SAT at 11:00 - 10/15/17 - SAT at 01:00",
                corrected="2017-10-15T11:00:00+00:00 - 2017-10-15T13:00:00+00:00",
                kind=CorrectionKind.BAD_RANGE_END,
            )
        ],
        "page": 1,
        "report_id": "report::123",
    })
    return crime


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield tmp_dir


@pytest.fixture
def temp_file():
    """Create a temporary file."""
    with tempfile.NamedTemporaryFile(delete=False) as tmp:
        tmp_path = tmp.name

    yield tmp_path

    if os.path.exists(tmp_path):
        os.unlink(tmp_path)
