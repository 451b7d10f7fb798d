"""
Tests for the Drexel crime log parser.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from crimemap.config import Config, ParsingConfig
from crimemap.drexel import DrexelParser, correct_occurred_range, new_drexel_runner
from crimemap.geo import GeoCache
from crimemap.model import (
    CorrectionKind,
    FieldNotParsedError,
    ParseStatus,
    StoreError,
    UnitFailedError,
    create_new_crime,
    create_new_report,
)
from crimemap.parser import ParserRunner


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def run(fields, **kwargs):
    runner = ParserRunner([DrexelParser(**kwargs)])
    report = create_new_report()
    crimes = runner.parse(report, fields)
    return runner, report, crimes


def test_single_crime(crime_fields):
    """Test a crime's glob 1, occurred, synopsis and disposition fields."""
    fields = [
        "Date Reported:", "x", "x",
        "10/14/17 - FRI at 09:00", "123 Main St", "2017-001", "THEFT",
    ] + crime_fields()[7:]

    runner, report, crimes = run(fields)

    assert len(crimes) == 1
    crime = crimes[0]
    assert crime["date_reported"] == utc(2017, 10, 14, 9, 0)
    assert crime["location"] == "123 Main St"
    assert crime["report_super_id"] == 2017
    assert crime["report_sub_id"] == 1
    assert crime["incidents"] == ["THEFT"]
    assert crime["date_occurred_start"] == utc(2017, 10, 14, 8, 0)
    assert crime["date_occurred_end"] == utc(2017, 10, 14, 8, 30)
    assert crime["descriptions"] == ["Wallet taken from unattended bag."]
    assert crime["remediation"] == "Closed"
    assert crime["parse_errors"] == []
    assert crime["page"] == 1


def test_full_report(sample_fields):
    """Test parsing a multi page report."""
    runner, report, crimes = run(sample_fields)

    assert [c["report_sub_id"] for c in crimes] == [1, 2, 3]
    assert report["range_start_date"] == utc(2016, 1, 13)
    assert report["range_end_date"] == utc(2017, 1, 13)
    assert report["pages"] == 2
    assert [c["page"] for c in crimes] == [1, 1, 2]
    assert crimes[1]["descriptions"] == ["Complainant reported being pushed.", "Suspect fled on foot."]
    assert crimes[2]["descriptions"] == []
    assert runner.parsers[0].crimes_count == 3
    assert runner.leftover == create_new_crime()


def test_header_sets_range_and_skips_three():
    """Test a header saves the range and skips the next 3 fields, whatever they are."""
    parser = DrexelParser()
    report = create_new_report()
    crime = create_new_crime()
    fields = ["From Jan 13, 2016 to Jan 13, 2017.", "Date Reported:", "42", "Disposition:"]

    results = [parser.parse(i, fields, report, crime) for i in range(len(fields))]

    assert all(r.consumed == 1 and r.status is ParseStatus.OK for r in results)
    assert report["range_start_date"] == utc(2016, 1, 13)
    assert report["range_end_date"] == utc(2017, 1, 13)
    assert crime == create_new_crime()


def test_header_range_first_writer_wins():
    """Test later page headers do not overwrite the saved range."""
    parser = DrexelParser()
    report = create_new_report()
    crime = create_new_crime()
    fields = [
        "From Jan 13, 2016 to Jan 13, 2017.", "a", "b", "c",
        "From Feb 1, 2018 to Mar 2, 2019.", "a", "b", "c",
    ]

    for i in range(len(fields)):
        parser.parse(i, fields, report, crime)

    assert report["range_start_date"] == utc(2016, 1, 13)
    assert report["range_end_date"] == utc(2017, 1, 13)


def test_header_bad_month_is_fatal():
    """Test an unknown month abbreviation in the header fails."""
    parser = DrexelParser()
    result = parser.parse(0, ["From Man 13, 2016 to Jan 13, 2017."], create_new_report(), create_new_crime())

    assert result.status is ParseStatus.FATAL
    assert "unknown value: Man" in result.reason


def test_footer_skips_five():
    """Test a page number skips the 5 fields after it."""
    fields = ["7", "Date Reported:", "Incident(s):", "x", "y", "z"]
    runner, report, crimes = run(fields)

    assert crimes == []
    assert report["pages"] == 1
    assert runner.parsers[0].page_num == 2


def test_report_id_wrong_number_of_parts(crime_fields):
    """Test a report ID which does not split into 2 parts fails."""
    with pytest.raises(UnitFailedError) as excinfo:
        run(crime_fields(report_id="2017-001-A"))

    assert excinfo.value.unit == "DrexelParser"
    assert excinfo.value.index == 5
    assert "incorrect number of parts" in excinfo.value.reason


def test_report_id_not_numeric(crime_fields):
    """Test a report ID with non numeric parts fails."""
    with pytest.raises(UnitFailedError) as excinfo:
        run(crime_fields(report_id="2017-A1"))

    assert "unsigned integers" in excinfo.value.reason


@pytest.mark.parametrize("report_id", ["2017-²", "٢٠١٧-001", "2017-+1", "2017-"])
def test_report_id_non_ascii_digits(crime_fields, report_id):
    """Test report ID parts must be plain ASCII digits."""
    with pytest.raises(UnitFailedError) as excinfo:
        run(crime_fields(report_id=report_id))

    assert excinfo.value.index == 5
    assert "unsigned integers" in excinfo.value.reason


def test_bad_reported_date(crime_fields):
    """Test a malformed reported timestamp fails."""
    with pytest.raises(UnitFailedError) as excinfo:
        run(crime_fields(reported="yesterday"))

    assert "reported at" in excinfo.value.reason


def test_occurred_range_too_inverted_is_fatal(crime_fields):
    """Test an occurred range still inverted after the 12 hour fix fails."""
    fields = crime_fields(occurred="10/14/17 - FRI at 23:00 - 10/14/17 - FRI at 01:00")

    with pytest.raises(UnitFailedError) as excinfo:
        run(fields)

    assert "date_occurred" in excinfo.value.reason
    assert excinfo.value.index == 8


def test_occurred_range_corrected(crime_fields):
    """Test an occurred range inverted by less than 12 hours is fixed and noted."""
    raw = "10/14/17 - FRI at 11:00 - 10/14/17 - FRI at 01:00"
    runner, report, crimes = run(crime_fields(occurred=raw))

    assert len(crimes) == 1
    crime = crimes[0]
    assert crime["date_occurred_start"] == utc(2017, 10, 14, 11, 0)
    assert crime["date_occurred_end"] == utc(2017, 10, 14, 13, 0)
    assert len(crime["parse_errors"]) == 1
    note = crime["parse_errors"][0]
    assert note.field == "date_occurred"
    assert note.original == raw
    assert note.corrected == "2017-10-14T11:00:00+00:00 - 2017-10-14T13:00:00+00:00"
    assert note.kind is CorrectionKind.BAD_RANGE_END


def test_occurred_range_fix_hours_configurable(crime_fields):
    """Test the range fix offset comes from configuration."""
    fields = crime_fields(occurred="10/14/17 - FRI at 11:00 - 10/14/17 - FRI at 01:00")

    with pytest.raises(UnitFailedError):
        run(fields, range_fix_hours=6)


def test_occurred_missing_second_date(crime_fields):
    """Test an occurred field without two dates fails."""
    with pytest.raises(UnitFailedError) as excinfo:
        run(crime_fields(occurred="10/14/17 - FRI at 11:00"))

    assert "expected 2 dates" in excinfo.value.reason


def test_correct_occurred_range_in_order_is_noop():
    """Test a range already in order is not changed or noted."""
    start = utc(2017, 10, 14, 11, 0)
    end = utc(2017, 10, 14, 13, 0)

    fixed_end, note = correct_occurred_range("raw", start, end)
    assert fixed_end == end
    assert note is None

    # Applying the fix to its own output changes nothing
    again, note = correct_occurred_range("raw", start, fixed_end)
    assert again == fixed_end
    assert note is None


def test_correct_occurred_range_equal_bounds():
    """Test a range with equal bounds is accepted."""
    when = utc(2017, 10, 14, 11, 0)
    assert correct_occurred_range("raw", when, when) == (when, None)


def test_correct_occurred_range_exactly_twelve_hours():
    """Test a range inverted by exactly 12 hours is fixable."""
    start = utc(2017, 10, 14, 13, 0)
    end = utc(2017, 10, 14, 1, 0)

    fixed_end, note = correct_occurred_range("raw", start, end, timedelta(hours=12))
    assert fixed_end == start
    assert note is not None


def test_crime_count_matches(crime_fields):
    """Test the listed crime total is checked against parsed crimes."""
    fields = crime_fields() + crime_fields(report_id="2017-002") + ["Incident(s) Listed.", " 2"]
    runner, report, crimes = run(fields)

    assert len(crimes) == 2


def test_crime_count_mismatch_is_fatal(crime_fields):
    """Test a listed total which disagrees with parsed crimes fails."""
    fields = crime_fields() + crime_fields(report_id="2017-002") + ["Incident(s) Listed.", " 3"]

    with pytest.raises(UnitFailedError) as excinfo:
        run(fields)

    assert "listed: 3, parsed: 2" in excinfo.value.reason


def test_crime_count_not_a_number(crime_fields):
    """Test a listed total which is not a number fails."""
    with pytest.raises(UnitFailedError) as excinfo:
        run(crime_fields() + ["Incident(s) Listed.", " three"])

    assert "number of listed crimes" in excinfo.value.reason


@pytest.mark.parametrize("listed", [" 0_1", " +1", " 1.0", " ¹", ""])
def test_crime_count_malformed(crime_fields, listed):
    """Test listed totals other than plain digits fail."""
    with pytest.raises(UnitFailedError) as excinfo:
        run(crime_fields() + ["Incident(s) Listed.", listed])

    assert "number of listed crimes" in excinfo.value.reason


def test_unknown_field_inside_crime(crime_fields):
    """Test an unexpected field in the middle of a crime stops parsing."""
    fields = crime_fields()
    fields.insert(7, "garbage")

    with pytest.raises(FieldNotParsedError) as excinfo:
        run(fields)

    assert excinfo.value.index == 7
    assert excinfo.value.field == "garbage"


def test_unknown_field_strict(crime_fields):
    """Test an unexpected field between crimes stops parsing."""
    fields = crime_fields() + ["Something unexpected"] + crime_fields(report_id="2017-002")

    with pytest.raises(FieldNotParsedError) as excinfo:
        run(fields)

    assert excinfo.value.index == len(crime_fields())
    assert excinfo.value.field == "Something unexpected"


def test_unknown_field_lenient(crime_fields):
    """Test lenient mode skips unexpected fields."""
    fields = crime_fields() + ["Something unexpected"] + crime_fields(report_id="2017-002")
    runner, report, crimes = run(fields, strict=False)

    assert [c["report_sub_id"] for c in crimes] == [1, 2]


def test_location_resolved_through_cache(crime_fields):
    """Test locations are resolved once per distinct raw string."""
    resolver = MagicMock(side_effect=lambda raw: f"id:{raw}")
    cache = GeoCache(resolver)
    fields = crime_fields() + crime_fields(report_id="2017-002") + crime_fields(
        report_id="2017-003", location="Race St"
    )

    runner, report, crimes = run(fields, geo_cache=cache)

    assert [c["geo_loc_id"] for c in crimes] == ["id:123 Main St", "id:123 Main St", "id:Race St"]
    assert resolver.call_count == 2


def test_location_resolver_failure_is_fatal(crime_fields):
    """Test a failing location resolver stops parsing."""
    cache = GeoCache(MagicMock(side_effect=StoreError("db down")))

    with pytest.raises(UnitFailedError) as excinfo:
        run(crime_fields(), geo_cache=cache)

    assert "db down" in excinfo.value.reason


def test_reset_between_documents(sample_fields):
    """Test repeated runs over the same fields give identical results."""
    runner = ParserRunner([DrexelParser()])

    report_a = create_new_report()
    crimes_a = runner.parse(report_a, sample_fields)
    report_b = create_new_report()
    crimes_b = runner.parse(report_b, sample_fields)

    assert crimes_a == crimes_b
    assert report_a == report_b


def test_from_config():
    """Test building a parser from configuration."""
    cfg = Config(parsing=ParsingConfig(strict=False, range_fix_hours=6, header_skip=2, footer_skip=4))
    parser = DrexelParser.from_config(cfg)

    assert parser.strict is False
    assert parser.range_fix == timedelta(hours=6)
    assert parser.header_skip == 2
    assert parser.footer_skip == 4


def test_new_drexel_runner(sample_fields):
    """Test the Drexel runner parses a full report."""
    runner = new_drexel_runner()

    assert [str(p) for p in runner.parsers] == ["DrexelParser"]
    assert len(runner.parse(create_new_report(), sample_fields)) == 3
