"""
Tests for the site record model and the JSON export loader.
"""

import json
from datetime import datetime

import pytest

from site_data_loader import extract_site_payloads, load_site_records, parse_site_records
from site_record import Recommendation, SiteRecord


class TestSiteRecordFromDict:
    """Raw API objects become fully defaulted SiteRecords."""

    def test_snake_case_fields(self, raw_site):
        record = SiteRecord.from_dict(raw_site)
        assert record.agent_identifier == "jane.doe@edf.com"
        assert record.status == "ACTIVE"
        assert record.onboard_date == datetime(2025, 1, 8, 9, 30)
        assert record.contact_key == "owner@customer.com"
        assert record.login_count == 2
        assert record.has_interaction
        assert record.site_address == "1 High Street, Leeds"
        assert record.mpans == ("1200000000001",)
        assert record.mprns == ()

    def test_recommendation_aliases_and_defaults(self, raw_site):
        first, second = SiteRecord.from_dict(raw_site).recommendations
        assert first == Recommendation("LED Lighting", 120.5, 40.0, 300.0)
        assert second.type == "Unknown"
        assert second.potential_savings == 15.0
        assert second.upgrade_cost == 5.0
        assert second.potential_carbon_savings == 0.0

    def test_camel_case_fields(self):
        record = SiteRecord.from_dict({
            "agentIdentifier": "a@edf.com",
            "status": "ACTIVE",
            "onboardDate": "2025-03-01",
            "contactIdentifier": "X@C.com",
            "loginCount": "0",
        })
        assert record.agent_identifier == "a@edf.com"
        assert record.onboard_date == datetime(2025, 3, 1)
        assert record.contact_key == "x@c.com"
        assert not record.has_interaction

    def test_malformed_values_fall_back_to_defaults(self):
        record = SiteRecord.from_dict({
            "onboard_date": "yesterday-ish",
            "logged_in_contacts": "many",
            "recommendations": [{"type": "  ", "potential_savings": "n/a"}, "junk"],
        })
        assert record.agent_identifier == ""
        assert record.onboard_date is None
        assert record.login_count == 0
        assert record.contact_key is None
        assert record.recommendations == (Recommendation(),)

    @pytest.mark.parametrize("value", [
        float("inf"), float("-inf"), float("nan"), "nan", "Infinity", 10 ** 400,
    ])
    def test_non_finite_numbers_become_zero(self, value):
        record = SiteRecord.from_dict({
            "logged_in_contacts": value,
            "recommendations": [{"potential_savings": value, "upgrade_cost": value}],
        })
        assert record.login_count == 0
        assert record.recommendations[0].potential_savings == 0.0
        assert record.recommendations[0].upgrade_cost == 0.0

    def test_address_falls_back_to_display_name(self):
        record = SiteRecord.from_dict({"display_name": "Unit 4"})
        assert record.site_address == "Unit 4"


class TestExtractSitePayloads:

    @pytest.mark.parametrize("payload", [
        [{"id": 1}],
        {"data": {"sites": [{"id": 1}]}},
        {"sites": [{"id": 1}]},
        {"records": [{"id": 1}]},
        {"data": [{"id": 1}]},
    ])
    def test_known_envelopes(self, payload):
        assert extract_site_payloads(payload) == [{"id": 1}]

    def test_unknown_shape_gives_empty_list(self):
        assert extract_site_payloads({"total": 3}) == []
        assert extract_site_payloads("sites") == []


class TestLoading:

    def test_parse_counts_skips_and_undated(self, raw_site):
        records, stats = parse_site_records([raw_site, "not a site", {"agent_name": "b@edf.com"}])
        assert len(records) == 2
        assert stats.total_rows == 3
        assert stats.loaded_rows == 2
        assert stats.skipped_rows == 1
        assert stats.undated_rows == 1
        assert stats.skipped_by_reason == {"not_an_object": 1}
        assert "Skipped rows: 1" in stats.get_summary()

    def test_load_from_file(self, tmp_path, raw_site):
        path = tmp_path / "sites.json"
        path.write_text(json.dumps({"data": {"sites": [raw_site]}}), encoding="utf-8")
        records = load_site_records(str(path))
        assert len(records) == 1
        assert records[0].company_name == "Customer Ltd"

    def test_overflowing_numbers_in_file(self, tmp_path):
        path = tmp_path / "sites.json"
        path.write_text(
            '[{"agent_name": "a@edf.com", "logged_in_contacts": 1e400,'
            ' "recommendations": [{"potential_savings": NaN, "upgrade_cost": -1e400,'
            ' "potential_carbon_savings": "inf"}]}]',
            encoding="utf-8",
        )
        records = load_site_records(str(path))
        assert records[0].login_count == 0
        assert records[0].recommendations[0] == Recommendation()

    def test_invalid_json_raises_value_error(self, tmp_path):
        path = tmp_path / "sites.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            load_site_records(str(path))

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_site_records(str(tmp_path / "missing.json"))
