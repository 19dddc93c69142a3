"""
Tests for recommendation amount extraction.
"""

from savings_extractor import (
    SavingsTotals,
    accumulate_by_type,
    extract_by_type,
    extract_savings,
    sort_type_stats,
)
from site_record import Recommendation


class TestExtractSavings:

    def test_negative_savings_ignored_but_cost_counted(self):
        totals = extract_savings([Recommendation(potential_savings=-5, upgrade_cost=10)])
        assert totals.savings == 0.0
        assert totals.cost == 10.0

    def test_negative_carbon_ignored_negative_cost_counted(self):
        totals = extract_savings([
            Recommendation(potential_savings=100, potential_carbon_savings=-3, upgrade_cost=-20),
            Recommendation(potential_savings=50, potential_carbon_savings=7, upgrade_cost=30),
        ])
        assert totals == SavingsTotals(savings=150.0, carbon_savings=7.0, cost=10.0)

    def test_no_recommendations(self):
        assert extract_savings(None) == SavingsTotals()
        assert extract_savings([]).to_dict() == {"savings": 0, "carbon_savings": 0, "cost": 0}


class TestByType:

    def test_missing_type_grouped_as_unknown(self):
        by_type = extract_by_type([Recommendation(potential_savings=12)])
        assert list(by_type) == ["Unknown"]
        assert by_type["Unknown"].count == 1
        assert by_type["Unknown"].total_savings == 12.0

    def test_count_is_per_recommendation(self, make_record):
        records = [
            make_record(recommendations=[
                {"type": "Solar", "potential_savings": 200, "upgrade_cost": 1000},
                {"type": "Solar", "potential_savings": -10, "upgrade_cost": 50},
            ]),
            make_record(recommendations=[
                {"type": "LED", "potential_savings": 300, "potential_carbon_savings": 12.346},
            ]),
        ]
        stats = sort_type_stats(accumulate_by_type(records))
        assert [s.type for s in stats] == ["LED", "Solar"]
        solar = stats[1].to_dict()
        assert solar == {
            "type": "Solar",
            "count": 2,
            "total_savings": 200.0,
            "total_cost": 1050.0,
            "total_carbon_savings": 0.0,
        }
        assert stats[0].to_dict()["total_carbon_savings"] == 12.35

    def test_ties_sorted_by_type(self, make_record):
        records = [make_record(recommendations=[{"type": "B"}, {"type": "A"}])]
        assert [s.type for s in sort_type_stats(accumulate_by_type(records))] == ["A", "B"]
