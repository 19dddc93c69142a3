"""
Savings Extractor Module

Sums the savings, carbon savings and investment cost carried by a site's
recommendations, either per site or per recommendation type.

Savings and carbon savings only include strictly positive amounts, while the
upgrade cost is summed for every recommendation regardless of sign. Reports
built on these numbers rely on that asymmetry, so both rules live here and
nowhere else.

Usage:
    from savings_extractor import (
        SavingsTotals,
        RecommendationTypeStats,
        extract_savings,
        extract_by_type,
        accumulate_by_type,
        sort_type_stats,
    )
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from constants import AMOUNT_DECIMAL_PLACES, UNKNOWN_RECOMMENDATION_TYPE
from site_record import Recommendation, SiteRecord

logger = logging.getLogger(__name__)


@dataclass
class SavingsTotals:
    """Summed amounts over a set of recommendations.

    Attributes:
        savings: Sum of positive potential savings (GBP)
        carbon_savings: Sum of positive potential carbon savings (kg CO2)
        cost: Sum of all upgrade costs (GBP)
    """
    savings: float = 0.0
    carbon_savings: float = 0.0
    cost: float = 0.0

    def add_recommendation(self, recommendation: Recommendation) -> None:
        if recommendation.potential_savings > 0:
            self.savings += recommendation.potential_savings
        if recommendation.potential_carbon_savings > 0:
            self.carbon_savings += recommendation.potential_carbon_savings
        self.cost += recommendation.upgrade_cost

    def merge(self, other: 'SavingsTotals') -> None:
        self.savings += other.savings
        self.carbon_savings += other.carbon_savings
        self.cost += other.cost

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "savings": round(self.savings, AMOUNT_DECIMAL_PLACES),
            "carbon_savings": round(self.carbon_savings, AMOUNT_DECIMAL_PLACES),
            "cost": round(self.cost, AMOUNT_DECIMAL_PLACES),
        }


@dataclass
class RecommendationTypeStats:
    """Totals for one recommendation type.

    Attributes:
        type: Recommendation category
        count: Number of recommendation entries (not sites) of this type
        total_savings: Sum of positive potential savings
        total_cost: Sum of all upgrade costs
        total_carbon_savings: Sum of positive potential carbon savings
    """
    type: str
    count: int = 0
    total_savings: float = 0.0
    total_cost: float = 0.0
    total_carbon_savings: float = 0.0

    def add_recommendation(self, recommendation: Recommendation) -> None:
        self.count += 1
        if recommendation.potential_savings > 0:
            self.total_savings += recommendation.potential_savings
        if recommendation.potential_carbon_savings > 0:
            self.total_carbon_savings += recommendation.potential_carbon_savings
        self.total_cost += recommendation.upgrade_cost

    def merge(self, other: 'RecommendationTypeStats') -> None:
        self.count += other.count
        self.total_savings += other.total_savings
        self.total_cost += other.total_cost
        self.total_carbon_savings += other.total_carbon_savings

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type,
            "count": self.count,
            "total_savings": round(self.total_savings, AMOUNT_DECIMAL_PLACES),
            "total_cost": round(self.total_cost, AMOUNT_DECIMAL_PLACES),
            "total_carbon_savings": round(self.total_carbon_savings, AMOUNT_DECIMAL_PLACES),
        }


def extract_savings(recommendations: Optional[Iterable[Recommendation]]) -> SavingsTotals:
    """Sum the amounts of one site's recommendations.

    Args:
        recommendations: The site's recommendations (None or empty gives zeros)

    Returns:
        SavingsTotals with positive-only savings/carbon and unconditional cost

    Example:
        >>> extract_savings([Recommendation(potential_savings=-5, upgrade_cost=10)])
        SavingsTotals(savings=0.0, carbon_savings=0.0, cost=10.0)
    """
    totals = SavingsTotals()
    for recommendation in recommendations or ():
        totals.add_recommendation(recommendation)
    return totals


def extract_by_type(
    recommendations: Optional[Iterable[Recommendation]]
) -> Dict[str, RecommendationTypeStats]:
    """Sum a site's recommendations per recommendation type.

    Missing types were already normalised to "Unknown" by the record model;
    blank strings are folded in here as well.
    """
    by_type: Dict[str, RecommendationTypeStats] = {}
    for recommendation in recommendations or ():
        rec_type = recommendation.type or UNKNOWN_RECOMMENDATION_TYPE
        if rec_type not in by_type:
            by_type[rec_type] = RecommendationTypeStats(type=rec_type)
        by_type[rec_type].add_recommendation(recommendation)
    return by_type


def accumulate_by_type(records: Iterable[SiteRecord]) -> Dict[str, RecommendationTypeStats]:
    """Sum recommendations per type across many sites."""
    combined: Dict[str, RecommendationTypeStats] = {}
    for record in records:
        for rec_type, stats in extract_by_type(record.recommendations).items():
            if rec_type not in combined:
                combined[rec_type] = RecommendationTypeStats(type=rec_type)
            combined[rec_type].merge(stats)
    return combined


def sort_type_stats(stats: Dict[str, RecommendationTypeStats]) -> List[RecommendationTypeStats]:
    """Order type totals by savings (highest first), then type name."""
    return sorted(stats.values(), key=lambda s: (-s.total_savings, s.type))
