"""Tests for opportunity aggregation."""
from concurrent.futures import ThreadPoolExecutor
import pytest
from arbiloop.core.collector import OpportunityCollector
from arbiloop.models import ArbitrageOpportunity, Cycle


def opportunity(nodes, profit, optimal_input=1.0):
    return ArbitrageOpportunity(cycle=Cycle(tuple(nodes)), optimal_input=optimal_input, profit=profit)


class TestOpportunityCollector:
    """Test filtering, ranking and deduplication."""

    def test_keeps_only_positive_profit(self):
        """Test zero and negative profits are rejected."""
        collector = OpportunityCollector()

        assert collector.add(opportunity(['A-B', 'B-C', 'C-A'], 1.5))
        assert not collector.add(opportunity(['A-C', 'C-B', 'B-A'], 0.0))
        assert not collector.add(opportunity(['A-D', 'D-B', 'B-A'], -2.0))

        assert len(collector) == 1
        assert collector.rejected == 2

    def test_ranked_descending(self):
        """Test highest profit comes first."""
        collector = OpportunityCollector()
        collector.add(opportunity(['A-B', 'B-C', 'C-A'], 1.0))
        collector.add(opportunity(['A-D', 'D-C', 'C-A'], 5.0))
        collector.add(opportunity(['B-D', 'D-C', 'C-B'], 3.0))

        profits = [o.profit for o in collector.ranked()]

        assert profits == [5.0, 3.0, 1.0]
        assert [o.profit for o in collector.top(2)] == [5.0, 3.0]

    def test_deduplicates_rotations(self):
        """Test a rotated duplicate is dropped when deduplication is on."""
        collector = OpportunityCollector(deduplicate=True)
        collector.add(opportunity(['A-B', 'B-C', 'C-A'], 1.0))
        collector.add(opportunity(['B-C', 'C-A', 'A-B'], 1.2))

        assert len(collector) == 1
        assert collector.duplicates == 1

    def test_keeps_duplicates_when_disabled(self):
        """Test duplicates are tolerated without deduplication."""
        collector = OpportunityCollector(deduplicate=False)
        collector.add(opportunity(['A-B', 'B-C', 'C-A'], 1.0))
        collector.add(opportunity(['A-B', 'B-C', 'C-A'], 1.0))

        assert len(collector) == 2

    def test_concurrent_adds(self):
        """Test appends from many threads are all kept."""
        collector = OpportunityCollector(deduplicate=False)
        items = [opportunity(['A-B', 'B-C', 'C-A'], float(i + 1)) for i in range(200)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(collector.add, items))

        assert len(collector) == 200
        assert collector.ranked()[0].profit == 200.0

    def test_empty(self):
        """Test an empty collector ranks to an empty list."""
        assert OpportunityCollector().top(10) == []
