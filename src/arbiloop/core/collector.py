"""Aggregation and ranking of profitable cycles."""
from threading import Lock
from typing import List, Set, Tuple
from arbiloop.models import ArbitrageOpportunity


class OpportunityCollector:
    """Append-only store of profitable opportunities, safe to share across threads."""

    def __init__(self, deduplicate: bool = True):
        self.deduplicate = deduplicate
        self._opportunities: List[ArbitrageOpportunity] = []
        self._seen: Set[Tuple[str, ...]] = set()
        self._lock = Lock()
        self.rejected = 0
        self.duplicates = 0

    def add(self, opportunity: ArbitrageOpportunity) -> bool:
        """Keep the opportunity if it makes a strictly positive profit."""
        with self._lock:
            if not opportunity.profit > 0:
                self.rejected += 1
                return False
            if self.deduplicate:
                key = opportunity.cycle.key
                if key in self._seen:
                    self.duplicates += 1
                    return False
                self._seen.add(key)
            self._opportunities.append(opportunity)
            return True

    def ranked(self) -> List[ArbitrageOpportunity]:
        """All kept opportunities, highest profit first."""
        with self._lock:
            return sorted(self._opportunities, key=lambda o: o.profit, reverse=True)

    def top(self, n: int) -> List[ArbitrageOpportunity]:
        return self.ranked()[:n]

    def __len__(self) -> int:
        with self._lock:
            return len(self._opportunities)
