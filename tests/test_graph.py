"""Tests for rate graph and line graph construction."""
import math
import pytest
from arbiloop.core.graph import Graph, build_rate_graph, build_line_graph, rate_weight
from arbiloop.infrastructure.error_handling import ErrorHandler


class TestGraph:
    """Test the graph container."""

    def test_add_edge_adds_nodes(self):
        """Test edges create their endpoints."""
        graph = Graph()
        graph.add_edge('a', 'b', 1.5)

        assert graph.nodes == ['a', 'b']
        assert graph.has_edge('a', 'b')
        assert not graph.has_edge('b', 'a')
        assert graph.weight('a', 'b') == 1.5
        assert graph.edge_count == 1

    def test_overwrite_keeps_single_successor(self):
        """Test re-adding an edge updates the weight only."""
        graph = Graph()
        graph.add_edge('a', 'b', 1.0)
        graph.add_edge('a', 'b', 2.0)

        assert graph.successors('a') == ['b']
        assert graph.weight('a', 'b') == 2.0

    def test_edges_in_insertion_order(self):
        """Test edge iteration is grouped by source in insertion order."""
        graph = Graph()
        graph.add_node('x')
        graph.add_edge('y', 'x', 1.0)
        graph.add_edge('x', 'y', 2.0)

        assert list(graph.edges()) == [('x', 'y', 2.0), ('y', 'x', 1.0)]


class TestRateGraph:
    """Test the token graph builder."""

    def test_weights_are_negative_log_rates(self, abc_tokens, abc_pools):
        """Test both directions of every pool carry -ln((1 - fee) * price)."""
        graph = build_rate_graph(abc_tokens, abc_pools, fee_rate=0.003)

        assert graph.node_count == 3
        assert graph.edge_count == 6
        assert graph.weight('A', 'B') == pytest.approx(-math.log(0.997 * 2.0))
        assert graph.weight('B', 'A') == pytest.approx(-math.log(0.997 * 0.5))
        assert graph.weight('A', 'C') == pytest.approx(-math.log(0.997 * 2.0))
        assert graph.weight('A', 'B') != graph.weight('B', 'A')

    def test_negative_cycle_matches_profitable_loop(self, abc_tokens, abc_pools):
        """Test the summed weight is negative exactly when the rate product exceeds 1."""
        graph = build_rate_graph(abc_tokens, abc_pools, fee_rate=0.003)

        forward = graph.weight('A', 'C') + graph.weight('C', 'B') + graph.weight('B', 'A')
        backward = graph.weight('A', 'B') + graph.weight('B', 'C') + graph.weight('C', 'A')

        assert forward < 0
        assert backward > 0

    def test_skips_pools_outside_universe(self, abc_tokens, abc_pools, pool_factory):
        """Test a pool with an unknown token adds no edges."""
        pools = abc_pools + [pool_factory('ad', 'A', 'D', 10, 10)]

        graph = build_rate_graph(abc_tokens, pools)

        assert 'D' not in graph
        assert graph.edge_count == 6

    def test_accepts_plain_token_ids(self, abc_pools):
        """Test the universe may be given as ids."""
        graph = build_rate_graph(['A', 'B'], abc_pools)

        assert graph.nodes == ['A', 'B']
        assert graph.edge_count == 2

    def test_malformed_pool_is_dropped(self, abc_tokens, abc_pools):
        """Test a bad record is skipped and counted while the rest still build."""
        abc_pools[1]['reserve0'] = 'not-a-number'
        abc_pools[2]['token0Price'] = '-3'
        handler = ErrorHandler()

        graph = build_rate_graph(abc_tokens, abc_pools, error_handler=handler)

        assert graph.edge_count == 2
        assert handler.count('DataFormatError') == 2

    def test_no_usable_pools_gives_empty_graph(self, abc_tokens, abc_pools):
        """Test an empty edge set is a valid result."""
        for pool in abc_pools:
            pool['reserve0'] = None

        graph = build_rate_graph(abc_tokens, abc_pools)

        assert graph.node_count == 3
        assert graph.edge_count == 0

    def test_token_id_with_separator_is_rejected(self, pool_factory):
        """Test ids that would make ambiguous line-graph labels are dropped."""
        handler = ErrorHandler()
        graph = build_rate_graph(['A-1', 'B'], [pool_factory('x', 'A-1', 'B', 1, 1)], error_handler=handler)

        assert graph.edge_count == 0
        assert handler.count('DataFormatError') == 1

    def test_duplicate_pool_keeps_first(self, abc_tokens, abc_pools, pool_factory):
        """Test a second pool for the same pair is ignored."""
        pools = abc_pools + [pool_factory('ab2', 'B', 'A', 1, 100)]

        graph = build_rate_graph(abc_tokens, pools)

        assert graph.weight('A', 'B') == pytest.approx(-math.log(0.997 * 2.0))

    def test_zero_price_gives_infinite_weight(self):
        """Test a zero effective rate never relaxes."""
        assert rate_weight(0.0, 0.003) == math.inf


class TestLineGraph:
    """Test the edge-to-node transform."""

    def test_one_node_per_edge(self, abc_tokens, abc_pools):
        """Test line graph nodes mirror rate graph edges."""
        graph = build_rate_graph(abc_tokens, abc_pools)
        line_graph = build_line_graph(graph)

        assert line_graph.node_count == graph.edge_count
        assert set(line_graph.nodes) == {'A-B', 'A-C', 'B-A', 'B-C', 'C-B', 'C-A'}

    def test_no_immediate_reversal(self, abc_tokens, abc_pools):
        """Test (A,B) never links to (B,A)."""
        line_graph = build_line_graph(build_rate_graph(abc_tokens, abc_pools))

        for u, v, _ in line_graph.edges():
            a, b = u.split('-')
            b2, c = v.split('-')
            assert b == b2
            assert a != c

        assert line_graph.edge_count == 6
        assert line_graph.successors('A-B') == ['B-C']

    def test_weights_copied_exactly(self, abc_tokens, abc_pools):
        """Test each line edge carries the weight of its second rate edge."""
        graph = build_rate_graph(abc_tokens, abc_pools)
        line_graph = build_line_graph(graph)

        for u, v, weight in line_graph.edges():
            b, c = v.split('-')
            assert weight == graph.weight(b, c)

    def test_empty_graph(self):
        """Test an edgeless graph transforms to an empty graph."""
        graph = Graph()
        graph.add_node('A')

        line_graph = build_line_graph(graph)

        assert line_graph.node_count == 0
        assert line_graph.edge_count == 0
