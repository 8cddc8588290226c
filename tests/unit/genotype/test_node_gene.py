"""
Unit tests for NodeGene class and NodeType enumeration.
"""

import pytest

from neatcore.genotype.node_gene import NodeGene, NodeType
from neatcore.identifiers        import LayerId, NodeId


# ============================================================================
# Test: NodeType
# ============================================================================

class TestNodeType:

    def test_values(self):
        assert NodeType.INPUT.value  == "I"
        assert NodeType.BIAS.value   == "B"
        assert NodeType.HIDDEN.value == "H"
        assert NodeType.OUTPUT.value == "O"

    def test_lookup_by_value(self):
        assert NodeType("H") is NodeType.HIDDEN


# ============================================================================
# Test: NodeGene
# ============================================================================

class TestNodeGeneInit:
    """Test NodeGene initialization."""

    def test_basic_initialization(self):
        node = NodeGene(4, NodeType.HIDDEN, 1024)

        assert node.id == 4
        assert node.type is NodeType.HIDDEN
        assert node.layer == 1024
        assert node.value == 0.0

    def test_identifier_types(self):
        node = NodeGene(4, NodeType.HIDDEN, 1024)
        assert isinstance(node.id, NodeId)
        assert isinstance(node.layer, LayerId)

    def test_custom_value(self):
        node = NodeGene(0, NodeType.INPUT, LayerId.INPUT, value=0.5)
        assert node.value == 0.5


class TestNodeGeneEquality:
    """Nodes are equal when ID, type and layer are equal; the scratch value is ignored."""

    def test_equal(self):
        assert NodeGene(1, NodeType.INPUT, 0) == NodeGene(1, NodeType.INPUT, 0, value=3.0)

    def test_different_id(self):
        assert NodeGene(1, NodeType.INPUT, 0) != NodeGene(2, NodeType.INPUT, 0)

    def test_different_layer(self):
        assert NodeGene(5, NodeType.HIDDEN, 10) != NodeGene(5, NodeType.HIDDEN, 20)

    def test_different_type(self):
        assert NodeGene(2, NodeType.INPUT, 0) != NodeGene(2, NodeType.BIAS, 0)

    def test_not_equal_to_other_types(self):
        assert NodeGene(1, NodeType.INPUT, 0) != 1

    def test_hashable(self):
        nodes = {NodeGene(1, NodeType.INPUT, 0), NodeGene(1, NodeType.INPUT, 0, value=1.0)}
        assert len(nodes) == 1


class TestNodeGeneStrings:

    def test_str(self):
        assert str(NodeGene(3, NodeType.OUTPUT, LayerId.OUTPUT)) == "[O3]"
        assert str(NodeGene(0, NodeType.INPUT,  LayerId.INPUT))  == "[I0]"

    def test_repr(self):
        node = NodeGene(7, NodeType.HIDDEN, 512)
        assert repr(node) == "NodeGene(node_id=007, node_type=NodeType.HIDDEN, layer=512)"
