"""
NEAT Node Gene Module.

This module implements the NodeGene class and NodeType enumeration
for the NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    NodeType: Enumeration for node types (INPUT, BIAS, HIDDEN, OUTPUT)
    NodeGene: Gene encoding a single network node
"""

from enum import Enum

from neatcore.identifiers import LayerId, NodeId

class NodeType(Enum):
    """
    Nodes come in four types: input, bias, hidden, output.
    The bias node sits on the input layer and always emits a constant.
    """
    INPUT  = "I"
    BIAS   = "B"
    HIDDEN = "H"
    OUTPUT = "O"

class NodeGene:
    """
    A gene describing a node in a feed-forward Neural Network.

    Node genes are identified by a node ID which denotes the same node in every
    genome of the population. A node sits on a layer; connections always go
    from a lower layer to a strictly higher one, which keeps the network acyclic.
    Since the layer of a hidden node is fixed when the node is first created,
    the same node ID always sits on the same layer, in every genome.

    Public Attributes:
        id:    Unique identifier for this node
        type:  Type of node (INPUT, BIAS, HIDDEN or OUTPUT)
        layer: The layer this node belongs to
        value: Scratch value for phenotype evaluation; meaningless between generations
    """

    def __init__(self, node_id: int, node_type: NodeType, layer: int, value: float = 0.0):
        """
        Parameters:
            node_id:   Unique identifier for this node
            node_type: Type of node (INPUT, BIAS, HIDDEN or OUTPUT)
            layer:     The layer this node belongs to
            value:     Initial scratch value
        """
        self.id   : NodeId   = NodeId(node_id)
        self.type : NodeType = node_type
        self.layer: LayerId  = LayerId(layer)
        self.value: float    = value

    def __eq__(self, other):
        if not isinstance(other, NodeGene):
            return NotImplemented
        return self.id == other.id and self.type == other.type and self.layer == other.layer

    def __hash__(self):
        return hash((self.id, self.type, self.layer))

    def __repr__(self):
        return f"NodeGene(node_id={self.id:03d}, node_type=NodeType.{self.type.name}, layer={int(self.layer)})"

    def __str__(self):
        return f"[{self.type.value}{self.id}]"
