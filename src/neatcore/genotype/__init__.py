"""
NEAT Genotype Package

This package implements the genotype representation for the NEAT (NeuroEvolution of
Augmenting Topologies) algorithm: the genetic encoding of layered, feed-forward networks.

The NEAT genotype consists of two types of genes:
- Node genes:       Encode network nodes and the layer they sit on
- Connection genes: Encode weighted connections between nodes, with innovation numbers

Modules:
    node_gene:          NodeType enumeration and NodeGene class
    connection_gene:    ConnectionGene class
    genome:             Genome class
    innovation_tracker: InnovationTracker class

Exported Classes:
    NodeType:          Enumeration for node types (INPUT, BIAS, HIDDEN, OUTPUT)
    NodeGene:          Gene encoding a single network node
    ConnectionGene:    Gene encoding a weighted connection between nodes
    Genome:            Complete genome representing a neural network
    InnovationTracker: Per-population tracker for innovation numbers and node IDs
"""

from neatcore.genotype.connection_gene    import ConnectionGene
from neatcore.genotype.genome             import Genome
from neatcore.genotype.innovation_tracker import InnovationTracker
from neatcore.genotype.node_gene          import NodeType, NodeGene

__all__ = ['ConnectionGene',
           'Genome',
           'InnovationTracker',
           'NodeGene',
           'NodeType']
