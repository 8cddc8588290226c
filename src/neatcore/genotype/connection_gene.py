"""
NEAT Connection Gene Module

This module implements the ConnectionGene class for the
NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    ConnectionGene: Gene encoding a weighted connection between nodes
"""

import numpy as np

from neatcore.identifiers    import NodeId
from neatcore.random_source  import RandomSource
from neatcore.run.config     import Settings

class ConnectionGene:
    """
    A gene describing a weighted connection between two nodes in a Neural Network.

    Each connection gene represents a directed edge in the neural network graph,
    connecting a source node to a destination node with an associated weight.
    Connection genes are uniquely identified by their innovation number, which
    serves as a historical marker enabling gene alignment during crossover and
    distance computation.

    Connections can be enabled or disabled. A disabled gene is still part of
    the genome: it keeps its place in the alignment history.

    Public Attributes:
        node_in:    ID of the source node
        node_out:   ID of the destination node
        weight:     Weight of the connection
        enabled:    Whether this connection is active in the network
        innovation: Innovation number uniquely identifying this connection

    Public Methods:
        mutate(rng, settings): Perturb or replace the connection weight
    """

    def __init__(self,
                 node_in   : int,
                 node_out  : int,
                 weight    : float,
                 innovation: int,
                 enabled   : bool = True):
        """
        Initialize a connection gene.

        Parameters:
            node_in:    ID of the source node
            node_out:   ID of the destination node
            weight:     Weight of the connection
            innovation: Number uniquely and globally identifying this connection
            enabled:    Whether this connection is active in the network
        """
        self.node_in   : NodeId = NodeId(node_in)
        self.node_out  : NodeId = NodeId(node_out)
        self.weight    : float  = weight
        self.enabled   : bool   = enabled
        self.innovation: int    = innovation

    def mutate(self, rng: RandomSource, settings: Settings) -> None:
        """
        Mutate the connection weight.

        The weight is either modified additively by a small normally distributed
        amount (with probability 'prob_mutation_weight_perturbation'), or replaced
        by a fresh uniform draw.
        """
        if rng.bernoulli(settings.prob_mutation_weight_perturbation):
            new_weight  = self.weight + rng.gauss(0.0, settings.weight_perturb_strength)
            self.weight = float(np.clip(new_weight, settings.min_weight, settings.max_weight))
        else:
            self.weight = rng.uniform_real(settings.weight_init_low, settings.weight_init_high)

    def __eq__(self, other):
        if not isinstance(other, ConnectionGene):
            return NotImplemented
        return (self.node_in    == other.node_in  and
                self.node_out   == other.node_out and
                self.weight     == other.weight   and
                self.enabled    == other.enabled  and
                self.innovation == other.innovation)

    def __repr__(self):
        return (f"ConnectionGene(node_in={self.node_in:03d}, node_out={self.node_out:03d},"
                f"weight={self.weight:+.6f}, enabled={self.enabled}, innovation={self.innovation:03d})")

    def __str__(self):
        s  = f"[{self.innovation:03d},{'E' if self.enabled else 'D'},"
        s += f"{self.node_in:02d}=>{self.node_out:02d},{self.weight:+.02f}]"
        return s
