"""
NEAT Innovation Tracker Module

This module implements the InnovationTracker class for the
NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    InnovationTracker: Tracker for innovation numbers, node IDs and node layers
"""

from itertools import count
from typing    import TYPE_CHECKING

from neatcore.identifiers import LayerId, NodeId
from neatcore.run.config  import Topology
if TYPE_CHECKING:
    from neatcore.genotype.connection_gene import ConnectionGene

class InnovationTracker:
    """
    Tracks structural changes across all genomes of a population.
    Ensures the same structural change gets the same innovation
    number (for connections) and the same ID and layer (for nodes).

    One tracker is owned by each Population and passed explicitly to
    every operation that may create new genes; there is no global state.
    """

    def __init__(self, topology: Topology):
        """
        Parameters:
            topology: input/output interface of the population (hidden node
                      IDs are numbered after the input, bias and output nodes)
        """
        self._next_innovation_number = count(0)
        self._next_node_id           = count(topology.first_hidden_id)

        # For each connection ever created, map its endpoints to its innovation number
        self._innovation_numbers: dict[tuple[int, int], int] = {}

        # When a connection is split, tracks what node was created, on which
        # layer, and what innovation numbers were assigned to the new connections.
        self._split_IDs: dict[int, tuple[NodeId, LayerId, int, int]] = {}

    def get_innovation_number(self, node_in: int, node_out: int) -> int:
        """
        Get innovation number for a connection, identified by its endpoints.
        Returns existing innovation number if this connection was created
        before, otherwise assigns a new innovation number.

        Parameters:
            node_in:  node ID for the 'from' end of the connection
            node_out: node ID for the 'to'   end of the connection

        Returns:
            connection ID (a.k.a. innovation number)
        """
        key = (node_in, node_out)

        # This is a new connection
        if key not in self._innovation_numbers:
            self._innovation_numbers[key] = next(self._next_innovation_number)

        return self._innovation_numbers[key]

    def get_split_IDs(self,
                      conn_to_split: 'ConnectionGene',
                      layer_in     : LayerId,
                      layer_out    : LayerId) -> tuple[NodeId, LayerId, int, int] | None:
        """
        Get node ID, node layer and innovation numbers for splitting a connection.
        If this exact connection has been split before, returns the same
        values, otherwise creates new ones.

        Parameters:
            conn_to_split: the connection being split
            layer_in:      layer of the connection's source node
            layer_out:     layer of the connection's destination node

        Returns
            4-tuple: (new_node_id, new_node_layer, innovation1, innovation2)
            innovation1 is for the connection from the 'from' node of 'conn_to_split' to the new node
            innovation2 is for the connection from the new node to the 'to' node of 'conn_to_split'
            None if there is no free layer between the two endpoints
        """
        key = conn_to_split.innovation

        # This connection hasn't been split before
        if key not in self._split_IDs:

            layer = LayerId.between(layer_in, layer_out)
            if layer is None:
                return None

            new_node_id = NodeId(next(self._next_node_id))
            innov1      = self.get_innovation_number(conn_to_split.node_in, new_node_id)
            innov2      = self.get_innovation_number(new_node_id, conn_to_split.node_out)

            self._split_IDs[key] = (new_node_id, layer, innov1, innov2)

        return self._split_IDs[key]

    @property
    def innovation_count(self) -> int:
        """Number of distinct connections created so far."""
        return len(self._innovation_numbers)
