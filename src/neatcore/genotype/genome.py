"""
NEAT Genome Module

This module implements the Genome class for the NEAT
(NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    Genome: Complete genome representing a layered, feed-forward network structure
"""

import bisect
import copy

from neatcore.genotype.connection_gene    import ConnectionGene
from neatcore.genotype.innovation_tracker import InnovationTracker
from neatcore.genotype.node_gene          import NodeType, NodeGene
from neatcore.identifiers                 import GenomeId, LayerId, NodeId, SpecieId
from neatcore.random_source               import RandomSource
from neatcore.run.config                  import Settings, Topology

class Genome:
    """
    A NEAT genome representing a neural network as a collection of node and connection genes.

    In the NEAT (NeuroEvolution of Augmenting Topologies) algorithm, a genome encodes
    the structure and parameters of a neural network at the genotype level. It consists of:
    - Node genes: describe network nodes (input, bias, hidden, output), grouped by layer
    - Connection genes: describe weighted connections between nodes, each with a unique
      innovation number used to align genes during crossover and distance computation

    Nodes are organized in layers. Input (and bias) nodes sit on 'LayerId.INPUT', output
    nodes on 'LayerId.OUTPUT', hidden nodes on layers strictly in between. Every connection
    goes from a lower layer to a strictly higher one, so the network is always acyclic.

    Node numbering convention:
        - Input nodes:  [0, num_inputs)
        - Bias node:    num_inputs (only if the topology has a bias)
        - Output nodes: the following num_outputs IDs
        - Hidden nodes: assigned by the InnovationTracker afterwards

    Public Attributes:
        id:               Population slot of this genome
        conn_genes:       Dictionary mapping innovation numbers to ConnectionGene objects
        layers:           Sorted list of the layers present in the genome
        nodes:            Node genes grouped by layer (parallel to 'layers')
        fitness:          Raw fitness, written by the external evaluator
        adjusted_fitness: Fitness shared among the members of the genome's species
        species:          ID of the species the genome belongs to

    Public Methods:
        new_random(rng, genome_id, topology, tracker): Minimal fully connected genome
        crossover(parent_1, parent_2, genome_id, rng, settings): Offspring of two genomes
        similarity(other, settings): Compatibility distance to another genome
        mutate(rng, settings, tracker): Weight and structural mutations
        validate(): Check the genome invariants
        copy(genome_id): Independent copy of the genome
        to_dict() / from_dict(genome_dict): Dictionary description of the genome
    """

    def __init__(self, genome_id: int, topology: Topology):
        """
        Initialize a genome holding only the input, bias and output nodes, and no connections.

        Parameters:
            genome_id: population slot of this genome
            topology:  input/output interface shared by the population
        """
        self._topology: Topology = topology

        self.id              : GenomeId                  = GenomeId(genome_id)
        self.conn_genes      : dict[int, ConnectionGene] = {}  # innovation number => connection gene
        self.fitness         : float                     = 0.0
        self.adjusted_fitness: float                     = 0.0
        self.species         : SpecieId                  = SpecieId(0)

        input_layer = [NodeGene(i, NodeType.INPUT, LayerId.INPUT) for i in range(topology.num_inputs)]
        if topology.bias:
            input_layer.append(NodeGene(topology.num_inputs, NodeType.BIAS, LayerId.INPUT))

        output_layer = [NodeGene(topology.num_input_nodes + i, NodeType.OUTPUT, LayerId.OUTPUT)
                        for i in range(topology.num_outputs)]

        self.layers: list[LayerId]        = [LayerId.INPUT, LayerId.OUTPUT]
        self.nodes : list[list[NodeGene]] = [input_layer, output_layer]

    @classmethod
    def new_random(cls,
                   rng      : RandomSource,
                   genome_id: int,
                   topology : Topology,
                   tracker  : InnovationTracker,
                   settings : Settings | None = None) -> 'Genome':
        """
        Create a minimal genome: every input (and bias) node connected to every
        output node, with weights drawn uniformly from the initialization range.
        """
        settings = settings or Settings()
        genome   = cls(genome_id, topology)

        for node_in in genome.nodes[0]:
            for node_out in genome.nodes[-1]:
                innovation = tracker.get_innovation_number(node_in.id, node_out.id)
                weight     = rng.uniform_real(settings.weight_init_low, settings.weight_init_high)
                genome.conn_genes[innovation] = ConnectionGene(node_in.id, node_out.id, weight, innovation)

        return genome

    @property
    def topology(self) -> Topology:
        return self._topology

    @property
    def connections(self) -> list[ConnectionGene]:
        return list(self.conn_genes.values())

    @property
    def node_genes(self) -> dict[NodeId, NodeGene]:
        return {node.id: node for layer_nodes in self.nodes for node in layer_nodes}

    @property
    def input_nodes(self) -> list[NodeGene]:
        return [node for node in self.nodes[0] if node.type == NodeType.INPUT]

    @property
    def bias_node(self) -> NodeGene | None:
        return next((node for node in self.nodes[0] if node.type == NodeType.BIAS), None)

    @property
    def output_nodes(self) -> list[NodeGene]:
        return list(self.nodes[-1])

    @property
    def hidden_nodes(self) -> list[NodeGene]:
        return [node for layer_nodes in self.nodes[1:-1] for node in layer_nodes]

    def _add_node(self, node: NodeGene) -> None:
        """
        Insert a node gene, creating its layer if the genome does not have it yet.
        """
        index = bisect.bisect_left(self.layers, node.layer)
        if index == len(self.layers) or self.layers[index] != node.layer:
            self.layers.insert(index, node.layer)
            self.nodes.insert(index, [])
        self.nodes[index].append(node)

    def similarity(self, other: 'Genome', settings: Settings) -> float:
        """
        Calculate the compatibility distance between this genome and another.

           distance = (c1 * E + c2 * D) / N + c3 * W̄

        Where:
        - E = number of excess genes (beyond the other genome's largest innovation number)
        - D = number of disjoint genes (non-matching, within the overlapping range)
        - N = number of genes in the larger genome, or 1 when both genomes have
              fewer than 'normalized_gene_size' genes
        - W̄ = average weight difference of matching genes
        - c1, c2, c3 = weights of the various terms (from the settings)

        Neither genome is modified; the result is symmetric.

        Parameters:
            other:    the genome relative to which we are calculating the distance
            settings: provides the coefficients

        Returns:
            the compatibility distance between this genome and 'other'
        """
        innovs1 = set(self.conn_genes.keys())
        innovs2 = set(other.conn_genes.keys())
        if not innovs1 and not innovs2:
            return 0.0

        matching_innovs     = innovs1 & innovs2
        non_matching_innovs = innovs1 ^ innovs2

        max_innov1 = max(innovs1, default=-1)
        max_innov2 = max(innovs2, default=-1)

        num_excess   = 0
        num_disjoint = 0
        for innov in non_matching_innovs:
            if innov > min(max_innov1, max_innov2):
                num_excess += 1
            else:
                num_disjoint += 1

        # Sorted, so that both argument orders add up the terms in the same order
        avg_weight_diff = 0.0
        if matching_innovs:
            weight_diff = sum(abs(self.conn_genes[i].weight - other.conn_genes[i].weight)
                              for i in sorted(matching_innovs))
            avg_weight_diff = weight_diff / len(matching_innovs)

        N = max(len(innovs1), len(innovs2))
        if len(innovs1) < settings.normalized_gene_size and len(innovs2) < settings.normalized_gene_size:
            N = 1

        return ((settings.coeficient_excess   * num_excess +
                 settings.coeficient_disjoint * num_disjoint) / N +
                settings.coeficient_weight * avg_weight_diff)

    @staticmethod
    def crossover(parent_1 : 'Genome',
                  parent_2 : 'Genome',
                  genome_id: int,
                  rng      : RandomSource,
                  settings : Settings) -> 'Genome':
        """
        Perform NEAT crossover between two genomes to create an offspring.

        Crossover rules:
        - Matching genes: inherited from the fitter parent with probability
          'prob_inherit_on_fitter_genomre', otherwise from the other one. A gene
          disabled in either parent is inherited disabled with probability
          'prob_inherit_disabled_gene'.
        - Disjoint/excess genes: inherited from the fitter parent only.

        When both parents have the same fitness, a coin flip decides which one counts as fitter.

        Parameters:
            parent_1:  first parent (by convention the fitter one)
            parent_2:  second parent
            genome_id: population slot of the offspring
            rng:       source of randomness
            settings:  provides the inheritance probabilities

        Returns:
            New offspring genome

        Raises:
            ValueError:   if the parents do not share the same input/output interface
            RuntimeError: if the offspring violates the genome invariants
        """
        if parent_1.topology != parent_2.topology:
            raise ValueError("cannot cross genomes with different input/output interfaces")

        if parent_1.fitness > parent_2.fitness:
            fitter, other = parent_1, parent_2
        elif parent_2.fitness > parent_1.fitness:
            fitter, other = parent_2, parent_1
        elif rng.bernoulli(0.5):
            fitter, other = parent_1, parent_2
        else:
            fitter, other = parent_2, parent_1

        offspring = Genome(genome_id, fitter.topology)

        for innov in sorted(fitter.conn_genes.keys() | other.conn_genes.keys()):
            if innov in fitter.conn_genes and innov in other.conn_genes:
                conn_fitter = fitter.conn_genes[innov]
                conn_other  = other.conn_genes [innov]

                donor     = conn_fitter if rng.bernoulli(settings.prob_inherit_on_fitter_genomre) else conn_other
                conn_gene = copy.copy(donor)
                if not (conn_fitter.enabled and conn_other.enabled):
                    conn_gene.enabled = not rng.bernoulli(settings.prob_inherit_disabled_gene)

            elif innov in fitter.conn_genes:
                conn_gene = copy.copy(fitter.conn_genes[innov])

            else:
                continue

            offspring.conn_genes[innov] = conn_gene

        # Host every node referenced by the inherited connections.
        # Input, bias and output nodes are already present.
        offspring_nodes = offspring.node_genes
        fitter_nodes    = fitter.node_genes
        other_nodes     = other.node_genes
        for conn_gene in offspring.conn_genes.values():
            for node_id in (conn_gene.node_in, conn_gene.node_out):
                if node_id in offspring_nodes:
                    continue
                parent_node = fitter_nodes.get(node_id) or other_nodes.get(node_id)
                if parent_node is None:
                    raise RuntimeError(f"node ID {node_id} cannot be found in either parent")
                node = NodeGene(parent_node.id, parent_node.type, parent_node.layer)
                offspring._add_node(node)
                offspring_nodes[node_id] = node

        offspring.validate()
        return offspring

    def mutate(self, rng: RandomSource, settings: Settings, tracker: InnovationTracker) -> None:
        """
        Apply to the current genome all possible mutation operations.

        The list of possible mutations is:
          + mutate the weights of the enabled connections
          + add a connection
          + add a node (split an existing connection)
        Each mutation occurs independently, with a given probability.
        Mutation never removes a gene and never breaks the layer ordering.
        """
        do_mutate_weights = rng.bernoulli(settings.prob_mutation_weight)
        do_add_connection = rng.bernoulli(settings.prob_mutation_new_connection)
        do_add_node       = rng.bernoulli(settings.prob_mutation_new_node)

        if do_mutate_weights:
            for conn in self.conn_genes.values():
                if conn.enabled:
                    conn.mutate(rng, settings)
        if do_add_connection:
            self._mutate_add_connection(rng, settings, tracker)
        if do_add_node:
            self._mutate_add_node(rng, tracker)

        self.validate()

    def _mutate_add_node(self, rng: RandomSource, tracker: InnovationTracker) -> None:
        """
        Split an existing connection by adding a new node.
        The connection to split is selected at random from all 'enabled' connections.
        The new node sits on a layer halfway between the connection's endpoints; the
        connection into it gets weight 1.0, the one out of it the old weight.
        """
        enabled_conn_genes = [gene for gene in self.conn_genes.values() if gene.enabled]
        if not enabled_conn_genes:
            return
        split_conn_gene = rng.choice(enabled_conn_genes)

        node_genes = self.node_genes
        split_IDs  = tracker.get_split_IDs(split_conn_gene,
                                           node_genes[split_conn_gene.node_in ].layer,
                                           node_genes[split_conn_gene.node_out].layer)
        if split_IDs is None:
            return  # endpoints on adjacent layers
        new_node_id, new_layer, innov1, innov2 = split_IDs

        split_conn_gene.enabled = False

        # The genome may already hold some of the new genes (inherited from a
        # genome where the same connection was split): reuse them, enabled.
        if new_node_id not in node_genes:
            self._add_node(NodeGene(new_node_id, NodeType.HIDDEN, new_layer))

        if innov1 in self.conn_genes:
            self.conn_genes[innov1].enabled = True
        else:
            self.conn_genes[innov1] = ConnectionGene(split_conn_gene.node_in, new_node_id, 1.0, innov1)

        if innov2 in self.conn_genes:
            self.conn_genes[innov2].enabled = True
        else:
            self.conn_genes[innov2] = ConnectionGene(new_node_id, split_conn_gene.node_out,
                                                     split_conn_gene.weight, innov2)

    def _mutate_add_connection(self, rng: RandomSource, settings: Settings, tracker: InnovationTracker) -> None:
        """
        Add a new connection between two existing nodes.

        Candidates are all node pairs on different layers that are not already linked
        by a gene (enabled or not); the connection always goes from the lower layer to
        the higher one. Nothing happens if the genome is already fully connected.
        """
        connected_nodes = {(conn.node_in, conn.node_out) for conn in self.conn_genes.values()}

        candidates = [(node_in.id, node_out.id)
                      for i, lower_nodes in enumerate(self.nodes)
                      for upper_nodes in self.nodes[i + 1:]
                      for node_in in lower_nodes
                      for node_out in upper_nodes
                      if (node_in.id, node_out.id) not in connected_nodes]
        if not candidates:
            return

        node_in, node_out = rng.choice(candidates)
        innovation = tracker.get_innovation_number(node_in, node_out)
        weight     = rng.uniform_real(settings.weight_init_low, settings.weight_init_high)
        self.conn_genes[innovation] = ConnectionGene(node_in, node_out, weight, innovation)

    def validate(self) -> None:
        """
        Check the genome invariants:
         + layers are sorted and every node sits in the group of its own layer
         + node IDs and connection endpoints are unique
         + every connection joins two existing nodes, from a lower to a higher layer

        Raises:
            RuntimeError: if any invariant is violated
        """
        if any(low >= high for low, high in zip(self.layers, self.layers[1:])):
            raise RuntimeError(f"genome {self.id}: layers are not strictly increasing")

        node_genes = {}
        for layer, layer_nodes in zip(self.layers, self.nodes):
            for node in layer_nodes:
                if node.layer != layer:
                    raise RuntimeError(f"genome {self.id}: node {node.id} is grouped under the wrong layer")
                if node.id in node_genes:
                    raise RuntimeError(f"genome {self.id}: duplicate node {node.id}")
                node_genes[node.id] = node

        endpoints = set()
        for innov, conn in self.conn_genes.items():
            if conn.innovation != innov:
                raise RuntimeError(f"genome {self.id}: gene {conn} is stored under innovation {innov}")
            if (conn.node_in, conn.node_out) in endpoints:
                raise RuntimeError(f"genome {self.id}: duplicate connection {conn.node_in}=>{conn.node_out}")
            endpoints.add((conn.node_in, conn.node_out))

            if conn.node_in not in node_genes or conn.node_out not in node_genes:
                raise RuntimeError(f"genome {self.id}: connection {conn} references a missing node")
            if node_genes[conn.node_in].layer >= node_genes[conn.node_out].layer:
                raise RuntimeError(f"genome {self.id}: connection {conn} does not lead to a higher layer")

    def copy(self, genome_id: int | None = None) -> 'Genome':
        """
        Return an independent copy of this genome, optionally placed in another population slot.
        """
        clone = copy.deepcopy(self)
        if genome_id is not None:
            clone.id = GenomeId(genome_id)
        return clone

    @classmethod
    def from_dict(cls, genome_dict: dict, tracker: InnovationTracker | None = None) -> 'Genome':
        """
        Create a Genome from a dictionary description.

        Dictionary format:
            {
                "id": 0,                   # Optional, defaults to 0
                "fitness": 1.5,            # Optional, defaults to 0.0
                "nodes": [
                    {"id": 0, "type": "input"},
                    {"id": 1, "type": "input"},
                    {"id": 2, "type": "bias"},
                    {"id": 3, "type": "output"},
                    {"id": 4, "type": "hidden", "layer": 1024}
                ],
                "connections": [
                    {"from": 0, "to": 4, "weight":  0.5, "enabled": true, "innovation": 0},
                    {"from": 4, "to": 3, "weight": -0.3, "enabled": true, "innovation": 1}
                ]
            }

        The input/output interface is inferred from the node list. Connections without an
        "innovation" field get their innovation number from 'tracker' (which is then required).

        Parameters:
            genome_dict: Dictionary describing the genome structure
            tracker:     Assigns innovation numbers to connections lacking one

        Returns:
            A new Genome object with the specified structure

        Raises:
            ValueError: If the structure is invalid (wrong node numbering, unknown nodes, etc.)
            KeyError:   If required fields are missing from the dictionary
        """
        nodes_data   = genome_dict["nodes"]
        input_nodes  = [n for n in nodes_data if n["type"] == "input"]
        bias_nodes   = [n for n in nodes_data if n["type"] == "bias"]
        output_nodes = [n for n in nodes_data if n["type"] == "output"]
        hidden_nodes = [n for n in nodes_data if n["type"] == "hidden"]

        if len(input_nodes) + len(bias_nodes) + len(output_nodes) + len(hidden_nodes) != len(nodes_data):
            raise ValueError("Unknown node type in node list")
        if len(bias_nodes) > 1:
            raise ValueError("A genome has at most one bias node")

        topology = Topology(len(input_nodes), len(output_nodes), bool(bias_nodes))
        cls._validate_node_numbering(topology, input_nodes, bias_nodes, output_nodes, hidden_nodes)

        genome = cls(genome_dict.get("id", 0), topology)
        genome.fitness = genome_dict.get("fitness", 0.0)

        for node_data in hidden_nodes:
            layer = node_data["layer"]
            if not LayerId.INPUT < layer < LayerId.OUTPUT:
                raise ValueError(f"Hidden node {node_data['id']} must sit strictly between the input and output layers")
            genome._add_node(NodeGene(node_data["id"], NodeType.HIDDEN, layer))

        node_genes = genome.node_genes
        for conn_data in genome_dict.get("connections", []):
            node_in  = conn_data["from"]
            node_out = conn_data["to"]

            if node_in not in node_genes:
                raise ValueError(f"Connection references non-existent source node: {node_in}")
            if node_out not in node_genes:
                raise ValueError(f"Connection references non-existent destination node: {node_out}")
            if node_genes[node_in].layer >= node_genes[node_out].layer:
                raise ValueError(f"Connection from {node_in} to {node_out} does not lead to a higher layer")

            innovation = conn_data.get("innovation")
            if innovation is None:
                if tracker is None:
                    raise ValueError(f"Connection {node_in}=>{node_out} has no innovation number and no tracker was given")
                innovation = tracker.get_innovation_number(node_in, node_out)
            if innovation in genome.conn_genes:
                raise ValueError(f"Duplicate innovation number {innovation}")

            genome.conn_genes[innovation] = ConnectionGene(node_in, node_out, conn_data["weight"],
                                                           innovation, conn_data.get("enabled", True))

        genome.validate()
        return genome

    def to_dict(self) -> dict:
        """
        Convert the genome to a dictionary representation.
        This is the inverse operation of from_dict().
        """
        type_names = {NodeType.INPUT: "input", NodeType.BIAS: "bias",
                      NodeType.HIDDEN: "hidden", NodeType.OUTPUT: "output"}

        nodes = []
        for node in sorted(self.node_genes.values(), key=lambda n: n.id):
            node_dict = {"id": int(node.id), "type": type_names[node.type]}
            if node.type == NodeType.HIDDEN:
                node_dict["layer"] = int(node.layer)
            nodes.append(node_dict)

        connections = []
        for conn in sorted(self.conn_genes.values(), key=lambda c: c.innovation):
            connections.append({
                "from"      : int(conn.node_in),
                "to"        : int(conn.node_out),
                "weight"    : conn.weight,
                "enabled"   : conn.enabled,
                "innovation": conn.innovation
            })

        return {
            "id"         : int(self.id),
            "fitness"    : self.fitness,
            "nodes"      : nodes,
            "connections": connections
        }

    @staticmethod
    def _validate_node_numbering(topology    : Topology,
                                 input_nodes : list,
                                 bias_nodes  : list,
                                 output_nodes: list,
                                 hidden_nodes: list) -> None:
        """
        Validate that nodes follow the numbering convention (see class docstring).

        Raises:
            ValueError: If node numbering doesn't follow the convention
        """
        input_ids = sorted(n["id"] for n in input_nodes)
        if input_ids != list(range(topology.num_inputs)):
            raise ValueError(f"Input nodes must be numbered {list(range(topology.num_inputs))}, got {input_ids}")

        bias_ids = [n["id"] for n in bias_nodes]
        if bias_ids and bias_ids != [topology.num_inputs]:
            raise ValueError(f"Bias node must be numbered {topology.num_inputs}, got {bias_ids[0]}")

        output_ids = sorted(n["id"] for n in output_nodes)
        expected_output_ids = list(range(topology.num_input_nodes, topology.first_hidden_id))
        if output_ids != expected_output_ids:
            raise ValueError(f"Output nodes must be numbered {expected_output_ids}, got {output_ids}")

        hidden_ids = [n["id"] for n in hidden_nodes]
        for hid in hidden_ids:
            if hid < topology.first_hidden_id:
                raise ValueError(f"Hidden node {hid} has ID below minimum {topology.first_hidden_id}")
        if len(hidden_ids) != len(set(hidden_ids)):
            raise ValueError("Duplicate node IDs found in node list")

    def __str__(self):
        node_genes_str  = ''.join(str(node) for layer_nodes in self.nodes for node in layer_nodes)
        conn_genes_str  = ''.join(str(conn) for conn in self.conn_genes.values())
        return f"Nodes: {node_genes_str}\nConns: {conn_genes_str}"

    def __repr__(self):
        return (f"Genome(id={int(self.id)}, nodes={sum(len(n) for n in self.nodes)}, "
                f"connections={len(self.conn_genes)}, fitness={self.fitness})")
