"""
NEAT Identifiers Module

Small integer-backed handles used throughout the package. They behave as
plain integers (ordering, hashing, list indexing) but keep their type in
signatures and in their 'repr', so a genome ID is never confused with a node ID.

Classes:
    NodeId:   Identifies a node gene (the same ID denotes the same node in every genome)
    GenomeId: Identifies a population slot
    SpecieId: Identifies a species (its position in the population's species list)
    LayerId:  Orders the layers of a feed-forward genome
"""


class _Identifier(int):

    __slots__ = ()

    def __repr__(self):
        return f"{type(self).__name__}({int(self)})"

    def __str__(self):
        return int.__repr__(self)


class NodeId(_Identifier):
    __slots__ = ()


class GenomeId(_Identifier):
    __slots__ = ()


class SpecieId(_Identifier):
    __slots__ = ()


class LayerId(_Identifier):
    """
    Position of a layer in a feed-forward genome.

    Input nodes live on layer 'INPUT' (0) and output nodes on layer 'OUTPUT',
    a reserved sentinel far above anything produced by splitting connections.
    Every connection goes from a lower layer to a strictly higher one.
    """

    __slots__ = ()

    INPUT : 'LayerId'
    OUTPUT: 'LayerId'

    @staticmethod
    def between(low: 'LayerId', high: 'LayerId') -> 'LayerId | None':
        """
        Return a layer strictly between 'low' and 'high', or None when the two are adjacent.
        """
        if high - low < 2:
            return None
        return LayerId((low + high) // 2)


LayerId.INPUT  = LayerId(0)
LayerId.OUTPUT = LayerId(2 ** 62)
