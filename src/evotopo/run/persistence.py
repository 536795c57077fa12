"""
Persistence Module

Saves evolved networks and loads them back. A network is stored as a set of
flat numpy arrays in the '.npz' format (no pickled objects):

    format_version: scalar, layout version
    node_ids:       int64,   one entry per node
    node_types:     unicode, node type code per node ("I", "H", "O", "B")
    node_biases:    float64, bias per node
    node_acts:      unicode, activation name per node ("" for input and bias nodes)
    conn_sources:   int64,   source node ID per connection
    conn_targets:   int64,   target node ID per connection
    conn_weights:   float64, weight per connection

Functions:
    network_to_bytes(network): Serialize a network
    network_from_bytes(data):  Rebuild a network from its serialized form
    save_network(network, path): Write a network to a file
    load_network(path):        Read a network from a file
"""

import io
import logging
import os
import zipfile
import numpy as np

from evotopo.activations        import parse_activation
from evotopo.genotype.node_gene import NodeType
from evotopo.phenotype.network  import Connection, Network, Node

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

_REQUIRED_ARRAYS = ('format_version', 'node_ids', 'node_types', 'node_biases', 'node_acts',
                    'conn_sources', 'conn_targets', 'conn_weights')

def network_to_bytes(network: Network) -> bytes:
    """
    Serialize a network into the '.npz' layout described in the module docstring.
    """
    nodes       = network.nodes
    connections = network.connections

    buffer = io.BytesIO()
    np.savez(buffer,
             format_version = np.array(FORMAT_VERSION, dtype=np.int64),
             node_ids       = np.array([n.id for n in nodes], dtype=np.int64),
             node_types     = np.array([n.type.value for n in nodes], dtype='<U1'),
             node_biases    = np.array([n.bias for n in nodes], dtype=np.float64),
             node_acts      = np.array([n.activation.value if n.activation else "" for n in nodes], dtype=str),
             conn_sources   = np.array([c.source for c in connections], dtype=np.int64),
             conn_targets   = np.array([c.target for c in connections], dtype=np.int64),
             conn_weights   = np.array([c.weight for c in connections], dtype=np.float64))
    return buffer.getvalue()

def network_from_bytes(data: bytes) -> Network:
    """
    Rebuild a network from the bytes produced by network_to_bytes().

    Raises:
        ValueError:      if the data is not a valid serialized network
        StructuralError: if the serialized connections form a cycle
    """
    try:
        archive = np.load(io.BytesIO(data), allow_pickle=False)
    except (OSError, EOFError, ValueError, zipfile.BadZipFile) as e:
        raise ValueError(f"Not a serialized network: {e}") from e
    if not hasattr(archive, 'files'):
        raise ValueError("Not a serialized network: expected an .npz archive")

    with archive:
        missing = [name for name in _REQUIRED_ARRAYS if name not in archive.files]
        if missing:
            raise ValueError(f"Serialized network lacks arrays: {', '.join(missing)}")

        version = int(archive['format_version'])
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported network format version {version}")

        node_ids, node_types, node_biases, node_acts = (archive['node_ids'], archive['node_types'],
                                                        archive['node_biases'], archive['node_acts'])
        if not len(node_ids) == len(node_types) == len(node_biases) == len(node_acts):
            raise ValueError("Serialized node arrays have different lengths")

        conn_sources, conn_targets, conn_weights = (archive['conn_sources'], archive['conn_targets'],
                                                    archive['conn_weights'])
        if not len(conn_sources) == len(conn_targets) == len(conn_weights):
            raise ValueError("Serialized connection arrays have different lengths")

        nodes = []
        for node_id, type_code, bias, act in zip(node_ids, node_types, node_biases, node_acts):
            node_type  = NodeType(str(type_code))
            activation = parse_activation(str(act)) if act else None
            nodes.append(Node(int(node_id), node_type, float(bias), activation))

        connections = [Connection(int(s), int(t), float(w))
                       for s, t, w in zip(conn_sources, conn_targets, conn_weights)]

    return Network(nodes, connections)

def save_network(network: Network, path: str | os.PathLike) -> None:
    """
    Write a network to a file.
    """
    with open(path, 'wb') as f:
        f.write(network_to_bytes(network))
    logger.debug("Saved network with %d nodes and %d connections to %s",
                 network.number_nodes, network.number_connections, path)

def load_network(path: str | os.PathLike) -> Network:
    """
    Read a network from a file written by save_network().

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError:        if the file is not a valid serialized network
    """
    with open(path, 'rb') as f:
        return network_from_bytes(f.read())
