"""
Edge lists and adjacency lists between bins.

Candidate neighbors of each bin usually arrive as a fixed-width table: one row
per bin, the bin's own id in column 0, and candidate ids in the remaining
columns, padded with a sentinel where a bin has fewer candidates than the
table is wide. This module

- flattens such a table into a dense ``(n_edges, 2)`` edge list
  (:func:`valid_pairs`),
- converts between the padded table and a list of variable-length rows
  (:func:`candidates_to_rows`, :func:`rows_to_candidates`),
- groups an edge list by source bin (:func:`edgelist_to_adjacency`), and
- exposes the edges as a `networkx` graph or a `scipy.sparse` matrix.
"""

from __future__ import annotations

from logging import getLogger
from typing import Any, Dict, List, Sequence, Tuple

import networkx as nx
import numpy as np
import scipy.sparse
from numpy.typing import NDArray

from mapper_cover.exceptions import MalformedCandidateTableError, ValidationError

logger = getLogger(__name__)

Edge = Tuple[int, int]
CandidateRow = Tuple[int, List[int]]


def _as_table(table: Any) -> np.ndarray:
    if not isinstance(table, np.ma.MaskedArray):
        table = np.asarray(table)
    if table.ndim != 2 or table.shape[1] < 1:
        raise MalformedCandidateTableError(
            "Candidate table must be 2-D with the bin's own id in column 0",
            expected="array with shape (n_bins, 1 + max_candidates)",
            got=f"array with shape {table.shape}",
        )
    return table


def _absent_mask(table: np.ndarray, sentinel: Any) -> NDArray[np.bool_]:
    """Entries that hold no candidate: masked, NaN, None, or equal to the sentinel."""
    absent = np.ma.getmaskarray(table).copy()
    values = np.ma.getdata(table)
    if np.issubdtype(values.dtype, np.floating):
        absent |= np.isnan(values)
    elif values.dtype == object:
        absent |= np.equal(values, None).astype(bool)
    if sentinel is not None and not (isinstance(sentinel, float) and np.isnan(sentinel)):
        absent |= values == sentinel
    return absent


def valid_pairs(table: Any, sentinel: Any = -1) -> NDArray[np.int_]:
    """
    Flatten a sentinel-padded candidate table into an edge list.

    Parameters
    ----------
    table : array_like, shape (n_bins, 1 + max_candidates)
        Column 0 holds the source bin id, the other columns candidate
        destination ids or ``sentinel``. Masked entries (``np.ma``), NaN
        entries of float tables and ``None`` entries of object tables are also
        treated as absent.
    sentinel : scalar or None, default=-1
        Padding value. ``None`` or NaN rely on masks, NaN and ``None`` alone.

    Returns
    -------
    edges : NDArray[np.int_], shape (n_edges, 2)
        ``(source, destination)`` rows in row-major, then column-major order
        of the table.

    Examples
    --------
    >>> valid_pairs([[0, 1, 2], [1, 2, -1], [2, -1, -1]]).tolist()
    [[0, 1], [0, 2], [1, 2]]
    """
    table = _as_table(table)
    values = np.ma.getdata(table)
    is_present = ~_absent_mask(table, sentinel)[:, 1:]

    sources = np.broadcast_to(values[:, :1], is_present.shape)[is_present]
    destinations = values[:, 1:][is_present]
    edges = np.stack((sources, destinations), axis=1).astype(np.int_)

    logger.debug(
        "Compacted %d candidate rows into %d edges", table.shape[0], edges.shape[0]
    )
    return edges


def check_candidate_table(table: Any) -> None:
    """
    Verify that column 0 of a candidate table equals the row position.

    Raises
    ------
    MalformedCandidateTableError
        If the table is not 2-D or a row's own id does not match its position.
    """
    table = _as_table(table)
    own_ids = np.ma.getdata(table)[:, 0]
    bad_rows = np.flatnonzero(own_ids != np.arange(table.shape[0]))
    if bad_rows.size:
        raise MalformedCandidateTableError(
            "Candidate table rows must start with their own bin id",
            expected="table[i, 0] == i",
            got=f"mismatched rows {bad_rows[:10].tolist()}",
        )


def candidates_to_rows(table: Any, sentinel: Any = -1) -> list[CandidateRow]:
    """Strip the padding of a candidate table into ``(source, candidates)`` rows."""
    table = _as_table(table)
    values = np.ma.getdata(table)
    is_present = ~_absent_mask(table, sentinel)
    return [
        (int(row[0]), [int(v) for v in row[1:][present[1:]]])
        for row, present in zip(values, is_present)
    ]


def rows_to_candidates(
    rows: Sequence[CandidateRow], sentinel: int = -1, width: int | None = None
) -> NDArray[np.int_]:
    """
    Pad variable-length candidate rows back into a fixed-width table.

    Parameters
    ----------
    rows : sequence of (int, list of int)
    sentinel : int, default=-1
    width : int, optional
        Number of candidate columns. Defaults to the longest row.

    Returns
    -------
    table : NDArray[np.int_], shape (n_rows, 1 + width)
    """
    max_candidates = max((len(candidates) for _, candidates in rows), default=0)
    if width is None:
        width = max_candidates
    elif width < max_candidates:
        raise ValidationError(
            "Candidate table width is too small",
            expected=f"width >= {max_candidates}",
            got=f"width = {width}",
        )
    table = np.full((len(rows), 1 + width), sentinel, dtype=np.int_)
    for row_ind, (source, candidates) in enumerate(rows):
        table[row_ind, 0] = source
        table[row_ind, 1 : 1 + len(candidates)] = candidates
    return table


def edgelist_to_adjacency(edges: Any) -> Dict[int, List[int]]:
    """
    Group an edge list by source bin.

    Parameters
    ----------
    edges : array_like, shape (n_edges, 2)
        ``(source, destination)`` rows.

    Returns
    -------
    adjacency : dict of int to list of int
        Keys in ascending order; each value lists destinations in edge-list
        order. Sources without edges are absent.

    Examples
    --------
    >>> edgelist_to_adjacency([(1, 2), (1, 3), (2, 3)])
    {1: [2, 3], 2: [3]}
    """
    edges = np.asarray(edges, dtype=np.int_).reshape(-1, 2)
    adjacency: Dict[int, List[int]] = {}
    for source, destination in edges.tolist():
        adjacency.setdefault(source, []).append(destination)
    return {source: adjacency[source] for source in sorted(adjacency)}


def adjacency_to_graph(
    adjacency: Dict[int, List[int]],
    n_bins: int | None = None,
    directed: bool = False,
) -> nx.Graph:
    """
    Build a graph whose nodes are bin ids and whose edges follow ``adjacency``.

    Parameters
    ----------
    adjacency : dict of int to list of int
    n_bins : int, optional
        If given, nodes ``0 .. n_bins - 1`` are added even without edges.
    directed : bool, default=False

    Returns
    -------
    graph : nx.Graph or nx.DiGraph
    """
    graph = nx.DiGraph() if directed else nx.Graph()
    if n_bins is not None:
        graph.add_nodes_from(range(n_bins))
    graph.add_edges_from(
        (source, destination)
        for source, destinations in adjacency.items()
        for destination in destinations
    )
    return graph


def edgelist_to_sparse(edges: Any, n_bins: int) -> scipy.sparse.csr_array:
    """
    Edge list as a boolean ``(n_bins, n_bins)`` sparse adjacency matrix.

    Repeated edges collapse to a single entry.
    """
    edges = np.asarray(edges, dtype=np.int_).reshape(-1, 2)
    if edges.size and (edges.min() < 0 or edges.max() >= n_bins):
        raise ValidationError(
            "Edge list refers to a bin outside the cover",
            expected=f"bin ids in [0, {n_bins})",
            got=f"ids in [{edges.min()}, {edges.max()}]",
        )
    data = np.ones(edges.shape[0], dtype=np.int_)
    matrix = scipy.sparse.csr_array(
        (data, (edges[:, 0], edges[:, 1])), shape=(n_bins, n_bins)
    )
    matrix.sum_duplicates()
    return matrix.astype(bool)
