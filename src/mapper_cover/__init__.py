from mapper_cover.adjacency import (  # noqa
    adjacency_to_graph,
    candidates_to_rows,
    check_candidate_table,
    edgelist_to_adjacency,
    edgelist_to_sparse,
    rows_to_candidates,
    valid_pairs,
)
from mapper_cover.box import Box, bounds_to_boxes, boxes_to_bounds  # noqa
from mapper_cover.box_distance import BoxDistances, dist_to_boxes  # noqa
from mapper_cover.cover import FixedIntervalCover, RestrainedIntervalCover  # noqa
from mapper_cover.grid_bounds import (  # noqa
    fixed_grid_bounds,
    fixed_level_sets,
    grid_index_set,
    interval_length_to_overlap,
    overlap_to_interval_length,
    restrained_grid_bounds,
    restrained_level_sets,
)
from mapper_cover.intersection import cover_map  # noqa
from mapper_cover.membership import (  # noqa
    LevelSet,
    MembershipPolicy,
    TieBreak,
    iso_aligned_level_sets,
    level_set_index,
    level_set_membership_matrix,
)
from mapper_cover.neighborhood import (  # noqa
    fixed_cover_neighborhood,
    neighborhood_candidate_table,
)

__version__ = "0.1.0"
