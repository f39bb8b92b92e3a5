"""
Central configuration for backend settings.
"""
import os


# Adjacency: two vertices closer than this (plane units) are the same corner
PARCEL_VERTEX_TOLERANCE: float = float(os.getenv("PARCEL_VERTEX_TOLERANCE", "0.5"))

# Combination search: accepted band around the target area (0.05 = +/-5%)
PARCEL_COMBINATION_TOLERANCE_PCT: float = float(os.getenv("PARCEL_COMBINATION_TOLERANCE_PCT", "0.05"))

# Merge: buffer applied to every input ring when the plain union comes out disjoint
PARCEL_HEAL_BUFFER: float = float(os.getenv("PARCEL_HEAL_BUFFER", "0.1"))

# Merge/split: vertices closer than this to the line through their neighbours are dropped
PARCEL_SIMPLIFY_TOLERANCE: float = float(os.getenv("PARCEL_SIMPLIFY_TOLERANCE", "0.01"))

# Split: how far past the parcel extent the cut line and its masks reach
PARCEL_SPLIT_REACH_FACTOR: float = float(os.getenv("PARCEL_SPLIT_REACH_FACTOR", "10.0"))

# Split: parts at or below this area count as empty
PARCEL_MIN_PART_AREA: float = float(os.getenv("PARCEL_MIN_PART_AREA", "1e-9"))
