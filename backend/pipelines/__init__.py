"""
Parcel spatial algebra pipelines: adjacency, combination search,
merge/split geometry and drawing-plane calibration.
"""
