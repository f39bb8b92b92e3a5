"""
Stateful services around the engine: persistence, lineage, logging.
"""
