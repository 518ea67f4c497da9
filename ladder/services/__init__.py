"""
Scheduling engine.

Pure functions over explicit inputs:
- time_conversion: wall-clock <-> UTC for a given date
- calendar_generator: weekly game days for a season window
- rotation_engine: per-court partner rotation and sit-outs
Nothing here touches the database or the HTTP layer.
"""
