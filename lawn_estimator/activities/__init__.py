"""Pipeline stage functions.

One module per stage, called in order by the orchestrator:
resolve_scale → fetch_imagery → decode_raster → classify_vegetation →
estimate_area.
"""
