"""Pipeline orchestration.

Sequences one estimate run:
1. Geocode the address (only when no coordinates were given)
2. Resolve scale → fetch imagery → decode raster
3. Classify vegetation → estimate area → assemble the result
"""
