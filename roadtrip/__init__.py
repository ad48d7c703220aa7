"""Road trip planner: route, map, weather and music for a drive between two places."""
