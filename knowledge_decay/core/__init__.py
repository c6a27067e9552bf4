"""
Decay detection core - detectors, scoring and orchestration.
"""
