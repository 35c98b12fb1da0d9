"""Score fusion"""

from multimodal_baseline.fusion.fusion_engine import FusionScoringEngine, round_half_up

__all__ = ['FusionScoringEngine', 'round_half_up']
