"""Baseline enrichment pipeline"""

from multimodal_baseline.enrichment.orchestrator import EnrichmentOrchestrator

__all__ = ['EnrichmentOrchestrator']
