"""Media sampling under processing budgets"""

from multimodal_baseline.sampling.media_sampler import MediaSampler

__all__ = ['MediaSampler']
