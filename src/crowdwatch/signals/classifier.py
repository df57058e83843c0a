"""
Density Classifier
==================

Maps a raw count and a radius baseline to a DensityTier.

Policy (ratio thresholds relative to baseline):
    count > baseline × heavy_ratio   → HEAVY
    count > baseline × medium_ratio  → MEDIUM
    otherwise                        → LOW

Comparisons are strict, so exact boundary values resolve to the lower
(safer) tier. The ratios are empirically chosen defaults and are loaded
from configuration.
"""

import logging

from crowdwatch.models.density import DensityTier
from crowdwatch.models.sample import Radius


logger = logging.getLogger(__name__)


def baseline_for(radius: Radius, people_per_meter: float = 1.0) -> float:
    """
    Expected normal occupancy for a radius.
    
    Wider radius implies a proportionally higher baseline.
    
    Args:
        radius: Monitoring radius
        people_per_meter: Baseline people per meter of radius
        
    Returns:
        Baseline count
    """
    return int(radius) * people_per_meter


class DensityClassifier:
    """
    Stateless ratio-threshold classifier.
    
    Example:
        classifier = DensityClassifier()
        classifier.classify(80, 50)  # DensityTier.HEAVY
    """
    
    def __init__(self, medium_ratio: float = 1.1, heavy_ratio: float = 1.5) -> None:
        if medium_ratio <= 0:
            raise ValueError("medium_ratio must be positive")
        if heavy_ratio < medium_ratio:
            raise ValueError("heavy_ratio must be >= medium_ratio")
        
        self.medium_ratio = medium_ratio
        self.heavy_ratio = heavy_ratio
    
    def classify(self, count: int, baseline: float) -> DensityTier:
        """
        Classify a count against a baseline.
        
        Args:
            count: Observed count
            baseline: Expected normal count for the radius
            
        Returns:
            DensityTier for this count
        """
        if count > baseline * self.heavy_ratio:
            return DensityTier.HEAVY
        if count > baseline * self.medium_ratio:
            return DensityTier.MEDIUM
        return DensityTier.LOW
