from crisislens.models.crisis_event import (
    Analysis,
    AggregationMetadata,
    AggregationResult,
    Coordinates,
    CrisisEvent,
    HourlyPoint,
    Insights,
    Metrics,
    RiskLevel,
    SocialMetrics,
    SourceStatus,
    Trend,
    TrendDirection,
    TypeTrend,
)

__all__ = [
    # Events
    'CrisisEvent',
    'Coordinates',
    'SocialMetrics',
    # Analysis
    'Analysis',
    'RiskLevel',
    # Aggregation
    'AggregationResult',
    'AggregationMetadata',
    'SourceStatus',
    # Insights
    'Insights',
    'Metrics',
    'Trend',
    'TrendDirection',
    'HourlyPoint',
    'TypeTrend',
]
