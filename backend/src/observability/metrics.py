"""Prometheus metrics for the exam extractor.

Defines operational metrics for extraction calls and the share store.
Metric labels never carry patient data or share ids.
"""

from prometheus_client import Counter, Histogram, Gauge

# Extraction metrics
extraction_requests_total = Counter(
    "exam_extractor_extraction_requests_total",
    "Total extraction requests",
    ["media_kind", "status"]  # media_kind: image|pdf, status: success|error kind
)

extraction_duration_seconds = Histogram(
    "exam_extractor_extraction_duration_seconds",
    "Time spent in the extraction engine in seconds",
    ["media_kind"],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0]
)

extraction_results_count = Histogram(
    "exam_extractor_extraction_results_count",
    "Number of measurements per extracted exam",
    buckets=[0, 1, 5, 10, 20, 40, 80]
)

# AI call metrics
ai_tokens_total = Counter(
    "exam_extractor_ai_tokens_total",
    "Total AI tokens consumed",
    ["provider", "direction"]  # direction: input|output
)

# Share store metrics
shares_created_total = Counter(
    "exam_extractor_shares_created_total",
    "Total share links created"
)

share_resolutions_total = Counter(
    "exam_extractor_share_resolutions_total",
    "Share link lookups",
    ["outcome"]  # outcome: found|not_found
)

shares_swept_total = Counter(
    "exam_extractor_shares_swept_total",
    "Expired share entries removed by sweeps"
)

shares_stored = Gauge(
    "exam_extractor_shares_stored",
    "Share entries physically present in storage (including expired, unswept ones)"
)
