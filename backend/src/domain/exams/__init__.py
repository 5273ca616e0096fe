"""Exam domain - record schemas and extraction output normalization"""

from .models import ExamRecord, Measurement, MeasurementStatus, Patient
from .normalizer import normalize_extraction_text, strip_code_fence

__all__ = [
    "ExamRecord",
    "Measurement",
    "MeasurementStatus",
    "Patient",
    "normalize_extraction_text",
    "strip_code_fence",
]
