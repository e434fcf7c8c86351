"""Record and API schema models"""

from rootcause.models.records import EntityRecord, MetricRecord, AnomalyRecord, SessionRecord

__all__ = ["EntityRecord", "MetricRecord", "AnomalyRecord", "SessionRecord"]
