"""
Knowledge decay scoring - stale and contradicted document detection with an auditable confidence score.
"""

from .core.decay_engine import DecayEngine, analyze, batch_analyze, build_audit_record, to_public_payload
from .core.config import VERSION, DecayConfig, load_config
from .core.models import DocumentSnapshot, VersionSnapshot, RelatedDocument, DecayVerdict

__version__ = VERSION

__all__ = [
    'DecayEngine',
    'analyze',
    'batch_analyze',
    'build_audit_record',
    'to_public_payload',
    'DecayConfig',
    'load_config',
    'DocumentSnapshot',
    'VersionSnapshot',
    'RelatedDocument',
    'DecayVerdict'
]
