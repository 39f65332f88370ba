"""
Website feature detection — keyword patterns over page text.

Each capability flag is set by a case-insensitive match against a fixed set of
vendor names and phrases. The technology tag list follows FEATURES order.
"""
import re
from typing import Dict, Any, Optional

# (flag, technology tag, pattern) in declaration order
FEATURES = [
    ('has_online_scheduling', 'onlineScheduling',
     r'book online|schedule online|book appointment|book now|zocdoc|localmed|doctible'
     r'|nexhealth|jane app|setmore|calendly'),
    ('has_patient_portal', 'patientPortal',
     r'patient portal|patient login|my chart|patient account'),
    ('has_text_reminders', 'textReminders',
     r'text reminders|sms reminder|text notification|weave|revenuewell|solutionreach|yapi'),
    ('has_digital_forms', 'digitalForms',
     r'online forms|digital forms|paperless|fill out.*online'),
    ('has_online_payments', 'onlinePayments',
     r'pay online|online payment|carecredit|care credit|financing'),
    ('has_virtual_consults', 'virtualConsults',
     r'virtual consultation|video consultation|teledentistry|telehealth'),
    ('has_advanced_imaging', 'advancedDentalTech',
     r'3d imaging|cbct|cerec|same day crown|digital impression|itero|laser'),
]

FLAG_NAMES = [flag for flag, _, _ in FEATURES]

_COMPILED = [(flag, tag, re.compile(pattern, re.IGNORECASE)) for flag, tag, pattern in FEATURES]


def detect_features(text: Optional[str]) -> Dict[str, Any]:
    """Flags + technologies for a page. Empty or missing text → all False."""
    text = text or ''
    result: Dict[str, Any] = {}
    technologies = []
    for flag, tag, pattern in _COMPILED:
        found = bool(pattern.search(text))
        result[flag] = found
        if found:
            technologies.append(tag)
    result['technologies'] = technologies
    return result
