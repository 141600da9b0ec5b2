"""
Custom Validators
=================

Custom validation functions untuk ledger dan invoice input
"""

import re
from typing import Optional


def validate_digits(value: Optional[str], field_name: str, max_length: int) -> Optional[str]:
    """Digits only, panjang maksimal tertentu (pincode, mobile)"""
    if value is None or value == '':
        return None
    if not re.match(r'^[0-9]*$', value):
        raise ValueError(f'{field_name} must contain only numbers')
    if len(value) > max_length:
        raise ValueError(f'{field_name} too long')
    return value

def validate_gst_number(value: Optional[str]) -> Optional[str]:
    """GST number: huruf dan angka, max 20"""
    if value is None or value == '':
        return None
    if not re.match(r'^[0-9A-Za-z]*$', value):
        raise ValueError('GST number can only contain letters and numbers')
    if len(value) > 20:
        raise ValueError('GST number too long')
    return value

def validate_pan_number(value: Optional[str]) -> Optional[str]:
    """PAN number: huruf besar dan angka, max 20"""
    if value is None or value == '':
        return None
    if not re.match(r'^[A-Z0-9]*$', value):
        raise ValueError('PAN number can only contain uppercase letters and numbers')
    if len(value) > 20:
        raise ValueError('PAN number too long')
    return value

def blank_to_none(value):
    """Empty string dianggap tidak diisi"""
    if isinstance(value, str) and value == '':
        return None
    return value
