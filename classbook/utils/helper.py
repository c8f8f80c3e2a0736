from datetime import date, datetime
from decimal import Decimal


def to_json(value):
    """Recursively turn Decimals into floats and dates into ISO strings for jsonify"""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    return value
