import logging
from src.security.errors import InvalidArgument

logger = logging.getLogger(__name__)

HEARTBEAT_SCHEMA = {
    'gigId': {'required': True, 'type': 'str'},
    'testerId': {'required': True, 'type': 'str'},
    'deviceId': {'required': True, 'type': 'str'},
    'installId': {'required': True, 'type': 'str'},
    'sessionId': {'required': True, 'type': 'str'},
    'timestamps': {'required': True, 'type': 'timestamps'},
    'isEmulator': {'required': True, 'type': 'bool'},
    'device': {'required': False, 'type': 'dict'}
}

CLAIM_SCHEMA = {
    'claimCode': {'required': True, 'type': 'str'},
    'installId': {'required': True, 'type': 'str'},
    'deviceId': {'required': True, 'type': 'str'},
    'packageName': {'required': True, 'type': 'str'},
    'isEmulator': {'required': True, 'type': 'bool'}
}


def _is_timestamp(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return isinstance(value, (int, float))

def _check_type(field, value, expected):
    if expected == 'str':
        if not isinstance(value, str) or not value.strip():
            return 'Must be a non-empty string'
        # Ids become document path segments
        if '/' in value:
            return 'Must not contain "/"'
    elif expected == 'bool':
        if not isinstance(value, bool):
            return 'Must be a boolean'
    elif expected == 'dict':
        if not isinstance(value, dict):
            return 'Must be an object'
    elif expected == 'timestamps':
        if not isinstance(value, list) or not value:
            return 'Must be a non-empty list'
        if not all(_is_timestamp(item) for item in value):
            return 'Must contain only timestamp strings or numbers'
    return None

def validate_payload(data, schema):
    """Check a request payload against a schema, raising InvalidArgument.

    The first missing required field is reported by name.
    """
    if not isinstance(data, dict):
        raise InvalidArgument("Request payload must be an object")

    for field, rules in schema.items():
        if data.get(field) is None:
            if rules.get('required'):
                raise InvalidArgument(f"Missing field {field}")
            continue

        error = _check_type(field, data[field], rules.get('type'))
        if error:
            logger.warning(f"Validation error on {field}: {error}")
            raise InvalidArgument(f"Invalid field {field}: {error}")

    return data
