"""
Readable primary keys for assessment records
"""
import random
import string


MODEL_PREFIXES = {
    'EXAM': 'EXM',
    'STUDENT': 'STU',
    'SUBJECT': 'SUB',
    'CBT_SESSION': 'CBT',
    'GRADE': 'GRD',
    'RESULT': 'RST',
}

SUFFIX_LENGTH = 8


def generate_random_string(length=SUFFIX_LENGTH):
    """Generate a random alphanumeric string"""
    chars = string.ascii_uppercase + string.digits
    return ''.join(random.choice(chars) for _ in range(length))


def generate_readable_id(model_type):
    """
    Generate a readable ID for a given model type

    Args:
        model_type (str): Key of MODEL_PREFIXES (e.g. 'EXAM', 'GRADE')

    Returns:
        str: A readable ID like "EXM-IEE83U7Q"
    """
    prefix = MODEL_PREFIXES.get(model_type, 'UNK')
    return f"{prefix}-{generate_random_string()}"


def assign_readable_id(instance, model_type):
    """Set instance.id to an unused readable ID if it has none yet"""
    if instance.id:
        return instance.id
    model = type(instance)
    candidate = generate_readable_id(model_type)
    while model.objects.filter(id=candidate).exists():
        candidate = generate_readable_id(model_type)
    instance.id = candidate
    return candidate
