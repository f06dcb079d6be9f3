import re


_REFERENCE_SPLIT = re.compile(r"[\s,]+")


def to_int(value, default=0, minimum=None):
    """Coerce a workload field to an int, falling back to ``default``."""
    if isinstance(value, bool):
        value = int(value)
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        number = default
    if minimum is not None and number < minimum:
        number = minimum
    return number


def clamp(value, low, high):
    return min(max(value, low), high)


def read_field(entry, *names, default=None):
    """Read the first present key among ``names`` from a dict or object."""
    for name in names:
        if isinstance(entry, dict):
            if name in entry and entry[name] is not None:
                return entry[name]
        elif getattr(entry, name, None) is not None:
            return getattr(entry, name)
    return default


def read_pid(entry, index):
    """Return the entry's pid as text, or ``P<index+1>`` when it is missing or blank."""
    pid = read_field(entry, 'pid', default=None)
    return str(pid) if pid not in (None, "") else f"P{index + 1}"


def parse_reference_string(value, total_pages):
    last_page = max(1, total_pages) - 1
    if isinstance(value, (list, tuple)) and value:
        return [clamp(to_int(page, 0), 0, last_page) for page in value]
    if isinstance(value, (list, tuple)):
        value = ""
    pages = []
    for token in _REFERENCE_SPLIT.split(str(value if value is not None else "")):
        if not token:
            continue
        try:
            page = int(float(token))
        except (ValueError, OverflowError):
            continue
        pages.append(clamp(page, 0, last_page))
    return pages or [0]


def sample_processes():
    return [
        {'pid': 'P1', 'arrival_time': 0, 'burst_time': 8, 'priority': 2},
        {'pid': 'P2', 'arrival_time': 1, 'burst_time': 4, 'priority': 1},
        {'pid': 'P3', 'arrival_time': 2, 'burst_time': 2, 'priority': 3},
    ]


def sample_memory_requests():
    return [
        {'pid': 'P1', 'size': 24},
        {'pid': 'P2', 'size': 16},
        {'pid': 'P3', 'size': 32},
        {'pid': 'P4', 'size': 8},
    ]


def sample_holes():
    return [100, 500, 200, 300]


def sample_paging_processes():
    return [
        {'pid': 'P1', 'total_pages': 5, 'reference_string': "0 1 2 3 0 1 4 0 1 2 3 4"},
        {'pid': 'P2', 'total_pages': 3, 'reference_string': [0, 1, 0, 2, 1, 0]},
    ]
