DEFAULT_LIMIT = 100
MAX_LIMIT = 500


def normalize_pagination(limit_raw, offset_raw):
    """Clamp roster paging arguments; raises ValueError on non-integers."""
    try:
        limit = int(limit_raw) if limit_raw not in (None, '') else DEFAULT_LIMIT
        offset = int(offset_raw) if offset_raw not in (None, '') else 0
    except ValueError:
        raise ValueError('limit/offset must be int')
    return max(1, min(limit, MAX_LIMIT)), max(0, offset)
