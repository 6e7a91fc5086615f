"""
categories.py — Map YouTube category IDs to the preference names users toggle.

- Fixed dictionary of category_id → preference key
- `name_for()` resolves an ID (int or numeric string) or returns None
- `default_settings()` builds a permissive preference filter
"""

# Mapping of YouTube video category IDs to preference names
ID_TO_NAME = {
    10: "music", 15: "animals", 17: "sports",
    20: "gaming", 23: "comedy", 25: "news",
}

def name_for(category_id):
    # Return preference name for a category ID, or None if unknown.
    try:
        return ID_TO_NAME.get(int(category_id))
    except (TypeError, ValueError):
        return None

def default_settings() -> dict:
    # Every known category allowed, no minimum length.
    out = {"vidlength": 0}
    out.update({name: True for name in ID_TO_NAME.values()})
    return out
