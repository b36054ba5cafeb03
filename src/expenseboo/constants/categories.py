"""
Starter categories seeded on first run, with their display colors.
"""

# (name, hex color)
DEFAULT_CATEGORIES = [
    ("Food", "#FF9500"),
    ("Transportation", "#007AFF"),
    ("Shopping", "#AF52DE"),
    ("Entertainment", "#34C759"),
    ("Bills", "#FF3B30"),
    ("Other", "#8E8E93"),
]

UNCATEGORIZED_NAME = "Uncategorized"
