"""Golf tournament odds extraction and draft tiering."""
