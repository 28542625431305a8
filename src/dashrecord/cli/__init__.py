"""CLI tools for dashrecord."""
