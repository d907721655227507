"""User-facing interfaces for texstatement."""
