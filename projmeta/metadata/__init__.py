"""Project metadata engine: field values, payload validation, templates, permissions and merge semantics."""
