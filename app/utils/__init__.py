"""Pure helpers: unit conversion, derived metrics, indices and retry."""
