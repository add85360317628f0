"""Cross-cutting helpers: errors, logging, ids, time, request context."""
