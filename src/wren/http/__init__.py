"""HTTP primitives — request facets, response values, headers, cookies."""
