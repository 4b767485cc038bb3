"""Developer tooling (architecture guards used by the test suite)."""
