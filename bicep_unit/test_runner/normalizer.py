"""Normalize bicep console output for comparison."""

# Banner lines bicep console prints on every invocation.
EXPERIMENTAL_FEATURE_WARNING = "The 'console' CLI command is an experimental feature"
EXPERIMENTAL_TESTING_ONLY_WARNING = (
    "Experimental features should be used for testing purposes only"
)

DIAGNOSTIC_MARKERS = (EXPERIMENTAL_FEATURE_WARNING, EXPERIMENTAL_TESTING_ONLY_WARNING)


def normalize(raw: str) -> str:
    """Canonicalize evaluator output or an expected operand.

    Removes carriage returns, the console banner lines and blank lines, then
    trims the result.

    Args:
        raw: Text as produced by bicep console or written in a test file

    Returns:
        Normalized text, possibly empty

    """
    lines = raw.replace("\r", "").split("\n")
    kept = [
        line
        for line in lines
        if line.strip() and not any(marker in line for marker in DIAGNOSTIC_MARKERS)
    ]
    return "\n".join(kept).strip()
