"""infixcalc — infix arithmetic over a persistent connection.

Normalizes, tokenizes and evaluates expressions like '3 + 4 * 2' or
'[2](3) ** 2' with a two-stack precedence evaluator, and serves them to
remote clients over length-prefixed UTF-8 frames.

Usage:
    python -m infixcalc eval "3 + 4 * 2"      # Evaluate locally
    python -m infixcalc tokens "2(3)-4"       # Show the token sequence
    python -m infixcalc serve --port 5000     # Run the server
    python -m infixcalc client                # Interactive client
"""

from infixcalc.evaluator import evaluate
from infixcalc.models import EvaluationOptions, EvaluationResult

__all__ = ["evaluate", "EvaluationOptions", "EvaluationResult"]
