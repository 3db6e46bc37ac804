# quiznova/prompts.py
from typing import Optional

SYSTEM_PROMPT = (
    "You are a quiz generator. Return only valid JSON arrays with quiz questions "
    "in the exact specified format. Do not include any additional text or explanations."
)

_EXAMPLE = """[
  {
    "text": "What is the capital of France?",
    "options": ["A) London", "B) Paris", "C) Berlin", "D) Madrid"],
    "correctAnswer": "B) Paris"
  }
]"""


def build_prompt(topic: str, count: int, difficulty: Optional[str] = None) -> str:
    """User message asking for exactly ``count`` questions on ``topic``."""
    difficulty_line = ""
    if difficulty:
        difficulty_line = f"\nAll questions must be of {difficulty} difficulty.\n"

    return f"""Generate exactly {count} multiple choice quiz questions on the topic "{topic}". Follow these strict rules:
1. Each question must have:
   - A clear question text
   - Exactly 4 distinct options (A, B, C, D)
   - One correct answer (must match exactly one option)
2. Format each question as JSON with:
   - "text": The question
   - "options": Array of 4 options (prefix with A), B), C), D))
   - "correctAnswer": The full correct option text, including its prefix
3. Return only a valid JSON array with no extra text
{difficulty_line}
Example:
{_EXAMPLE}

Now generate {count} questions about "{topic}":"""
