from quiznova.prompts import SYSTEM_PROMPT, build_prompt


def test_prompt_names_topic_count_and_shape():
    prompt = build_prompt("Oceans", 5)
    assert 'Generate exactly 5 multiple choice quiz questions on the topic "Oceans"' in prompt
    assert '"correctAnswer"' in prompt
    assert "A), B), C), D)" in prompt
    assert "Return only a valid JSON array" in prompt
    assert prompt.rstrip().endswith('Now generate 5 questions about "Oceans":')


def test_difficulty_line_only_when_given():
    assert "difficulty" not in build_prompt("Oceans", 3).lower()
    assert "All questions must be of hard difficulty." in build_prompt("Oceans", 3, "hard")


def test_system_prompt_asks_for_json_only():
    assert "JSON" in SYSTEM_PROMPT
