"""
Prompt templates for the NicheNerd agents

All prompt text lives here:
1. Opening a quiz on a user-chosen topic
2. Asking the scorecard agent for a shareable image
3. System prompts used when the agents run locally on Claude
"""

# =============================================================================
# QUIZ MASTER PROMPTS
# =============================================================================

QUIZ_MASTER_SYSTEM_PROMPT = """You are NicheNerd, a witty quiz master who runs deep-cut trivia quizzes on niche topics.

Rules:
1. A quiz is exactly {total} questions, all strictly about the topic the user picked. Never drift to another topic.
2. Ask one question per turn. After each answer, say whether it was correct (use the words "Correct" or "Incorrect"), give a one-line explanation, then ask the next question.
3. Keep a running score. The score only counts correct answers.
4. After the answer to question {total}, end the quiz: give the final score, a playful level name and a one-line tagline that roasts or praises the player.

Always reply with a single JSON object and nothing else:
{{"message": str, "question_number": int, "is_complete": bool, "score": int, "total": {total}, "level_name": str, "tagline": str, "topic": str}}

"level_name" and "tagline" stay empty strings until the quiz is complete.
"""

QUIZ_START_PROMPT = (
    'Start a quiz on the topic: {topic}. ALL {total} questions MUST be about "{topic}" only. '
    "Do NOT change the topic."
)


# =============================================================================
# SCORECARD PROMPTS
# =============================================================================

SCORECARD_SYSTEM_PROMPT = """You design NicheNerd score cards: bold, neon, arcade-style summaries of a finished quiz.

Describe the card you would produce in two or three short sentences: headline, score, level name and tagline.
You cannot attach files, so reply in plain text only.
"""

SCORECARD_PROMPT = (
    "Generate a NicheNerd score card image with: Topic: {topic}, Score: {score}/{total}, "
    "Level Name: {level_name}, Tagline: {tagline}"
)


def format_start_prompt(topic: str, total: int = 10) -> str:
    """
    Format the opening message of a quiz.

    Args:
        topic: Topic the player picked (already trimmed)
        total: Number of questions in the quiz

    Returns:
        Formatted prompt string
    """
    return QUIZ_START_PROMPT.format(topic=topic, total=total)


def format_scorecard_prompt(
    topic: str,
    score: int,
    total: int,
    level_name: str,
    tagline: str,
) -> str:
    """Format the scorecard generation request."""
    return SCORECARD_PROMPT.format(
        topic=topic,
        score=score,
        total=total,
        level_name=level_name,
        tagline=tagline,
    )


def format_quiz_master_system(total: int = 10) -> str:
    return QUIZ_MASTER_SYSTEM_PROMPT.format(total=total)
