from __future__ import annotations
from typing import List
from loguru import logger
from ..config import settings
from .client import async_client

FALLBACK_REPLY = "Sorry, I'm here but I couldn't think of a good answer right now."


class CoachUnavailableError(RuntimeError):
    pass


def build_system_prompt(habit_titles: List[str], checkins_30d: int) -> str:
    titles = ", ".join(habit_titles) or "no habits yet"
    return (
        'You are "HabitFlow Coach", a friendly coach inside a habit tracking app.\n\n'
        "PERSONALITY:\n"
        "- Warm, supportive and human. Reply like a normal chat.\n"
        "- Keep it short: 2-5 short sentences.\n\n"
        "TOPICS:\n"
        "- Habits, routines, motivation, productivity, goals, wellness.\n"
        "- Everyday questions about work, studies, stress or confidence.\n"
        "- Light off-topic questions such as jokes or general facts.\n\n"
        "WHAT YOU KNOW ABOUT THE USER:\n"
        f"- Active habits: {len(habit_titles)}\n"
        f"- Habit titles: {titles}\n"
        f"- Check-ins in the last 30 days: {checkins_30d}\n"
        "Use this only when it helps the answer.\n\n"
        "RULES:\n"
        "1. Answer the question directly first.\n"
        "2. Then ask ONE gentle follow-up about their habits, wellbeing or day.\n"
        "3. Do not force habits into unrelated answers.\n"
        "4. Do not introduce yourself or say you are an AI model.\n"
        "5. No markdown, no lists, no emojis unless the user uses them.\n\n"
        "SAFETY:\n"
        "If the user mentions self-harm, suicide, severe depression or medical treatment, "
        "be kind, say you are not a professional and encourage them to contact a trusted "
        "person or a local helpline. Never give instructions for dangerous behaviour."
    )


def build_user_prompt(message: str) -> str:
    return (
        f'User message: "{message}"\n\n'
        "Respond in ONE short answer following the rules above."
    )


async def ask_coach(message: str, habit_titles: List[str], checkins_30d: int) -> str:
    """
    One chat-completion call per request. No retries and no caching; any
    failure surfaces as CoachUnavailableError.
    """
    try:
        response = await async_client.chat.completions.create(
            model=settings.LLM_MODEL_ID,
            messages=[
                {"role": "system", "content": build_system_prompt(habit_titles, checkins_30d)},
                {"role": "user", "content": build_user_prompt(message)},
            ],
            temperature=0.7,
        )
    except Exception as e:
        logger.exception("AI coach request failed: {}", e)
        raise CoachUnavailableError("AI Coach is temporarily unavailable") from e

    if not response or not response.choices:
        return FALLBACK_REPLY
    reply = (response.choices[0].message.content or "").strip()
    return reply or FALLBACK_REPLY
