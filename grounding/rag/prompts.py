"""
Prompt construction for grounded readings.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

UNKNOWN = "Unknown"
NOT_SPECIFIED = "Not specified"

SYSTEM_PROMPT = (
    "You are an expert Bhrigu Nandi Nadi (BNN) astrologer.\n"
    "Base every statement on the subject's actual planetary positions and on the BNN "
    "reference passages supplied with the question. Never invent planetary positions; "
    "when a field is Unknown or Not available, say so.\n"
    "Address the subject by their name, never as 'User' or 'the user'.\n"
    "Structure the reading as: key houses, planetary indicators, flow of results by "
    "life stage (till 25, 25-40, 40-55, 55+), probabilities of specific outcomes as "
    "percentages, strengths, weaknesses, a prediction summary and a final summary.\n"
    "Write in Markdown."
)


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    """First present, non-empty value among ``keys`` (camelCase and snake_case aliases)."""
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


def _name_of(value: Any) -> str:
    if isinstance(value, Mapping):
        return str(value.get("name") or UNKNOWN)
    return str(value) if value else UNKNOWN


def _format_planets(planets: Any) -> str:
    if not isinstance(planets, Sequence) or isinstance(planets, str) or not planets:
        return "Planetary positions not available"
    lines: List[str] = []
    for planet in planets:
        retro = " (Retrograde)" if planet.get("is_retrograde") else ""
        lines.append(
            f"- {planet.get('name') or UNKNOWN}: {planet.get('sign') or UNKNOWN} "
            f"{planet.get('degree') or '0°'} in house {planet.get('house') or UNKNOWN}, "
            f"Nakshatra: {_name_of(planet.get('nakshatra'))}{retro}"
        )
    return "\n".join(lines)


def _format_houses(houses: Any) -> str:
    if not isinstance(houses, Sequence) or isinstance(houses, str) or not houses:
        return "Houses data not available"
    return "\n".join(
        f"- House {house.get('house') or UNKNOWN}: {house.get('sign') or UNKNOWN} "
        f"ruled by {house.get('lord') or UNKNOWN} ({house.get('degree') or '0°'})"
        for house in houses
    )


def subject_name(subject: Mapping[str, Any]) -> str:
    return str(_pick(subject, "name") or "the native")


def build_user_prompt(question: str, subject: Mapping[str, Any], context: str) -> str:
    ascendant = _pick(subject, "ascendant") or {}
    nakshatra = _pick(subject, "nakshatra") or {}
    if not isinstance(ascendant, Mapping):
        ascendant = {"sign": ascendant}
    if not isinstance(nakshatra, Mapping):
        nakshatra = {"name": nakshatra}
    name = subject_name(subject)

    return "\n".join(
        [
            "Subject details:",
            f"- Name: {name}",
            f"- Gender: {_pick(subject, 'gender') or NOT_SPECIFIED}",
            f"- Birth date: {_pick(subject, 'birthDate', 'birth_date') or NOT_SPECIFIED}",
            f"- Birth time: {_pick(subject, 'birthTime', 'birth_time') or NOT_SPECIFIED}",
            f"- Birth place: {_pick(subject, 'birthPlace', 'birth_place') or NOT_SPECIFIED}",
            "",
            "Birth chart:",
            f"- Ascendant: {ascendant.get('sign') or UNKNOWN} {ascendant.get('degree') or '0°'}",
            f"- Nakshatra: {nakshatra.get('name') or UNKNOWN} (Lord: {_name_of(nakshatra.get('lord'))})",
            f"- Chandra rashi: {_name_of(_pick(subject, 'chandra_rasi', 'chandraRasi'))}",
            f"- Soorya rashi: {_name_of(_pick(subject, 'soorya_rasi', 'sooryaRasi'))}",
            f"- Zodiac: {_name_of(_pick(subject, 'zodiac'))}",
            "",
            "Planetary positions:",
            _format_planets(_pick(subject, "planetaryPositions", "planetary_positions")),
            "",
            "Houses:",
            _format_houses(_pick(subject, "houses")),
            "",
            f"Question: {question}",
            "",
            "BNN reference passages:",
            context or "(none)",
            "",
            f"Answer for {name} using only the chart data above and BNN principles.",
        ]
    )


def build_messages(question: str, subject: Mapping[str, Any], context: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(question, subject, context)},
    ]


__all__ = ["SYSTEM_PROMPT", "build_messages", "build_user_prompt", "subject_name"]
