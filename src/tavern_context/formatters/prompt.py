"""System prompt assembly from character and persona records."""

from __future__ import annotations

from tavern_context.models.chat import Character, Persona

CLOSING_INSTRUCTIONS = (
    "Stay in character at all times. Respond naturally and consistently "
    "with {name}'s personality and the current scenario."
)


def _clean(value: str | None) -> str:
    return (value or "").strip()


def _persona_section(persona: Persona) -> str:
    lines: list[str] = []
    if name := _clean(persona.name):
        lines.append(f"You are talking to {name}.")
    if description := _clean(persona.description):
        lines.append(description)
    if traits := _clean(persona.personality_traits):
        lines.append(f"They are: {traits}")
    return "\n".join(lines)


def build_system_prompt(
    character: Character,
    persona: Persona | None = None,
    override: str | None = None,
    *,
    scenario: str | None = None,
) -> str:
    """Assemble the roleplay system prompt.

    Sections appear in a fixed order and only when their source text is
    non-blank:

    1. *override*, else the character's stored system prompt
    2. the roleplay framing sentence
    3. character description
    4. personality
    5. persona (name, description, traits)
    6. scenario (*scenario* wins over the character's stored one)
    7. example dialogue
    8. closing stay-in-character instructions

    An empty string is treated exactly like ``None``.
    """
    name = _clean(character.name)
    sections: list[str] = []

    if base := _clean(override) or _clean(character.system_prompt):
        sections.append(base)

    sections.append(f"You are roleplaying as {name}.")

    if description := _clean(character.description):
        sections.append(f"Character Description:\n{description}")

    if personality := _clean(character.personality):
        sections.append(f"Personality:\n{personality}")

    if persona is not None and (persona_text := _persona_section(persona)):
        sections.append(persona_text)

    if scenario_text := _clean(scenario) or _clean(character.scenario):
        sections.append(f"Scenario:\n{scenario_text}")

    if dialogue := _clean(character.example_dialogues):
        sections.append(f"Example Dialogue:\n{dialogue}")

    sections.append(CLOSING_INSTRUCTIONS.format(name=name))
    return "\n\n".join(sections).strip()
