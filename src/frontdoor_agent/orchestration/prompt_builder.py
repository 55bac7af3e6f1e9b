"""Build system prompts and field summaries from config and current state."""

from __future__ import annotations

from typing import Mapping, Sequence

from frontdoor_agent.domain.completion import completion_percentage, missing_fields
from frontdoor_agent.domain.fields import FieldRegistry
from frontdoor_agent.domain.routing import Node
from frontdoor_agent.domain.state import Mode
from frontdoor_agent.domain.teams import TeamRegistry

_AGENT_DESCRIPTIONS = {
    Node.CHAT: "handles general conversation, questions and small talk",
    Node.ELICITATION: "gathers the details of a request the user wants to submit, including changes to or cancellation of it",
    Node.REVIEW: "handles the user's answer about the pending request: confirm, modify, cancel, or questions about it",
}

_MODE_CONTEXT = {
    Mode.CHAT: "No request is in progress.",
    Mode.ELICITATION: "The user is providing information for a request.",
    Mode.REVIEW: "The user has a completed request waiting for their confirmation.",
}

EXTRACTION_RULES = """Extraction rules:
- Extract only what the user explicitly provided; enum values may be inferred from casual language.
- Never invent a description; you may polish what the user said.
- Fill only the fields you want to update in "updates"; set every other field to null.
- If the user says they don't know a value, set it to "{unknown}".
- Set user_wants_to_abandon to true if the user cancels ("cancel", "never mind", "forget it")."""

RESPONSE_GUIDELINES = """Response style:
- Start with a brief recap of what you understood.
- Ask for remaining fields conversationally; never mention technical field names.
- For enum fields, list the options naturally.
- Do not promise to finalise the request; there may be more questions."""


# --- Field summaries ---


def format_remaining_fields(collected: Mapping[str, str], registry: FieldRegistry) -> str:
    """Uncollected fields, one line each, tagged required/optional."""
    names = missing_fields(collected, registry)
    if not names:
        return "(all fields collected)"
    lines = []
    for name in names:
        f = registry.field_by_name(name)
        if f is None:
            continue
        tag = "required" if f.required else "optional"
        line = f"- {f.name} ({tag}): {f.description} - {f.prompt}"
        if f.enum_values:
            line += f" Options: {', '.join(f.enum_values)}."
        if f.extraction_rule:
            line += f" Rule: {f.extraction_rule}"
        lines.append(line)
    return "\n".join(lines)


def format_collected_summary(collected: Mapping[str, str], registry: FieldRegistry) -> str:
    """Collected values keyed by field name, for prompts."""
    lines = [
        f'- {f.name}: "{collected[f.name]}"'
        for f in registry.fields
        if registry.is_valid_value(collected.get(f.name))
    ]
    return "\n".join(lines) if lines else "(none yet)"


def format_collected_for_user(collected: Mapping[str, str], registry: FieldRegistry) -> str:
    """Collected values keyed by label, for the user."""
    lines = [
        f"- **{f.label}:** {collected[f.name]}"
        for f in registry.fields
        if registry.is_valid_value(collected.get(f.name))
    ]
    return "\n".join(lines) if lines else "(none yet)"


# --- Supervisor ---


def build_supervisor_prompt(mode: Mode, choices: Sequence[Node]) -> str:
    parts = [
        "You are the supervisor of an assistant that chats with employees and helps them submit requests to internal teams.",
        "Decide which agent should handle the latest user message.",
        "",
        f"Current mode: {mode.value}. {_MODE_CONTEXT[mode]}",
        "",
        "Available agents:",
    ]
    for node in choices:
        parts.append(f"- {node.value}: {_AGENT_DESCRIPTIONS[node]}")
    parts.append("")
    if mode == Mode.CHAT:
        parts.append(
            f"Route to {Node.ELICITATION.value} only when the user shows clear intent to submit a request, "
            "report an issue, or asks which team handles something. Otherwise route to chatAgent."
        )
    else:
        parts.append(
            f"Route to {choices[0].value} for anything related to the in-progress request. "
            "Route to chatAgent only for questions unrelated to it."
        )
    parts.append("")
    parts.append(f'Reply as JSON: {{"next_agent": one of {", ".join(repr(c.value) for c in choices)}}}')
    return "\n".join(parts)


# --- Chat ---


def build_chat_prompt(mode: Mode) -> str:
    parts = [
        "You are a friendly, helpful assistant for internal employees.",
        "Answer general questions directly, keep replies brief (2-3 sentences) and conversational.",
        "If you don't know something, say so.",
    ]
    if mode == Mode.ELICITATION:
        parts.append(
            "The user is in the middle of describing a request. Answer their side question, "
            "then remind them you can continue with their request whenever they're ready."
        )
    elif mode == Mode.REVIEW:
        parts.append(
            "The user has a request waiting for their review. Answer their side question, "
            "then remind them they can confirm, change or cancel the pending request."
        )
    else:
        parts.append(
            "If the user mentions a problem or wants to submit a request, respond helpfully; "
            "the system will switch to request intake automatically."
        )
    return "\n".join(parts)


# --- Elicitation ---


def build_elicitation_first_prompt(registry: FieldRegistry) -> str:
    """First entry: show every question up front."""
    fields_list = "\n".join(f"- {f.label}: {f.prompt}" for f in registry.fields if f.prompt)
    schema_lines = ", ".join(registry.names)
    return "\n".join(
        [
            "You are gathering information to submit a change/demand request. This is the FIRST time collecting information.",
            "",
            "All questions we need answered:",
            fields_list,
            "",
            EXTRACTION_RULES.format(unknown=registry.unknown_value),
            "",
            RESPONSE_GUIDELINES,
            "",
            "In followup_response: acknowledge the request in one sentence, list the questions above, "
            "and invite the user to answer as many as they can now.",
            "",
            f"Reply as JSON with keys: updates (object with keys {schema_lines}), confidence (0-100), "
            "reasoning, followup_response, user_wants_to_abandon.",
        ]
    )


def build_elicitation_subsequent_prompt(collected: Mapping[str, str], registry: FieldRegistry) -> str:
    """Follow-up turns: scoped to remaining fields."""
    return "\n".join(
        [
            "You are gathering information to submit a change/demand request. This is a FOLLOW-UP turn.",
            "",
            "Fields still needed:",
            format_remaining_fields(collected, registry),
            "",
            "Fields collected so far:",
            format_collected_summary(collected, registry),
            "",
            f"Completion: {completion_percentage(collected, registry)}%",
            "",
            EXTRACTION_RULES.format(unknown=registry.unknown_value),
            "",
            "If a collected answer is too vague (a one-line description, unmeasurable benefits), ask for more detail.",
            "",
            RESPONSE_GUIDELINES,
            "",
            f"Reply as JSON with keys: updates (object with keys {', '.join(registry.names)}), confidence (0-100), "
            "reasoning, followup_response, user_wants_to_abandon.",
        ]
    )


def build_focus_hint(latest_user_message: str) -> str:
    return (
        f'Focus on extracting from the latest user message: "{latest_user_message}"\n\n'
        "Also consider the full conversation for context, and correct any collected field the user has corrected."
    )


# --- Team matching ---


def build_team_matching_prompt(
    collected: Mapping[str, str], registry: FieldRegistry, teams: TeamRegistry
) -> str:
    team_blocks = [
        "\n".join(
            [
                f"Team ID: {t.id}",
                f"Name: {t.name}",
                f"Description: {t.description}",
                f"Keywords: {', '.join(t.keywords)}",
            ]
        )
        for t in teams.teams
    ]
    return "\n".join(
        [
            "You are a team routing specialist. Pick the single best team for this request.",
            "",
            "Available teams:",
            "\n---\n".join(team_blocks),
            "",
            "Collected request information:",
            format_collected_summary(collected, registry),
            "",
            "Match on meaning, not just keywords. If several teams could handle it, pick the primary owner.",
            "Return null only if the request is out of scope for every team.",
            "",
            f"Reply as JSON: {{\"team_id\": one of {', '.join(teams.team_ids())} or null, "
            '"confidence": 0-100, "reasoning": "1-2 sentences"}',
        ]
    )


def build_no_match_prompt(collected: Mapping[str, str], registry: FieldRegistry) -> str:
    return "\n".join(
        [
            "You are helping a user whose request could not yet be routed.",
            "",
            "What we have collected so far:",
            format_collected_summary(collected, registry),
            "",
            "Write a warm, conversational reply (2-4 sentences) that plays back what the user told you in plain language,",
            "says you need a bit more context to get it to the right place, and asks them to add detail",
            "or describe it from a different angle.",
            "Do not mention teams, matching or any internal process.",
        ]
    )


def build_review_invitation(team_name: str, summary: str) -> str:
    return (
        f"Thanks! I have everything I need. This looks like one for the **{team_name}** team.\n\n"
        f"Here's a summary of your request:\n{summary}\n\n"
        "Would you like me to submit it? You can also ask me to change anything, or cancel it."
    )


# --- Review ---


def build_review_prompt(collected: Mapping[str, str], registry: FieldRegistry, team_name: str | None) -> str:
    return "\n".join(
        [
            "You are analysing the user's response during the review of a request they are about to submit.",
            "They have already seen the summary and the identified team.",
            "",
            "Current request summary:",
            format_collected_summary(collected, registry),
            "",
            f"Identified team: {team_name or 'Unknown'}",
            "",
            "Classify the latest user message:",
            '- confirm: they approve ("yes", "looks good", "submit it")',
            '- modify: they want to change something ("change the urgency", "wrong team")',
            '- abandon: they cancel ("never mind", "don\'t submit")',
            "- clarify: they ask a question about the request or the process",
            "If the intent is unclear, use clarify.",
            "",
            "In response_to_user, reply warmly in 2-4 sentences appropriate to the action.",
            'Reply as JSON: {"action_type": ..., "reasoning": ..., "response_to_user": ...}',
        ]
    )
